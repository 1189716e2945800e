"""
Responsible Resolver - picks the CRM responsible for an order.

Resolution order (first match wins):
1. Weekday schedule, with the Monday 09:01 and Friday 19:01 handovers
2. Order tags, in the order they appear on the order
3. Country code (shipping, then billing)
4. Order source
5. Configured default (warns)
6. Unresolved (warns)
"""
from typing import Optional

from .clock import ClockSource, ZoneClock
from .diagnostics import DiagnosticSink, LoggerSink
from .models import (
    Identifier,
    LocalTime,
    MappingConfig,
    MatchedBy,
    Order,
    ResolutionResult,
    TraceStep,
)

MONDAY = 1
FRIDAY = 5

# weekday → (hour, minute) from which that weekday's responsible takes over
HANDOVER_CUTOFFS = {
    MONDAY: (9, 1),
    FRIDAY: (19, 1),
}


def _present(value: Optional[Identifier]) -> bool:
    return value is not None and value != ''


class ResponsibleResolver:
    """
    Resolves the responsible for an order against a mapping config.

    The clock and the diagnostic sink are injected; the config is passed per
    call so one resolver can serve any number of mappings.
    """

    def __init__(self, clock: Optional[ClockSource] = None, sink: Optional[DiagnosticSink] = None):
        self.clock = clock or ZoneClock()
        self.sink = sink or LoggerSink()

    def resolve(self, config: MappingConfig, order: Order, sink: Optional[DiagnosticSink] = None) -> ResolutionResult:
        """
        Run the priority chain for one order.

        Args:
            config: Loaded mapping config (never mutated)
            order: Order to resolve
            sink: Per-call override of the diagnostic sink

        Returns:
            ResolutionResult; ``matched_by`` is None when unresolved
        """
        if sink is None:
            sink = self.sink
        local_time = self.clock.now()
        trace = [TraceStep("Clock", "Local time in business timezone", str(local_time))]

        def done(responsible_id: Optional[Identifier] = None, matched_by: Optional[MatchedBy] = None) -> ResolutionResult:
            return ResolutionResult(
                order_id=order.id,
                responsible_id=responsible_id,
                matched_by=matched_by,
                local_time=local_time,
                trace=tuple(trace),
            )

        # 1. Schedule
        responsible = self._resolve_by_schedule(config, local_time, trace)
        if _present(responsible):
            return done(responsible, MatchedBy.SCHEDULE)

        # 2. Tags
        tags = order.tag_list()
        for tag in tags:
            responsible = config.by_tag.get(tag)
            if _present(responsible):
                trace.append(TraceStep("Tag", f"Tag '{tag}' is mapped", str(responsible)))
                return done(responsible, MatchedBy.TAG)
        if tags:
            trace.append(TraceStep("Tag", "No mapping for tags", ", ".join(tags)))
        else:
            trace.append(TraceStep("Tag", "Order has no tags"))

        # 3. Country
        country_code = order.country_code
        if country_code:
            responsible = config.by_country_code.get(country_code)
            if _present(responsible):
                trace.append(TraceStep("Country", f"Country '{country_code}' is mapped", str(responsible)))
                return done(responsible, MatchedBy.COUNTRY)
            trace.append(TraceStep("Country", "No mapping for country", country_code))
        else:
            trace.append(TraceStep("Country", "Order has no shipping or billing country"))

        # 4. Source
        source = order.source_name or ''
        if source:
            responsible = config.by_source.get(source)
            if _present(responsible):
                trace.append(TraceStep("Source", f"Source '{source}' is mapped", str(responsible)))
                return done(responsible, MatchedBy.SOURCE)
            trace.append(TraceStep("Source", "No mapping for source", source))
        else:
            trace.append(TraceStep("Source", "Order has no source name"))

        # 5. Default
        if _present(config.default_id):
            trace.append(TraceStep("Fallback", "Using default responsible", str(config.default_id)))
            sink.warn(f"Responsible resolved by default for order {order.id}")
            return done(config.default_id, MatchedBy.DEFAULT)

        trace.append(TraceStep("Fallback", "No default responsible configured"))
        sink.warn(f"No responsible found for order {order.id}")
        return done()

    def resolve_responsible_id(self, config: MappingConfig, order: Order) -> Optional[Identifier]:
        """Resolve and return just the identifier (None when unresolved)."""
        return self.resolve(config, order).responsible_id

    def _resolve_by_schedule(self, config: MappingConfig, local_time: LocalTime, trace: list) -> Optional[Identifier]:
        """Weekday table lookup with the two handover windows."""
        # Handover windows look up their own weekday code, so the key is always
        # the current weekday; only the trace tells the two cases apart.
        code = str(local_time.weekday)
        cutoff = HANDOVER_CUTOFFS.get(local_time.weekday)
        if cutoff is not None and local_time.at_or_after(*cutoff):
            description = f"Handover from {cutoff[0]:02d}:{cutoff[1]:02d}, weekday {code}"
        else:
            description = f"Weekday {code} schedule"

        responsible = config.by_weekday.get(code)
        if _present(responsible):
            trace.append(TraceStep("Schedule", description, str(responsible)))
            return responsible

        trace.append(TraceStep("Schedule", f"{description}: no responsible mapped"))
        return None
