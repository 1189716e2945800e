"""
Data models for the responsible resolver.

Uses frozen dataclasses: mappings and orders are shared read-only across
resolutions, results are built once at the end of a resolution.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional, Union

Identifier = Union[str, int]

WEEKDAY_CODES = ('0', '1', '2', '3', '4', '5', '6')

# JSON section name → MappingConfig attribute
MAPPING_SECTIONS = {
    'byWeekday': 'by_weekday',
    'byTag': 'by_tag',
    'byCountryCode': 'by_country_code',
    'bySource': 'by_source',
}


class MatchedBy(str, Enum):
    """Which rule of the priority chain produced the responsible."""
    SCHEDULE = "schedule"
    TAG = "tag"
    COUNTRY = "country"
    SOURCE = "source"
    DEFAULT = "default"


def _is_identifier(value: Any) -> bool:
    # bool is an int subclass but never a valid CRM id
    return isinstance(value, (str, int)) and not isinstance(value, bool)


def _frozen(mapping: Optional[Mapping[str, Identifier]]) -> Mapping[str, Identifier]:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class MappingConfig:
    """Static rule table consulted during resolution."""
    default_id: Optional[Identifier] = None
    by_weekday: Mapping[str, Identifier] = field(default_factory=dict)
    by_tag: Mapping[str, Identifier] = field(default_factory=dict)
    by_country_code: Mapping[str, Identifier] = field(default_factory=dict)
    by_source: Mapping[str, Identifier] = field(default_factory=dict)

    def __post_init__(self):
        for attr in MAPPING_SECTIONS.values():
            object.__setattr__(self, attr, _frozen(getattr(self, attr)))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'MappingConfig':
        """
        Build a config from the compiled mapping document.

        Raises ValueError when a section has the wrong shape.
        """
        if not isinstance(data, Mapping):
            raise ValueError("Mapping document must be a JSON object")

        default_id = data.get('default')
        if default_id is not None and not _is_identifier(default_id):
            raise ValueError(f"'default' must be a string or integer, got {type(default_id).__name__}")

        sections = {}
        for section, attr in MAPPING_SECTIONS.items():
            values = data.get(section) or {}
            if not isinstance(values, Mapping):
                raise ValueError(f"'{section}' must be an object")
            for key, value in values.items():
                if value is not None and not _is_identifier(value):
                    raise ValueError(f"'{section}.{key}' must be a string or integer")
            sections[attr] = {str(k): v for k, v in values.items()}

        unknown_days = set(sections['by_weekday']) - set(WEEKDAY_CODES)
        if unknown_days:
            raise ValueError(f"'byWeekday' keys must be '0'..'6', got {sorted(unknown_days)}")

        return cls(default_id=default_id, **sections)

    def to_dict(self) -> dict:
        """Convert back to the compiled document layout."""
        data = {'default': self.default_id}
        for section, attr in MAPPING_SECTIONS.items():
            data[section] = dict(getattr(self, attr))
        return data

    def counts(self) -> dict[str, int]:
        """Number of entries per section."""
        return {section: len(getattr(self, attr)) for section, attr in MAPPING_SECTIONS.items()}


@dataclass(frozen=True)
class Order:
    """The order fields the resolver reads."""
    id: Optional[Union[str, int]] = None
    tags: Optional[str] = None
    shipping_country_code: Optional[str] = None
    billing_country_code: Optional[str] = None
    source_name: Optional[str] = None

    @classmethod
    def from_shopify(cls, payload: Mapping[str, Any]) -> 'Order':
        """Create Order from a Shopify order document."""
        shipping = payload.get('shipping_address') or {}
        billing = payload.get('billing_address') or {}
        return cls(
            id=payload.get('id'),
            tags=payload.get('tags'),
            shipping_country_code=shipping.get('country_code'),
            billing_country_code=billing.get('country_code'),
            source_name=payload.get('source_name'),
        )

    def tag_list(self) -> list[str]:
        """Tags split on commas, trimmed, empties dropped, order preserved."""
        return [t.strip() for t in (self.tags or '').split(',') if t.strip()]

    @property
    def country_code(self) -> Optional[str]:
        """Shipping country, falling back to billing country."""
        return self.shipping_country_code or self.billing_country_code or None


@dataclass(frozen=True)
class LocalTime:
    """Wall-clock time in the business timezone. weekday: 0 = Sunday … 6 = Saturday."""
    weekday: int
    hour: int
    minute: int

    def __post_init__(self):
        if not 0 <= self.weekday <= 6:
            raise ValueError(f"weekday must be 0..6, got {self.weekday}")
        if not 0 <= self.hour <= 23:
            raise ValueError(f"hour must be 0..23, got {self.hour}")
        if not 0 <= self.minute <= 59:
            raise ValueError(f"minute must be 0..59, got {self.minute}")

    @classmethod
    def from_datetime(cls, dt: datetime) -> 'LocalTime':
        """Decompose an already-localised datetime."""
        return cls(weekday=dt.isoweekday() % 7, hour=dt.hour, minute=dt.minute)

    def at_or_after(self, hour: int, minute: int) -> bool:
        return (self.hour, self.minute) >= (hour, minute)

    def __str__(self) -> str:
        return f"{WEEKDAY_NAMES[self.weekday]} {self.hour:02d}:{self.minute:02d}"


WEEKDAY_NAMES = ('Sunday', 'Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday')


@dataclass(frozen=True)
class TraceStep:
    """A single step in the resolution trace."""
    step: str
    description: str
    value: Optional[str] = None


@dataclass(frozen=True)
class ResolutionResult:
    """Outcome of one resolution: a responsible and the rule that chose it, or nothing."""
    order_id: Optional[Union[str, int]]
    responsible_id: Optional[Identifier] = None
    matched_by: Optional[MatchedBy] = None
    local_time: Optional[LocalTime] = None
    trace: tuple[TraceStep, ...] = ()

    @property
    def resolved(self) -> bool:
        return self.matched_by is not None

    def get_trace_text(self) -> str:
        """Get human-readable trace as formatted text."""
        lines = []
        for t in self.trace:
            if t.value:
                lines.append(f"→ {t.step}: {t.description} = {t.value}")
            else:
                lines.append(f"→ {t.step}: {t.description}")
        return "\n".join(lines)

    def to_dict(self) -> dict:
        return {
            "order_id": self.order_id,
            "resolved": self.resolved,
            "responsible_id": self.responsible_id,
            "matched_by": self.matched_by.value if self.matched_by else None,
            "local_time": str(self.local_time) if self.local_time else None,
            "trace": [
                {"step": t.step, "description": t.description, "value": t.value}
                for t in self.trace
            ],
        }
