"""Engine subpackage - responsible resolution logic."""
from .responsible_resolver import ResponsibleResolver
from .clock import ClockSource, FixedClock, ZoneClock
from .diagnostics import CollectingSink, DiagnosticSink, LoggerSink
from .models import LocalTime, MappingConfig, MatchedBy, Order, ResolutionResult

__all__ = [
    'ResponsibleResolver',
    'ClockSource', 'FixedClock', 'ZoneClock',
    'CollectingSink', 'DiagnosticSink', 'LoggerSink',
    'LocalTime', 'MappingConfig', 'MatchedBy', 'Order', 'ResolutionResult',
]
