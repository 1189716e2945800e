"""Diagnostic sinks receiving the resolver's non-fatal warnings."""
import logging
from typing import Optional, Protocol


class DiagnosticSink(Protocol):
    def warn(self, message: str) -> None: ...


class LoggerSink:
    """Forwards warnings to a standard logger."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("responsible_tool.resolver")

    def warn(self, message: str) -> None:
        self.logger.warning(message)


class CollectingSink:
    """Keeps warnings in memory, optionally forwarding them to another sink."""

    def __init__(self, forward_to: Optional[DiagnosticSink] = None):
        self.messages: list[str] = []
        self.forward_to = forward_to

    def warn(self, message: str) -> None:
        self.messages.append(message)
        if self.forward_to is not None:
            self.forward_to.warn(message)
