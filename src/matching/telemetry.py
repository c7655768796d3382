"""
Observability hook for the matcher.

The matching core never writes to a global logger. Every component takes
an optional ``MatchTelemetry`` and emits structured events through it.
A structlog ``BoundLogger`` already satisfies the protocol, so the default
is simply the module logger; tests pass a recorder instead.

Usage::

    from matching.telemetry import RecordingTelemetry

    telemetry = RecordingTelemetry()
    match_archetypes(profile, catalog, telemetry=telemetry)
    assert telemetry.has_event("muscular_gate_skipped")
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Tuple

from core.logging import get_logger


class MatchTelemetry(Protocol):
    """Structured event sink: an event name plus keyword fields."""

    def debug(self, event: str, **fields: Any) -> Any: ...

    def info(self, event: str, **fields: Any) -> Any: ...

    def warning(self, event: str, **fields: Any) -> Any: ...

    def error(self, event: str, **fields: Any) -> Any: ...


def default_telemetry(name: str = "matching") -> MatchTelemetry:
    """The structlog logger used when the caller supplies nothing."""
    return get_logger(name)


@dataclass
class RecordingTelemetry:
    """In-memory sink that keeps every event, for tests and diagnostics."""

    events: List[Tuple[str, str, Dict[str, Any]]] = field(default_factory=list)

    def _record(self, level: str, event: str, fields: Dict[str, Any]) -> None:
        self.events.append((level, event, fields))

    def debug(self, event: str, **fields: Any) -> None:
        self._record("debug", event, fields)

    def info(self, event: str, **fields: Any) -> None:
        self._record("info", event, fields)

    def warning(self, event: str, **fields: Any) -> None:
        self._record("warning", event, fields)

    def error(self, event: str, **fields: Any) -> None:
        self._record("error", event, fields)

    def names(self, level: Optional[str] = None) -> List[str]:
        return [name for lvl, name, _ in self.events if level is None or lvl == level]

    def has_event(self, event: str) -> bool:
        return event in self.names()

    def first(self, event: str) -> Optional[Dict[str, Any]]:
        for _, name, fields in self.events:
            if name == event:
                return fields
        return None
