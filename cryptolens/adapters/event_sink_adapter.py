"""
Event sink adapters - implement EventSink
"""

from typing import Any, Dict, List, Tuple

from cryptolens.infrastructure.logging import get_logger
from cryptolens.ports.interfaces import EventSink


class LoggingEventSink(EventSink):
    """Writes each event as an INFO record carrying the fields as ``extra_data``"""

    def __init__(self, logger_name: str = "cryptolens.events"):
        self.logger = get_logger(logger_name)

    def emit(self, event: str, **fields: Any) -> None:
        self.logger.info(event, extra={"extra_data": fields})


class RecordingEventSink(EventSink):
    """Keeps events in memory; used by the CLI ``--trace`` flag and by tests"""

    def __init__(self):
        self.events: List[Tuple[str, Dict[str, Any]]] = []

    def emit(self, event: str, **fields: Any) -> None:
        self.events.append((event, fields))

    def names(self) -> List[str]:
        return [name for name, _ in self.events]

    def of(self, event: str) -> List[Dict[str, Any]]:
        return [fields for name, fields in self.events if name == event]


class NullEventSink(EventSink):
    """Discards every event"""

    def emit(self, event: str, **fields: Any) -> None:
        pass
