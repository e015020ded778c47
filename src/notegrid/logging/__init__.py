"""Structured event logging for notegrid.

Provides a unified event schema, filesystem NDJSON sink, and safe
emit helpers that never raise uncaught exceptions.
"""

from notegrid.logging.events import (
    EventLevel,
    EventType,
    NotegridEvent,
    emit,
    emit_info,
    emit_warning,
    set_log_dir,
)
from notegrid.logging.sink import EventSink

__all__ = [
    "EventLevel",
    "EventSink",
    "EventType",
    "NotegridEvent",
    "emit",
    "emit_info",
    "emit_warning",
    "set_log_dir",
]
