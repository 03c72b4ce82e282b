"""Security helpers — audit events and redirect-target validation."""

from guildhall.security.audit import (
    SecurityEvent,
    emit_security_event,
    set_security_event_sink,
)
from guildhall.security.urls import is_safe_url, referer_path

__all__ = [
    "SecurityEvent",
    "emit_security_event",
    "is_safe_url",
    "referer_path",
    "set_security_event_sink",
]
