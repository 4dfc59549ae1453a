"""
Onboarding - Observability Package.

Provides:
- Telemetry event emitters (logging, JSONL session files, null)
"""

from onboarding.observability.events import (
    EventEmitter,
    LoggingEmitter,
    NullEmitter,
    safe_emit,
)
from onboarding.observability.session_logger import SessionLogger

__all__ = [
    "EventEmitter",
    "LoggingEmitter",
    "NullEmitter",
    "SessionLogger",
    "safe_emit",
]
