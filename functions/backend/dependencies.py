"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

from backend.config import get_settings
from backend.contact_log import ContactLog, FileContactLog, InMemoryContactLog

_contact_log: ContactLog | None = None


def get_contact_log() -> ContactLog:
    """
    Return a singleton contact log so every request appends to the same sink.
    """
    global _contact_log
    if _contact_log:
        return _contact_log

    settings = get_settings()
    if settings.use_in_memory_backends:
        _contact_log = InMemoryContactLog()
    else:
        _contact_log = FileContactLog(settings.contact_log_path)
    return _contact_log
