"""
In-memory state holders: the record lifecycle tracker and the template store.
"""

from .record_tracker import RecordListener, RecordTracker, validate_values
from .template_store import ProtectedEntityError, TemplateNotFoundError, TemplateStore

__all__ = [
    "RecordTracker",
    "RecordListener",
    "validate_values",
    "TemplateStore",
    "TemplateNotFoundError",
    "ProtectedEntityError",
]
