"""Persistence layer for notifications, templates, preferences and channels.

Exports:
    RecordStore: Storage protocol consumed by the notification services
    InMemoryRecordStore: Thread-safe in-memory implementation
    GuardRejectedError: Raised when a guarded update is refused
    paginate: Page-based listing helper
"""

from infrastructure.persistence.pagination import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    paginate,
)
from infrastructure.persistence.store import (
    GuardRejectedError,
    InMemoryRecordStore,
    RecordStore,
)

__all__ = [
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    "GuardRejectedError",
    "InMemoryRecordStore",
    "RecordStore",
    "paginate",
]
