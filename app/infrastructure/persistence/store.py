"""Record storage for notification engine data.

The protocol-based design allows multiple storage backends. Records are
pydantic models with a string `id` attribute; stores hand out copies so
callers never mutate stored state outside an update call.
"""

import threading
import uuid
from typing import (
    Any,
    Callable,
    Dict,
    Generic,
    List,
    Optional,
    Protocol,
    Type,
    TypeVar,
)

from pydantic import BaseModel

T = TypeVar("T", bound=BaseModel)

Predicate = Callable[[Any], bool]


class RecordStore(Protocol[T]):
    """Storage interface for one collection of records.

    Methods:
        create: Persist a new record (assigning an id when empty)
        get: Fetch a record by id
        update: Atomically apply field changes, optionally guarded by a predicate
        apply: Atomic read-modify-write driven by a mutator function
        update_many: Apply the same changes to every matching record
        find: Filter, sort and paginate records
        count: Count matching records
        delete: Remove a record by id
    """

    def create(self, record: T) -> T: ...

    def get(self, record_id: str) -> Optional[T]: ...

    def update(
        self,
        record_id: str,
        changes: Dict[str, Any],
        guard: Optional[Predicate] = None,
    ) -> Optional[T]: ...

    def apply(
        self, record_id: str, mutator: Callable[[Any], Dict[str, Any]]
    ) -> Optional[T]: ...

    def update_many(
        self,
        changes: Dict[str, Any],
        where: Optional[Dict[str, Any]] = None,
        predicate: Optional[Predicate] = None,
    ) -> int: ...

    def find(
        self,
        where: Optional[Dict[str, Any]] = None,
        predicate: Optional[Predicate] = None,
        sort_by: Optional[str] = None,
        descending: bool = False,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> List[T]: ...

    def count(
        self,
        where: Optional[Dict[str, Any]] = None,
        predicate: Optional[Predicate] = None,
    ) -> int: ...

    def delete(self, record_id: str) -> bool: ...


class GuardRejectedError(Exception):
    """Raised by update() when the guard predicate rejects the current record."""

    def __init__(self, record_id: str, current: Any):
        super().__init__(f"Update of record {record_id} rejected by guard")
        self.record_id = record_id
        self.current = current


class InMemoryRecordStore(Generic[T]):
    """Thread-safe in-memory implementation of RecordStore.

    All reads and writes happen under a single lock. Updates rebuild the
    record through `model_copy(update=...)` and re-validate it, so a bad
    change never lands in the store.

    Suitable for single-instance deployments, development and tests.

    Attributes:
        model: The pydantic model class stored in this collection
        name: Collection name used in log events
    """

    def __init__(self, model: Type[T], name: Optional[str] = None) -> None:
        self.model = model
        self.name = name or model.__name__
        self._records: Dict[str, T] = {}
        self._lock = threading.Lock()

    def create(self, record: T) -> T:
        """Persist a new record, assigning a uuid4 id when it has none."""
        with self._lock:
            record_id = getattr(record, "id", None) or str(uuid.uuid4())
            if record_id in self._records:
                raise ValueError(f"{self.name} record {record_id} already exists")
            stored = record.model_copy(update={"id": record_id}, deep=True)
            self._records[record_id] = stored
            return stored.model_copy(deep=True)

    def get(self, record_id: str) -> Optional[T]:
        with self._lock:
            record = self._records.get(record_id)
            return record.model_copy(deep=True) if record else None

    def update(
        self,
        record_id: str,
        changes: Dict[str, Any],
        guard: Optional[Predicate] = None,
    ) -> Optional[T]:
        """Atomically apply `changes` to a record.

        Args:
            record_id: Id of the record to update
            changes: Field name to new value mapping
            guard: Optional predicate evaluated against the current record
                inside the lock; if it returns False nothing is written

        Returns:
            The updated record, or None if the id is unknown

        Raises:
            GuardRejectedError: If the guard rejects the current record
        """
        with self._lock:
            current = self._records.get(record_id)
            if current is None:
                return None
            if guard is not None and not guard(current):
                raise GuardRejectedError(record_id, current.model_copy(deep=True))
            updated = self._apply(current, changes)
            self._records[record_id] = updated
            return updated.model_copy(deep=True)

    def apply(
        self, record_id: str, mutator: Callable[[Any], Dict[str, Any]]
    ) -> Optional[T]:
        """Atomic read-modify-write.

        `mutator` receives a copy of the current record and returns the
        changes to write; both steps run under the store lock so counters
        computed from the current value are never lost.
        """
        with self._lock:
            current = self._records.get(record_id)
            if current is None:
                return None
            updated = self._apply(current, mutator(current.model_copy(deep=True)))
            self._records[record_id] = updated
            return updated.model_copy(deep=True)

    def update_many(
        self,
        changes: Dict[str, Any],
        where: Optional[Dict[str, Any]] = None,
        predicate: Optional[Predicate] = None,
    ) -> int:
        with self._lock:
            matched = [
                record_id
                for record_id, record in self._records.items()
                if self._matches(record, where, predicate)
            ]
            for record_id in matched:
                self._records[record_id] = self._apply(
                    self._records[record_id], changes
                )
            return len(matched)

    def find(
        self,
        where: Optional[Dict[str, Any]] = None,
        predicate: Optional[Predicate] = None,
        sort_by: Optional[str] = None,
        descending: bool = False,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> List[T]:
        """Return matching records.

        Args:
            where: Field equality filters
            predicate: Extra filter evaluated per record
            sort_by: Field name to sort on (None values sort first)
            descending: Reverse the sort order
            offset: Records to skip after sorting
            limit: Maximum records to return
        """
        with self._lock:
            matched = [
                record
                for record in self._records.values()
                if self._matches(record, where, predicate)
            ]
            if sort_by:
                matched.sort(
                    key=lambda r: self._sort_key(getattr(r, sort_by, None)),
                    reverse=descending,
                )
            end = None if limit is None else offset + limit
            return [record.model_copy(deep=True) for record in matched[offset:end]]

    def count(
        self,
        where: Optional[Dict[str, Any]] = None,
        predicate: Optional[Predicate] = None,
    ) -> int:
        with self._lock:
            return sum(
                1
                for record in self._records.values()
                if self._matches(record, where, predicate)
            )

    def delete(self, record_id: str) -> bool:
        with self._lock:
            return self._records.pop(record_id, None) is not None

    def clear(self) -> None:
        """Remove every record (for testing)."""
        with self._lock:
            self._records.clear()

    def _apply(self, record: T, changes: Dict[str, Any]) -> T:
        data = record.model_dump()
        data.update(changes)
        return self.model.model_validate(data)

    @staticmethod
    def _matches(
        record: Any,
        where: Optional[Dict[str, Any]],
        predicate: Optional[Predicate],
    ) -> bool:
        if where:
            for field, expected in where.items():
                if getattr(record, field, None) != expected:
                    return False
        if predicate is not None and not predicate(record):
            return False
        return True

    @staticmethod
    def _sort_key(value: Any) -> tuple:
        return (value is not None, value)
