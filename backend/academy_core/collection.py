from __future__ import annotations

from typing import Dict, Generic, Iterable, Iterator, List, Optional, Protocol, Tuple, TypeVar


class HasId(Protocol):
    @property
    def id(self) -> str: ...


T = TypeVar("T", bound=HasId)


class EntityCollection(Generic[T]):
    """An ordered, id-keyed set of records for one entity kind.

    Collections are values: every mutating operation returns a new
    collection and leaves the receiver untouched. The most recently touched
    record sits first; all other records keep their relative order.
    """

    __slots__ = ("_records",)

    def __init__(self, records: Iterable[T] = ()) -> None:
        self._records: Tuple[T, ...] = self._dedupe(records)

    @staticmethod
    def _dedupe(records: Iterable[T]) -> Tuple[T, ...]:
        # Last occurrence wins and keeps its own position.
        materialised = list(records)
        last_index: Dict[str, int] = {}
        for index, record in enumerate(materialised):
            last_index[record.id] = index
        return tuple(
            record for index, record in enumerate(materialised) if last_index[record.id] == index
        )

    @classmethod
    def _from_trusted(cls, records: Tuple[T, ...]) -> "EntityCollection[T]":
        collection = cls.__new__(cls)
        collection._records = records
        return collection

    # ------------------------------------------------------------------
    # Mutations (copy-on-write)

    def upsert(self, record: T) -> "EntityCollection[T]":
        """Return a collection with ``record`` first and any older copy dropped."""
        rest = tuple(existing for existing in self._records if existing.id != record.id)
        return self._from_trusted((record,) + rest)

    def remove(self, record_id: str) -> "EntityCollection[T]":
        """Return a collection without ``record_id``; absent ids are a no-op."""
        if record_id not in self:
            return self
        return self._from_trusted(tuple(r for r in self._records if r.id != record_id))

    def replace_all(self, records: Iterable[T]) -> "EntityCollection[T]":
        """Discard the current contents in favour of ``records``."""
        return type(self)(records)

    # ------------------------------------------------------------------
    # Reads

    def get(self, record_id: str) -> Optional[T]:
        return next((r for r in self._records if r.id == record_id), None)

    def ids(self) -> List[str]:
        return [record.id for record in self._records]

    def records(self) -> Tuple[T, ...]:
        return self._records

    def __contains__(self, record_id: object) -> bool:
        return any(record.id == record_id for record in self._records)

    def __iter__(self) -> Iterator[T]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __bool__(self) -> bool:
        return bool(self._records)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EntityCollection):
            return NotImplemented
        return self._records == other._records

    def __repr__(self) -> str:
        return f"EntityCollection({list(self.ids())!r})"
