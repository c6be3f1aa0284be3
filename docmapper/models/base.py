"""
Active-record base class.

Usage:
```python
from dataclasses import dataclass, field
from docmapper import Record, register_record

@register_record
@dataclass
class Widget(Record):
    name: str = ""
    tags: list = field(default_factory=list)

    @classmethod
    def get_collection_name(cls) -> str:
        return "widgets"

widget = Widget(name="a", tags=["x"])
widget.save()

found = Widget.find_by_id(widget.id)
```
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Type, TypeVar

from docmapper.models.serialization import DocumentMixin
from docmapper.stores.query import SortSpec
from docmapper.stores.store import Store

T = TypeVar('T', bound='Record')


def _mark_persisted(record: Optional[T]) -> Optional[T]:
    if record is not None:
        record.is_new = False
    return record


@dataclass
class Record(DocumentMixin, ABC):
    """Base dataclass for records persisted as one MongoDB document each.

    `id` and `is_new` live only in memory: they are not constructor arguments,
    are never written into the document body, and do not take part in equality.
    """

    id: Optional[str] = field(default=None, init=False, compare=False, metadata={"description": "Stored identifier"})
    is_new: bool = field(default=True, init=False, compare=False, metadata={"description": "Not yet persisted"})

    @classmethod
    @abstractmethod
    def get_collection_name(cls) -> str:
        """Name of the collection this record type is stored in."""

    def get_id(self) -> Optional[str]:
        return self.id

    def set_id(self, record_id: str) -> None:
        self.id = record_id

    @classmethod
    def get_store(cls) -> Store:
        return Store.get_instance()

    # ---- Finders ----------------------------------------------------------

    @classmethod
    def find(cls: Type[T], filter: Optional[Mapping[str, Any]] = None, sort: Optional[SortSpec] = None,
             limit: Optional[int] = None) -> List[T]:
        """Find records in this type's collection."""
        records = cls.get_store().find(cls.get_collection_name(), filter, sort, limit, record_type=cls)
        for record in records:
            record.is_new = False
        return records

    @classmethod
    def find_one(cls: Type[T], filter: Optional[Mapping[str, Any]] = None,
                 sort: Optional[SortSpec] = None) -> Optional[T]:
        """First matching record, or None."""
        return _mark_persisted(cls.get_store().find_one(cls.get_collection_name(), filter, sort, record_type=cls))

    @classmethod
    def find_by_id(cls: Type[T], record_id: str) -> Optional[T]:
        """Record with this identifier, or None.

        Raises:
            InvalidArgumentError: If record_id is not a valid identifier
        """
        return _mark_persisted(cls.get_store().find_by_id(cls.get_collection_name(), record_id, record_type=cls))

    @classmethod
    def count(cls, filter: Optional[Mapping[str, Any]] = None) -> int:
        return cls.get_store().count(cls.get_collection_name(), filter)

    # ---- Lifecycle --------------------------------------------------------

    def save(self) -> bool:
        """Insert a new record or replace the stored document of an existing one.

        A new record adopts the identifier returned by the insert. When the
        insert is not acknowledged the record is left unchanged and False is
        returned.
        """
        store = self.get_store()
        if self.is_new:
            record_id = store.insert(self)
            if record_id is None:
                return False
            self.id = record_id
            self.is_new = False
            return True
        return store.update(self)

    def delete(self) -> bool:
        """Remove the stored document. The in-memory record is not modified."""
        return self.get_store().delete(self)
