from .mapping import from_document
from .query import DEFAULT_LIMIT, UNLIMITED, QueryOptions
from .registry import (
    ID_FIELD,
    TYPE_TAG_FIELD,
    RecordRegistration,
    get_registration,
    list_record_types,
    register_record,
    registration_for,
    unregister_record,
)
from .store import Store, parse_object_id

__all__ = [
    "DEFAULT_LIMIT",
    "ID_FIELD",
    "QueryOptions",
    "RecordRegistration",
    "Store",
    "TYPE_TAG_FIELD",
    "UNLIMITED",
    "from_document",
    "get_registration",
    "list_record_types",
    "parse_object_id",
    "register_record",
    "registration_for",
    "unregister_record",
]
