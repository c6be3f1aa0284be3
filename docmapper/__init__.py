"""
docmapper: a small active-record object-document mapper for MongoDB.
"""
import logging

from docmapper.errors import (
    DocMapperError,
    IdentifierMissingError,
    InvalidArgumentError,
    StoreNotInitializedError,
    UnknownTypeTagError,
    UnsupportedOperationError,
)
from docmapper.models.base import Record
from docmapper.stores import DEFAULT_LIMIT, QueryOptions, Store, register_record

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_LIMIT",
    "DocMapperError",
    "IdentifierMissingError",
    "InvalidArgumentError",
    "QueryOptions",
    "Record",
    "Store",
    "StoreNotInitializedError",
    "UnknownTypeTagError",
    "UnsupportedOperationError",
    "register_record",
]
