"""
Exception types raised by docmapper.

Each error also derives from the builtin that callers would naturally catch
(ValueError, LookupError, ...), so code written against plain Python
exceptions keeps working. Errors coming from pymongo are never wrapped.
"""
from typing import Optional


class DocMapperError(Exception):
    """Base class for all docmapper errors."""


class StoreNotInitializedError(DocMapperError, RuntimeError):
    """The Store was used before Store.init() or Store.init_from_config()."""


class InvalidArgumentError(DocMapperError, ValueError):
    """A malformed identifier, filter, sort or limit was rejected before reaching the database."""


class UnsupportedOperationError(DocMapperError, NotImplementedError):
    """The mapper cannot express the requested value or operation."""


class UnknownTypeTagError(DocMapperError, LookupError):
    """A document carries a type tag that no registered record type claims."""

    def __init__(self, tag: Optional[str]):
        if tag is None:
            message = "Document has no type tag and no fallback record type was given"
        else:
            message = f"No record type registered for type tag '{tag}'"
        super().__init__(message)
        self.tag = tag


class IdentifierMissingError(DocMapperError):
    """The database acknowledged an insert but returned no usable identifier."""
