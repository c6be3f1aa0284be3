from .base import Record
from .serialization import DocumentMixin

__all__ = ["DocumentMixin", "Record"]
