"""
Document -> record reconstruction.

A document names its record type through the type tag field. The registry
supplies the factory and the field -> setter table for that type; fields the
table does not know are skipped, so documents written by older or newer
versions of a record type still load.
"""
import logging
from typing import Any, Mapping, Optional, Type

from docmapper.errors import UnknownTypeTagError
from docmapper.stores.registry import ID_FIELD, TYPE_TAG_FIELD, get_registration, registration_for

logger = logging.getLogger(__name__)


def _restore_value(value: Any) -> Any:
    if isinstance(value, Mapping):
        if TYPE_TAG_FIELD in value:
            return from_document(value)
        return {k: _restore_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_restore_value(v) for v in value]
    return value


def from_document(document: Mapping[str, Any], default_class: Optional[Type[Any]] = None) -> Any:
    """Build a record from a stored document.

    Args:
        document: Document as returned by the driver
        default_class: Record class used when the document carries no type tag

    Returns:
        The reconstructed record. When the document has an identifier the
        record's `id` is set and `is_new` is False.

    Raises:
        UnknownTypeTagError: If the tag is unknown, or missing with no default_class
    """
    tag = document.get(TYPE_TAG_FIELD)
    if tag is not None:
        registration = get_registration(tag)
    elif default_class is not None:
        registration = registration_for(default_class)
    else:
        raise UnknownTypeTagError(None)

    record = registration.create()
    for key, value in document.items():
        if key == TYPE_TAG_FIELD:
            continue
        if key == ID_FIELD:
            record.id = str(value)
            record.is_new = False
            continue
        setter = registration.setter_for(key)
        if setter is None:
            logger.debug(f"Skipping field '{key}': no setter on {registration.record_class.__name__}")
            continue
        setter(record, _restore_value(value))
    return record
