import dataclasses
from dataclasses import is_dataclass
from typing import Any, Dict, Mapping

from bson import json_util

from docmapper.stores.registry import ID_FIELD, TYPE_TAG_FIELD, registration_for


def _convert_value(v: Any) -> Any:
    # Preserve BSON-native types (datetime, ObjectId, Decimal128, ...)
    # Only recurse into records, dataclasses, mappings, and sequences
    if isinstance(v, DocumentMixin):
        return v.to_attributes()
    if is_dataclass(v) and not isinstance(v, type):
        # nested records keep their own type tag
        return {f.name: _convert_value(getattr(v, f.name)) for f in dataclasses.fields(v)}
    if isinstance(v, Mapping):
        return {k: _convert_value(val) for k, val in v.items()}
    if isinstance(v, (list, tuple, set, frozenset)):
        return [_convert_value(i) for i in v]
    return v


class DocumentMixin:
    """
    Serialization helpers shared by every record type.

    The field list and type tag come from the record's registration, so
    serialization never inspects instance __dict__ at runtime.
    """

    def to_attributes(self) -> Dict[str, Any]:
        """Return the stored document for this record, without its identifier.

        Nested records become nested documents carrying their own type tag.
        Keys are sorted. The record itself is left untouched.
        """
        registration = registration_for(type(self))
        attributes = {name: _convert_value(getattr(self, name)) for name in registration.field_names}
        attributes[TYPE_TAG_FIELD] = registration.tag
        return dict(sorted(attributes.items()))

    def to_json(self) -> str:
        """Render the document as relaxed extended JSON, identifier included when set."""
        doc = self.to_attributes()
        record_id = getattr(self, "id", None)
        if record_id:
            doc = {ID_FIELD: record_id, **doc}
        return json_util.dumps(doc, json_options=json_util.RELAXED_JSON_OPTIONS)
