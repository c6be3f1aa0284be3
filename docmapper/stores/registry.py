"""
Record type registry (library-level).

Record types register themselves with the @register_record decorator. The
registry maps a type tag to everything the mapper needs to rebuild a record
from a document: a zero-argument factory, the ordered tuple of serializable
field names, and a field -> setter table. All of it is computed once, at
registration time.
"""
from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Type, Union

from docmapper.errors import UnknownTypeTagError, UnsupportedOperationError

logger = logging.getLogger(__name__)

# Stored document fields
ID_FIELD = "_id"
TYPE_TAG_FIELD = "type_tag"

# In-memory only record attributes, never serialized
SYSTEM_FIELDS = frozenset({"id", "is_new"})

# Document keys written by the mapper itself
RESERVED_FIELDS = frozenset({ID_FIELD, TYPE_TAG_FIELD})

Setter = Callable[[Any, Any], None]


@dataclass(frozen=True)
class RecordRegistration:
    """Everything known about one registered record type."""
    tag: str
    record_class: Type[Any]
    factory: Callable[[], Any]
    field_names: Tuple[str, ...]
    setters: Dict[str, Setter] = field(default_factory=dict)

    def create(self) -> Any:
        return self.factory()

    def setter_for(self, name: str) -> Optional[Setter]:
        return self.setters.get(name)


# Global registry: type tag -> registration
_RECORD_REGISTRY: Dict[str, RecordRegistration] = {}
# Reverse lookup: record class -> type tag
_CLASS_TAGS: Dict[Type[Any], str] = {}


def _method_setter(method_name: str) -> Setter:
    def _call(record: Any, value: Any) -> None:
        getattr(record, method_name)(value)

    return _call


def _attribute_setter(name: str) -> Setter:
    def _assign(record: Any, value: Any) -> None:
        setattr(record, name, value)

    return _assign


def _needs_arguments(record_cls: Type[Any]) -> bool:
    for f in dataclasses.fields(record_cls):
        if f.init and f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING:
            return True
    return False


def _build_setters(record_cls: Type[Any], field_names: Tuple[str, ...],
                   overrides: Optional[Mapping[str, Union[str, Setter]]]) -> Dict[str, Setter]:
    """Build the field -> setter table for a record class.

    A field `foo_bar` uses `set_foo_bar(value)` when the class defines it and
    plain attribute assignment otherwise. Overrides may name a method or give
    a callable taking (record, value); they may also add document fields that
    are not dataclass fields (e.g. a renamed legacy field).
    """
    setters: Dict[str, Setter] = {}
    for name in field_names:
        method_name = f"set_{name}"
        if callable(getattr(record_cls, method_name, None)):
            setters[name] = _method_setter(method_name)
        else:
            setters[name] = _attribute_setter(name)

    for name, setter in (overrides or {}).items():
        if isinstance(setter, str):
            if not callable(getattr(record_cls, setter, None)):
                raise TypeError(f"{record_cls.__name__} has no setter method '{setter}' for field '{name}'")
            setters[name] = _method_setter(setter)
        elif callable(setter):
            setters[name] = setter
        else:
            raise TypeError(f"Setter for field '{name}' must be a method name or a callable")
    return setters


def register_record(cls: Optional[Type[Any]] = None, *, tag: Optional[str] = None,
                    factory: Optional[Callable[[], Any]] = None,
                    setters: Optional[Mapping[str, Union[str, Setter]]] = None):
    """Register a dataclass record type. Usable bare or with arguments.

        @register_record
        @dataclass
        class Widget(Record): ...

        @register_record(tag="widget.v2", setters={"title": "set_name"})
        @dataclass
        class Widget(Record): ...

    Args:
        cls: The record class (when used without arguments)
        tag: Type tag stored in documents; defaults to the class name
        factory: Zero-argument callable producing an empty instance; defaults to the class
        setters: Per-field setter overrides (method name or callable(record, value))

    Raises:
        TypeError: If the class is not a dataclass, declares a field named
            `_id` or `type_tag`, or needs constructor arguments and no
            factory was given
    """

    def _register(record_cls: Type[Any]) -> Type[Any]:
        # __dataclass_fields__ is inherited, so check the class itself was decorated
        if "__dataclass_fields__" not in vars(record_cls):
            raise TypeError(f"{record_cls.__name__} must be a dataclass to be registered as a record")
        if factory is None and _needs_arguments(record_cls):
            raise TypeError(
                f"{record_cls.__name__} has fields without defaults; give every field a default "
                f"or pass factory= to register_record"
            )

        type_tag = tag or record_cls.__name__
        field_names = tuple(f.name for f in dataclasses.fields(record_cls) if f.name not in SYSTEM_FIELDS)
        reserved = RESERVED_FIELDS.intersection(field_names)
        if reserved:
            raise TypeError(
                f"{record_cls.__name__} declares reserved document field(s) {sorted(reserved)}; rename them"
            )
        registration = RecordRegistration(
            tag=type_tag,
            record_class=record_cls,
            factory=factory or record_cls,
            field_names=field_names,
            setters=_build_setters(record_cls, field_names, setters),
        )

        previous = _RECORD_REGISTRY.get(type_tag)
        if previous is not None and previous.record_class is not record_cls:
            logger.warning(f"Type tag '{type_tag}' re-registered: {previous.record_class.__name__} -> {record_cls.__name__}")
            _CLASS_TAGS.pop(previous.record_class, None)

        _RECORD_REGISTRY[type_tag] = registration
        _CLASS_TAGS[record_cls] = type_tag
        logger.debug(f"Registered record type {record_cls.__name__} as '{type_tag}' with fields {field_names}")
        return record_cls

    if cls is None:
        return _register
    return _register(cls)


def unregister_record(tag: str) -> None:
    """Remove a registration. Unknown tags are ignored."""
    registration = _RECORD_REGISTRY.pop(tag, None)
    if registration is not None:
        _CLASS_TAGS.pop(registration.record_class, None)


def get_registration(tag: str) -> RecordRegistration:
    """Return the registration for a type tag.

    Raises:
        UnknownTypeTagError: If nothing is registered under the tag
    """
    try:
        return _RECORD_REGISTRY[tag]
    except KeyError:
        raise UnknownTypeTagError(tag) from None


def registration_for(record_cls: Type[Any]) -> RecordRegistration:
    """Return the registration of a record class.

    Raises:
        UnsupportedOperationError: If the class was never registered
    """
    tag = _CLASS_TAGS.get(record_cls)
    if tag is None:
        raise UnsupportedOperationError(
            f"{record_cls.__name__} is not a registered record type; decorate it with @register_record"
        )
    return _RECORD_REGISTRY[tag]


def is_registered(record_cls: Type[Any]) -> bool:
    return record_cls in _CLASS_TAGS


def list_record_types() -> Dict[str, Type[Any]]:
    """Return a copy of the tag -> record class mapping."""
    return {tag: reg.record_class for tag, reg in _RECORD_REGISTRY.items()}
