"""
Example demonstrating the record lifecycle against a local MongoDB.

Reads the `mongodb` section from config.json (or DOCMAPPER_CONFIG), e.g.

    {"mongodb": {"uri": "mongodb://localhost:27017", "database": "docmapper_demo"}}
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from docmapper import Record, Store, register_record
from docmapper.observability import JsonFormatter, install_log_context_filter, set_obs_context

_handler = logging.StreamHandler()
_handler.setFormatter(JsonFormatter(static_fields={"service": "widget-example"}))
logging.basicConfig(level=logging.INFO, handlers=[_handler])
logging.getLogger("docmapper").setLevel(logging.DEBUG)
logger = logging.getLogger(__name__)


@register_record
@dataclass
class Part(Record):
    sku: str = ""
    quantity: int = 1

    @classmethod
    def get_collection_name(cls) -> str:
        return "parts"


@register_record
@dataclass
class Widget(Record):
    name: str = ""
    tags: List[str] = field(default_factory=list)
    price: Optional[float] = None
    parts: List[Part] = field(default_factory=list)

    @classmethod
    def get_collection_name(cls) -> str:
        return "widgets"


def demonstrate_lifecycle():
    print("=== Record lifecycle ===")

    widget = Widget(name="sprocket", tags=["metal"], price=4.5, parts=[Part(sku="bolt-m4", quantity=2)])
    print(f"New widget: is_new={widget.is_new} id={widget.id}")

    if not widget.save():
        print("Insert was not acknowledged")
        return
    print(f"Saved widget: is_new={widget.is_new} id={widget.id}")
    print(f"Stored document: {widget.to_json()}")

    widget.price = 5.0
    print(f"Updated: {widget.save()}")

    loaded = Widget.find_by_id(widget.id)
    print(f"Loaded equals saved: {loaded == widget}")
    print(f"Nested part type: {type(loaded.parts[0]).__name__}")

    print(f"Deleted: {loaded.delete()}")
    print(f"After delete: {Widget.find_by_id(widget.id)}")


def demonstrate_queries():
    print("\n=== Queries ===")

    for i, price in enumerate([3.0, 1.0, 2.0]):
        Widget(name=f"widget-{i}", price=price, tags=["demo"]).save()

    cheapest = Widget.find({"tags": "demo"}, sort=[("price", 1)], limit=2)
    print(f"Two cheapest: {[(w.name, w.price) for w in cheapest]}")
    print(f"Demo widgets: {Widget.count({'tags': 'demo'})}")

    for widget in Widget.find({"tags": "demo"}, limit=0):
        widget.delete()


def main():
    install_log_context_filter()
    set_obs_context({"request_id": "widget-example-run"})

    Store.init_from_config()
    demonstrate_lifecycle()
    demonstrate_queries()


if __name__ == "__main__":
    main()
