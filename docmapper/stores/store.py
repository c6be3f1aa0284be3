"""
Process-wide MongoDB store.

The Store owns the single MongoClient, maps records to documents and back,
and runs find/insert/update/delete/count against a named collection. It holds
no per-request state: filter, sort and limit are arguments of every query.

    Store.init("mongodb://localhost:27017", "app")
    store = Store.get_instance()
    widgets = store.find("widgets", {"name": "a"}, sort=[("name", 1)], limit=5)
"""
from __future__ import annotations

import logging
import threading
from time import perf_counter
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Tuple, Type, Union

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import MongoClient
from pymongo.collection import Collection

from docmapper.configuration import ConfigValidator, get_config
from docmapper.errors import IdentifierMissingError, InvalidArgumentError, StoreNotInitializedError
from docmapper.observability.instrumentation import make_emitter, with_obs_context
from docmapper.observability.logging_filter import mask_credentials
from docmapper.stores.mapping import from_document
from docmapper.stores.query import QueryOptions, SortSpec
from docmapper.stores.registry import ID_FIELD

if TYPE_CHECKING:
    from docmapper.models.base import Record

logger = logging.getLogger(__name__)

# config key -> MongoClient keyword
_CLIENT_OPTION_KEYS = {
    "server_selection_timeout_ms": "serverSelectionTimeoutMS",
    "connect_timeout_ms": "connectTimeoutMS",
    "app_name": "appname",
    "tz_aware": "tz_aware",
}


def _store_context(operation: str):
    """Scope collection, record type and operation onto the obs context of a Store verb.

    The first argument after self is either a collection name or a record.
    """

    def _resolve(store: "Store", target: Any = None, *args: Any, **kwargs: Any) -> Dict[str, Any]:
        ctx: Dict[str, Any] = {"operation": operation, "database": store.database_name}
        if target is None:
            target = kwargs.get("collection", kwargs.get("record"))
        if isinstance(target, str):
            ctx["collection"] = target
        elif hasattr(type(target), "get_collection_name"):
            ctx["collection"] = type(target).get_collection_name()
            ctx["record_type"] = type(target).__name__
        record_type = kwargs.get("record_type")
        if record_type is not None:
            ctx["record_type"] = getattr(record_type, "__name__", str(record_type))
        return ctx

    return with_obs_context(_resolve)


def parse_object_id(value: Union[str, ObjectId, None]) -> ObjectId:
    """Parse a record identifier into an ObjectId.

    Raises:
        InvalidArgumentError: If value is empty or not a 24-character hex string
    """
    if isinstance(value, ObjectId):
        return value
    if not value:
        raise InvalidArgumentError("Identifier is empty")
    try:
        return ObjectId(value)
    except (InvalidId, TypeError) as e:
        raise InvalidArgumentError(f"'{value}' is not a valid ObjectId: {e}") from e


class Store:
    """Singleton owning the database connection and the record <-> document mapping."""

    # Preconfigured emitter for store operations
    STORE_EMIT = make_emitter(component="store", default_type="store_operation")

    _instance: Optional["Store"] = None
    _settings: Optional[Tuple[Optional[str], str, Optional[MongoClient], Dict[str, Any]]] = None
    _lock = threading.Lock()

    def __init__(self, client: MongoClient, database_name: str):
        self._client = client
        self._database_name = database_name
        self._db = client[database_name]

    # ---- Lifecycle --------------------------------------------------------

    @classmethod
    def init(cls, uri: Optional[str] = None, database: Optional[str] = None, *,
             client: Optional[MongoClient] = None, **client_kwargs: Any) -> None:
        """Record connection settings for the process-wide Store.

        The client is created lazily by get_instance(). Once the instance
        exists, later calls keep it; call reset() first to reconnect.

        Args:
            uri: MongoDB connection string (ignored when client is given)
            database: Database name
            client: An already-constructed MongoClient to use instead of uri
            **client_kwargs: Extra MongoClient keyword arguments

        Raises:
            InvalidArgumentError: If database is empty or neither uri nor client is given
        """
        if not database:
            raise InvalidArgumentError("A database name is required")
        if client is None and not uri:
            raise InvalidArgumentError("Either a connection uri or a client is required")

        with cls._lock:
            if cls._instance is not None:
                logger.warning(f"Store already connected to '{cls._instance.database_name}'; ignoring init for '{database}'")
                return
            cls._settings = (uri, database, client, dict(client_kwargs))
        target = mask_credentials(uri) if client is None else "a provided client"
        logger.info(f"Store configured for database '{database}' via {target}")

    @classmethod
    def init_from_config(cls, config_path: Optional[str] = None) -> None:
        """Initialize from the `mongodb` configuration section.

        Raises:
            KeyError: If uri or database is missing from the section
            ValueError: If the section is invalid
        """
        cfg = get_config("mongodb", config_path)
        ConfigValidator.validate_mongodb_config(cfg, cfg.path)
        client_kwargs = {kwarg: cfg[key] for key, kwarg in _CLIENT_OPTION_KEYS.items() if key in cfg}
        cls.init(cfg["uri"], cfg["database"], **client_kwargs)

    @classmethod
    def get_instance(cls) -> "Store":
        """Return the shared Store, creating the client on first use.

        Raises:
            StoreNotInitializedError: If init() was never called
        """
        with cls._lock:
            if cls._instance is None:
                if cls._settings is None:
                    raise StoreNotInitializedError(
                        "Store is not initialized; call Store.init(uri, database) or Store.init_from_config() first"
                    )
                uri, database, client, client_kwargs = cls._settings
                if client is None:
                    client = MongoClient(uri, **client_kwargs)
                cls._instance = cls(client, database)
                logger.debug(f"Created Store instance for database '{database}'")
            return cls._instance

    @classmethod
    def is_initialized(cls) -> bool:
        return cls._instance is not None or cls._settings is not None

    @classmethod
    def reset(cls) -> None:
        """Forget the shared instance and settings. The client is not closed."""
        with cls._lock:
            cls._instance = None
            cls._settings = None

    @property
    def database_name(self) -> str:
        return self._database_name

    @property
    def client(self) -> MongoClient:
        return self._client

    def collection(self, name: str) -> Collection:
        if not isinstance(name, str) or not name:
            raise InvalidArgumentError(f"Collection name must be a non-empty string, got {name!r}")
        return self._db[name]

    # ---- Helpers ----------------------------------------------------------

    def _op_data(self, *, collection: str, t0: float, returned: Optional[int] = None,
                 record_id: Optional[str] = None, ok: Optional[bool] = None) -> Dict[str, Any]:
        data = {
            "collection": collection,
            "database": self._database_name,
            "returned": returned,
            "id": record_id,
            "ok": ok,
            "duration_ms": (perf_counter() - t0) * 1000.0,
        }
        return {k: v for k, v in data.items() if v is not None}

    @staticmethod
    def _record_filter(record: "Record") -> Dict[str, ObjectId]:
        if not record.id:
            raise InvalidArgumentError(f"{type(record).__name__} has no identifier; save it before updating or deleting")
        return {ID_FIELD: parse_object_id(record.id)}

    # ---- Queries ----------------------------------------------------------

    @_store_context("find")
    def find(self, collection: str, filter: Optional[Mapping[str, Any]] = None, sort: Optional[SortSpec] = None,
             limit: Optional[int] = None, *, record_type: Optional[Type[Any]] = None) -> List["Record"]:
        """Run a query and rebuild a record per document.

        Args:
            collection: Collection name
            filter: MongoDB filter, passed through unmodified
            sort: (field, direction) pairs or a mapping, passed through in order
            limit: Max documents; None means DEFAULT_LIMIT, 0 means unlimited
            record_type: Record class for documents without a type tag

        Returns:
            Records in the order returned by the database (empty list when nothing matches)

        Raises:
            InvalidArgumentError: If filter, sort or limit is malformed
            UnknownTypeTagError: If a document's type tag is not registered
        """
        options = QueryOptions.build(filter, sort, limit)
        t0 = perf_counter()
        with self.collection(collection).find(**options.to_find_kwargs()) as cursor:
            records = [from_document(doc, record_type) for doc in cursor]
        logger.debug(f"find {collection} filter={options.filter} sort={options.sort} limit={options.limit} -> {len(records)}")
        Store.STORE_EMIT(None, "find", self._op_data(collection=collection, t0=t0, returned=len(records)))
        return records

    @_store_context("find_one")
    def find_one(self, collection: str, filter: Optional[Mapping[str, Any]] = None, sort: Optional[SortSpec] = None,
                 *, record_type: Optional[Type[Any]] = None) -> Optional["Record"]:
        """First matching record, or None."""
        records = self.find(collection, filter, sort, limit=1, record_type=record_type)
        return records[0] if records else None

    @_store_context("find_by_id")
    def find_by_id(self, collection: str, record_id: Union[str, ObjectId], *,
                   record_type: Optional[Type[Any]] = None) -> Optional["Record"]:
        """Record with the given identifier, or None.

        Raises:
            InvalidArgumentError: If record_id is not a valid ObjectId string
        """
        return self.find_one(collection, {ID_FIELD: parse_object_id(record_id)}, record_type=record_type)

    @_store_context("count")
    def count(self, collection: str, filter: Optional[Mapping[str, Any]] = None) -> int:
        """Number of documents matching filter."""
        options = QueryOptions.build(filter)
        t0 = perf_counter()
        total = self.collection(collection).count_documents(options.filter)
        Store.STORE_EMIT(None, "count", self._op_data(collection=collection, t0=t0, returned=total))
        return total

    # ---- Writes -----------------------------------------------------------

    @_store_context("insert")
    def insert(self, record: "Record") -> Optional[str]:
        """Insert the record as a new document.

        Returns:
            The new identifier as a string, or None when the write was not acknowledged

        Raises:
            IdentifierMissingError: If the write was acknowledged without an identifier
        """
        collection = type(record).get_collection_name()
        t0 = perf_counter()
        result = self.collection(collection).insert_one(record.to_attributes())
        if not result.acknowledged:
            logger.warning(f"Insert into {collection} was not acknowledged")
            Store.STORE_EMIT(None, "insert", self._op_data(collection=collection, t0=t0, ok=False))
            return None
        if result.inserted_id is None:
            raise IdentifierMissingError(f"Insert into {collection} was acknowledged without an identifier")

        record_id = str(result.inserted_id)
        logger.debug(f"insert {collection} -> {record_id}")
        Store.STORE_EMIT(None, "insert", self._op_data(collection=collection, t0=t0, record_id=record_id, ok=True))
        return record_id

    @_store_context("update")
    def update(self, record: "Record") -> bool:
        """Replace the stored document with the record's current state.

        Returns:
            True if exactly one document matched the record's identifier
        """
        collection = type(record).get_collection_name()
        t0 = perf_counter()
        result = self.collection(collection).replace_one(self._record_filter(record), record.to_attributes())
        ok = result.acknowledged and result.matched_count == 1
        logger.debug(f"update {collection} {record.id} -> {ok}")
        Store.STORE_EMIT(None, "update", self._op_data(collection=collection, t0=t0, record_id=record.id, ok=ok))
        return ok

    @_store_context("delete")
    def delete(self, record: "Record") -> bool:
        """Remove the record's document.

        Returns:
            True if exactly one document was removed
        """
        collection = type(record).get_collection_name()
        t0 = perf_counter()
        result = self.collection(collection).delete_one(self._record_filter(record))
        ok = result.acknowledged and result.deleted_count == 1
        logger.debug(f"delete {collection} {record.id} -> {ok}")
        Store.STORE_EMIT(None, "delete", self._op_data(collection=collection, t0=t0, record_id=record.id, ok=ok))
        return ok
