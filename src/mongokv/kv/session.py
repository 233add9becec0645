"""
Connection lifecycle for the key-value store.

A KVSession owns one MongoClient, the parsed connection URI, the target
database and the collection cache. The cache exists exactly while the client
does.

Example:
    with KVSession() as session:
        session.connect("mongodb://localhost:27017/testdb")
        KVStore(session).put("counters", "visits", 42)
"""

import threading
from typing import Any, Callable, Dict, Optional

from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError
from pymongo.uri_parser import parse_uri

from mongokv.core.exceptions import (
    AlreadyConnectedError,
    ConfigurationError,
    ConnectivityError,
    NotConnectedError,
)
from mongokv.core.logging import logger, masker
from mongokv.core.secure_config import Settings
from mongokv.kv.cache import CollectionCache
from mongokv.kv.collection_names import CollectionName

ClientFactory = Callable[..., Any]


class KVSession:
    """
    Disconnected --connect(uri)--> Connected --disconnect()--> Disconnected

    All entry points take the same re-entrant lock, so a multi-threaded host
    sees them serialized.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client_factory: ClientFactory = MongoClient,
        max_name_length: Optional[int] = None,
    ):
        self.settings = settings or Settings()
        self._client_factory = client_factory
        self.max_name_length: int = max_name_length or self.settings.get(
            "collections.max_name_length"
        )
        self._lock = threading.RLock()
        self._client: Optional[Any] = None
        self._uri: Optional[Dict[str, Any]] = None
        self._database: Optional[Database] = None
        self._cache: Optional[CollectionCache] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def connect(self, uri: Optional[str] = None) -> None:
        """
        Open the client and verify the database answers a ping.

        Args:
            uri: MongoDB URI naming a database. Defaults to connection.uri.

        Raises:
            AlreadyConnectedError: session already connected
            ConfigurationError: malformed URI or no database in it
            ConnectivityError: client construction or ping failed
        """
        with self._lock:
            if self._client is not None:
                raise AlreadyConnectedError("client is already created")

            if uri is None:
                uri = self.settings.require("connection.uri")

            parsed = self._parse_uri(uri)
            database_name = parsed.get("database")
            if not database_name:
                raise ConfigurationError(
                    "uri doesn't have database",
                    context={"uri": masker.mask_uri(uri)},
                )

            client = self._open_client(uri, parsed)
            try:
                database = client.get_database(database_name)
                database.command("ping")
            except PyMongoError as e:
                client.close()
                logger.error(
                    "Ping failed", uri=masker.mask_uri(uri), database=database_name, error=str(e)
                )
                error = ConnectivityError(
                    f"failed to check connection with database: {e}",
                    context={"database": database_name, "original_error": str(e)},
                    cause=e,
                )
                error.add_suggestion("Verify that the MongoDB server is running and reachable")
                error.add_suggestion("Check the credentials in the connection uri")
                raise error from e

            self._client = client
            self._uri = parsed
            self._database = database
            self._cache = CollectionCache(database)
            logger.info(
                "client has been created", uri=masker.mask_uri(uri), database=database_name
            )

    def disconnect(self) -> None:
        """
        Release every cached handle and close the client.

        Raises:
            NotConnectedError: session not connected
        """
        with self._lock:
            if self._client is None:
                raise NotConnectedError("client isn't initialized")

            client = self._client
            try:
                if self._cache is not None:
                    self._cache.clear()
            finally:
                self._cache = None
                self._database = None
                self._uri = None
                self._client = None
                client.close()
            logger.info("client was destroyed")

    def _parse_uri(self, uri: str) -> Dict[str, Any]:
        if not isinstance(uri, str):
            raise ConfigurationError(f"connection uri must be a string, got {type(uri).__name__}")
        try:
            return parse_uri(uri)
        except (PyMongoError, ValueError) as e:
            raise ConfigurationError(
                f"failed to parse connection uri: {e}",
                context={"original_error": str(e)},
                cause=e,
            ) from e

    def _open_client(self, uri: str, parsed: Dict[str, Any]) -> Any:
        kwargs: Dict[str, Any] = {}
        if "serverSelectionTimeoutMS" not in parsed.get("options", {}):
            kwargs["serverSelectionTimeoutMS"] = self.settings.get(
                "connection.server_selection_timeout_ms"
            )
        try:
            return self._client_factory(uri, **kwargs)
        except (PyMongoError, ValueError, TypeError) as e:
            logger.error("Client construction failed", uri=masker.mask_uri(uri), error=str(e))
            raise ConnectivityError(
                f"failed to create client: {e}",
                context={"original_error": str(e)},
                cause=e,
            ) from e

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    @property
    def database_name(self) -> Optional[str]:
        return self._database.name if self._database is not None else None

    @property
    def cache(self) -> CollectionCache:
        """The live collection cache. Raises NotConnectedError when disconnected."""
        with self._lock:
            self.require_connected()
            assert self._cache is not None
            return self._cache

    def require_connected(self) -> None:
        if self._client is None:
            raise NotConnectedError("client isn't initialized")

    def collection(self, name: Any) -> Collection:
        """
        Validate `name` and return its provisioned handle.

        Order: connected check, name validation, cache fetch. A CollectionName
        has already been validated and is used as is.
        """
        with self._lock:
            self.require_connected()
            if isinstance(name, CollectionName):
                valid_name = name
            else:
                valid_name = CollectionName.validate(name, self.max_name_length)
            assert self._cache is not None
            return self._cache.fetch(valid_name)

    def health_check(self) -> Dict[str, Any]:
        """
        Report connection health. Never raises.

        Returns:
            {"connected": bool, "database": str|None, "ping_ok": bool,
             "collections": [...], "details": {...}}
        """
        health: Dict[str, Any] = {
            "connected": False,
            "database": None,
            "ping_ok": False,
            "collections": [],
            "details": {},
        }
        with self._lock:
            if self._client is None or self._database is None:
                health["details"]["error"] = "client isn't initialized"
                return health
            health["connected"] = True
            health["database"] = self._database.name
            health["collections"] = self._cache.names() if self._cache is not None else []
            try:
                self._database.command("ping")
                health["ping_ok"] = True
            except PyMongoError as e:
                health["details"]["error"] = str(e)
        return health

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------

    def __enter__(self) -> "KVSession":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        with self._lock:
            if self._client is not None:
                self.disconnect()
