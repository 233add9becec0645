"""
Collection handle cache.

Every handle in the cache already has its ascending index on `key`. Entries are
never evicted one by one; the owning session clears the whole cache on
disconnect.
"""

from typing import Dict, Iterator, List

from pymongo import ASCENDING
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError

from mongokv.core.exceptions import StoreError
from mongokv.core.logging import logger, perf_logger
from mongokv.kv.collection_names import CollectionName

KEY_FIELD = "key"
VALUE_FIELD = "value"


class CollectionCache:
    """
    Maps validated collection names to provisioned handles.

    Lives exactly as long as the client of the session that created it.
    """

    def __init__(self, database: Database):
        self._database = database
        self._handles: Dict[str, Collection] = {}

    def fetch(self, name: CollectionName) -> Collection:
        """
        Return the handle for `name`, opening and indexing it on first use.

        Raises:
            StoreError: index creation failed; nothing is cached
        """
        handle = self._handles.get(name)
        if handle is not None:
            return handle

        handle = self._database.get_collection(name)
        try:
            with perf_logger.measure("create_index", collection=str(name)):
                handle.create_index([(KEY_FIELD, ASCENDING)])
        except PyMongoError as e:
            # Nothing cached, so the next fetch retries provisioning
            logger.error("Index provisioning failed", collection=str(name), error=str(e))
            raise StoreError(
                f"failed to create index for collection: {e}",
                context={"collection": str(name), "original_error": str(e)},
                cause=e,
            ) from e

        self._handles[name] = handle
        logger.info("Collection provisioned", collection=str(name))
        return handle

    def clear(self) -> None:
        """Release every cached handle."""
        count = len(self._handles)
        self._handles.clear()
        logger.debug("Collection cache cleared", released=count)

    def names(self) -> List[str]:
        return sorted(self._handles)

    def __contains__(self, name: object) -> bool:
        return name in self._handles

    def __len__(self) -> int:
        return len(self._handles)

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())
