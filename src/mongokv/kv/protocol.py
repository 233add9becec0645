"""
Upsert and point lookup of `{key, value}` documents.
"""

from typing import Any, Optional

from pymongo.errors import PyMongoError

from mongokv.core.exceptions import (
    NotFoundError,
    StoreError,
    TypeMismatchError,
    ValidationError,
)
from mongokv.core.logging import logger, perf_logger
from mongokv.kv.cache import KEY_FIELD, VALUE_FIELD
from mongokv.kv.collection_names import CollectionName
from mongokv.kv.codecs import INT64, TEXT, ValueType, codec_for_value, get_codec
from mongokv.kv.session import KVSession


def _check_key(key: Any) -> str:
    if not isinstance(key, str):
        raise ValidationError(
            f"key must be a string, got {type(key).__name__}",
            context={"field": "key", "reason": "not_a_string"},
        )
    return key


class KVStore:
    """
    Generic key-value protocol over a KVSession.

    put() is a single server-side upsert filtered by key, so concurrent writers
    of the same key converge without a read-modify-write race.
    """

    def __init__(self, session: KVSession):
        self.session = session

    def put(
        self,
        collection_name: str,
        key: str,
        value: Any,
        value_type: Optional[ValueType] = None,
    ) -> None:
        """
        Store `value` under `key`, replacing any previous value.

        Args:
            collection_name: Target collection
            key: Document key
            value: int (int64 range) or str
            value_type: Force a codec instead of inferring it from the value

        Raises:
            NotConnectedError, ValidationError, StoreError
        """
        self.session.require_connected()
        name = CollectionName.validate(collection_name, self.session.max_name_length)
        key = _check_key(key)
        codec = get_codec(value_type) if value_type is not None else codec_for_value(value)
        encoded = codec.encode(value)
        collection = self.session.collection(name)

        try:
            with perf_logger.measure("update_one", collection=collection.name):
                collection.update_one(
                    {KEY_FIELD: key},
                    {"$set": {KEY_FIELD: key, VALUE_FIELD: encoded}},
                    upsert=True,
                )
        except PyMongoError as e:
            logger.error("Put failed", collection=collection.name, error=str(e))
            raise StoreError(
                f"failed to put value: {e}",
                context={"collection": collection.name, "original_error": str(e)},
                cause=e,
            ) from e

        logger.info(f"{codec.name} stored with success", collection=collection.name)

    def get(self, collection_name: str, key: str, value_type: ValueType) -> Any:
        """
        Return the value stored under `key`, decoded as `value_type`.

        Raises:
            NotConnectedError, ValidationError, NotFoundError,
            TypeMismatchError, StoreError
        """
        self.session.require_connected()
        name = CollectionName.validate(collection_name, self.session.max_name_length)
        key = _check_key(key)
        codec = get_codec(value_type)
        collection = self.session.collection(name)

        try:
            with perf_logger.measure("find_one", collection=collection.name):
                document = collection.find_one({KEY_FIELD: key})
        except PyMongoError as e:
            logger.error("Get failed", collection=collection.name, error=str(e))
            raise StoreError(
                f"failed to find key: {e}",
                context={"collection": collection.name, "original_error": str(e)},
                cause=e,
            ) from e

        if document is None:
            raise NotFoundError(
                "key doesn't exist",
                context={"collection": collection.name, "key": key},
            )

        if VALUE_FIELD not in document:
            raise StoreError(
                "missing value field",
                context={"collection": collection.name, "key": key},
            )

        stored = document[VALUE_FIELD]
        if not codec.holds(stored):
            raise TypeMismatchError(
                "key doesn't hold value of expected type",
                context={
                    "collection": collection.name,
                    "key": key,
                    "expected": codec.name,
                    "actual": type(stored).__name__,
                },
            )

        logger.info(f"{codec.name} returned with success", collection=collection.name)
        return codec.decode(stored)

    # Typed variants matching the host's put_int8/get_int8/put_text/get_text

    def put_int8(self, collection_name: str, key: str, value: int) -> None:
        self.put(collection_name, key, value, INT64)

    def get_int8(self, collection_name: str, key: str) -> int:
        return self.get(collection_name, key, INT64)

    def put_text(self, collection_name: str, key: str, value: str) -> None:
        self.put(collection_name, key, value, TEXT)

    def get_text(self, collection_name: str, key: str) -> str:
        return self.get(collection_name, key, TEXT)
