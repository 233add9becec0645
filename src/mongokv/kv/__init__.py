"""
Key-value layer: name validation, value codecs, collection cache, session
lifecycle and the put/get protocol.
"""

from mongokv.kv.collection_names import CollectionName, validate_collection_name
from mongokv.kv.codecs import (
    ValueCodec,
    Int64Codec,
    TextCodec,
    INT64,
    TEXT,
    get_codec,
    codec_for_value,
    register_codec,
)
from mongokv.kv.cache import CollectionCache, KEY_FIELD, VALUE_FIELD
from mongokv.kv.session import KVSession
from mongokv.kv.protocol import KVStore

__all__ = [
    "CollectionName",
    "validate_collection_name",
    "ValueCodec",
    "Int64Codec",
    "TextCodec",
    "INT64",
    "TEXT",
    "get_codec",
    "codec_for_value",
    "register_codec",
    "CollectionCache",
    "KEY_FIELD",
    "VALUE_FIELD",
    "KVSession",
    "KVStore",
]
