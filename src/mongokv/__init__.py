"""
mongokv - a minimal key-value store on top of MongoDB.

Collections are opened lazily, get an ascending index on `key` on first use and
stay cached until the client is destroyed.
"""

from mongokv._version import __version__, __version_info__

__author__ = "mongokv contributors"
__license__ = "MIT"

# Core components
from mongokv.core import (
    logger,
    Settings,
    ErrorType,
    MongoKVError,
    ConfigurationError,
    ConnectivityError,
    AlreadyConnectedError,
    NotConnectedError,
    ValidationError,
    NotFoundError,
    TypeMismatchError,
    StoreError,
    ErrorResponse,
    from_exception,
    MAX_COLLECTION_NAME_LENGTH,
)

# Key-value layer
from mongokv.kv import (
    CollectionName,
    validate_collection_name,
    ValueCodec,
    INT64,
    TEXT,
    CollectionCache,
    KVSession,
    KVStore,
)

# Process-wide host operations
from mongokv.client import (
    create_client,
    destroy_client,
    put,
    get,
    put_int8,
    get_int8,
    put_text,
    get_text,
    get_session,
    set_session,
)

__all__ = [
    "__version__",
    "__version_info__",
    "__author__",
    "__license__",
    # Core
    "logger",
    "Settings",
    "MAX_COLLECTION_NAME_LENGTH",
    # Exceptions
    "ErrorType",
    "MongoKVError",
    "ConfigurationError",
    "ConnectivityError",
    "AlreadyConnectedError",
    "NotConnectedError",
    "ValidationError",
    "NotFoundError",
    "TypeMismatchError",
    "StoreError",
    "ErrorResponse",
    "from_exception",
    # Key-value layer
    "CollectionName",
    "validate_collection_name",
    "ValueCodec",
    "INT64",
    "TEXT",
    "CollectionCache",
    "KVSession",
    "KVStore",
    # Host operations
    "create_client",
    "destroy_client",
    "put",
    "get",
    "put_int8",
    "get_int8",
    "put_text",
    "get_text",
    "get_session",
    "set_session",
]
