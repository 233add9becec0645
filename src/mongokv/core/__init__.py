"""
mongokv Core module.

Exports the infrastructure shared by the key-value layer.
"""

# Configuration
from mongokv.core.secure_config import (
    Settings,
    ConfigValidator,
    MAX_COLLECTION_NAME_LENGTH,
)

# Exceptions and errors
from mongokv.core.exceptions import (
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
)

# Logging
from mongokv.core.logging import (
    AsyncLogger,
    SensitiveDataMasker,
    PerformanceLogger,
    logger,
    masker,
    perf_logger,
)

__all__ = [
    # Configuration
    "Settings",
    "ConfigValidator",
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
    # Logging
    "AsyncLogger",
    "SensitiveDataMasker",
    "PerformanceLogger",
    "logger",
    "masker",
    "perf_logger",
]
