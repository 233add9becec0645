"""
Process-wide client: the four host operations bound to one default session.

    create_client("mongodb://localhost:27017/testdb")
    put("counters", "visits", 42)
    get("counters", "visits", int)   # -> 42
    destroy_client()

The default session is built on first use and disconnected at interpreter exit.
Code that needs several independent connections should construct KVSession
objects directly.
"""

import atexit
import threading
from typing import Any, Optional

from mongokv.core.logging import logger
from mongokv.kv.codecs import ValueType
from mongokv.kv.protocol import KVStore
from mongokv.kv.session import KVSession

_session: Optional[KVSession] = None
_session_lock = threading.Lock()


def get_session() -> KVSession:
    """Return the default session, creating it (disconnected) if needed."""
    global _session
    with _session_lock:
        if _session is None:
            _session = KVSession()
        return _session


def set_session(session: Optional[KVSession]) -> None:
    """Replace the default session (e.g. with one using a test client factory)."""
    global _session
    with _session_lock:
        _session = session


def _store() -> KVStore:
    return KVStore(get_session())


def create_client(uri: Optional[str] = None) -> None:
    """Connect the default session. uri defaults to the connection.uri setting."""
    get_session().connect(uri)


def destroy_client() -> None:
    """Disconnect the default session."""
    get_session().disconnect()


def put(collection_name: str, key: str, value: Any, value_type: Optional[ValueType] = None) -> None:
    _store().put(collection_name, key, value, value_type)


def get(collection_name: str, key: str, value_type: ValueType) -> Any:
    return _store().get(collection_name, key, value_type)


def put_int8(collection_name: str, key: str, value: int) -> None:
    _store().put_int8(collection_name, key, value)


def get_int8(collection_name: str, key: str) -> int:
    return _store().get_int8(collection_name, key)


def put_text(collection_name: str, key: str, value: str) -> None:
    _store().put_text(collection_name, key, value)


def get_text(collection_name: str, key: str) -> str:
    return _store().get_text(collection_name, key)


@atexit.register
def _teardown() -> None:
    session = _session
    if session is not None and session.is_connected:
        logger.debug("Disconnecting default session at exit")
        session.disconnect()
