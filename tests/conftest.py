"""
Shared fixtures: an in-memory stand-in for a MongoDB deployment.

FakeMongoServer keeps documents across clients, so reconnect tests see earlier
writes. It records pings and index creations and can be told to fail them.
No live network.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pytest

os.environ.setdefault("MONGOKV_LOG_FILE", str(Path(tempfile.gettempdir()) / "mongokv-tests.log"))

from mongokv import client as process_client  # noqa: E402
from mongokv.core.secure_config import Settings  # noqa: E402
from mongokv.kv.protocol import KVStore  # noqa: E402
from mongokv.kv.session import KVSession  # noqa: E402

TEST_URI = "mongodb://localhost:27017/testdb"


class FakeCollection:
    """Per-call handle over shared storage, like pymongo's Collection objects."""

    def __init__(self, server: "FakeMongoServer", database: str, name: str):
        self._server = server
        self.database_name = database
        self.name = name

    @property
    def _docs(self) -> List[Dict[str, Any]]:
        return self._server.storage.setdefault((self.database_name, self.name), [])

    def create_index(self, keys, **kwargs):
        self._server.index_calls.append((self.database_name, self.name, list(keys)))
        if self._server.index_error is not None:
            raise self._server.index_error
        return "key_1"

    def update_one(self, filter, update, upsert=False):
        self._server.update_calls.append((self.name, filter, update, upsert))
        if self._server.write_error is not None:
            raise self._server.write_error
        fields = update["$set"]
        for doc in self._docs:
            if all(doc.get(k) == v for k, v in filter.items()):
                doc.update(fields)
                return
        if upsert:
            self._docs.append(dict(fields))

    def find_one(self, filter):
        self._server.find_calls.append((self.name, filter))
        if self._server.read_error is not None:
            raise self._server.read_error
        for doc in self._docs:
            if all(doc.get(k) == v for k, v in filter.items()):
                return dict(doc)
        return None

    def insert_raw(self, doc: Dict[str, Any]) -> None:
        """Write a document bypassing the protocol (for corrupt-data tests)."""
        self._docs.append(dict(doc))


class FakeDatabase:
    def __init__(self, server: "FakeMongoServer", name: str):
        self._server = server
        self.name = name

    def get_collection(self, name: str) -> FakeCollection:
        return FakeCollection(self._server, self.name, name)

    def command(self, command: str):
        self._server.pings.append(self.name)
        if self._server.ping_error is not None:
            raise self._server.ping_error
        return {"ok": 1.0}


class FakeMongoClient:
    def __init__(self, server: "FakeMongoServer", uri: str, **kwargs):
        self._server = server
        self.uri = uri
        self.kwargs = kwargs
        self.closed = False

    def get_database(self, name: str) -> FakeDatabase:
        return FakeDatabase(self._server, name)

    def close(self) -> None:
        self.closed = True


class FakeMongoServer:
    def __init__(self):
        self.storage: Dict[Tuple[str, str], List[Dict[str, Any]]] = {}
        self.clients: List[FakeMongoClient] = []
        self.pings: List[str] = []
        self.index_calls: List[Tuple[str, str, list]] = []
        self.update_calls: List[tuple] = []
        self.find_calls: List[tuple] = []
        self.construct_error: Optional[Exception] = None
        self.ping_error: Optional[Exception] = None
        self.index_error: Optional[Exception] = None
        self.write_error: Optional[Exception] = None
        self.read_error: Optional[Exception] = None

    def client_factory(self, uri: str, **kwargs) -> FakeMongoClient:
        if self.construct_error is not None:
            raise self.construct_error
        client = FakeMongoClient(self, uri, **kwargs)
        self.clients.append(client)
        return client

    def collection(self, name: str, database: str = "testdb") -> FakeCollection:
        return FakeCollection(self, database, name)

    @property
    def round_trips(self) -> int:
        return len(self.pings) + len(self.index_calls) + len(self.update_calls) + len(
            self.find_calls
        )


@pytest.fixture(autouse=True)
def _isolated_environment(tmp_path, monkeypatch):
    """No stray .mongokv file or MONGOKV_* variable leaks into a test."""
    for name in list(os.environ):
        if name.startswith("MONGOKV_") and name != "MONGOKV_LOG_FILE":
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    yield
    process_client.set_session(None)


@pytest.fixture()
def server() -> FakeMongoServer:
    return FakeMongoServer()


@pytest.fixture()
def session(server) -> KVSession:
    """A disconnected session wired to the fake server."""
    return KVSession(settings=Settings(), client_factory=server.client_factory)


@pytest.fixture()
def connected(session):
    session.connect(TEST_URI)
    yield session
    if session.is_connected:
        session.disconnect()


@pytest.fixture()
def store(connected) -> KVStore:
    return KVStore(connected)


@pytest.fixture()
def default_session(session):
    """Install the fake-backed session as the process-wide default."""
    process_client.set_session(session)
    yield session
    if session.is_connected:
        session.disconnect()
