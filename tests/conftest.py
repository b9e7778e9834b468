"""In-memory stand-in for the pymongo admin surface used by the helpers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pytest


@dataclass
class FakeCollection:
    count: int = 0
    index_sizes: dict[str, float] = field(default_factory=lambda: {"_id_": 0.008})


class FakeDatabase:
    def __init__(self, server: "FakeClient", name: str):
        self.server = server
        self.name = name

    @property
    def _state(self) -> dict[str, Any]:
        return self.server.databases[self.name]

    def command(self, command: str, value: Any = None, **kwargs: Any) -> dict[str, Any]:
        self.server.commands.append((self.name, command, value, kwargs))
        if self.name in self.server.failing:
            from pymongo.errors import OperationFailure

            raise OperationFailure(f"not authorized on {self.name}", code=13)
        if command == "dbStats":
            return dict(self._state["stats"])
        collections = self._state["collections"]
        if command == "count":
            return {"n": collections[value].count, "ok": 1.0}
        if command == "collStats":
            return {"indexSizes": dict(collections[value].index_sizes), "ok": 1.0}
        raise AssertionError(f"unexpected command {command}")

    def list_collections(self):
        # Serve names in batches the way a command cursor does with getMore.
        names = list(self._state["collections"])
        size = self.server.batch_size
        for start in range(0, len(names), size):
            self.server.batches.append((self.name, start))
            for name in names[start:start + size]:
                yield {"name": name, "type": "collection"}

    def drop_collection(self, name: str) -> None:
        self.server.drops.append((self.name, name))
        if (self.name, name) in self.server.failing_drops:
            from pymongo.errors import OperationFailure

            raise OperationFailure(f"cannot drop {name}")
        del self._state["collections"][name]


class FakeClient:
    def __init__(self, batch_size: int = 101):
        self.databases: dict[str, dict[str, Any]] = {}
        self.batch_size = batch_size
        self.commands: list[tuple] = []
        self.batches: list[tuple] = []
        self.drops: list[tuple[str, str]] = []
        self.failing: set[str] = set()
        self.failing_drops: set[tuple[str, str]] = set()
        self.selected: list[str] = []

    def add_database(self, name, size_on_disk=0, data_size=0.0, index_size=0.0, objects=0, collections=None):
        self.databases[name] = {
            "sizeOnDisk": size_on_disk,
            "stats": {"dataSize": data_size, "indexSize": index_size, "objects": objects},
            "collections": dict(collections or {}),
        }
        return self

    def list_databases(self):
        for name, state in self.databases.items():
            yield {"name": name, "sizeOnDisk": state["sizeOnDisk"], "empty": False}

    def __getitem__(self, name: str) -> FakeDatabase:
        self.selected.append(name)
        return FakeDatabase(self, name)


@pytest.fixture
def client() -> FakeClient:
    return FakeClient()
