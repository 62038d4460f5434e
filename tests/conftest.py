import asyncio
import copy
from typing import Any, Optional

import pytest

from docversion.core.exceptions import StorageError
from docversion.storage.base import RecordStore


def _lookup(doc: dict, dotted: str) -> Any:
    value: Any = doc
    for part in dotted.split("."):
        if not isinstance(value, dict) or part not in value:
            return None
        value = value[part]
    return value


def _matches(doc: dict, query: dict) -> bool:
    for key, condition in query.items():
        value = _lookup(doc, key)
        if isinstance(condition, dict) and "$lt" in condition:
            if value is None or isinstance(value, dict) or not value < condition["$lt"]:
                return False
        elif value != condition:
            return False
    return True


class InMemoryRecordStore(RecordStore):
    """RecordStore keeping deep copies of documents in a dict, keyed on _id."""

    def __init__(self, name: str = "users"):
        self.name = name
        self.docs: dict[Any, dict] = {}
        self.persist_calls = 0
        self.fail_persist_for: set = set()
        self.stream_error_after: Optional[int] = None
        self.streamed = 0
        self.stream_closed = False
        self._next_id = 1

    def seed(self, *records: dict) -> list[Any]:
        """Store raw records without running any hook."""
        ids = []
        for record in records:
            record.setdefault("_id", self._next_id)
            self._next_id += 1
            self.docs[record["_id"]] = copy.deepcopy(record)
            ids.append(record["_id"])
        return ids

    async def stream_all(self):
        try:
            for position, doc in enumerate(list(self.docs.values())):
                if self.stream_error_after is not None and position >= self.stream_error_after:
                    raise StorageError("stream_all", "cursor killed")
                await asyncio.sleep(0)
                self.streamed += 1
                yield copy.deepcopy(doc)
        finally:
            self.stream_closed = True

    async def persist(self, record: dict) -> None:
        self.persist_calls += 1
        await asyncio.sleep(0)
        if record.get("_id") in self.fail_persist_for:
            raise StorageError("persist", "write concern failed")
        if "_id" not in record:
            self.seed(record)
            return
        self.docs[record["_id"]] = copy.deepcopy(record)

    async def find_one(self, query: dict) -> Optional[dict]:
        for doc in self.docs.values():
            if _matches(doc, query):
                return copy.deepcopy(doc)
        return None

    async def insert_one(self, record: dict) -> Any:
        return self.seed(record)[0]

    async def insert_many(self, records: list[dict]) -> list[Any]:
        return self.seed(*records)

    async def count(self, query: dict) -> int:
        return sum(1 for doc in self.docs.values() if _matches(doc, query))


@pytest.fixture
def memory_store():
    """Provide an empty in-memory record store."""
    return InMemoryRecordStore()


@pytest.fixture
def split_name():
    """Migration step splitting a full-name string into first/last."""

    def split_name(record):
        name = record["name"]
        first, _, last = name.partition(" ")
        record["name"] = {"first": first, "last": last}

    return split_name


@pytest.fixture
def step_log():
    """Shared list migration steps append their index to."""
    return []


@pytest.fixture
def recording_steps(step_log):
    """Factory producing async steps that record the order they ran in."""

    def make(count: int):
        steps = []
        for index in range(count):

            async def step(record, index=index):
                await asyncio.sleep(0)
                step_log.append(index)
                record.setdefault("applied", []).append(index)

            steps.append(step)
        return steps

    return make
