import copy
import os
import re
from typing import Any, Dict, Iterable, List, Optional

# Ensure required env vars exist before importing app modules.
os.environ.setdefault("MONGODB_URI", "mongodb://localhost:27017")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from pymongo.errors import DuplicateKeyError


def _matches_condition(value: Any, condition: Any) -> bool:
    if isinstance(condition, dict) and any(key.startswith("$") for key in condition):
        for operator, operand in condition.items():
            if operator == "$in":
                if value not in operand:
                    return False
            elif operator == "$ne":
                if value == operand:
                    return False
            elif operator == "$exists":
                if (value is not None) != bool(operand):
                    return False
            elif operator == "$regex":
                flags = re.IGNORECASE if "i" in condition.get("$options", "") else 0
                if not isinstance(value, str) or not re.search(operand, value, flags):
                    return False
            elif operator == "$options":
                continue
            else:
                raise NotImplementedError(f"FakeCollection does not support {operator}")
        return True
    return value == condition


def matches(document: Dict[str, Any], filter_dict: Optional[Dict[str, Any]]) -> bool:
    for key, condition in (filter_dict or {}).items():
        if key == "$or":
            if not any(matches(document, sub) for sub in condition):
                return False
        elif not _matches_condition(document.get(key), condition):
            return False
    return True


def _sort_documents(documents: List[Dict[str, Any]], keys) -> List[Dict[str, Any]]:
    if isinstance(keys, str):
        keys = [(keys, 1)]
    result = list(documents)
    for key, direction in reversed(list(keys)):
        present = [d for d in result if d.get(key) is not None]
        missing = [d for d in result if d.get(key) is None]
        present.sort(key=lambda d: d[key], reverse=direction == -1)
        result = missing + present if direction == 1 else present + missing
    return result


def _apply_update(document: Dict[str, Any], update: Dict[str, Any]) -> None:
    for operator, fields in update.items():
        if operator == "$set":
            document.update(fields)
        elif operator == "$inc":
            for key, amount in fields.items():
                document[key] = document.get(key, 0) + amount
        elif operator == "$unset":
            for key in fields:
                document.pop(key, None)
        else:
            raise NotImplementedError(f"FakeCollection does not support {operator}")


class _InsertResult:
    def __init__(self, inserted_id):
        self.inserted_id = inserted_id


class _UpdateResult:
    def __init__(self, matched_count: int, modified_count: int):
        self.matched_count = matched_count
        self.modified_count = modified_count


class _DeleteResult:
    def __init__(self, deleted_count: int):
        self.deleted_count = deleted_count


class FakeCollection:
    """In-memory stand-in for the subset of a Motor collection the store modules use."""

    def __init__(self, unique_keys: Iterable[str] = ()) -> None:
        self.documents: List[Dict[str, Any]] = []
        self.unique_keys = ("_id", *unique_keys)
        self.indexes = []
        self.replaced = []
        # Number of upcoming replace_one calls that behave as if another writer won
        self.replace_conflicts = 0
        self._next_id = 1

    def seed(self, *documents: Dict[str, Any]) -> None:
        for document in documents:
            document = copy.deepcopy(document)
            document.setdefault("_id", self._new_id())
            self.documents.append(document)

    def _new_id(self) -> str:
        new_id = f"fake_{self._next_id}"
        self._next_id += 1
        return new_id

    async def insert_one(self, document: Dict[str, Any], *args, **kwargs):
        document = copy.deepcopy(document)
        document.setdefault("_id", self._new_id())
        for key in self.unique_keys:
            if key in document and any(d.get(key) == document[key] for d in self.documents):
                raise DuplicateKeyError(f"E11000 duplicate key error dup key: {{ {key}: {document[key]!r} }}")
        self.documents.append(document)
        return _InsertResult(document["_id"])

    async def find_one(self, filter_dict=None, projection=None, sort=None, **kwargs):
        found = [d for d in self.documents if matches(d, filter_dict)]
        if sort:
            found = _sort_documents(found, sort)
        return copy.deepcopy(found[0]) if found else None

    def find(self, filter_dict=None, projection=None, **kwargs):
        found = [d for d in self.documents if matches(d, filter_dict)]
        return FakeCursor(copy.deepcopy(found))

    async def count_documents(self, filter_dict=None, **kwargs) -> int:
        return sum(1 for d in self.documents if matches(d, filter_dict))

    async def replace_one(self, filter_dict, replacement, *args, **kwargs):
        self.replaced.append({"filter": filter_dict, "replacement": replacement})
        if self.replace_conflicts > 0:
            self.replace_conflicts -= 1
            return _UpdateResult(0, 0)
        for index, document in enumerate(self.documents):
            if matches(document, filter_dict):
                new_document = copy.deepcopy(replacement)
                new_document["_id"] = document["_id"]
                self.documents[index] = new_document
                return _UpdateResult(1, 1)
        return _UpdateResult(0, 0)

    async def update_one(self, filter_dict, update_dict, *args, **kwargs):
        for document in self.documents:
            if matches(document, filter_dict):
                _apply_update(document, update_dict)
                return _UpdateResult(1, 1)
        return _UpdateResult(0, 0)

    async def update_many(self, filter_dict, update_dict, *args, **kwargs):
        count = 0
        for document in self.documents:
            if matches(document, filter_dict):
                _apply_update(document, update_dict)
                count += 1
        return _UpdateResult(count, count)

    async def find_one_and_update(self, filter_dict, update_dict, return_document=False, **kwargs):
        for document in self.documents:
            if matches(document, filter_dict):
                before = copy.deepcopy(document)
                _apply_update(document, update_dict)
                return copy.deepcopy(document) if return_document else before
        return None

    async def delete_one(self, filter_dict, *args, **kwargs):
        for index, document in enumerate(self.documents):
            if matches(document, filter_dict):
                del self.documents[index]
                return _DeleteResult(1)
        return _DeleteResult(0)

    async def delete_many(self, filter_dict, *args, **kwargs):
        kept = [d for d in self.documents if not matches(d, filter_dict)]
        deleted = len(self.documents) - len(kept)
        self.documents = kept
        return _DeleteResult(deleted)

    async def create_index(self, keys, **kwargs):
        self.indexes.append({"keys": keys, **kwargs})
        return "_".join(f"{key}_{direction}" for key, direction in keys)


class FakeCursor:
    def __init__(self, items):
        self.items = list(items)

    def sort(self, keys, direction=None):
        if direction is not None:
            keys = [(keys, direction)]
        self.items = _sort_documents(self.items, keys)
        return self

    def skip(self, skip_count: int):
        self.items = self.items[skip_count:]
        return self

    def limit(self, limit_count: int):
        if limit_count:
            self.items = self.items[:limit_count]
        return self

    def __aiter__(self):
        self._iter = iter(self.items)
        return self

    async def __anext__(self):
        try:
            return next(self._iter)
        except StopIteration:
            raise StopAsyncIteration


from helpdesk.database import COLLECTION_TICKETS, COLLECTION_COUNTERS


@pytest.fixture
def fake_db(monkeypatch):
    collections = {
        COLLECTION_TICKETS: FakeCollection(unique_keys=("ticketId",)),
        COLLECTION_COUNTERS: FakeCollection(),
    }

    def _get_collection(name: str) -> FakeCollection:
        return collections[name]

    monkeypatch.setattr("helpdesk.database.get_collection", _get_collection)
    monkeypatch.setattr("helpdesk.database.ticket_operations.get_collection", _get_collection)
    monkeypatch.setattr("helpdesk.database.sequences.get_collection", _get_collection)

    return collections
