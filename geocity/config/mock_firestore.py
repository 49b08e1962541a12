"""
In-process Firestore stand-in for local development and tests.

Implements the subset of the firebase_admin Firestore client that GEOCITY
uses: collection/document references, set/get/update/delete, where,
order_by, limit, stream and SERVER_TIMESTAMP / Increment transforms.
Optionally persists to a JSON file so a dev server keeps data across restarts.
Also carries a small Realtime Database tree for the sensor feed.
"""

import copy
import json
import logging
import os
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional

from firebase_admin import firestore

logger = logging.getLogger(__name__)

_OPERATORS = {
    "==": lambda a, b: a == b,
    "!=": lambda a, b: a != b,
    "<": lambda a, b: a is not None and a < b,
    "<=": lambda a, b: a is not None and a <= b,
    ">": lambda a, b: a is not None and a > b,
    ">=": lambda a, b: a is not None and a >= b,
    "in": lambda a, b: a in b,
    "array_contains": lambda a, b: isinstance(a, list) and b in a,
}


_DATETIME_TAG = "__datetime__"


def _encode_value(value: Any) -> Any:
    if isinstance(value, datetime):
        return {_DATETIME_TAG: value.isoformat()}
    return str(value)


def _decode_object(obj: Dict) -> Any:
    """json.load hook restoring timestamps written by _encode_value."""
    if set(obj) == {_DATETIME_TAG}:
        return datetime.fromisoformat(obj[_DATETIME_TAG])
    return obj


def _resolve_transforms(data: Dict, existing: Optional[Dict] = None) -> Dict:
    """Replace SERVER_TIMESTAMP sentinels and Increment transforms with concrete values."""
    resolved = {}
    for key, value in data.items():
        if value is firestore.SERVER_TIMESTAMP:
            resolved[key] = datetime.now(timezone.utc)
        elif isinstance(value, firestore.Increment):
            current = (existing or {}).get(key) or 0
            resolved[key] = current + value.value
        elif isinstance(value, dict):
            resolved[key] = _resolve_transforms(value, (existing or {}).get(key) or {})
        else:
            resolved[key] = copy.deepcopy(value)
    return resolved


def _get_field(data: Dict, field_path: str) -> Any:
    current: Any = data
    for part in field_path.split("."):
        if not isinstance(current, dict):
            return None
        current = current.get(part)
    return current


class MockDocumentSnapshot:
    def __init__(self, reference: "MockDocumentReference", data: Optional[Dict]):
        self.reference = reference
        self.id = reference.id
        self._data = data

    @property
    def exists(self) -> bool:
        return self._data is not None

    def to_dict(self) -> Optional[Dict]:
        return copy.deepcopy(self._data) if self._data is not None else None

    def get(self, field_path: str) -> Any:
        return _get_field(self._data or {}, field_path)


class MockDocumentReference:
    def __init__(self, store: "MockFirestore", collection_name: str, doc_id: str):
        self._store = store
        self._collection_name = collection_name
        self.id = doc_id

    @property
    def path(self) -> str:
        return f"{self._collection_name}/{self.id}"

    def _docs(self) -> Dict[str, Dict]:
        return self._store._collections.setdefault(self._collection_name, {})

    def set(self, data: Dict, merge: bool = False) -> None:
        with self._store._lock:
            docs = self._docs()
            existing = docs.get(self.id)
            if merge and existing is not None:
                merged = dict(existing)
                merged.update(_resolve_transforms(data, existing))
                docs[self.id] = merged
            else:
                docs[self.id] = _resolve_transforms(data)
        self._store._persist()

    def get(self) -> MockDocumentSnapshot:
        with self._store._lock:
            data = self._docs().get(self.id)
            return MockDocumentSnapshot(self, copy.deepcopy(data) if data is not None else None)

    def update(self, data: Dict) -> None:
        with self._store._lock:
            docs = self._docs()
            existing = docs.get(self.id)
            if existing is None:
                raise LookupError(f"No document to update: {self.path}")
            existing.update(_resolve_transforms(data, existing))
        self._store._persist()

    def delete(self) -> None:
        with self._store._lock:
            self._docs().pop(self.id, None)
        self._store._persist()


class MockQuery:
    def __init__(self, store: "MockFirestore", collection_name: str):
        self._store = store
        self._collection_name = collection_name
        self._filters: List[tuple] = []
        self._orders: List[tuple] = []
        self._limit: Optional[int] = None

    def _copy(self) -> "MockQuery":
        clone = MockQuery(self._store, self._collection_name)
        clone._filters = list(self._filters)
        clone._orders = list(self._orders)
        clone._limit = self._limit
        return clone

    def where(self, field_path: str, op_string: str, value: Any) -> "MockQuery":
        if op_string not in _OPERATORS:
            raise ValueError(f"Unsupported operator in mock Firestore: {op_string}")
        clone = self._copy()
        clone._filters.append((field_path, op_string, value))
        return clone

    def order_by(self, field_path: str, direction: str = "ASCENDING") -> "MockQuery":
        clone = self._copy()
        clone._orders.append((field_path, direction))
        return clone

    def limit(self, count: int) -> "MockQuery":
        clone = self._copy()
        clone._limit = count
        return clone

    def stream(self) -> Iterator[MockDocumentSnapshot]:
        with self._store._lock:
            items = list(self._store._collections.get(self._collection_name, {}).items())

        results = []
        for doc_id, data in items:
            if all(_OPERATORS[op](_get_field(data, field), value) for field, op, value in self._filters):
                results.append((doc_id, data))

        # Firestore drops documents missing an order_by field
        for field, direction in reversed(self._orders):
            results = [item for item in results if _get_field(item[1], field) is not None]
            results.sort(
                key=lambda item: _get_field(item[1], field),
                reverse=direction == firestore.Query.DESCENDING,
            )

        if self._limit is not None:
            results = results[: self._limit]

        for doc_id, data in results:
            ref = MockDocumentReference(self._store, self._collection_name, doc_id)
            yield MockDocumentSnapshot(ref, copy.deepcopy(data))

    def get(self) -> List[MockDocumentSnapshot]:
        return list(self.stream())


class MockCollectionReference(MockQuery):
    @property
    def id(self) -> str:
        return self._collection_name

    def document(self, doc_id: Optional[str] = None) -> MockDocumentReference:
        return MockDocumentReference(self._store, self._collection_name, doc_id or uuid.uuid4().hex[:20])

    def add(self, data: Dict):
        ref = self.document()
        ref.set(data)
        return datetime.now(timezone.utc), ref


class MockFirestore:
    """Thread-safe in-memory Firestore with optional JSON persistence."""

    def __init__(self, path: Optional[str] = None):
        self._path = path
        self._lock = threading.RLock()
        self._collections: Dict[str, Dict[str, Dict]] = {}
        self.realtime: Dict[str, Any] = {}
        self._load()

    def collection(self, name: str) -> MockCollectionReference:
        return MockCollectionReference(self, name)

    def collections(self) -> List[MockCollectionReference]:
        with self._lock:
            return [MockCollectionReference(self, name) for name in self._collections]

    def get_realtime(self, path: str) -> Any:
        current: Any = self.realtime
        for part in [p for p in path.split("/") if p]:
            if not isinstance(current, dict) or part not in current:
                return None
            current = current[part]
        return copy.deepcopy(current)

    def set_realtime(self, path: str, value: Any) -> None:
        parts = [p for p in path.split("/") if p]
        with self._lock:
            if not parts:
                self.realtime = copy.deepcopy(value)
                return
            current = self.realtime
            for part in parts[:-1]:
                current = current.setdefault(part, {})
            current[parts[-1]] = copy.deepcopy(value)
        self._persist()

    def clear(self) -> None:
        with self._lock:
            self._collections = {}
            self.realtime = {}
        self._persist()

    def _load(self) -> None:
        if not self._path or not os.path.exists(self._path):
            return
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                payload = json.load(f, object_hook=_decode_object)
            self._collections = payload.get("collections", {})
            self.realtime = payload.get("realtime", {})
            logger.info(f"[MOCK DB] Loaded {len(self._collections)} collection(s) from {self._path}")
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"[MOCK DB] Could not load {self._path}: {e}")

    def _persist(self) -> None:
        if not self._path:
            return
        with self._lock:
            payload = {"collections": self._collections, "realtime": self.realtime}
            try:
                with open(self._path, "w", encoding="utf-8") as f:
                    json.dump(payload, f, default=_encode_value)
            except OSError as e:
                logger.warning(f"[MOCK DB] Could not persist to {self._path}: {e}")


_mock_db: Optional[MockFirestore] = None


def get_mock_db(path: Optional[str] = None) -> MockFirestore:
    global _mock_db
    if _mock_db is None:
        _mock_db = MockFirestore(path)
    return _mock_db


def reset_mock_db() -> None:
    global _mock_db
    _mock_db = None
