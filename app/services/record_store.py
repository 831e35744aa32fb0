"""
Record Store - CRUD operations for the portal collections.

One store per entity type, each exposing the same small surface:
    find(id), find_one(filters), query(filters), count(filters),
    insert(doc), update(id, patch), remove(id)

Filters are MongoDB filter documents. Two backends implement them:
1. MongoRecordStore  - pymongo collection, uniqueness from unique indexes
2. MemoryRecordStore - process-local list, same filter subset evaluated in Python

Unique-key violations surface as Conflict; an unreachable database surfaces
as StoreUnavailable so the transport layer can tell it apart from the
expected error taxonomy.
"""

import copy
import logging
import threading
from functools import lru_cache, wraps
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from pymongo import ASCENDING, ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError, PyMongoError

from app.core.config import get_settings
from app.core.errors import Conflict, StoreUnavailable
from app.db.mongodb import COLLECTIONS, UNIQUE_KEYS, get_collection

logger = logging.getLogger(__name__)

Sort = Optional[Sequence[Tuple[str, int]]]

# Never expose Mongo's internal key
_PROJECTION = {"_id": 0}


class RecordStore:
    """Interface shared by every backend."""

    name: str = ""

    def find(self, record_id: str) -> Optional[dict]:
        return self.find_one({"id": record_id})

    def find_one(self, filters: dict) -> Optional[dict]:
        raise NotImplementedError

    def query(self, filters: Optional[dict] = None, sort: Sort = None, limit: int = 0) -> List[dict]:
        raise NotImplementedError

    def count(self, filters: Optional[dict] = None) -> int:
        raise NotImplementedError

    def insert(self, doc: dict) -> dict:
        raise NotImplementedError

    def update(self, record_id: str, patch: dict) -> Optional[dict]:
        raise NotImplementedError

    def remove(self, record_id: str) -> Optional[dict]:
        raise NotImplementedError


# ============================================================
# MONGODB BACKEND
# ============================================================

def _translate_errors(func):
    """Map pymongo failures onto the store's error contract."""
    @wraps(func)
    def wrapper(self, *args, **kwargs):
        try:
            return func(self, *args, **kwargs)
        except DuplicateKeyError as e:
            raise Conflict(f"Duplicate {self.name} record") from e
        except PyMongoError as e:
            logger.error("Record store '%s' unavailable: %s", self.name, e)
            raise StoreUnavailable(str(e)) from e
    return wrapper


class MongoRecordStore(RecordStore):
    """Store backed by one MongoDB collection."""

    def __init__(self, name: str, collection: Optional[Collection] = None):
        self.name = name
        self.collection: Collection = collection if collection is not None else get_collection(COLLECTIONS[name])

    @_translate_errors
    def find_one(self, filters: dict) -> Optional[dict]:
        return self.collection.find_one(filters, _PROJECTION)

    @_translate_errors
    def query(self, filters: Optional[dict] = None, sort: Sort = None, limit: int = 0) -> List[dict]:
        # Natural order of ObjectIds is insertion order
        cursor = self.collection.find(filters or {}, _PROJECTION, sort=list(sort) if sort else [("_id", ASCENDING)])
        if limit:
            cursor = cursor.limit(limit)
        return list(cursor)

    @_translate_errors
    def count(self, filters: Optional[dict] = None) -> int:
        return self.collection.count_documents(filters or {})

    @_translate_errors
    def insert(self, doc: dict) -> dict:
        # insert_one adds _id to the dict it is given
        self.collection.insert_one(dict(doc))
        return doc

    @_translate_errors
    def update(self, record_id: str, patch: dict) -> Optional[dict]:
        return self.collection.find_one_and_update(
            {"id": record_id},
            {"$set": patch},
            projection=_PROJECTION,
            return_document=ReturnDocument.AFTER
        )

    @_translate_errors
    def remove(self, record_id: str) -> Optional[dict]:
        return self.collection.find_one_and_delete({"id": record_id}, projection=_PROJECTION)


# ============================================================
# IN-MEMORY BACKEND
# Evaluates the subset of Mongo filter operators the services use
# ============================================================

def _equals(value: Any, expected: Any) -> bool:
    # Mongo semantics: a scalar condition matches any element of an array field
    if isinstance(value, list) and not isinstance(expected, list):
        return expected in value
    return value == expected


def _compare(op: str, value: Any, operand: Any) -> bool:
    if value is None:
        return False
    if op == "$gt":
        return value > operand
    if op == "$gte":
        return value >= operand
    if op == "$lt":
        return value < operand
    return value <= operand


def _field_matches(value: Any, condition: Any) -> bool:
    if isinstance(condition, dict) and condition and all(k.startswith("$") for k in condition):
        for op, operand in condition.items():
            if op == "$in":
                ok = any(_equals(value, c) for c in operand)
            elif op == "$nin":
                ok = not any(_equals(value, c) for c in operand)
            elif op == "$ne":
                ok = not _equals(value, operand)
            elif op in ("$gt", "$gte", "$lt", "$lte"):
                ok = _compare(op, value, operand)
            else:
                raise ValueError(f"Unsupported filter operator: {op}")
            if not ok:
                return False
        return True
    return _equals(value, condition)


def matches(doc: dict, filters: Optional[dict]) -> bool:
    """True if a document satisfies a Mongo-style filter."""
    for key, condition in (filters or {}).items():
        if key == "$or":
            if not any(matches(doc, sub) for sub in condition):
                return False
        elif key == "$and":
            if not all(matches(doc, sub) for sub in condition):
                return False
        elif not _field_matches(doc.get(key), condition):
            return False
    return True


def _sort_docs(docs: List[dict], sort: Sort) -> List[dict]:
    for field, direction in reversed(list(sort or [])):
        docs.sort(key=lambda d: (d.get(field) is not None, d.get(field)), reverse=direction < 0)
    return docs


class MemoryRecordStore(RecordStore):
    """Process-local store with the same contract as MongoRecordStore."""

    def __init__(self, name: str, unique_keys: Iterable[Tuple[str, ...]] = (("id",),)):
        self.name = name
        self.unique_keys = [tuple(k) for k in unique_keys]
        self._docs: List[dict] = []
        self._lock = threading.Lock()

    def _check_unique(self, doc: dict, ignore_id: Optional[str] = None):
        for fields in self.unique_keys:
            key = tuple(doc.get(f) for f in fields)
            if all(v is None for v in key):
                continue
            for existing in self._docs:
                if ignore_id is not None and existing.get("id") == ignore_id:
                    continue
                if tuple(existing.get(f) for f in fields) == key:
                    raise Conflict(f"Duplicate {self.name} record")

    def find_one(self, filters: dict) -> Optional[dict]:
        for doc in self._docs:
            if matches(doc, filters):
                return copy.deepcopy(doc)
        return None

    def query(self, filters: Optional[dict] = None, sort: Sort = None, limit: int = 0) -> List[dict]:
        docs = [copy.deepcopy(d) for d in self._docs if matches(d, filters)]
        docs = _sort_docs(docs, sort)
        return docs[:limit] if limit else docs

    def count(self, filters: Optional[dict] = None) -> int:
        return sum(1 for d in self._docs if matches(d, filters))

    def insert(self, doc: dict) -> dict:
        with self._lock:
            self._check_unique(doc)
            self._docs.append(copy.deepcopy(doc))
        return doc

    def update(self, record_id: str, patch: dict) -> Optional[dict]:
        with self._lock:
            for index, doc in enumerate(self._docs):
                if doc.get("id") == record_id:
                    updated = {**doc, **copy.deepcopy(patch)}
                    self._check_unique(updated, ignore_id=record_id)
                    self._docs[index] = updated
                    return copy.deepcopy(updated)
        return None

    def remove(self, record_id: str) -> Optional[dict]:
        with self._lock:
            for index, doc in enumerate(self._docs):
                if doc.get("id") == record_id:
                    return self._docs.pop(index)
        return None


# ============================================================
# CONVENIENCE: all stores for one backend
# ============================================================

class RecordStores:
    """One store per collection."""

    def __init__(self, stores: Dict[str, RecordStore]):
        self.students = stores["students"]
        self.mentors = stores["mentors"]
        self.admins = stores["admins"]
        self.recruiters = stores["recruiters"]
        self.internships = stores["internships"]
        self.applications = stores["applications"]
        self.audit_log = stores["audit_log"]

    def users(self, role: str) -> RecordStore:
        """User collection for a role name."""
        return getattr(self, f"{role}s")

    @classmethod
    def in_memory(cls) -> "RecordStores":
        return cls({name: MemoryRecordStore(name, UNIQUE_KEYS[name]) for name in COLLECTIONS})

    @classmethod
    def mongo(cls) -> "RecordStores":
        return cls({name: MongoRecordStore(name) for name in COLLECTIONS})


def build_record_stores(backend: str) -> RecordStores:
    if backend == "memory":
        return RecordStores.in_memory()
    if backend == "mongo":
        return RecordStores.mongo()
    raise ValueError(f"Unknown store backend: {backend}")


@lru_cache()
def get_record_stores() -> RecordStores:
    """
    Get the stores for the configured backend.

    Usage:
        stores = get_record_stores()
        stores.internships.find("INT-...")
    """
    return build_record_stores(get_settings().store_backend)
