# -*- coding: utf-8 -*-
"""Store — document-collection façade over one JSON file.

A :class:`Collection` offers the small document-database API the handlers use
(``find``, ``find_one``, ``find_by_id``, ``create``, ``find_by_id_and_update``,
``save``) on top of :class:`~sprout.store.backend.JsonFileBackend`. Every
operation loads the whole file; writes rewrite it. All operations on one file
are serialized through a shared re-entrant lock so concurrent writers to
different documents cannot overwrite each other.
"""

from __future__ import annotations

import copy
import json
import logging
import threading
from datetime import datetime, timezone
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple, Type

from pydantic import BaseModel

from .backend import Document, JsonFileBackend, lock_for
from .identity import new_id
from .matcher import matches, same_identifier

logger = logging.getLogger(__name__)

PRIMARY_ID = "_id"
ALIAS_ID = "id"
ID_FIELDS = (PRIMARY_ID, ALIAS_ID)

Clock = Callable[[], datetime]


def _utc_clock() -> datetime:
    return datetime.now(timezone.utc)


def _jsonable(doc: Mapping[str, Any]) -> Document:
    # Exactly what the backend will persist (datetimes/UUIDs become strings).
    return json.loads(json.dumps(doc, ensure_ascii=False, default=str))


class Collection:
    def __init__(
        self,
        name: str,
        backend: JsonFileBackend,
        *,
        owner_field: Optional[str] = None,
        filter_fields: Optional[Iterable[str]] = None,
        patch_model: Optional[Type[BaseModel]] = None,
        defaults: Optional[Mapping[str, Any]] = None,
        track_updates: bool = False,
        one_per_owner: bool = False,
        clock: Optional[Clock] = None,
    ) -> None:
        self.name = name
        self.backend = backend
        self.owner_field = owner_field
        self.filter_fields: Optional[FrozenSet[str]] = (
            frozenset(filter_fields) | frozenset(ID_FIELDS) if filter_fields is not None else None
        )
        self.patch_model = patch_model
        self.defaults: Dict[str, Any] = dict(defaults or {})
        self.track_updates = track_updates
        self.one_per_owner = one_per_owner
        self.clock: Clock = clock or _utc_clock
        self._managed = set(ID_FIELDS) | {"createdAt", "updatedAt"}
        if owner_field:
            self._managed.add(owner_field)
        self._lock = lock_for(backend.path_for(name))

    def __repr__(self) -> str:
        return f"Collection({self.name!r}, path={str(self.backend.path_for(self.name))!r})"

    # ---- helpers ----

    @property
    def id_fields(self) -> Tuple[str, ...]:
        if self.owner_field:
            return ID_FIELDS + (self.owner_field,)
        return ID_FIELDS

    def _now(self) -> str:
        return self.clock().astimezone(timezone.utc).isoformat().replace("+00:00", "Z")

    def _check_query(self, query: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        query = dict(query or {})
        if self.filter_fields is not None:
            unknown = sorted(set(query) - self.filter_fields)
            if unknown:
                raise ValueError(f"{self.name}: cannot filter on {', '.join(unknown)}")
        return query

    def _patch_fields(self, patch: Mapping[str, Any] | BaseModel) -> Dict[str, Any]:
        if isinstance(patch, BaseModel):
            data = patch.model_dump(exclude_unset=True)
        else:
            data = dict(patch)
        if self.patch_model is not None:
            validated = self.patch_model.model_validate(data)
            data = validated.model_dump(mode="json", exclude_unset=True)
        return data

    def _document_fields(self, raw: Mapping[str, Any]) -> Dict[str, Any]:
        """Validate a whole document minus what the store manages itself."""
        return self._patch_fields({k: v for k, v in raw.items() if k not in self._managed})

    def _index_of(self, docs: List[Document], doc_id: Any) -> int:
        if doc_id is None:
            return -1
        for i, doc in enumerate(docs):
            if same_identifier(doc.get(PRIMARY_ID), doc_id):
                return i
        for i, doc in enumerate(docs):
            if same_identifier(doc.get(ALIAS_ID), doc_id):
                return i
        return -1

    def locked(self) -> threading.RLock:
        """Hold this across a caller-side read-modify-write (find, mutate, save)."""
        return self._lock

    def _stamp_update(self, doc: Document) -> None:
        if self.track_updates:
            doc["updatedAt"] = self._now()

    # ---- reads ----

    def find(self, query: Optional[Mapping[str, Any]] = None) -> List[Document]:
        query = self._check_query(query)
        with self._lock:
            docs = self.backend.load(self.name)
        if not query:
            return docs
        return [doc for doc in docs if matches(query, doc, self.id_fields)]

    def find_one(self, query: Optional[Mapping[str, Any]] = None) -> Optional[Document]:
        found = self.find(query)
        return found[0] if found else None

    def find_by_id(self, doc_id: Any) -> Optional[Document]:
        with self._lock:
            docs = self.backend.load(self.name)
        idx = self._index_of(docs, doc_id)
        return docs[idx] if idx >= 0 else None

    def count_documents(self, query: Optional[Mapping[str, Any]] = None) -> int:
        return len(self.find(query))

    # ---- writes ----

    def create(self, fields: Mapping[str, Any] | BaseModel) -> Document:
        data = fields.model_dump(mode="json") if isinstance(fields, BaseModel) else dict(fields)
        supplied = [k for k in ID_FIELDS if k in data]
        if supplied:
            raise ValueError(f"{self.name}: create() allocates identifiers; got {', '.join(supplied)}")
        owner = data.get(self.owner_field) if self.owner_field else None

        doc_id = new_id()
        doc: Document = {PRIMARY_ID: doc_id, ALIAS_ID: doc_id}
        doc.update(copy.deepcopy(self.defaults))
        doc.update(self._document_fields(data))
        if owner is not None:
            doc[self.owner_field] = str(owner)
        now = self._now()
        doc["createdAt"] = now
        if self.track_updates:
            doc["updatedAt"] = now
        doc = _jsonable(doc)

        with self._lock:
            docs = self.backend.load(self.name)
            docs.append(doc)
            self.backend.store(self.name, docs)
        logger.debug("%s: created %s", self.name, doc_id)
        return copy.deepcopy(doc)

    def find_by_id_and_update(self, doc_id: Any, patch: Mapping[str, Any] | BaseModel) -> Optional[Document]:
        data = self._patch_fields(patch)
        for key in ID_FIELDS:
            if key in data and not same_identifier(data[key], doc_id):
                raise ValueError(f"{self.name}: identifiers cannot be changed")
            data.pop(key, None)

        with self._lock:
            docs = self.backend.load(self.name)
            idx = self._index_of(docs, doc_id)
            if idx < 0:
                return None
            updated = {**docs[idx], **data}
            self._stamp_update(updated)
            updated = _jsonable(updated)
            docs[idx] = updated
            self.backend.store(self.name, docs)
        return copy.deepcopy(updated)

    def save(self, document: Mapping[str, Any] | BaseModel) -> Document:
        """Merge ``document`` onto the record sharing its identifier, else append it.

        Collections with ``one_per_owner`` also match on the owner reference.
        """
        raw = document.model_dump(mode="json") if isinstance(document, BaseModel) else dict(document)
        fields = self._document_fields(raw)
        doc_id = raw.get(PRIMARY_ID) if raw.get(PRIMARY_ID) is not None else raw.get(ALIAS_ID)
        owner = raw.get(self.owner_field) if self.owner_field else None

        with self._lock:
            docs = self.backend.load(self.name)
            idx = self._index_of(docs, doc_id)
            if idx < 0 and self.one_per_owner and owner is not None:
                for i, existing in enumerate(docs):
                    if same_identifier(existing.get(self.owner_field), owner):
                        idx = i
                        break

            if idx >= 0:
                merged = {**docs[idx], **fields}
                self._stamp_update(merged)
                merged = _jsonable(merged)
                docs[idx] = merged
            else:
                new_doc_id = doc_id if doc_id is not None else new_id()
                merged = {PRIMARY_ID: new_doc_id, ALIAS_ID: new_doc_id}
                merged.update(copy.deepcopy(self.defaults))
                merged.update(fields)
                if self.owner_field and owner is not None:
                    merged[self.owner_field] = str(owner)
                now = self._now()
                merged["createdAt"] = raw.get("createdAt") or now
                if self.track_updates:
                    merged["updatedAt"] = now
                merged = _jsonable(merged)
                docs.append(merged)
            self.backend.store(self.name, docs)
        return copy.deepcopy(merged)

    def find_by_id_and_delete(self, doc_id: Any) -> Optional[Document]:
        with self._lock:
            docs = self.backend.load(self.name)
            idx = self._index_of(docs, doc_id)
            if idx < 0:
                return None
            removed = docs.pop(idx)
            self.backend.store(self.name, docs)
        return removed

    def find_one_or_create(
        self,
        query: Mapping[str, Any],
        defaults: Optional[Mapping[str, Any]] = None,
    ) -> Tuple[Document, bool]:
        """Return ``(document, created)``; lookup and insert happen under one lock."""
        with self._lock:
            existing = self.find_one(query)
            if existing is not None:
                return existing, False
            return self.create({**dict(defaults or {}), **self._check_query(query)}), True
