# -*- coding: utf-8 -*-
"""Store — whole-file JSON persistence, one file per collection."""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Dict, List

logger = logging.getLogger(__name__)

Document = Dict[str, Any]

_locks: Dict[Path, threading.RLock] = {}
_locks_guard = threading.Lock()


class StorageError(RuntimeError):
    """The backing file for a collection could not be written."""


def lock_for(path: Path) -> threading.RLock:
    """Return the process-wide lock guarding ``path``."""
    key = Path(path).resolve()
    with _locks_guard:
        lock = _locks.get(key)
        if lock is None:
            lock = threading.RLock()
            _locks[key] = lock
        return lock


class JsonFileBackend:
    """Reads and writes collections as JSON arrays under ``root``.

    ``load`` never raises: a missing file is bootstrapped to ``[]`` and an
    unreadable one is logged and treated as empty. ``store`` replaces the file
    atomically and raises :class:`StorageError` when it cannot.
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def path_for(self, collection: str) -> Path:
        return self.root / f"{collection}.json"

    def _bootstrap(self, fp: Path) -> None:
        try:
            self._write(fp, [])
        except StorageError:
            logger.error("could not initialise collection file %s", fp, exc_info=True)
            return
        logger.info("initialised empty collection file %s", fp)

    def load(self, collection: str) -> List[Document]:
        fp = self.path_for(collection)
        if not fp.exists():
            self._bootstrap(fp)
        try:
            raw = fp.read_text(encoding="utf-8")
            data = json.loads(raw)
        except Exception as exc:
            logger.error(
                "collection %s is unreadable (%s); treating it as empty", fp, exc
            )
            return []
        if not isinstance(data, list):
            logger.error(
                "collection %s does not hold a JSON array (got %s); treating it as empty",
                fp,
                type(data).__name__,
            )
            return []
        return [doc for doc in data if isinstance(doc, dict)]

    def store(self, collection: str, documents: List[Document]) -> None:
        self._write(self.path_for(collection), documents)

    def _write(self, fp: Path, documents: List[Document]) -> None:
        try:
            fp.parent.mkdir(parents=True, exist_ok=True)
            payload = json.dumps(documents, ensure_ascii=False, indent=2, default=str)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{fp.name}.", suffix=".tmp", dir=fp.parent)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(payload)
                    fh.flush()
                    os.fsync(fh.fileno())
                os.replace(tmp_name, fp)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except (OSError, TypeError, ValueError) as exc:
            logger.error("failed to write collection file %s", fp, exc_info=True)
            raise StorageError(f"Failed to write {fp.name}: {exc}") from exc
