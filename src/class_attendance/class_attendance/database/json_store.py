from __future__ import annotations

import copy
import json
import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

from ..core.exceptions import PersistenceError

logger = logging.getLogger(__name__)

COLLECTIONS = ("users", "otps", "sessions", "attendance")

Document = Dict[str, Any]


def empty_document() -> Document:
    return {name: [] for name in COLLECTIONS}


class JsonStore:
    """The whole application state as one JSON document on disk.

    Every mutation is a transaction: take the lock, mutate a deep copy,
    rewrite the file (temp file + fsync + os.replace), and only then swap the
    copy in as the live document. A failed write leaves both the file and
    memory as they were.

    The lock is re-entrant and a transaction opened while another one is
    running on the same thread joins it, so a service can wrap several
    repository calls (check-then-append) in one atomic unit.
    """

    def __init__(self, path: Path | str | None):
        self._path = Path(path) if path else None
        self._lock = threading.RLock()
        self._local = threading.local()
        self._data = self._load()

    @classmethod
    def in_memory(cls) -> "JsonStore":
        """No file behind it; used by tests and one-off scripts."""
        return cls(None)

    def _load(self) -> Document:
        if self._path is None or not self._path.exists():
            return empty_document()
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8") or "{}")
        except (OSError, ValueError) as e:
            # Refuse to start on a corrupt file rather than overwrite it with an empty one
            raise PersistenceError(f"Cannot read data file {self._path}: {e}") from e
        if not isinstance(raw, dict):
            raise PersistenceError(f"Data file {self._path} is not a JSON object")
        doc = empty_document()
        for name in COLLECTIONS:
            value = raw.get(name)
            if isinstance(value, list):
                doc[name] = value
        return doc

    def _write(self, doc: Document) -> None:
        if self._path is None:
            return
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{self._path.name}.", dir=str(self._path.parent))
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(doc, f, indent=2, ensure_ascii=False)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_name, self._path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except (OSError, TypeError, ValueError) as e:
            raise PersistenceError(f"Cannot write data file {self._path}: {e}") from e

    @contextmanager
    def transaction(self) -> Iterator[Document]:
        with self._lock:
            working = getattr(self._local, "working", None)
            if working is not None:
                yield working
                return

            working = copy.deepcopy(self._data)
            self._local.working = working
            try:
                yield working
                if working == self._data:
                    return
                self._write(working)
            except PersistenceError:
                logger.error("Transaction rolled back, data file unchanged: %s", self._path)
                raise
            finally:
                self._local.working = None
            self._data = working

    @contextmanager
    def read(self) -> Iterator[Document]:
        """Consistent view of the document. Callers must not mutate it."""
        with self._lock:
            working = getattr(self._local, "working", None)
            yield working if working is not None else self._data

    def snapshot(self) -> Document:
        with self.read() as doc:
            return copy.deepcopy(doc)
