from __future__ import annotations
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional
import copy
import json
import logging
import os
import threading
import uuid

logger = logging.getLogger(__name__)


def deep_merge(base: Mapping[str, Any], updates: Mapping[str, Any]) -> Dict[str, Any]:
    """Merge ``updates`` into a copy of ``base``; nested maps merge, anything else replaces."""
    out = copy.deepcopy(dict(base))
    for k, v in updates.items():
        if isinstance(v, Mapping) and isinstance(out.get(k), Mapping):
            out[k] = deep_merge(out[k], v)
        else:
            out[k] = copy.deepcopy(v)
    return out


class DocumentStore:
    """JSON documents on disk: ``<root>/<collection>/<doc_id>.json``."""

    def __init__(self, root: str | Path):
        self.root = Path(root)
        self._lock = threading.Lock()

    def _path(self, collection: str, doc_id: str) -> Path:
        if not doc_id or "/" in doc_id or "\\" in doc_id or doc_id.startswith("."):
            raise KeyError(doc_id)
        return self.root / collection / f"{doc_id}.json"

    def _write(self, path: Path, data: Mapping[str, Any]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(json.dumps(data, indent=2))
        os.replace(tmp, path)

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        path = self._path(collection, doc_id)
        with self._lock:
            if not path.exists():
                return None
            return json.loads(path.read_text())

    def set(self, collection: str, doc_id: str, data: Mapping[str, Any], merge: bool = False) -> Dict[str, Any]:
        path = self._path(collection, doc_id)
        with self._lock:
            current = json.loads(path.read_text()) if (merge and path.exists()) else {}
            doc = deep_merge(current, data) if merge else dict(data)
            self._write(path, doc)
            return doc

    def add(self, collection: str, data: Mapping[str, Any], prefix: str = "p") -> str:
        doc_id = f"{prefix}_{uuid.uuid4().hex[:8]}"
        self.set(collection, doc_id, data)
        return doc_id

    def update(self, collection: str, doc_id: str, updates: Mapping[str, Any]) -> Dict[str, Any]:
        """Shallow field update of an existing document (KeyError when missing)."""
        path = self._path(collection, doc_id)
        with self._lock:
            if not path.exists():
                raise KeyError(doc_id)
            doc = json.loads(path.read_text())
            doc.update(copy.deepcopy(dict(updates)))
            self._write(path, doc)
            return doc

    def delete(self, collection: str, doc_id: str) -> bool:
        path = self._path(collection, doc_id)
        with self._lock:
            if not path.exists():
                return False
            path.unlink()
            return True

    def list(self, collection: str) -> List[Dict[str, Any]]:
        """All documents of a collection as ``{"id": ..., **doc}``; unreadable files are skipped."""
        folder = self.root / collection
        out: List[Dict[str, Any]] = []
        with self._lock:
            if not folder.exists():
                return out
            for p in sorted(folder.glob("*.json")):
                try:
                    out.append({"id": p.stem, **json.loads(p.read_text())})
                except (OSError, ValueError):
                    logger.warning("Skipping unreadable document %s", p)
                    continue
        return out
