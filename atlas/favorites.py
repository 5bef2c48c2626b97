"""
Favorites store
===============

Favorites are an ordered list of country names with set semantics, persisted
as `{"countries": [...]}` in a small JSON file.

This is the only mutable state shared between requests, so every
read-modify-persist cycle runs under one lock.
"""

from __future__ import annotations
import json
import logging
import threading
from pathlib import Path
from typing import List, Optional, Union
from .errors import FavoritesError

logger = logging.getLogger(__name__)

class FavoritesStore:
    """Ordered, duplicate-free favorite country names, optionally file-backed."""

    def __init__(self, path: Optional[Union[str, Path]] = None, names: Optional[List[str]] = None) -> None:
        self.path = Path(path) if path is not None else None
        self._names: List[str] = []
        self._lock = threading.Lock()
        for n in names or []:
            if n not in self._names:
                self._names.append(n)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "FavoritesStore":
        """Read favorites from `path`. A missing file means no favorites.

        Any other read or decode problem raises FavoritesError.
        """
        p = Path(path)
        try:
            raw = p.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.info("No favorites file at %s, starting empty", p)
            return cls(p)
        except OSError as e:
            raise FavoritesError(str(p), f"cannot read favorites: {e}") from e

        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as e:
            raise FavoritesError(str(p), f"invalid JSON: {e}") from e

        names = payload.get("countries") if isinstance(payload, dict) else None
        if names is None:
            names = []
        if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
            raise FavoritesError(str(p), "'countries' must be a list of names")
        logger.info("Loaded %d favorites from %s", len(names), p)
        return cls(p, names)

    # ---------------- Read ----------------
    def names(self) -> List[str]:
        with self._lock:
            return self._names[:]

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._names

    def __len__(self) -> int:
        with self._lock:
            return len(self._names)

    def snapshot(self) -> frozenset:
        """Frozen copy for annotating one response."""
        with self._lock:
            return frozenset(self._names)

    # ---------------- Write ----------------
    def add(self, name: str) -> bool:
        """Add `name`; returns False if it was already a favorite."""
        with self._lock:
            if name in self._names:
                return False
            names = self._names + [name]
            self._save(names)
            self._names = names
            return True

    def remove(self, name: str) -> bool:
        """Remove `name`; returns False if it was not a favorite."""
        with self._lock:
            if name not in self._names:
                return False
            names = [n for n in self._names if n != name]
            self._save(names)
            self._names = names
            return True

    def _save(self, names: List[str]) -> None:
        # caller holds the lock; memory is only updated after a successful write
        if self.path is None:
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps({"countries": names}, ensure_ascii=False), encoding="utf-8")
        except OSError as e:
            raise FavoritesError(str(self.path), f"cannot write favorites: {e}") from e
