"""
Keyed storage for catalog and membership entities.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Dict, Generic, List, Optional, TypeVar

T = TypeVar("T")
logger = logging.getLogger("library.repository")


class Repository(Generic[T], ABC):
    """Keyed upsert/lookup contract used by the Library.

    Implementations may be durable; the Library only relies on the
    operations below.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[T]:
        """Return the entity stored under key, or None."""

    @abstractmethod
    def put(self, key: str, entity: T) -> None:
        """Insert or replace the entity stored under key."""

    @abstractmethod
    def values(self) -> List[T]:
        """Return all stored entities in insertion order."""

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.get(key) is not None

    def __len__(self) -> int:
        return len(self.values())


class InMemoryRepository(Repository[T]):
    """Dict-backed repository."""

    def __init__(self) -> None:
        self._store: Dict[str, T] = {}

    def get(self, key: str) -> Optional[T]:
        return self._store.get(key)

    def put(self, key: str, entity: T) -> None:
        logger.debug("put | repository=%s key=%s", type(self).__name__, key)
        self._store[key] = entity

    def values(self) -> List[T]:
        return list(self._store.values())
