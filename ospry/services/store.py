"""Metadata storage used by the demo server.

The demo only needs to remember which images it uploaded; the ospry api
stays the source of truth for their metadata.
"""
from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod

from ospry.models import Metadata

logger = logging.getLogger(__name__)


class MetadataStore(ABC):
    """Abstract interface for keeping track of uploaded images."""

    @abstractmethod
    def insert(self, metadata: Metadata) -> None:
        """Store *metadata*, replacing any entry with the same id."""

    @abstractmethod
    def delete(self, image_id: str) -> bool:
        """Forget the image; returns whether it was stored."""

    @abstractmethod
    def snapshot(self) -> list[Metadata]:
        """Snapshot of the stored metadata, oldest first."""


class InMemoryMetadataStore(MetadataStore):
    """Ordered list guarded by a single lock. Fine for a demo, nothing more."""

    def __init__(self) -> None:
        self._items: list[Metadata] = []
        self._lock = threading.Lock()

    def insert(self, metadata: Metadata) -> None:
        with self._lock:
            for i, item in enumerate(self._items):
                if item.id == metadata.id:
                    self._items[i] = metadata
                    break
            else:
                self._items.append(metadata)
        logger.debug("Stored metadata id=%s", metadata.id)

    def delete(self, image_id: str) -> bool:
        with self._lock:
            before = len(self._items)
            self._items = [item for item in self._items if item.id != image_id]
            removed = len(self._items) != before
        if removed:
            logger.debug("Deleted metadata id=%s", image_id)
        return removed

    def snapshot(self) -> list[Metadata]:
        with self._lock:
            return list(self._items)
