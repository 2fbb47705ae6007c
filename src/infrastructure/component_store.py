"""
In-memory component store — the default ``IComponentStore``.

Records live in a dict guarded by a lock; nothing is written to disk.
Any key-value or relational store exposing the same five methods can be
injected into ``ComponentService`` instead.
"""
from __future__ import annotations

import logging
import uuid
from threading import RLock
from typing import Callable, Optional

from core.component_record import ComponentRecord
from core.errors import ComponentNotFoundError

logger = logging.getLogger(__name__)

ID_LENGTH = 9


def _new_id() -> str:
    return uuid.uuid4().hex[:ID_LENGTH]


class InMemoryComponentStore:
    """Thread-safe dict-backed store of ``ComponentRecord`` objects."""

    def __init__(self, id_factory: Optional[Callable[[], str]] = None) -> None:
        self._records: dict[str, ComponentRecord] = {}
        self._lock = RLock()
        self._id_factory = id_factory or _new_id

    def create(self, code: str) -> ComponentRecord:
        with self._lock:
            component_id = self._id_factory()
            while component_id in self._records:
                component_id = self._id_factory()
            record = ComponentRecord(id=component_id, code=code)
            self._records[component_id] = record
        logger.debug("Stored component %s (%d chars)", component_id, len(code))
        return record

    def get(self, component_id: str) -> ComponentRecord:
        with self._lock:
            try:
                return self._records[component_id]
            except KeyError:
                raise ComponentNotFoundError(f"Component not found: {component_id}") from None

    def list(self) -> list[ComponentRecord]:
        with self._lock:
            return list(self._records.values())

    def update(self, component_id: str, code: str) -> ComponentRecord:
        with self._lock:
            record = self.get(component_id).with_code(code)
            self._records[component_id] = record
        return record

    def delete(self, component_id: str) -> ComponentRecord:
        with self._lock:
            record = self.get(component_id)
            del self._records[component_id]
        return record

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __contains__(self, component_id: object) -> bool:
        with self._lock:
            return component_id in self._records
