"""
ComponentRecord — one stored component description.

The record is what the persistence boundary hands back and forth; the
patching engine never sees it, only its ``code``.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class ComponentRecord:
    """
    Attributes:
        id:         Opaque identifier assigned by the store.
        code:       Full component source text.
        created_at: Creation time (UTC).
        updated_at: Time of the last code replacement (UTC).
    """
    id: str
    code: str
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)

    def with_code(self, code: str) -> ComponentRecord:
        """Return a copy carrying *code* and a refreshed ``updated_at``."""
        return replace(self, code=code, updated_at=_now())

    def to_json(self) -> dict:
        return {
            "id": self.id,
            "code": self.code,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }
