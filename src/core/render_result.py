from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass(slots=True)
class RenderNode:
    """One targetable element of a rendered component (carries a marker id)."""
    marker_id: str
    line: int
    tag: str = ""
    children: list[RenderNode] = field(default_factory=list)

    def to_json(self) -> dict:
        return {
            "markerId": self.marker_id,
            "line": self.line,
            "tag": self.tag,
            "children": [c.to_json() for c in self.children],
        }


@dataclass(slots=True)
class RenderResult:
    """
    Outcome of rendering a component description.

    Either ``root`` holds the rendered tree or ``error`` holds a
    human-readable failure message; ``warnings`` never block rendering.
    """
    root: Optional[RenderNode] = None
    error: Optional[str] = None
    warnings: list[str] = field(default_factory=list)

    def __post_init__(self):
        if self.root is not None and self.error is not None:
            raise ValueError("RenderResult cannot carry both a tree and an error")

    @property
    def ok(self) -> bool:
        return self.error is None

    def __bool__(self) -> bool:
        return self.ok

    def to_json(self) -> dict:
        return {
            "ok": self.ok,
            "root": self.root.to_json() if self.root is not None else None,
            "error": self.error,
            "warnings": list(self.warnings),
        }
