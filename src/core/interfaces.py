"""
Core interfaces for the component editing system.

This module defines the contracts for the collaborators around the
patching engine:
- IComponentStore: create / read / update / delete component records
- IRenderer: turn component source text into a tree or a failure message

The patching engine itself depends on neither.
"""
from __future__ import annotations

from typing import Protocol

from core.component_record import ComponentRecord
from core.render_result import RenderResult


class IComponentStore(Protocol):
    """
    Protocol defining the persistence interface.
    Services depend on this protocol, not on a concrete store.

    Missing ids raise ``ComponentNotFoundError`` (a ``KeyError``).
    """

    def create(self, code: str) -> ComponentRecord: ...

    def get(self, component_id: str) -> ComponentRecord: ...

    def list(self) -> list[ComponentRecord]: ...

    def update(self, component_id: str, code: str) -> ComponentRecord: ...

    def delete(self, component_id: str) -> ComponentRecord: ...


class IRenderer(Protocol):
    """
    Protocol for the preview collaborator.

    ``render`` must never raise: any fault while materializing the tree is
    reported through ``RenderResult.error``.
    """

    def render(self, code: str) -> RenderResult: ...
