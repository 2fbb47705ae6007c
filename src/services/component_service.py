"""
ComponentService — the bridge between the API layer and the core domain.

Manages:
- Component records, through an injected ``IComponentStore``
- Element edits: locate → patch → store, serialized per component
- Edit sessions: select → update properties → apply → (debounced) save
- Previews, through an injected ``IRenderer``

All public methods return JSON-friendly dicts.  Missing components raise
``ComponentNotFoundError`` (a ``KeyError``); malformed input raises a
``ValueError`` subclass; session misuse raises ``EditSessionError``.
"""
from __future__ import annotations

import logging
from threading import Lock, RLock
from typing import Any, Optional

from core import (
    ComponentNotFoundError,
    IComponentStore,
    IRenderer,
    InvalidComponentError,
    PropertySet,
    SourceDocument,
)
from patching.locator import locate
from patching.patcher import patch_block, splice
from services.edit_session import DEFAULT_DEBOUNCE_SECONDS, EditSession
from services.preview import OutlineRenderer

logger = logging.getLogger(__name__)


def require_id(component_id: Any) -> str:
    if not isinstance(component_id, str) or not component_id.strip():
        raise InvalidComponentError("Component ID is required")
    return component_id


def require_code(code: Any) -> str:
    if not isinstance(code, str) or not code:
        raise InvalidComponentError("Code is required and must be a string")
    if not code.strip():
        raise InvalidComponentError("Code cannot be empty")
    return code


class ComponentService:
    """
    Facade that the API layer calls. One instance per application.
    """

    def __init__(
        self,
        store: IComponentStore,
        renderer: Optional[IRenderer] = None,
        *,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
    ):
        self._store: IComponentStore = store
        self._renderer: IRenderer = renderer or OutlineRenderer()
        self._debounce_seconds = debounce_seconds
        self._sessions: dict[str, EditSession] = {}
        self._locks: dict[str, RLock] = {}
        self._locks_guard = Lock()

    def _lock_for(self, component_id: str) -> RLock:
        """
        Lock serializing writes to one stored component.

        Unknown ids raise ComponentNotFoundError before a lock is created,
        so the lock table only ever holds stored components.
        """
        self._store.get(component_id)
        with self._locks_guard:
            return self._locks.setdefault(component_id, RLock())

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    def create(self, code: Any) -> dict:
        record = self._store.create(require_code(code))
        logger.info("Created component %s", record.id)
        return {"id": record.id, "message": "Component created successfully"}

    def get(self, component_id: Any) -> dict:
        return self._store.get(require_id(component_id)).to_json()

    def list_components(self) -> list[dict]:
        return [record.to_json() for record in self._store.list()]

    def update(self, component_id: Any, code: Any) -> dict:
        """Replace a component's code (stripped).  Open sessions follow the new code."""
        component_id = require_id(component_id)
        code = require_code(code).strip()
        with self._lock_for(component_id):
            record = self._store.update(component_id, code)
            session = self._sessions.get(component_id)
            if session is not None:
                session.mark_saved(record.code)
        logger.info("Updated component %s (%d chars)", component_id, len(code))
        return {"message": "Component updated successfully", "component": record.to_json()}

    def delete(self, component_id: Any) -> dict:
        component_id = require_id(component_id)
        with self._lock_for(component_id):
            record = self._store.delete(component_id)
            self._sessions.pop(component_id, None)
        with self._locks_guard:
            self._locks.pop(component_id, None)
        logger.info("Deleted component %s", component_id)
        return {"message": "Component deleted successfully", "deletedComponent": record.to_json()}

    # ------------------------------------------------------------------
    # Element edits
    # ------------------------------------------------------------------

    @staticmethod
    def patch_code(code: Any, target_id: Any, properties: PropertySet) -> dict:
        """
        Stateless locate + patch.

        Returns the (possibly unchanged) code, whether it changed, the
        located range and how each field was applied.
        """
        code = require_code(code)
        if not isinstance(target_id, str) or not target_id:
            raise InvalidComponentError("targetId is required")

        doc = SourceDocument.from_text(code)
        call = locate(doc.lines, target_id)
        if call is None:
            return {"code": code, "changed": False, "range": None, "style": None, "text": None}

        outcome = patch_block(doc.block(call), properties)
        lines = splice(doc.lines, call, outcome.block)
        new_code = SourceDocument(lines=lines).to_text()
        return {
            "code": new_code,
            "changed": new_code != code,
            "range": call.to_json(),
            "style": outcome.style.value,
            "text": outcome.text.value,
        }

    def apply_edit(self, component_id: Any, target_id: Any, properties: PropertySet) -> dict:
        """
        Patch a stored component in place; one edit per component at a time.

        With an edit session open, the edit lands on the session's working
        copy and that copy is saved, so neither write overwrites the other.
        """
        component_id = require_id(component_id)
        with self._lock_for(component_id):
            record = self._store.get(component_id)
            session = self._sessions.get(component_id)
            base = session.code if session is not None else record.code
            result = self.patch_code(base, target_id, properties)
            if result["changed"]:
                record = self._store.update(component_id, result["code"])
                if session is not None:
                    session.mark_saved(record.code)
                logger.info(
                    "Edited element %r in component %s (style=%s text=%s)",
                    target_id, component_id, result["style"], result["text"],
                )
            else:
                logger.info("Edit of %r in component %s changed nothing", target_id, component_id)
        return {**result, "component": record.to_json()}

    # ------------------------------------------------------------------
    # Edit sessions
    # ------------------------------------------------------------------

    def start_session(self, component_id: Any) -> dict:
        """Open (or reopen) an edit session seeded from the stored code."""
        component_id = require_id(component_id)
        with self._lock_for(component_id):
            record = self._store.get(component_id)
            session = EditSession(
                component_id, record.code, debounce_seconds=self._debounce_seconds,
            )
            self._sessions[component_id] = session
        logger.debug("Started edit session for component %s", component_id)
        return session.to_json()

    def get_session(self, component_id: str) -> EditSession:
        try:
            return self._sessions[component_id]
        except KeyError:
            raise ComponentNotFoundError(f"No edit session for component: {component_id}") from None

    def select_element(self, component_id: str, target_id: str, properties: PropertySet) -> dict:
        with self._lock_for(component_id):
            session = self.get_session(component_id)
            session.select(target_id, properties)
        return session.to_json()

    def deselect_element(self, component_id: str) -> dict:
        with self._lock_for(component_id):
            session = self.get_session(component_id)
            session.deselect()
        return session.to_json()

    def update_session_properties(self, component_id: str, properties: PropertySet) -> dict:
        with self._lock_for(component_id):
            session = self.get_session(component_id)
            session.update_properties(properties)
        return session.to_json()

    def apply_session(self, component_id: str) -> dict:
        """Patch the session's working copy; the store is written by save/autosave."""
        with self._lock_for(component_id):
            session = self.get_session(component_id)
            changed = session.apply()
            outcome = session.last_outcome
        return {
            **session.to_json(),
            "changed": changed,
            "style": outcome.style.value if outcome else None,
            "text": outcome.text.value if outcome else None,
        }

    def save_session(self, component_id: str) -> dict:
        with self._lock_for(component_id):
            session = self.get_session(component_id)
            return self._save(session)

    def flush_autosaves(self, now: Optional[float] = None) -> list[str]:
        """Save every session whose working copy has been quiet long enough."""
        saved: list[str] = []
        for component_id, session in list(self._sessions.items()):
            try:
                lock = self._lock_for(component_id)
            except ComponentNotFoundError:
                logger.warning("Dropping session for deleted component %s", component_id)
                self._sessions.pop(component_id, None)
                continue
            with lock:
                # Closed, reopened or deleted since the snapshot
                if self._sessions.get(component_id) is not session:
                    continue
                if not session.autosave_due(now):
                    continue
                self._save(session)
            saved.append(component_id)
        if saved:
            logger.info("Autosaved %d component(s): %s", len(saved), ", ".join(saved))
        return saved

    def close_session(self, component_id: str) -> None:
        if component_id not in self._sessions:
            return
        with self._lock_for(component_id):
            self._sessions.pop(component_id, None)
        logger.debug("Closed edit session for component %s", component_id)

    def _save(self, session: EditSession) -> dict:
        record = self._store.update(session.component_id, session.code)
        session.mark_saved(record.code)
        return {"message": "Component updated successfully", "component": record.to_json()}

    # ------------------------------------------------------------------
    # Preview
    # ------------------------------------------------------------------

    def render_preview(self, component_id: Any, *, use_session: bool = False) -> dict:
        """Render the stored code, or the open session's working copy."""
        component_id = require_id(component_id)
        with self._lock_for(component_id):
            session = self._sessions.get(component_id) if use_session else None
            if session is not None:
                code = session.code
            else:
                code = self._store.get(component_id).code
        result = self._renderer.render(code)
        return {"id": component_id, **result.to_json()}
