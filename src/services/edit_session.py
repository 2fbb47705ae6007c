"""
EditSession — one user's in-flight edits to one component.

Holds a working copy of the component code, the selected element and
the property values shown in the editor.  Rapid property changes are
coalesced: they only mark the session as having unapplied changes, the
patch runs on :meth:`apply`, and the store is written once the working
copy has been quiet for ``debounce_seconds`` (or on an explicit save).

Lifecycle::

    session = EditSession("abc123", code)
    session.select("card-title", PropertySet.from_computed_style(...))
    session.update_properties(text="Hello")
    session.apply()                     # patches the working copy
    if session.autosave_due():
        store.update(session.component_id, session.code)
        session.mark_saved()
"""
from __future__ import annotations

import dataclasses
import logging
import time
from typing import Callable, Optional

from core.errors import EditSessionError
from core.properties import PropertySet
from core.source_document import SourceDocument
from patching.locator import locate
from patching.patcher import PatchOutcome, patch_block, splice

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 2.0


class EditSession:
    """Mutable editing state for a single component."""

    def __init__(
        self,
        component_id: str,
        code: str,
        *,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.component_id = component_id
        self.code = code
        self.saved_code = code
        self.selected_target: Optional[str] = None
        self.properties: Optional[PropertySet] = None
        self.has_unapplied_changes = False
        self.last_outcome: Optional[PatchOutcome] = None
        self._debounce_seconds = debounce_seconds
        self._clock = clock
        self._last_code_change: Optional[float] = None

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def select(self, target_id: str, properties: PropertySet) -> None:
        """Select an element and seed the editor with its current values."""
        if not target_id:
            raise EditSessionError("A marker id is required to select an element")
        self.selected_target = target_id
        self.properties = properties
        self.has_unapplied_changes = False

    def deselect(self) -> None:
        self.selected_target = None
        self.properties = None
        self.has_unapplied_changes = False

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def update_properties(self, properties: Optional[PropertySet] = None, **changes) -> PropertySet:
        """
        Replace the whole property set, or change individual fields.

        Any call marks the session as having unapplied changes.
        """
        if self.selected_target is None or self.properties is None:
            raise EditSessionError("No element selected")
        if properties is None:
            try:
                properties = dataclasses.replace(self.properties, **changes)
            except TypeError as exc:
                raise EditSessionError(f"Unknown property: {exc}") from exc
        self.properties = properties
        self.has_unapplied_changes = True
        return properties

    def apply(self) -> bool:
        """
        Patch the working copy with the current properties.

        Returns ``True`` when the code changed.  Raises EditSessionError
        when nothing is selected or no change was registered since the
        last apply.
        """
        if self.selected_target is None or self.properties is None:
            raise EditSessionError("No element selected")
        if not self.has_unapplied_changes:
            raise EditSessionError("No changes to apply")

        doc = SourceDocument.from_text(self.code)
        call = locate(doc.lines, self.selected_target)
        if call is None:
            logger.info(
                "Element %r not found in component %s; nothing applied",
                self.selected_target, self.component_id,
            )
            self.last_outcome = None
            return False

        outcome = patch_block(doc.block(call), self.properties)
        self.last_outcome = outcome
        new_code = SourceDocument(lines=splice(doc.lines, call, outcome.block)).to_text()
        if new_code == self.code:
            return False

        self.code = new_code
        self.has_unapplied_changes = False
        self._last_code_change = self._clock()
        logger.debug(
            "Applied edit to %r in component %s (style=%s text=%s)",
            self.selected_target, self.component_id,
            outcome.style.value, outcome.text.value,
        )
        return True

    # ------------------------------------------------------------------
    # Saving
    # ------------------------------------------------------------------

    @property
    def is_dirty(self) -> bool:
        """The working copy differs from what was last saved."""
        return self.code != self.saved_code

    def autosave_due(self, now: Optional[float] = None) -> bool:
        """True once the working copy has been unchanged for the debounce period."""
        if not self.is_dirty or self._last_code_change is None:
            return False
        now = self._clock() if now is None else now
        return now - self._last_code_change >= self._debounce_seconds

    def mark_saved(self, code: Optional[str] = None) -> None:
        if code is not None:
            self.code = code
        self.saved_code = self.code

    def to_json(self) -> dict:
        return {
            "componentId": self.component_id,
            "code": self.code,
            "selectedTarget": self.selected_target,
            "properties": self.properties.to_json() if self.properties else None,
            "hasUnappliedChanges": self.has_unapplied_changes,
            "isDirty": self.is_dirty,
        }

