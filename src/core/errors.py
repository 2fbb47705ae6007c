"""
Base error hierarchy for the component editing system.

All component-specific errors inherit from ``ComponentError`` so callers
can catch a single base type.  The not-found and invalid-input errors also
derive from ``KeyError`` / ``ValueError`` so the API layer can map them to
HTTP statuses without importing this module.

"Target not found" and "pattern did not match" are *not* errors: the
locator returns ``None`` and the patcher leaves the field unchanged.
"""
from __future__ import annotations



class ComponentError(Exception):
    """Base class for all component editing errors."""


class ComponentNotFoundError(ComponentError, KeyError):
    """Raised when no component is stored under the given id."""

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return str(self.args[0]) if self.args else "Component not found"


class InvalidComponentError(ComponentError, ValueError):
    """Raised when a component id or code payload is malformed."""


class InvalidPropertiesError(ComponentError, ValueError):
    """Raised when an edit's property values cannot be accepted."""


class EditSessionError(ComponentError):
    """Raised when an edit session operation is not allowed in its current state."""
