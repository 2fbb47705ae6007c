"""
API routes for the component editor.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from core import EditSessionError, PropertySet
from services.component_service import ComponentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

# Singleton service, created in main.py and attached here
_service: Optional[ComponentService] = None


def init_service(svc: ComponentService) -> None:
    global _service
    _service = svc


def svc() -> ComponentService:
    if _service is None:
        raise RuntimeError("ComponentService not initialized")
    return _service


# ------------------------------------------------------------------
# Request / response models
# ------------------------------------------------------------------

class CodeRequest(BaseModel):
    # Typed loosely so a non-string payload gets a readable 400, not a 422
    code: Any = None


class EditRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    target_id: str = Field("", alias="targetId")
    properties: dict = Field(default_factory=dict)


class PatchRequest(EditRequest):
    code: Any = None


class SelectRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    target_id: str = Field("", alias="targetId")
    text: str = ""
    computed_style: Optional[dict[str, str]] = Field(None, alias="computedStyle")
    properties: Optional[dict] = None


class PropertiesRequest(BaseModel):
    properties: dict = Field(default_factory=dict)


def _properties(fields: dict) -> PropertySet:
    try:
        return PropertySet.from_dict(fields)
    except ValueError as e:
        raise HTTPException(400, str(e))


# ------------------------------------------------------------------
# Component CRUD
# ------------------------------------------------------------------

@router.post("/component")
def create_component(req: CodeRequest):
    """Store a new component description."""
    try:
        return svc().create(req.code)
    except ValueError as e:
        raise HTTPException(400, str(e))
    except Exception as e:
        logger.exception("Error creating component")
        raise HTTPException(500, f"Internal server error: {e}")


@router.get("/component")
def list_components():
    """List all stored components."""
    return {"components": svc().list_components()}


@router.get("/component/{component_id}")
def get_component(component_id: str):
    try:
        return svc().get(component_id)
    except KeyError as e:
        raise HTTPException(404, str(e))
    except ValueError as e:
        raise HTTPException(400, str(e))


@router.put("/component/{component_id}")
def update_component(component_id: str, req: CodeRequest):
    """Replace a component's code."""
    try:
        return svc().update(component_id, req.code)
    except KeyError as e:
        raise HTTPException(404, str(e))
    except ValueError as e:
        raise HTTPException(400, str(e))
    except Exception as e:
        logger.exception("Error updating component %s", component_id)
        raise HTTPException(500, f"Failed to update component: {e}")


@router.delete("/component/{component_id}")
def delete_component(component_id: str):
    try:
        return svc().delete(component_id)
    except KeyError as e:
        raise HTTPException(404, str(e))
    except ValueError as e:
        raise HTTPException(400, str(e))


# ------------------------------------------------------------------
# Element edits
# ------------------------------------------------------------------

@router.post("/patch")
def patch_code(req: PatchRequest):
    """Patch a code blob without storing it."""
    props = _properties(req.properties)
    try:
        return svc().patch_code(req.code, req.target_id, props)
    except ValueError as e:
        raise HTTPException(400, str(e))


@router.post("/component/{component_id}/edit")
def edit_component(component_id: str, req: EditRequest):
    """Stamp new properties onto one element of a stored component."""
    props = _properties(req.properties)
    try:
        return svc().apply_edit(component_id, req.target_id, props)
    except KeyError as e:
        raise HTTPException(404, str(e))
    except ValueError as e:
        raise HTTPException(400, str(e))


@router.get("/component/{component_id}/preview")
def preview_component(component_id: str, session: bool = False):
    """Outline of the component's targetable elements, or a render error."""
    try:
        return svc().render_preview(component_id, use_session=session)
    except KeyError as e:
        raise HTTPException(404, str(e))
    except ValueError as e:
        raise HTTPException(400, str(e))


# ------------------------------------------------------------------
# Edit sessions
# ------------------------------------------------------------------

@router.post("/component/{component_id}/session")
def start_session(component_id: str):
    """Open an edit session on the stored code."""
    try:
        return svc().start_session(component_id)
    except KeyError as e:
        raise HTTPException(404, str(e))
    except ValueError as e:
        raise HTTPException(400, str(e))


@router.post("/component/{component_id}/session/select")
def select_element(component_id: str, req: SelectRequest):
    """Select an element, seeding its properties from the resolved style."""
    if req.computed_style is not None:
        props = PropertySet.from_computed_style(req.text, req.computed_style)
    else:
        props = _properties(req.properties or {})
    try:
        return svc().select_element(component_id, req.target_id, props)
    except KeyError as e:
        raise HTTPException(404, str(e))
    except EditSessionError as e:
        raise HTTPException(409, str(e))


@router.post("/component/{component_id}/session/deselect")
def deselect_element(component_id: str):
    try:
        return svc().deselect_element(component_id)
    except KeyError as e:
        raise HTTPException(404, str(e))


@router.put("/component/{component_id}/session/properties")
def update_properties(component_id: str, req: PropertiesRequest):
    """Register new property values; they are patched in on apply."""
    props = _properties(req.properties)
    try:
        return svc().update_session_properties(component_id, props)
    except KeyError as e:
        raise HTTPException(404, str(e))
    except EditSessionError as e:
        raise HTTPException(409, str(e))


@router.post("/component/{component_id}/session/apply")
def apply_session(component_id: str):
    try:
        return svc().apply_session(component_id)
    except KeyError as e:
        raise HTTPException(404, str(e))
    except EditSessionError as e:
        raise HTTPException(409, str(e))


@router.post("/component/{component_id}/session/save")
def save_session(component_id: str):
    try:
        return svc().save_session(component_id)
    except KeyError as e:
        raise HTTPException(404, str(e))


@router.delete("/component/{component_id}/session")
def close_session(component_id: str):
    try:
        svc().close_session(component_id)
    except KeyError as e:
        raise HTTPException(404, str(e))
    return {"message": "Session closed"}
