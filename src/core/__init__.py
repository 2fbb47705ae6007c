from core.properties import FontWeight, PropertySet, rgb_to_hex
from core.source_document import ElementCall, SourceDocument
from core.component_record import ComponentRecord
from core.render_result import RenderNode, RenderResult
from core.errors import (
    ComponentError,
    ComponentNotFoundError,
    InvalidComponentError,
    InvalidPropertiesError,
    EditSessionError,
)
from core.interfaces import IComponentStore, IRenderer

__all__ = [
    "FontWeight",
    "PropertySet",
    "rgb_to_hex",
    "ElementCall",
    "SourceDocument",
    "ComponentRecord",
    "RenderNode",
    "RenderResult",
    "ComponentError",
    "ComponentNotFoundError",
    "InvalidComponentError",
    "InvalidPropertiesError",
    "EditSessionError",
    "IComponentStore",
    "IRenderer",
]
