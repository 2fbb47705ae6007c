from patching.syntax import CALL_TOKEN, MARKER_ATTRIBUTE, marker_spellings
from patching.locator import locate
from patching.patcher import (
    PatchOutcome,
    StyleUpdate,
    TextUpdate,
    patch,
    patch_block,
    style_literal,
    update_element_in_code,
)

__all__ = [
    "CALL_TOKEN",
    "MARKER_ATTRIBUTE",
    "marker_spellings",
    "locate",
    "PatchOutcome",
    "StyleUpdate",
    "TextUpdate",
    "patch",
    "patch_block",
    "style_literal",
    "update_element_in_code",
]
