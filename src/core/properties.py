"""
PropertySet — the full visual state stamped onto one element per edit.

A PropertySet carries no history: every edit overwrites the element's
style attribute with exactly these four style values plus the text.
"""
from __future__ import annotations

import dataclasses
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

from core.errors import InvalidPropertiesError


DEFAULT_COLOR = "#000000"
DEFAULT_BACKGROUND = "#ffffff"
DEFAULT_FONT_SIZE = 16
TRANSPARENT = "rgba(0, 0, 0, 0)"

_HEX_RE = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")
_DIGITS_RE = re.compile(r"\d+")


class FontWeight(Enum):
    """Font weight keywords offered by the property editor."""
    NORMAL = "normal"
    BOLD = "bold"
    LIGHTER = "lighter"
    BOLDER = "bolder"


@dataclass(frozen=True, slots=True)
class PropertySet:
    """Typed representation of the editable properties of one element."""
    text: str = ""
    color: str = DEFAULT_COLOR
    background_color: str = DEFAULT_BACKGROUND
    font_size: int = DEFAULT_FONT_SIZE
    font_weight: FontWeight = FontWeight.NORMAL

    @classmethod
    def from_dict(cls, fields: Mapping[str, Any]) -> PropertySet:
        """
        Build a PropertySet from a raw JSON dict.

        Accepts both ``backgroundColor`` / ``fontSize`` / ``fontWeight`` and
        their snake_case spellings.  Missing keys fall back to defaults.

        Raises InvalidPropertiesError on values the editor cannot produce.
        """
        def pick(camel: str, snake: str, default: Any) -> Any:
            if camel in fields:
                return fields[camel]
            return fields.get(snake, default)

        text = fields.get("text", "")
        if not isinstance(text, str):
            raise InvalidPropertiesError("text must be a string")

        color = _parse_hex("color", fields.get("color", DEFAULT_COLOR))
        background = _parse_hex(
            "backgroundColor", pick("backgroundColor", "background_color", DEFAULT_BACKGROUND),
        )

        raw_size = pick("fontSize", "font_size", DEFAULT_FONT_SIZE)
        if isinstance(raw_size, bool):
            raise InvalidPropertiesError(f"Invalid fontSize: {raw_size!r}")
        try:
            font_size = int(raw_size)
        except (TypeError, ValueError) as exc:
            raise InvalidPropertiesError(f"Invalid fontSize: {raw_size!r}") from exc
        if font_size <= 0:
            raise InvalidPropertiesError("fontSize must be a positive integer")

        raw_weight = pick("fontWeight", "font_weight", FontWeight.NORMAL.value)
        try:
            font_weight = FontWeight(raw_weight)
        except ValueError:
            allowed = ", ".join(w.value for w in FontWeight)
            raise InvalidPropertiesError(
                f"Invalid fontWeight: {raw_weight!r} (expected one of {allowed})"
            ) from None

        return cls(
            text=text,
            color=color,
            background_color=background,
            font_size=font_size,
            font_weight=font_weight,
        )

    @classmethod
    def from_computed_style(cls, text: str, style: Mapping[str, str]) -> PropertySet:
        """
        Seed a PropertySet from an element's resolved (computed) style.

        This is what the selection step does when the user clicks an
        element: colors arrive as ``rgb(...)`` strings, the font size as
        ``"16px"`` and the weight as a keyword or a number.
        """
        raw_bg = style.get("backgroundColor", TRANSPARENT)
        background = DEFAULT_BACKGROUND if raw_bg == TRANSPARENT else rgb_to_hex(raw_bg)

        size_match = _DIGITS_RE.match(str(style.get("fontSize", "")).strip())
        font_size = int(size_match.group()) if size_match else 0

        return cls(
            text=text,
            color=rgb_to_hex(style.get("color", DEFAULT_COLOR)),
            background_color=background,
            font_size=font_size or DEFAULT_FONT_SIZE,
            font_weight=_weight_from_computed(style.get("fontWeight", "")),
        )

    def to_json(self) -> dict:
        """Convert to the camelCase dict the editor UI works with."""
        d = dataclasses.asdict(self)
        return {
            "text": d["text"],
            "color": d["color"],
            "backgroundColor": d["background_color"],
            "fontSize": d["font_size"],
            "fontWeight": self.font_weight.value,
        }


def rgb_to_hex(rgb: str) -> str:
    """
    Convert ``rgb(r, g, b)`` / ``rgba(r, g, b, a)`` to ``#rrggbb``.

    Values already in hex form are returned as-is; strings without any
    digits give ``#000000``.
    """
    if rgb.startswith("#"):
        return rgb
    parts = _DIGITS_RE.findall(rgb)
    if len(parts) < 3:
        return DEFAULT_COLOR
    r, g, b = (min(int(p), 255) for p in parts[:3])
    return f"#{r:02x}{g:02x}{b:02x}"


def _parse_hex(name: str, value: Any) -> str:
    if not isinstance(value, str) or not _HEX_RE.match(value):
        raise InvalidPropertiesError(f"Invalid {name}: {value!r} (expected a hex color)")
    return value


def _weight_from_computed(value: str) -> FontWeight:
    value = str(value).strip()
    try:
        return FontWeight(value)
    except ValueError:
        pass
    if value.isdigit():
        return FontWeight.BOLD if int(value) >= 600 else FontWeight.NORMAL
    return FontWeight.NORMAL
