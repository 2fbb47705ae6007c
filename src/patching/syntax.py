"""
Shared constants for the element-creation call syntax (locator + patcher).

Only one calling convention is recognized:

    React.createElement('tag', {
      'data-v0-id': 'unique-id',
      style: { ... },
    }, 'text'),
"""
from __future__ import annotations


CALL_TOKEN = "React.createElement"
MARKER_ATTRIBUTE = "data-v0-id"
STYLE_KEY = "style:"
QUOTE_CHARS = ("'", '"', "`")


def marker_spellings(target_id: str, marker: str = MARKER_ATTRIBUTE) -> tuple[str, ...]:
    """
    The six textual forms of ``marker: target_id`` the locator accepts.

    Every form ends with the closing quote of the value, so an id never
    matches a longer id that merely starts with it.
    """
    return (
        f"'{marker}': '{target_id}'",
        f'"{marker}": "{target_id}"',
        f"'{marker}': \"{target_id}\"",
        f"\"{marker}\": '{target_id}'",
        f"{marker}: '{target_id}'",
        f'{marker}: "{target_id}"',
    )


def has_marker(line: str, target_id: str, marker: str = MARKER_ATTRIBUTE) -> bool:
    return any(spelling in line for spelling in marker_spellings(target_id, marker))


def is_call_line(line: str, call_token: str = CALL_TOKEN) -> bool:
    return call_token in line
