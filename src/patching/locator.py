"""
Locator — find the element-creation call that carries a marker id.

Two passes over the lines:

1. Find a call line whose props literal (on a following line, before the
   next call line) contains the marker with the target value.
2. From that call line, count parentheses until the balance returns to
   zero; that line closes the call.

The scan is textual.  Parentheses inside string literals are counted like
any other, and the balance restarts on every line that contains the call
token, so a parent call whose children start on their own lines ends at
its first child's closing line.
"""
from __future__ import annotations

import logging
from typing import Optional, Sequence

from core.source_document import ElementCall
from patching.syntax import CALL_TOKEN, MARKER_ATTRIBUTE, has_marker, is_call_line

logger = logging.getLogger(__name__)


def find_call_start(
    lines: Sequence[str],
    target_id: str,
    *,
    call_token: str = CALL_TOKEN,
    marker: str = MARKER_ATTRIBUTE,
) -> Optional[int]:
    """Return the index of the call line owning *target_id*, or ``None``."""
    for i, line in enumerate(lines):
        if not is_call_line(line, call_token):
            continue
        for j in range(i + 1, len(lines)):
            if has_marker(lines[j], target_id, marker):
                return i
            # Another call opened before the marker: not this one
            if is_call_line(lines[j], call_token):
                break
    return None


def find_call_end(
    lines: Sequence[str],
    start_line: int,
    *,
    call_token: str = CALL_TOKEN,
) -> Optional[int]:
    """Return the first line at which the parenthesis balance is back to zero."""
    balance = 0
    for i in range(start_line, len(lines)):
        line = lines[i]
        if is_call_line(line, call_token):
            balance = 0
        balance += line.count("(") - line.count(")")
        if balance == 0:
            return i
    return None


def locate(
    lines: Sequence[str],
    target_id: str,
    *,
    call_token: str = CALL_TOKEN,
    marker: str = MARKER_ATTRIBUTE,
) -> Optional[ElementCall]:
    """
    Locate the call whose props carry ``marker`` = *target_id*.

    Returns ``None`` when the marker is absent or the call never balances.
    """
    start = find_call_start(lines, target_id, call_token=call_token, marker=marker)
    if start is None:
        logger.debug("Marker %r not found", target_id)
        return None

    end = find_call_end(lines, start, call_token=call_token)
    if end is None:
        logger.debug("Call for %r at line %d is unbalanced", target_id, start)
        return None

    logger.debug("Located %r at lines %d..%d", target_id, start, end)
    return ElementCall(start_line=start, end_line=end)
