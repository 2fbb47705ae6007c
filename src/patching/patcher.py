"""
Patcher — stamp a PropertySet onto a located element-creation call.

Only the lines of the located call are touched.  Inside that block:

- the ``style:`` field of the props literal is replaced, or inserted
  before the props closing brace when there is none;
- the literal text argument is replaced by the first strategy that
  matches: a ``}, 'text'),`` trailing argument, a standalone quoted line
  after the props literal, or a regex over the whole block.

Every strategy is best-effort.  A field whose pattern does not match is
left as it was; ``patch`` never raises for that.  ``patch_block`` reports
which strategy applied each field.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from core.properties import PropertySet
from core.source_document import ElementCall, SourceDocument
from patching.locator import locate
from patching.syntax import CALL_TOKEN, QUOTE_CHARS, STYLE_KEY

logger = logging.getLogger(__name__)


_STYLE_VALUE_RE = re.compile(r"style:\s*\{[^}]*\}")
_TRAILING_TEXT_RE = re.compile(r"(\}\s*,\s*)(['\"`])(.+?)\2(\s*\),?)")
_INDENT_RE = re.compile(r"^\s*")
# Object literal allowing one level of nested braces (an inserted style)
_PROPS_LITERAL = r"\{(?:[^{}]|\{[^{}]*\})*\}"


def _inline_text_re(call_token: str) -> re.Pattern[str]:
    return re.compile(
        "(" + re.escape(call_token) + r"\s*\([^,]+,\s*" + _PROPS_LITERAL + r",\s*)"
        r"(['\"`])[^'\"`]*\2",
        re.DOTALL,
    )


class StyleUpdate(Enum):
    REPLACED = "replaced"
    INSERTED = "inserted"
    SKIPPED = "skipped"


class TextUpdate(Enum):
    TRAILING = "trailing"
    LINE = "line"
    REGEX = "regex"
    SKIPPED = "skipped"


@dataclass(frozen=True, slots=True)
class PatchOutcome:
    """The patched block and how each field was applied."""
    block: list[str]
    style: StyleUpdate
    text: TextUpdate

    @property
    def fully_applied(self) -> bool:
        return self.style != StyleUpdate.SKIPPED and self.text != TextUpdate.SKIPPED


@dataclass(slots=True)
class PropsSpan:
    """
    Line indexes (relative to the block) found by :func:`scan_props`.

    ``start``/``end`` delimit the props object literal; ``style_line`` is
    the first ``style:`` field inside it; ``text_line`` is the first line
    after it that starts with a quote character.
    """
    start: Optional[int] = None
    end: Optional[int] = None
    style_line: Optional[int] = None
    text_line: Optional[int] = None

    def shift_after_end(self, delta: int) -> None:
        """Account for *delta* lines inserted at or before ``end``."""
        if self.end is not None:
            self.end += delta
        if self.text_line is not None:
            self.text_line += delta


# ------------------------------------------------------------------
# Scanning
# ------------------------------------------------------------------

def scan_props(block: Sequence[str]) -> PropsSpan:
    """Find the props literal, its style field and the standalone text line."""
    span = PropsSpan()
    depth = 0
    for i, line in enumerate(block):
        stripped = line.strip()
        if span.start is None:
            if "{" not in line:
                continue
            span.start = i
        elif span.end is not None:
            if span.text_line is None and stripped.startswith(QUOTE_CHARS):
                span.text_line = i
            continue

        if span.style_line is None and stripped.startswith(STYLE_KEY):
            span.style_line = i
        depth += line.count("{") - line.count("}")
        if depth <= 0:
            span.end = i
    return span


# ------------------------------------------------------------------
# Style
# ------------------------------------------------------------------

def style_literal(props: PropertySet) -> str:
    """Build the ``style:`` field; keys outside these four are not kept."""
    return (
        f"style: {{ color: '{props.color}', "
        f"backgroundColor: '{props.background_color}', "
        f"fontSize: '{props.font_size}px', "
        f"fontWeight: '{props.font_weight.value}' }}"
    )


def _comment_start(line: str) -> int:
    """Index of a ``//`` comment outside string literals, or -1."""
    quote = None
    i = 0
    while i < len(line):
        ch = line[i]
        if quote is not None:
            if ch == "\\":
                i += 2
                continue
            if ch == quote:
                quote = None
        elif ch in QUOTE_CHARS:
            quote = ch
        elif line.startswith("//", i):
            return i
        i += 1
    return -1


def _with_comma(text: str) -> str:
    cut = _comment_start(text)
    code, comment = (text, "") if cut == -1 else (text[:cut], text[cut:])
    stripped = code.rstrip()
    if not stripped or stripped.endswith((",", "{")):
        return text
    if comment:
        # Keep the gap before the comment
        return stripped + "," + code[len(stripped):] + comment
    return stripped + ","


def _indent_of(line: str) -> str:
    return _INDENT_RE.match(line).group()


def _apply_style(block: list[str], span: PropsSpan, style: str) -> StyleUpdate:
    if span.style_line is not None:
        line = block[span.style_line]
        new_line, n = _STYLE_VALUE_RE.subn(lambda _m: style, line, count=1)
        if not n:
            return StyleUpdate.SKIPPED
        block[span.style_line] = new_line
        return StyleUpdate.REPLACED

    if span.end is None:
        return StyleUpdate.SKIPPED

    line = block[span.end]
    brace = line.find("}")
    if brace == -1:
        return StyleUpdate.SKIPPED

    head, tail = line[:brace], line[brace:]
    indent = _indent_of(line)
    new_lines: list[str] = []
    if head.strip():
        new_lines.append(_with_comma(head))
        new_lines.append(f"{indent}  {style},")
    else:
        if span.start is not None and span.end > span.start:
            block[span.end - 1] = _with_comma(block[span.end - 1])
        new_lines.append(f"{indent}  {style},")
    new_lines.append(indent + tail)

    block[span.end : span.end + 1] = new_lines
    span.shift_after_end(len(new_lines) - 1)
    return StyleUpdate.INSERTED


# ------------------------------------------------------------------
# Text
# ------------------------------------------------------------------

def escape_text(text: str, quote: str) -> str:
    """Escape *text* for placement between two *quote* characters."""
    return (
        text.replace("\\", "\\\\")
        .replace(quote, "\\" + quote)
        .replace("\n", "\\n")
        .replace("\r", "\\r")
    )


def _closing_quote(text: str, quote: str) -> int:
    """Index of the unescaped *quote* closing a literal that opens at text[0]."""
    i = 1
    while i < len(text):
        if text[i] == "\\":
            i += 2
            continue
        if text[i] == quote:
            return i
        i += 1
    return -1


def _replace_trailing(block: list[str], span: PropsSpan, text: str) -> bool:
    if span.end is None:
        return False
    for i in range(span.end, len(block)):
        line = block[i]
        m = _TRAILING_TEXT_RE.search(line)
        if m:
            quote = m.group(2)
            block[i] = line[: m.start(3)] + escape_text(text, quote) + line[m.end(3) :]
            return True
    return False


def _replace_text_line(block: list[str], span: PropsSpan, text: str) -> bool:
    if span.text_line is None:
        return False
    line = block[span.text_line]
    indent = _indent_of(line)
    literal = line.strip()
    close = _closing_quote(literal, literal[0])
    suffix = literal[close + 1 :] if close != -1 else ""
    escaped = escape_text(text, "'")
    block[span.text_line] = f"{indent}'{escaped}'{suffix}"
    return True


def _replace_inline(block: list[str], text: str, call_token: str) -> Optional[list[str]]:
    joined = "\n".join(block)
    replacement = "'" + escape_text(text, "'") + "'"
    new_text, n = _inline_text_re(call_token).subn(
        lambda m: m.group(1) + replacement, joined, count=1,
    )
    if not n:
        return None
    return new_text.split("\n")


# ------------------------------------------------------------------
# Entry points
# ------------------------------------------------------------------

def patch_block(
    block: Sequence[str],
    props: PropertySet,
    *,
    call_token: str = CALL_TOKEN,
) -> PatchOutcome:
    """
    Patch one call block (the lines of a located ``ElementCall``).

    Returns a new list; *block* is not modified.
    """
    new_block = list(block)
    span = scan_props(new_block)

    style_update = _apply_style(new_block, span, style_literal(props))

    if _replace_trailing(new_block, span, props.text):
        text_update = TextUpdate.TRAILING
    elif _replace_text_line(new_block, span, props.text):
        text_update = TextUpdate.LINE
    else:
        replaced = _replace_inline(new_block, props.text, call_token)
        if replaced is not None:
            new_block = replaced
            text_update = TextUpdate.REGEX
        else:
            text_update = TextUpdate.SKIPPED

    logger.debug(
        "Patched block of %d lines: style=%s text=%s",
        len(block), style_update.value, text_update.value,
    )
    return PatchOutcome(block=new_block, style=style_update, text=text_update)


def splice(lines: Sequence[str], call: ElementCall, block: Sequence[str]) -> list[str]:
    """Replace the lines covered by *call* with *block*."""
    return [*lines[: call.start_line], *block, *lines[call.end_line + 1 :]]


def patch(
    lines: Sequence[str],
    call: Optional[ElementCall],
    props: PropertySet,
    *,
    call_token: str = CALL_TOKEN,
) -> list[str]:
    """
    Return a copy of *lines* with the call at *call* patched.

    Lines outside ``call`` are returned untouched.  With ``call=None``
    (target not found) the result equals the input.
    """
    if call is None:
        return list(lines)
    if call.end_line >= len(lines):
        logger.warning(
            "Element range %d..%d is outside a %d-line document; nothing patched",
            call.start_line, call.end_line, len(lines),
        )
        return list(lines)

    outcome = patch_block(
        lines[call.start_line : call.end_line + 1], props, call_token=call_token,
    )
    return splice(lines, call, outcome.block)


def update_element_in_code(code: str, target_id: str, props: PropertySet) -> str:
    """Locate *target_id* in *code* and stamp *props* onto it."""
    doc = SourceDocument.from_text(code)
    call = locate(doc.lines, target_id)
    if call is None:
        return code
    return SourceDocument(lines=patch(doc.lines, call, props)).to_text()
