"""
OutlineRenderer — a static stand-in for the browser-side preview.

The browser evaluates the pasted code to render it; the backend cannot
and does not.  What it can do is check the contract that evaluation
relies on and report which elements are targetable:

- exactly one top-level factory function, named ``ExampleComponent``;
- balanced parentheses and braces;
- marker ids present and unique (ids that prefix other ids are reported
  because the editor's text matching can confuse them).

The result is a tree of marker-bearing ``React.createElement`` calls,
nested by parenthesis depth.  Every failure, expected or not, comes back
as ``RenderResult.error``.
"""
from __future__ import annotations

import logging
import re
from collections import Counter
from typing import Optional

from core.render_result import RenderNode, RenderResult
from patching.syntax import CALL_TOKEN, MARKER_ATTRIBUTE

logger = logging.getLogger(__name__)

DEFAULT_FACTORY_NAME = "ExampleComponent"

_FACTORY_RE = re.compile(
    r"^(?:export\s+(?:default\s+)?)?"
    r"(?:function\s+([A-Z]\w*)\s*\(|(?:const|let|var)\s+([A-Z]\w*)\s*=\s*(?:function\b|\([^)]*\)\s*=>))",
    re.MULTILINE,
)
_TAG_RE = re.compile(r"\s*\(\s*(['\"`])([\w.-]+)\1")


def _marker_re(marker: str) -> re.Pattern[str]:
    name = re.escape(marker)
    return re.compile(rf"(?:(['\"]){name}\1|{name})\s*:\s*(['\"])(.*?)\2")


class OutlineRenderer:
    """Builds a ``RenderResult`` tree of the targetable elements in a component."""

    def __init__(
        self,
        factory_name: str = DEFAULT_FACTORY_NAME,
        *,
        call_token: str = CALL_TOKEN,
        marker: str = MARKER_ATTRIBUTE,
    ) -> None:
        self._factory_name = factory_name
        self._call_token = call_token
        self._marker = marker
        self._marker_re = _marker_re(marker)

    def render(self, code: str) -> RenderResult:
        try:
            return self._render(code)
        except Exception as exc:
            logger.exception("Unexpected failure while rendering component outline")
            return RenderResult(error=f"Error rendering component: {exc}")

    # ------------------------------------------------------------------

    def _render(self, code: str) -> RenderResult:
        if not code.strip():
            return RenderResult(error="Component code is empty")

        factories = [m.group(1) or m.group(2) for m in _FACTORY_RE.finditer(code)]
        if not factories:
            return RenderResult(
                error=f"No component factory found: define function {self._factory_name}()"
            )
        if len(factories) > 1:
            return RenderResult(
                error="Expected exactly one top-level component factory, found: "
                + ", ".join(factories)
            )
        if factories[0] != self._factory_name:
            return RenderResult(
                error=f"{self._factory_name} is not defined (found {factories[0]})"
            )

        imbalance = _imbalance(code)
        if imbalance:
            return RenderResult(error=imbalance)

        root = RenderNode(marker_id="", line=_line_of(code, code.find(factories[0])), tag=self._factory_name)
        self._build_tree(code, root)
        return RenderResult(root=root, warnings=self._warnings(root))

    def _build_tree(self, code: str, root: RenderNode) -> None:
        starts = [m.start() for m in re.finditer(re.escape(self._call_token), code)]
        # (node, paren depth before the call's own parenthesis)
        stack: list[tuple[RenderNode, int]] = [(root, -1)]
        depth = 0
        next_call = 0
        for i, ch in enumerate(code):
            if next_call < len(starts) and i == starts[next_call]:
                end = starts[next_call + 1] if next_call + 1 < len(starts) else len(code)
                node = self._node_for_call(code, i, end)
                next_call += 1
                if node is not None:
                    stack[-1][0].children.append(node)
                    stack.append((node, depth))
            if ch == "(":
                depth += 1
            elif ch == ")":
                depth -= 1
                while len(stack) > 1 and stack[-1][1] >= depth:
                    stack.pop()

    def _node_for_call(self, code: str, start: int, end: int) -> Optional[RenderNode]:
        m = self._marker_re.search(code, start, end)
        if m is None:
            return None
        tag_match = _TAG_RE.match(code, start + len(self._call_token))
        return RenderNode(
            marker_id=m.group(3),
            line=_line_of(code, start),
            tag=tag_match.group(2) if tag_match else "",
        )

    def _warnings(self, root: RenderNode) -> list[str]:
        ids = [node.marker_id for node in _walk(root) if node is not root]
        if not ids:
            return [f"No element carries a '{self._marker}' attribute; nothing can be edited"]

        warnings = [
            f"Duplicate {self._marker} '{marker_id}' ({count} elements)"
            for marker_id, count in sorted(Counter(ids).items())
            if count > 1
        ]
        unique = sorted(set(ids))
        for a in unique:
            for b in unique:
                if a != b and b.startswith(a):
                    warnings.append(f"{self._marker} '{a}' is a prefix of '{b}'")
        return warnings


def _walk(node: RenderNode):
    yield node
    for child in node.children:
        yield from _walk(child)


def _line_of(code: str, index: int) -> int:
    return code.count("\n", 0, max(index, 0))


def _imbalance(code: str) -> Optional[str]:
    for opener, closer, name in (("(", ")", "parentheses"), ("{", "}", "braces")):
        diff = code.count(opener) - code.count(closer)
        if diff:
            return f"Unbalanced {name}: {abs(diff)} unmatched '{opener if diff > 0 else closer}'"
    return None
