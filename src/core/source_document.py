"""
SourceDocument — one component description as an ordered list of lines.

The patching engine works on plain ``list[str]``; this wrapper only owns
the text ↔ lines conversion so that a document survives the round-trip
exactly (``"\\n"`` separators, no trailing-newline normalization).
"""
from __future__ import annotations

from dataclasses import dataclass, field

LINE_SEPARATOR = "\n"


@dataclass(frozen=True, slots=True)
class ElementCall:
    """
    Inclusive line range of one balanced element-creation call.

    Attributes:
        start_line: 0-based line containing the call token.
        end_line:   0-based line where the parenthesis balance returns to zero.
    """
    start_line: int
    end_line: int

    def __post_init__(self):
        if self.start_line < 0 or self.end_line < self.start_line:
            raise ValueError(
                f"Invalid element range: {self.start_line}..{self.end_line}"
            )

    def __len__(self) -> int:
        return self.end_line - self.start_line + 1

    def to_json(self) -> dict:
        return {"startLine": self.start_line, "endLine": self.end_line}


@dataclass(slots=True)
class SourceDocument:
    """Ordered sequence of text lines representing one component description."""
    lines: list[str] = field(default_factory=list)

    @classmethod
    def from_text(cls, text: str) -> SourceDocument:
        return cls(lines=text.split(LINE_SEPARATOR))

    def to_text(self) -> str:
        return LINE_SEPARATOR.join(self.lines)

    def __len__(self) -> int:
        return len(self.lines)

    def __getitem__(self, index: int) -> str:
        return self.lines[index]

    def block(self, call: ElementCall) -> list[str]:
        """Return a copy of the lines covered by *call*."""
        return self.lines[call.start_line : call.end_line + 1]
