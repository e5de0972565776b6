"""Data types exchanged between the importer and its host."""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from indexer.symbols import Symbol


@dataclass(frozen=True)
class Position:
    """Zero-based line/character position."""
    line: int
    character: int


@dataclass(frozen=True)
class TextEdit:
    """Replace the text between start and end with new_text."""
    start: Position
    end: Position
    new_text: str


@dataclass(frozen=True)
class Document:
    """A text document as seen by the host."""
    path: str
    text: str

    def position_at(self, offset: int) -> Position:
        offset = max(0, min(offset, len(self.text)))
        line = self.text.count("\n", 0, offset)
        line_start = self.text.rfind("\n", 0, offset) + 1
        return Position(line, offset - line_start)

    def offset_at(self, position: Position) -> int:
        offset = 0
        lines = self.text.split("\n")
        for line in lines[:position.line]:
            offset += len(line) + 1
        if position.line >= len(lines):
            return len(self.text)
        return min(offset + position.character, offset + len(lines[position.line]))

    def line_text(self, line: int) -> str:
        lines = self.text.split("\n")
        return lines[line] if 0 <= line < len(lines) else ""

    def apply_edits(self, edits: Iterable[TextEdit]) -> 'Document':
        """Return a new document with the edits applied; edits must not overlap."""
        spans = sorted(
            ((self.offset_at(e.start), self.offset_at(e.end), e.new_text) for e in edits),
            reverse=True,
        )
        text = self.text
        for start, end, new_text in spans:
            text = text[:start] + new_text + text[end:]
        return Document(self.path, text)


@dataclass(frozen=True)
class ImportBinding:
    """A named binding inside an import declaration's braces."""
    name: str
    alias: Optional[str] = None

    @property
    def local_name(self) -> str:
        return self.alias or self.name

    def render(self) -> str:
        return f"{self.name} as {self.alias}" if self.alias else self.name


class CompletionCategory(Enum):
    FILE = "file"
    CLASS = "class"
    INTERFACE = "interface"
    VARIABLE = "variable"


@dataclass(frozen=True)
class CompletionItem:
    label: str
    category: CompletionCategory
    detail: str = ""
    insert_text: Optional[str] = None
    replace_start: Optional[Position] = None
    replace_end: Optional[Position] = None
    symbol: Optional[Symbol] = None


@dataclass(frozen=True)
class ImportAction:
    """A quick fix offering to import a symbol."""
    title: str
    symbol: Symbol
    specifier: str
