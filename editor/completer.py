"""prompt_toolkit completion backed by the importer engine."""

from __future__ import annotations

import re
from typing import Any, Iterable

from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document as PromptDocument

from importer.engine import ImporterEngine
from importer.models import Document

_WORD_BEFORE_CURSOR_RE = re.compile(r"[\w$]*$")


class ImportCompleter(Completer):
    """Completes identifiers and import paths as if typing into ``document_path``."""

    def __init__(self, engine: ImporterEngine, document_path: str = "scratch.ts") -> None:
        self.engine = engine
        self.document_path = document_path

    def get_completions(
        self, document: PromptDocument, complete_event: Any
    ) -> Iterable[Completion]:
        doc = Document(self.document_path, document.text)
        row, col = document.cursor_position_row, document.cursor_position_col

        for item in self.engine.complete_at(doc, row, col):
            if item.replace_start is not None:
                start_position = item.replace_start.character - col
                text = item.insert_text or item.label
            else:
                word = _WORD_BEFORE_CURSOR_RE.search(document.current_line_before_cursor).group(0)
                start_position = -len(word)
                text = item.label
            yield Completion(
                text,
                start_position=start_position,
                display=item.label,
                display_meta=item.detail or item.category.value,
            )
