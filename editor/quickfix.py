"""Quick fix for unresolved identifiers."""

import logging
from pathlib import Path
from typing import List, Optional

from prompt_toolkit.shortcuts import radiolist_dialog

from importer.engine import ImporterEngine
from importer.models import Document, ImportAction

logger = logging.getLogger(__name__)


def missing_name_message(name: str) -> str:
    """Diagnostic text the compiler reports for an unresolved identifier."""
    return f"Cannot find name '{name}'."


class QuickFixManager:
    """Offers and applies import actions for a document."""

    def __init__(self, engine: ImporterEngine):
        self.engine = engine

    def actions_for(self, document: Document, diagnostics: List[str]) -> List[ImportAction]:
        """Actions for the first diagnostic that yields any."""
        for message in diagnostics:
            actions = self.engine.suggest_imports_for_diagnostic(document, message)
            if actions:
                return actions
        return []

    def choose(self, actions: List[ImportAction]) -> Optional[ImportAction]:
        """Let the user pick an action; a single action is picked without asking."""
        if not actions:
            return None
        if len(actions) == 1:
            return actions[0]
        return radiolist_dialog(
            title="Quick Fix",
            text="Add import:",
            values=[(action, action.title) for action in actions],
        ).run()

    def apply(self, document: Document, action: ImportAction) -> Document:
        """Return the document with the action's import applied."""
        edits = self.engine.import_symbol(document, action.symbol)
        return document.apply_edits(edits)

    def apply_to_file(self, path: Path, action: ImportAction) -> bool:
        """Apply an action to a file on disk. Returns True if the file changed."""
        document = self.engine.open_document(path)
        updated = self.apply(document, action)
        if updated.text == document.text:
            return False
        (self.engine.project_root / document.path).write_text(updated.text, encoding="utf-8")
        logger.info(f"Applied '{action.title}' to {path}")
        return True
