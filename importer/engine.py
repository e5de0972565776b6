"""The importer engine: one index, indexer and resolver per workspace root."""

import logging
import re
from pathlib import Path
from typing import Callable, List, Optional

from core.config import Config, get_config
from core.errors import ResolutionWarning, SelfImportError
from importer.models import (
    CompletionCategory, CompletionItem, Document, ImportAction, Position, TextEdit,
)
from importer.resolver import ImportResolver
from indexer.symbols import MatchMode, Symbol, SymbolIndex
from indexer.workspace import ScanReport, WorkspaceIndexer

logger = logging.getLogger(__name__)

NOTIFICATION_PREFIX = "[TypeScript Importer] "

_MISSING_NAME_RE = re.compile(r"Cannot find name ['\"](.*?)['\"]\.")
_WORD_RE = re.compile(r"[\w$]+")
_QUOTES = ("'", '"')


def symbol_category(symbol: Symbol) -> CompletionCategory:
    """Display category from the declaration keyword, by containment."""
    if not symbol.type_text:
        return CompletionCategory.FILE
    if "class" in symbol.type_text:
        return CompletionCategory.CLASS
    if "interface" in symbol.type_text:
        return CompletionCategory.INTERFACE
    return CompletionCategory.VARIABLE


class ImporterEngine:
    """
    Index-backed completion and auto-import for one workspace.

    Implements both CompletionSource and QuickFixSource.
    """

    def __init__(self, project_root: Path, config: Optional[Config] = None):
        self.project_root = Path(project_root).resolve()
        self.config = config if config is not None else get_config(project_root=self.project_root)
        self.disabled = self.config.disabled or not self.project_root.is_dir()

        self.index = SymbolIndex()
        self.indexer = WorkspaceIndexer(self.project_root, self.index, self.config, notify=self.show_notification)
        self.resolver = ImportResolver(self.project_root, self.config)

        self._notifiers: List[Callable[[str], None]] = []

    @property
    def status(self) -> str:
        return self.indexer.status

    def add_status_listener(self, listener: Callable[[str], None]):
        self.indexer.add_status_listener(listener)

    def add_notifier(self, notifier: Callable[[str], None]):
        self._notifiers.append(notifier)

    def show_notification(self, message: str):
        if not self.config.show_notifications:
            return
        for notifier in self._notifiers:
            notifier(NOTIFICATION_PREFIX + message)

    def start(self) -> Optional[ScanReport]:
        """Initial full scan; does nothing when disabled."""
        if self.disabled:
            logger.info("Importer disabled")
            return None
        return self.reindex(show_output=True)

    def reindex(self, show_output: bool = False) -> ScanReport:
        """Clear the index and rebuild it from the file tree."""
        self.indexer.reset_index()
        return self.indexer.scan_all(show_output)

    def scan_file(self, path, event_type: str = "modified") -> bool:
        return self.indexer.scan_file(path, event_type)

    def open_document(self, path) -> Document:
        """Read a file from disk as a Document with a workspace-relative path."""
        file_path = Path(path)
        if not file_path.is_absolute():
            file_path = self.project_root / file_path
        text = file_path.read_text(encoding="utf-8")
        return Document(self.resolver.normalize_path(str(file_path.resolve())), text)

    # CompletionSource

    def query_symbols(self, query: str, prefix_only: bool = True) -> List[Symbol]:
        return self.index.get_symbols(query, prefix_only, MatchMode.ANY)

    def query_modules(self, query: str, prefix_only: bool = True) -> List[str]:
        return self.index.get_modules(query, prefix_only, MatchMode.ANY)

    def complete_at(self, document: Document, line: int, character: int) -> List[CompletionItem]:
        """
        Completion items at a cursor position.

        Inside the quoted path of an ``import ... from`` line, module
        specifiers are offered; elsewhere, symbols matching the word under the
        cursor.
        """
        line_text = document.line_text(line)
        character = min(character, len(line_text))

        if "import" in line_text and "from" in line_text:
            start = character - 1
            while start > 0 and line_text[start] not in _QUOTES:
                start -= 1
            if start < 0 or line_text[start] not in _QUOTES:
                return []
            module_text = line_text[start + 1:character]
            return self._module_items(document, module_text, Position(line, start + 1), Position(line, character))

        word = None
        for match in _WORD_RE.finditer(line_text):
            if match.start() <= character <= match.end():
                word = line_text[match.start():character]
                break
        if not word:
            return []

        items = []
        for symbol in self.query_symbols(word, prefix_only=True)[:self.config.max_completion_items]:
            items.append(CompletionItem(
                label=symbol.name,
                category=symbol_category(symbol),
                detail=symbol.module_specifier or symbol.module_path,
                symbol=symbol,
            ))
        return items

    def _module_items(self, document: Document, module_text: str, start: Position, end: Position) -> List[CompletionItem]:
        if module_text.startswith("."):
            candidates = set()
            doc_path = self.resolver.normalize_path(document.path)
            for spec in self.index.get_modules("./", True, MatchMode.ANY):
                entry = self.index.get_module(spec)
                if entry is None:
                    continue
                for symbol in entry.symbols:
                    # Unresolvable package files have no usable relative path
                    if symbol.module_specifier or not symbol.importable or symbol.module_path == doc_path:
                        continue
                    candidates.add(self.resolver.relative_specifier(doc_path, symbol.module_path))
            lowered = module_text.lower()
            specs = sorted((s for s in candidates if s.lower().startswith(lowered)), key=lambda s: (s != module_text, s))
        else:
            specs = []
            for spec in self.query_modules(module_text, prefix_only=True):
                entry = self.index.get_module(spec)
                if entry is not None and any(s.module_specifier for s in entry.symbols):
                    specs.append(spec)

        return [
            CompletionItem(
                label=spec,
                category=CompletionCategory.FILE,
                insert_text=spec,
                replace_start=start,
                replace_end=end,
            )
            for spec in specs[:self.config.max_completion_items]
        ]

    # QuickFixSource

    def suggest_imports_for_diagnostic(self, document: Document, message: str) -> List[ImportAction]:
        match = _MISSING_NAME_RE.search(message or "")
        if not match:
            return []

        actions = []
        for symbol in self.index.get_symbols(match.group(1), False, MatchMode.EXACT):
            try:
                specifier = self.resolver.resolve_module(document.path, symbol)
            except SelfImportError:
                continue
            except ResolutionWarning as e:
                logger.warning(f"Not offering import of '{symbol.name}': {e}")
                continue
            title = self.resolver.create_import_statement(
                self.resolver.create_import_definition(symbol.name), specifier
            )
            actions.append(ImportAction(title=title, symbol=symbol, specifier=specifier))
        return actions

    def import_symbol(self, document: Document, symbol: Symbol) -> List[TextEdit]:
        """Edits importing ``symbol`` into ``document``; errors propagate to the caller."""
        edits = self.resolver.import_symbol(document, symbol)
        if edits:
            logger.info(f"Importing '{symbol.name}' into {document.path}")
        return edits
