"""TypeScript codemods built on the import resolver."""

from importer.engine import ImporterEngine
from importer.models import Document
from indexer.symbols import Symbol
from .base import BaseCodeMod


class AddImportCodemod(BaseCodeMod):
    """Add (or merge) an import of an indexed symbol."""

    def __init__(self, engine: ImporterEngine, symbol: Symbol):
        super().__init__(
            name="add_import",
            description=f"Import '{symbol.name}' from {symbol.module_specifier or symbol.module_path}"
        )
        self.engine = engine
        self.symbol = symbol

    def apply(self, path: str, text: str) -> str:
        document = Document(self.engine.resolver.normalize_path(path), text)
        edits = self.engine.import_symbol(document, self.symbol)
        return document.apply_edits(edits).text
