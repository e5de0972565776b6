"""Export indexing for TypeScript workspaces."""

from .symbols import MatchMode, ModuleEntry, Symbol, SymbolIndex, SymbolKind
from .workspace import IndexerState, ScanReport, WorkspaceIndexer

__all__ = ["MatchMode", "ModuleEntry", "Symbol", "SymbolIndex", "SymbolKind", "IndexerState", "ScanReport", "WorkspaceIndexer"]
