"""Capabilities the importer exposes to an editor host."""

from typing import List, Protocol, runtime_checkable

from importer.models import Document, ImportAction
from indexer.symbols import Symbol


@runtime_checkable
class CompletionSource(Protocol):
    """Ranked completion candidates for identifiers and module specifiers."""

    def query_modules(self, query: str, prefix_only: bool = True) -> List[str]:
        """
        Module specifiers matching a partially typed import path.

        Args:
            query: Text typed so far inside the quotes
            prefix_only: Only return specifiers starting with the query

        Returns:
            Specifiers, exact match first
        """
        ...

    def query_symbols(self, query: str, prefix_only: bool = True) -> List[Symbol]:
        """Symbols whose names match a partially typed identifier."""
        ...


@runtime_checkable
class QuickFixSource(Protocol):
    """Import suggestions for unresolved identifiers."""

    def suggest_imports_for_diagnostic(self, document: Document, message: str) -> List[ImportAction]:
        """
        Import actions for a diagnostic message.

        Only ``Cannot find name '<name>'.`` messages produce actions; any other
        message yields an empty list.
        """
        ...
