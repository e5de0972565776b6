"""Base class for codemods."""

from abc import ABC, abstractmethod
import difflib


class BaseCodeMod(ABC):
    """Base class for codemods with common functionality."""

    def __init__(self, name: str, description: str):
        self.name = name
        self.description = description

    def preview(self, path: str, text: str) -> str:
        """Generate preview diff."""
        return self._create_unified_diff(path, text, self.apply(path, text))

    @abstractmethod
    def apply(self, path: str, text: str) -> str:
        """Apply transformation."""
        pass

    def _create_unified_diff(self, path: str, original: str, modified: str) -> str:
        """Create unified diff from original and modified text."""
        diff = difflib.unified_diff(
            original.splitlines(keepends=True),
            modified.splitlines(keepends=True),
            fromfile=f"a/{path}",
            tofile=f"b/{path}",
        )
        return "".join(diff)
