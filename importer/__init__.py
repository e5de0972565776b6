"""Import resolution and the host-facing engine."""

from .engine import ImporterEngine
from .resolver import ImportResolver
from .sources import CompletionSource, QuickFixSource

__all__ = ["CompletionSource", "ImporterEngine", "ImportResolver", "QuickFixSource"]
