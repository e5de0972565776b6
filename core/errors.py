"""Error types raised by the indexer and the import resolver."""

from typing import Optional


class ImporterError(Exception):
    """Base class for all importer errors."""


class ParseError(ImporterError):
    """A source file could not be scanned for exports."""

    def __init__(self, path: str, message: str, line: Optional[int] = None):
        self.path = path
        self.message = message
        self.line = line
        location = f"{path}:{line}" if line is not None else path
        super().__init__(f"{location}: {message}")


class SelfImportError(ImporterError):
    """Resolving the symbol would import a file into itself."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Cannot import '{path}' into itself")


class AmbiguousBindingError(ImporterError):
    """The local name is already bound to an import from another module."""

    def __init__(self, name: str, existing_specifier: str, requested_specifier: str):
        self.name = name
        self.existing_specifier = existing_specifier
        self.requested_specifier = requested_specifier
        super().__init__(
            f"'{name}' is already imported from '{existing_specifier}', "
            f"refusing to import it from '{requested_specifier}'"
        )


class ResolutionWarning(ImporterError, UserWarning):
    """The declaring module of a symbol has no importable specifier."""

    def __init__(self, path: str, reason: str = "no package name found"):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot resolve module for '{path}': {reason}")
