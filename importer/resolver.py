"""Module specifier resolution and import statement editing."""

import logging
import os
import posixpath
from pathlib import Path
from typing import List, Optional

from core.config import Config, DEFAULT_CONFIG
from core.errors import AmbiguousBindingError, ResolutionWarning, SelfImportError
from importer.models import Document, ImportBinding, TextEdit
from importer.statements import header_end_offset, merge_binding, scan_imports
from indexer.symbols import Symbol, strip_source_extension

logger = logging.getLogger(__name__)


class ImportResolver:
    """Computes specifiers and import edits for a requesting document."""

    def __init__(self, project_root: Optional[Path] = None, config: Config = DEFAULT_CONFIG):
        self.project_root = Path(project_root).resolve() if project_root is not None else None
        self.config = config

    def normalize_path(self, path: str) -> str:
        """Workspace-relative POSIX form of a document path."""
        if self.project_root is not None and os.path.isabs(path):
            try:
                return Path(path).resolve().relative_to(self.project_root).as_posix()
            except ValueError:
                pass
        return posixpath.normpath(str(path).replace("\\", "/"))

    def relative_specifier(self, requesting_path: str, module_path: str) -> str:
        """Relative import path from the requesting file to a module file."""
        target = strip_source_extension(module_path)
        base = posixpath.dirname(self.normalize_path(requesting_path)) or "."
        specifier = posixpath.relpath(target, base)
        if not (specifier.startswith("./") or specifier.startswith("../")):
            specifier = "./" + specifier

        if self.config.collapse_index and specifier.endswith("/index"):
            specifier = specifier[:-len("/index")]
        return specifier

    def resolve_module(self, requesting_path: str, symbol: Symbol) -> str:
        """
        Specifier to write when importing ``symbol`` into ``requesting_path``.

        Raises:
            ResolutionWarning: the symbol's module has no importable specifier
            SelfImportError: the symbol is declared in the requesting file
        """
        if not symbol.importable:
            raise ResolutionWarning(symbol.module_path)
        if symbol.module_specifier:
            return symbol.module_specifier

        if self.normalize_path(requesting_path) == self.normalize_path(symbol.module_path):
            raise SelfImportError(symbol.module_path)
        return self.relative_specifier(requesting_path, symbol.module_path)

    def create_import_definition(self, name: str) -> ImportBinding:
        return ImportBinding(name)

    def create_import_statement(self, binding: ImportBinding, specifier: str) -> str:
        quote = '"' if self.config.double_quotes else "'"
        pad = " " if self.config.space_between_braces else ""
        terminator = ";" if self.config.emit_semicolon else ""
        return f"import {{{pad}{binding.render()}{pad}}} from {quote}{specifier}{quote}{terminator}"

    def import_symbol(self, document: Document, symbol: Symbol) -> List[TextEdit]:
        """
        Compute the edits importing ``symbol`` into ``document``.

        Returns an empty list when the symbol is already imported.

        Raises:
            SelfImportError, ResolutionWarning: from resolve_module
            AmbiguousBindingError: the name is already bound from another module
        """
        specifier = self.resolve_module(document.path, symbol)
        binding = self.create_import_definition(symbol.name)
        text = document.text
        declarations = scan_imports(text)

        for decl in declarations:
            if binding.local_name not in decl.local_names():
                continue
            if decl.specifier == specifier and decl.imports_named(binding.name):
                logger.debug(f"'{symbol.name}' is already imported from '{specifier}'")
                return []
            raise AmbiguousBindingError(binding.local_name, decl.specifier, specifier)

        for decl in declarations:
            if decl.specifier == specifier and decl.mergeable:
                merged = merge_binding(text, decl, binding.render(), self.config.space_between_braces)
                return [TextEdit(document.position_at(decl.start), document.position_at(decl.end), merged)]

        statement = self.create_import_statement(binding, specifier)
        if declarations:
            last_end = max(d.end for d in declarations)
            newline = text.find("\n", last_end)
            if newline < 0:
                offset, new_text = len(text), "\n" + statement
            else:
                offset, new_text = newline + 1, statement + "\n"
        else:
            offset = header_end_offset(text)
            new_text = statement + "\n"
            if offset == len(text) and text and not text.endswith("\n"):
                new_text = "\n" + statement

        position = document.position_at(offset)
        return [TextEdit(position, position, new_text)]
