"""In-memory index of exported symbols and the modules that declare them."""

from dataclasses import dataclass
from enum import Enum
import threading
from typing import Dict, Iterable, List, Optional, Tuple

SOURCE_EXTENSIONS = (".d.ts", ".tsx", ".ts", ".jsx", ".js")


class SymbolKind(Enum):
    CLASS = "class"
    INTERFACE = "interface"
    FUNCTION = "function"
    VARIABLE = "variable"
    UNKNOWN = "unknown"


class MatchMode(Enum):
    EXACT = "exact"
    ANY = "any"


def classify_kind(type_text: Optional[str]) -> SymbolKind:
    """Best-effort kind from a free-text declaration keyword such as 'abstract class'."""
    if not type_text:
        return SymbolKind.UNKNOWN
    words = type_text.split()
    if "class" in type_text:
        return SymbolKind.CLASS
    if "interface" in type_text:
        return SymbolKind.INTERFACE
    if "function" in type_text:
        return SymbolKind.FUNCTION
    if "enum" in words:
        return SymbolKind.UNKNOWN
    if any(w in ("const", "let", "var") for w in words):
        return SymbolKind.VARIABLE
    return SymbolKind.UNKNOWN


def strip_source_extension(path: str) -> str:
    for ext in SOURCE_EXTENSIONS:
        if path.endswith(ext):
            return path[:-len(ext)]
    return path


@dataclass(frozen=True)
class Symbol:
    """An exported declaration."""
    name: str
    kind: SymbolKind
    module_path: str  # workspace-relative, POSIX separators
    module_specifier: Optional[str] = None  # package specifier, None for workspace sources
    type_text: Optional[str] = None
    importable: bool = True

    @property
    def key(self) -> Tuple[str, str]:
        return (self.name, self.module_path)

    @property
    def module_key(self) -> str:
        """
        Specifier the symbol is filed under in the module mapping.

        Workspace files are keyed './<path without extension>' so they never
        share an entry with a bare package name.
        """
        if self.module_specifier:
            return self.module_specifier
        return "./" + strip_source_extension(self.module_path)


@dataclass(frozen=True)
class ModuleEntry:
    """All indexed symbols sharing one module specifier."""
    specifier: str
    symbols: Tuple[Symbol, ...]


@dataclass(frozen=True)
class _Snapshot:
    by_name: Dict[str, Tuple[Symbol, ...]]
    by_module: Dict[str, ModuleEntry]
    by_file: Dict[str, Tuple[Symbol, ...]]


_EMPTY = _Snapshot(by_name={}, by_module={}, by_file={})


def _matches(candidate: str, query: str, prefix_only: bool, mode: MatchMode) -> bool:
    if mode is MatchMode.EXACT:
        return candidate == query
    candidate_lower = candidate.lower()
    query_lower = query.lower()
    if prefix_only:
        return candidate_lower.startswith(query_lower)
    return query_lower in candidate_lower


class SymbolIndex:
    """
    Name and module mappings over all exported symbols.

    Mutations are serialized and publish a new snapshot with a single
    reference swap; readers never lock and always see a whole snapshot.
    """

    def __init__(self):
        self._snapshot = _EMPTY
        self._write_lock = threading.Lock()

    def reset_index(self):
        """Drop every symbol."""
        with self._write_lock:
            self._snapshot = _EMPTY

    def replace_file(self, path: str, symbols: Iterable[Symbol]):
        """Replace everything attributed to ``path`` with ``symbols``."""
        new_symbols: List[Symbol] = []
        seen = set()
        for symbol in symbols:
            if symbol.module_path != path:
                raise ValueError(f"Symbol '{symbol.name}' belongs to '{symbol.module_path}', not '{path}'")
            if symbol.key in seen:
                continue
            seen.add(symbol.key)
            new_symbols.append(symbol)

        with self._write_lock:
            current = self._snapshot
            old_symbols = current.by_file.get(path, ())
            if not old_symbols and not new_symbols:
                return

            by_name = dict(current.by_name)
            by_module = dict(current.by_module)
            by_file = dict(current.by_file)

            for symbol in old_symbols:
                remaining = tuple(s for s in by_name.get(symbol.name, ()) if s.module_path != path)
                if remaining:
                    by_name[symbol.name] = remaining
                else:
                    by_name.pop(symbol.name, None)

                entry = by_module.get(symbol.module_key)
                if entry is not None:
                    kept = tuple(s for s in entry.symbols if s.module_path != path)
                    if kept:
                        by_module[symbol.module_key] = ModuleEntry(entry.specifier, kept)
                    else:
                        del by_module[symbol.module_key]

            for symbol in new_symbols:
                by_name[symbol.name] = by_name.get(symbol.name, ()) + (symbol,)
                entry = by_module.get(symbol.module_key)
                existing = entry.symbols if entry is not None else ()
                by_module[symbol.module_key] = ModuleEntry(symbol.module_key, existing + (symbol,))

            if new_symbols:
                by_file[path] = tuple(new_symbols)
            else:
                by_file.pop(path, None)

            self._snapshot = _Snapshot(by_name=by_name, by_module=by_module, by_file=by_file)

    def remove_file(self, path: str):
        self.replace_file(path, [])

    def get_symbols(self, query: str, prefix_only: bool, mode: MatchMode) -> List[Symbol]:
        """
        Query symbols by name.

        Exact (case-sensitive) name matches come first, then the remaining
        matches; each group is ordered by name, then module path.
        """
        snapshot = self._snapshot
        if mode is MatchMode.EXACT:
            return sorted(snapshot.by_name.get(query, ()), key=lambda s: s.module_path)

        results = []
        for name, symbols in snapshot.by_name.items():
            if _matches(name, query, prefix_only, mode):
                results.extend(symbols)

        results.sort(key=lambda s: (s.name != query, s.name, s.module_path))
        return results

    def get_modules(self, query: str, prefix_only: bool, mode: MatchMode) -> List[str]:
        """Query module specifiers, same matching and ordering rules as get_symbols."""
        snapshot = self._snapshot
        results = [spec for spec in snapshot.by_module if _matches(spec, query, prefix_only, mode)]
        results.sort(key=lambda spec: (spec != query, spec))
        return results

    def get_module(self, specifier: str) -> Optional[ModuleEntry]:
        return self._snapshot.by_module.get(specifier)

    def all_symbols(self) -> List[Symbol]:
        snapshot = self._snapshot
        return sorted(
            (s for symbols in snapshot.by_file.values() for s in symbols),
            key=lambda s: (s.name, s.module_path),
        )

    def file_symbols(self, path: str) -> Tuple[Symbol, ...]:
        return self._snapshot.by_file.get(path, ())

    def files(self) -> List[str]:
        return sorted(self._snapshot.by_file)

    def __len__(self) -> int:
        return sum(len(symbols) for symbols in self._snapshot.by_file.values())
