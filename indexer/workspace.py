"""Workspace scanning that keeps the symbol index in sync with the file tree."""

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from enum import Enum
import fnmatch
import logging
import os
import threading
import time
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

from core.config import Config, DEFAULT_CONFIG
from core.errors import ParseError, ResolutionWarning
from indexer.exports import TypeScriptExportParser
from indexer.packages import PackageResolver
from indexer.symbols import Symbol, SymbolIndex, classify_kind

logger = logging.getLogger(__name__)


class IndexerState(Enum):
    IDLE = "Initializing"
    SCANNING = "Scanning..."
    READY = "Ready"
    UPDATING = "Updating"
    ERROR = "Error"


@dataclass
class ScanReport:
    """Outcome of a full scan."""
    files_scanned: int = 0
    symbols_indexed: int = 0
    failures: List[Tuple[str, str]] = field(default_factory=list)
    cancelled: bool = False
    elapsed_ms: int = 0

    @property
    def ok(self) -> bool:
        return not self.failures and not self.cancelled

    def summary(self) -> str:
        text = f"Indexed {self.symbols_indexed} symbols in {self.files_scanned} files"
        if self.failures:
            text += f" ({len(self.failures)} failed)"
        if self.cancelled:
            text += " (cancelled)"
        return text


def matches_globs(rel_path: str, patterns: Sequence[str]) -> bool:
    """fnmatch against POSIX relative paths, letting a leading '**/' match zero directories."""
    for pattern in patterns:
        if fnmatch.fnmatch(rel_path, pattern):
            return True
        if pattern.startswith("**/") and fnmatch.fnmatch(rel_path, pattern[3:]):
            return True
    return False


class WorkspaceIndexer:
    """Scans a workspace root for exported symbols and feeds a SymbolIndex."""

    def __init__(
        self,
        project_root: Path,
        index: SymbolIndex,
        config: Config = DEFAULT_CONFIG,
        notify: Optional[Callable[[str], None]] = None,
    ):
        self.project_root = Path(project_root).resolve()
        self.index = index
        self.config = config
        self.notify = notify
        self.parser = TypeScriptExportParser()
        self.packages = PackageResolver(self.project_root)

        self.state = IndexerState.IDLE
        self.status = IndexerState.IDLE.value
        self._status_listeners: List[Callable[[str], None]] = []

        self._scan_lock = threading.RLock()
        self._generation = 0
        self._generation_lock = threading.Lock()

    def add_status_listener(self, listener: Callable[[str], None]):
        """Register a callback receiving status text on every state change."""
        self._status_listeners.append(listener)

    def _set_state(self, state: IndexerState, detail: Optional[str] = None):
        self.state = state
        if not detail:
            self.status = state.value
        elif state is IndexerState.ERROR:
            self.status = f"{state.value}: {detail}"
        else:
            self.status = f"{state.value} {detail}"
        logger.debug(f"Indexer status: {self.status}")
        for listener in self._status_listeners:
            try:
                listener(self.status)
            except Exception as e:
                logger.error(f"Status listener error: {e}")

    def _next_generation(self) -> int:
        with self._generation_lock:
            self._generation += 1
            return self._generation

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    def reset_index(self):
        """Clear the index and abandon any scan in progress."""
        self._next_generation()
        self.index.reset_index()
        self.packages.clear()

    def relative_path(self, path) -> Optional[str]:
        """Workspace-relative POSIX path, or None when outside the root."""
        candidate = Path(path)
        if not candidate.is_absolute():
            candidate = self.project_root / candidate
        try:
            rel = candidate.resolve().relative_to(self.project_root)
        except ValueError:
            return None
        return rel.as_posix()

    def should_index(self, rel_path: str) -> bool:
        return (matches_globs(rel_path, self.config.files_to_scan)
                and not matches_globs(rel_path, self.config.files_to_exclude))

    def iter_source_files(self) -> Iterator[str]:
        """Yield workspace-relative paths of files to index, in sorted order."""
        if not self.project_root.is_dir():
            raise FileNotFoundError(f"Workspace root not found: {self.project_root}")
        for root, dirs, files in os.walk(self.project_root):
            dirs[:] = sorted(d for d in dirs if d != ".git")
            for name in sorted(files):
                rel_path = Path(root, name).relative_to(self.project_root).as_posix()
                if self.should_index(rel_path):
                    yield rel_path

    def parse_file(self, rel_path: str) -> List[Symbol]:
        """
        Read and parse one file into symbols.

        Raises:
            ParseError: if the file cannot be read or scanned
        """
        file_path = self.project_root / rel_path
        try:
            content = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ParseError(rel_path, f"Cannot read file: {e}") from e

        declarations = self.parser.parse(rel_path, content)

        importable = True
        try:
            specifier = self.packages.resolve(rel_path)
        except ResolutionWarning as e:
            logger.warning(str(e))
            specifier = None
            importable = False

        return [
            Symbol(
                name=decl.name,
                kind=classify_kind(decl.type_text),
                module_path=rel_path,
                module_specifier=specifier,
                type_text=decl.type_text,
                importable=importable,
            )
            for decl in declarations
        ]

    def scan_all(self, show_output: bool = False) -> ScanReport:
        """
        Index every matching file under the root.

        A file that fails to parse is logged and contributes no symbols; the
        rest of the scan continues. A newer scan or reset stops this one from
        committing further results.
        """
        generation = self._next_generation()
        with self._scan_lock:
            report = ScanReport()
            if not self._is_current(generation):
                report.cancelled = True
                return report

            start = time.time()
            self._set_state(IndexerState.SCANNING)

            try:
                rel_paths = list(self.iter_source_files())
            except OSError as e:
                logger.error(f"Failed to enumerate {self.project_root}: {e}")
                self._set_state(IndexerState.ERROR, str(e))
                report.failures.append((str(self.project_root), str(e)))
                return report

            stale = set(self.index.files()) - set(rel_paths)
            for rel_path in stale:
                self.index.remove_file(rel_path)

            with ThreadPoolExecutor(max_workers=self.config.scan_workers) as executor:
                futures = {executor.submit(self.parse_file, rel_path): rel_path for rel_path in rel_paths}
                for future in as_completed(futures):
                    rel_path = futures[future]
                    if not self._is_current(generation):
                        report.cancelled = True
                        for pending in futures:
                            pending.cancel()
                        break
                    try:
                        symbols = future.result()
                    except ParseError as e:
                        logger.warning(f"Skipping {rel_path}: {e}")
                        self.index.remove_file(rel_path)
                        report.failures.append((rel_path, str(e)))
                        continue
                    self.index.replace_file(rel_path, symbols)
                    report.files_scanned += 1
                    report.symbols_indexed += len(symbols)

            report.elapsed_ms = int((time.time() - start) * 1000)
            logger.info(f"{report.summary()} in {report.elapsed_ms}ms")
            self._set_state(IndexerState.READY)

            if show_output and self.notify and self.config.show_notifications:
                self.notify(report.summary())
            return report

    def scan_file(self, path, event_type: str = "modified") -> bool:
        """
        Update the index for one file change.

        Args:
            path: Absolute or workspace-relative path
            event_type: 'created', 'modified' or 'deleted'

        Returns:
            True if the index was touched
        """
        rel_path = self.relative_path(path)
        if rel_path is None or not self.should_index(rel_path):
            return False

        with self._scan_lock:
            previous = self.state
            self._set_state(IndexerState.UPDATING, rel_path)
            try:
                if event_type == "deleted" or not (self.project_root / rel_path).is_file():
                    self.index.remove_file(rel_path)
                    logger.debug(f"Removed {rel_path} from index")
                else:
                    try:
                        self.index.replace_file(rel_path, self.parse_file(rel_path))
                    except ParseError as e:
                        logger.warning(f"Skipping {rel_path}: {e}")
                        self.index.remove_file(rel_path)
            finally:
                self._set_state(IndexerState.READY if previous is not IndexerState.IDLE else previous)
            return True
