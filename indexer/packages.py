"""Maps files inside node_modules to the package specifier that imports them."""

import json
import logging
import posixpath
import threading
from pathlib import Path
from typing import Dict, Optional, Tuple

from core.errors import ResolutionWarning
from indexer.symbols import strip_source_extension

logger = logging.getLogger(__name__)


def _types_package_name(name: str) -> str:
    """'@types/node' imports as 'node', '@types/scope__pkg' as '@scope/pkg'."""
    if not name.startswith("@types/"):
        return name
    bare = name[len("@types/"):]
    if "__" in bare:
        scope, pkg = bare.split("__", 1)
        return f"@{scope}/{pkg}"
    return bare


def _collapse_index(path: str) -> str:
    if path == "index":
        return ""
    if path.endswith("/index"):
        return path[:-len("/index")]
    return path


class PackageResolver:
    """Resolves package specifiers for dependency files, caching package.json reads."""

    def __init__(self, project_root: Path):
        self.project_root = Path(project_root)
        self._manifests: Dict[str, Optional[Tuple[str, str]]] = {}
        self._lock = threading.Lock()

    def clear(self):
        with self._lock:
            self._manifests.clear()

    def resolve(self, rel_path: str) -> Optional[str]:
        """
        Return the package specifier for a workspace-relative path.

        Returns None for workspace sources, which are imported by relative
        path instead.

        Raises:
            ResolutionWarning: the file is a dependency without a usable package name
        """
        parts = rel_path.split("/")
        if "node_modules" not in parts:
            return None

        idx = len(parts) - 1 - parts[::-1].index("node_modules")
        rest = parts[idx + 1:]
        pkg_len = 2 if rest and rest[0].startswith("@") else 1
        if len(rest) <= pkg_len:
            raise ResolutionWarning(rel_path, "file is not inside a package directory")

        pkg_dir = "/".join(parts[:idx + 1 + pkg_len])
        manifest = self._read_manifest(pkg_dir)
        if manifest is None:
            raise ResolutionWarning(rel_path, f"no package name declared in {pkg_dir}/package.json")

        name, entry = manifest
        specifier = _types_package_name(name)
        sub_path = strip_source_extension("/".join(rest[pkg_len:]))
        entry_path = strip_source_extension(posixpath.normpath(entry))

        if sub_path == entry_path:
            return specifier

        entry_dir = posixpath.dirname(entry_path)
        if entry_dir and sub_path.startswith(entry_dir + "/"):
            sub_path = sub_path[len(entry_dir) + 1:]

        sub_path = _collapse_index(sub_path)
        return f"{specifier}/{sub_path}" if sub_path else specifier

    def _read_manifest(self, pkg_dir: str) -> Optional[Tuple[str, str]]:
        with self._lock:
            if pkg_dir in self._manifests:
                return self._manifests[pkg_dir]

        manifest = None
        manifest_path = self.project_root / pkg_dir / "package.json"
        try:
            data = json.loads(manifest_path.read_text(encoding="utf-8"))
            name = data.get("name")
            if isinstance(name, str) and name:
                entry = data.get("types") or data.get("typings") or data.get("main") or "index"
                manifest = (name, entry)
        except (OSError, ValueError) as e:
            logger.debug(f"Cannot read {manifest_path}: {e}")

        with self._lock:
            self._manifests[pkg_dir] = manifest
        return manifest
