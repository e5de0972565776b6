"""Shared fixtures."""

from pathlib import Path

import pytest

from core.config import Config


def write_files(root: Path, files: dict) -> Path:
    for rel_path, content in files.items():
        path = root / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def config():
    """Config with notifications on and a single scan worker."""
    return Config(show_notifications=True, scan_workers=1)


@pytest.fixture
def deps_config():
    """Config that also scans declaration files under node_modules."""
    return Config(
        show_notifications=True,
        files_to_scan=["**/*.ts", "**/*.tsx"],
        files_to_exclude=["**/.git/**"],
    )


@pytest.fixture
def workspace(tmp_path):
    """A small TypeScript project with one dependency in node_modules."""
    return write_files(tmp_path, {
        "src/models/user.ts": (
            "export class User {\n"
            "    constructor(public name: string) {}\n"
            "}\n"
            "export interface UserProps { name: string }\n"
        ),
        "src/models/index.ts": "export { User as Account } from './user';\n",
        "src/util/format.ts": (
            "export function formatName(name: string): string {\n"
            "    return `${name}`;\n"
            "}\n"
            "export const DEFAULT_NAME = 'anon';\n"
        ),
        "src/app.ts": "const user = new User('x');\n",
        "node_modules/left-pad/package.json": '{"name": "left-pad", "types": "index.d.ts"}',
        "node_modules/left-pad/index.d.ts": "export declare function leftPad(s: string, n: number): string;\n",
    })
