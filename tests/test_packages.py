"""Tests for package specifier resolution."""

import pytest

from conftest import write_files
from core.errors import ResolutionWarning
from indexer.packages import PackageResolver


@pytest.fixture
def resolver(tmp_path):
    write_files(tmp_path, {
        "node_modules/lib/package.json": '{"name": "lib", "types": "dist/index.d.ts"}',
        "node_modules/@scope/pkg/package.json": '{"name": "@scope/pkg", "main": "main.js"}',
        "node_modules/@types/node/package.json": '{"name": "@types/node"}',
        "node_modules/@types/babel__core/package.json": '{"name": "@types/babel__core"}',
        "node_modules/nameless/package.json": '{"version": "1.0.0"}',
        "node_modules/broken/package.json": "{not json",
    })
    return PackageResolver(tmp_path)


def test_workspace_source_has_no_specifier(resolver):
    assert resolver.resolve("src/app.ts") is None


def test_entry_point_maps_to_package_name(resolver):
    assert resolver.resolve("node_modules/lib/dist/index.d.ts") == "lib"


def test_sub_path_beyond_entry_directory(resolver):
    assert resolver.resolve("node_modules/lib/dist/fp/map.d.ts") == "lib/fp/map"
    assert resolver.resolve("node_modules/lib/dist/fp/index.d.ts") == "lib/fp"


def test_scoped_package(resolver):
    assert resolver.resolve("node_modules/@scope/pkg/main.d.ts") == "@scope/pkg"
    assert resolver.resolve("node_modules/@scope/pkg/extra/thing.d.ts") == "@scope/pkg/extra/thing"


def test_types_packages_import_as_runtime_name(resolver):
    assert resolver.resolve("node_modules/@types/node/index.d.ts") == "node"
    assert resolver.resolve("node_modules/@types/node/fs.d.ts") == "node/fs"
    assert resolver.resolve("node_modules/@types/babel__core/index.d.ts") == "@babel/core"


def test_nested_node_modules_uses_innermost(tmp_path):
    write_files(tmp_path, {
        "node_modules/outer/node_modules/inner/package.json": '{"name": "inner"}',
    })
    resolver = PackageResolver(tmp_path)
    assert resolver.resolve("node_modules/outer/node_modules/inner/index.d.ts") == "inner"


@pytest.mark.parametrize("rel_path", [
    "node_modules/nameless/index.d.ts",
    "node_modules/broken/index.d.ts",
    "node_modules/missing/index.d.ts",
    "node_modules/loose.d.ts",
])
def test_unresolvable_dependencies_warn(resolver, rel_path):
    with pytest.raises(ResolutionWarning) as exc:
        resolver.resolve(rel_path)
    assert exc.value.path == rel_path
