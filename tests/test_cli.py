"""Tests for the command line interface."""

import pytest
from typer.testing import CliRunner

from cli import app
from conftest import write_files

runner = CliRunner()


@pytest.fixture
def project(workspace):
    # A workspace config keeps the user's home config out of the tests
    write_files(workspace, {".tsimporter.toml": "show_notifications = true\n"})
    return workspace


def invoke(root, *args):
    return runner.invoke(app, ["--root", str(root), *args])


def test_index(project):
    result = invoke(project, "index")
    assert result.exit_code == 0
    assert "[TypeScript Importer] Indexed 5 symbols in 4 files" in result.output


def test_index_reports_failures(project):
    write_files(project, {"src/broken.ts": "export class Broken {\n"})
    result = invoke(project, "index")
    assert result.exit_code == 0
    assert "(1 failed)" in result.output
    assert "src/broken.ts" in result.output


def test_symbols(project):
    result = invoke(project, "symbols", "user")
    assert result.exit_code == 0
    lines = [line for line in result.output.splitlines() if "\t" in line]
    assert lines == ["User\tclass\tsrc/models/user.ts", "UserProps\tinterface\tsrc/models/user.ts"]


def test_symbols_exact(project):
    result = invoke(project, "symbols", "user", "--exact")
    assert [line for line in result.output.splitlines() if "\t" in line] == []


def test_modules(project):
    result = invoke(project, "modules", "models", "--prefix")
    assert result.exit_code == 0
    assert "./src/models" not in result.output

    result = invoke(project, "modules", "models")
    assert "./src/models/user" in result.output.splitlines()
    assert "./src/models" in result.output.splitlines()


def test_fix_lists_actions(project):
    result = invoke(project, "fix", str(project / "src" / "app.ts"), "--name", "User")
    assert result.exit_code == 0
    assert "1. import { User } from './models/user';" in result.output


def test_fix_from_diagnostic_and_apply(project):
    app_file = project / "src" / "app.ts"
    result = invoke(project, "fix", str(app_file), "-d", "Cannot find name 'User'.", "--apply", "1")
    assert result.exit_code == 0
    assert app_file.read_text() == "import { User } from './models/user';\nconst user = new User('x');\n"

    result = invoke(project, "fix", str(app_file), "--name", "User", "--apply", "1")
    assert "Already imported" in result.output


def test_fix_out_of_range(project):
    result = invoke(project, "fix", str(project / "src" / "app.ts"), "--name", "User", "--apply", "3")
    assert result.exit_code == 1


def test_fix_without_suggestions(project):
    result = invoke(project, "fix", str(project / "src" / "app.ts"), "--name", "Nope")
    assert result.exit_code == 0
    assert "No import suggestions" in result.output


def test_add_import(project):
    target = project / "src" / "models" / "user.ts"
    result = invoke(project, "add-import", str(target), "formatName")
    assert result.exit_code == 0
    assert target.read_text().startswith("import { formatName } from '../util/format';\n")


def test_add_import_preview(project):
    target = project / "src" / "app.ts"
    before = target.read_text()
    result = invoke(project, "add-import", str(target), "DEFAULT_NAME", "--preview")
    assert result.exit_code == 0
    assert "+import { DEFAULT_NAME } from './util/format';" in result.output
    assert target.read_text() == before


def test_add_import_ambiguous(project):
    write_files(project, {"src/legacy/user.ts": "export class User {}\n"})
    target = project / "src" / "app.ts"

    result = invoke(project, "add-import", str(target), "User")
    assert result.exit_code == 1
    assert "src/legacy/user.ts" in result.output

    result = invoke(project, "add-import", str(target), "User", "--from", "src/legacy/user")
    assert result.exit_code == 0
    assert target.read_text().startswith("import { User } from './legacy/user';\n")


def test_add_import_self_import_fails(project):
    result = invoke(project, "add-import", str(project / "src" / "models" / "user.ts"), "UserProps")
    assert result.exit_code == 1


def test_add_import_unknown(project):
    result = invoke(project, "add-import", str(project / "src" / "app.ts"), "Nope")
    assert result.exit_code == 1


def test_disabled(project):
    write_files(project, {".tsimporter.toml": "disabled = true\n"})
    result = invoke(project, "index")
    assert result.exit_code == 1
    assert "disabled" in result.output


def test_doctor(project):
    result = invoke(project, "doctor")
    assert result.exit_code == 0
    assert "Workspace root" in result.output
    assert ".tsimporter.toml" in result.output
