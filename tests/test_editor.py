"""Tests for the terminal editor components."""

from unittest.mock import MagicMock, patch

import pytest
from prompt_toolkit.document import Document as PromptDocument

from conftest import write_files
from editor.completer import ImportCompleter
from editor.quickfix import QuickFixManager, missing_name_message
from editor.statusbar import StatusBar
from importer.engine import ImporterEngine
from importer.models import Document


@pytest.fixture
def engine(workspace, config):
    write_files(workspace, {"src/legacy/user.ts": "export class User {}\n"})
    engine = ImporterEngine(workspace, config)
    engine.start()
    return engine


def completions(engine, text, path="src/app.ts"):
    completer = ImportCompleter(engine, path)
    return list(completer.get_completions(PromptDocument(text, len(text)), None))


class TestImportCompleter:
    """Test prompt_toolkit completion."""

    def test_identifier_completion(self, engine):
        results = completions(engine, "new Us")
        assert [c.text for c in results] == ["User", "User", "UserProps"]
        assert all(c.start_position == -2 for c in results)
        assert results[0].display_meta_text == "src/legacy/user.ts"

    def test_module_path_completion(self, engine):
        results = completions(engine, "import { User } from './mo")
        assert [c.text for c in results] == ["./models", "./models/user"]
        assert all(c.start_position == -len("./mo") for c in results)

    def test_nothing_to_complete(self, engine):
        assert completions(engine, "") == []


class TestStatusBar:
    """Test status bar text."""

    def test_initial_status(self):
        assert StatusBar().control.text == "[TypeScript Importer]: Initializing"

    def test_message(self):
        bar = StatusBar()
        bar.set_message("1 import added")
        assert bar.control.text == "[TypeScript Importer]: Initializing | 1 import added"

    def test_hidden(self):
        bar = StatusBar(hidden=True)
        bar.set_index_status("Ready")
        assert bar.control.text == ""

    def test_follows_engine(self, workspace, config):
        engine = ImporterEngine(workspace, config)
        bar = StatusBar()
        bar.attach(engine)
        engine.start()
        assert bar.control.text == "[TypeScript Importer]: Ready"


class TestQuickFixManager:
    """Test quick fix selection and application."""

    def test_actions_for_first_matching_diagnostic(self, engine):
        manager = QuickFixManager(engine)
        document = Document("src/app.ts", "")
        actions = manager.actions_for(document, [
            "Type 'string' is not assignable to type 'number'.",
            missing_name_message("formatName"),
            missing_name_message("User"),
        ])
        assert [a.symbol.name for a in actions] == ["formatName"]

    def test_single_action_chosen_without_dialog(self, engine):
        manager = QuickFixManager(engine)
        actions = manager.actions_for(Document("src/app.ts", ""), [missing_name_message("formatName")])
        with patch("editor.quickfix.radiolist_dialog") as dialog:
            assert manager.choose(actions) is actions[0]
            dialog.assert_not_called()
        assert manager.choose([]) is None

    def test_dialog_for_several_actions(self, engine):
        manager = QuickFixManager(engine)
        actions = manager.actions_for(Document("src/app.ts", ""), [missing_name_message("User")])
        assert [a.specifier for a in actions] == ["./legacy/user", "./models/user"]

        dialog = MagicMock()
        dialog.return_value.run.return_value = actions[1]
        with patch("editor.quickfix.radiolist_dialog", dialog):
            assert manager.choose(actions) is actions[1]
        values = dialog.call_args.kwargs["values"]
        assert [title for _, title in values] == [a.title for a in actions]

    def test_apply_to_file(self, engine, workspace):
        manager = QuickFixManager(engine)
        path = workspace / "src" / "app.ts"
        document = engine.open_document(path)
        action = manager.actions_for(document, [missing_name_message("formatName")])[0]

        assert manager.apply_to_file(path, action)
        assert path.read_text().startswith("import { formatName } from './util/format';\n")
        assert not manager.apply_to_file(path, action)
