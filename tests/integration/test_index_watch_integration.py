"""Integration tests for file system watcher."""

import time

import pytest

from core.config import Config
from indexer.symbols import MatchMode, SymbolIndex
from indexer.watch import IndexWatcher
from indexer.workspace import WorkspaceIndexer


def wait_for(predicate, timeout=5.0, interval=0.1):
    deadline = time.time() + timeout
    while time.time() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


@pytest.fixture
def watched(tmp_path):
    (tmp_path / "src").mkdir()
    config = Config(scan_workers=1, watch_debounce_ms=50, watch_polling_interval_ms=100)
    indexer = WorkspaceIndexer(tmp_path, SymbolIndex(), config)
    indexer.scan_all()
    watcher = IndexWatcher(indexer)
    # Polling is deterministic across platforms
    watcher._start_fs_watcher = lambda: False
    watcher.start()
    time.sleep(0.2)
    yield indexer, watcher
    watcher.stop()


class TestIndexWatcherIntegration:
    """Integration tests for the watcher."""

    def test_watcher_start_stop(self, watched):
        """Test starting and stopping the watcher."""
        _, watcher = watched
        assert watcher.watcher_thread is not None
        assert watcher.processing_thread is not None
        assert watcher.get_stats()['backend'] == 'polling'

    def test_file_changes_reach_index(self, watched):
        """Test created, modified and deleted files update the index."""
        indexer, _ = watched
        source = indexer.project_root / "src" / "live.ts"

        def names():
            return [s.name for s in indexer.index.file_symbols("src/live.ts")]

        source.write_text("export class Live {}\n")
        assert wait_for(lambda: names() == ["Live"]), names()

        time.sleep(0.05)
        source.write_text("export class Live {}\nexport const more = 1;\n")
        assert wait_for(lambda: names() == ["Live", "more"]), names()

        source.unlink()
        assert wait_for(lambda: not indexer.index.get_symbols("Live", False, MatchMode.EXACT))
