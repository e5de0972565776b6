"""File system watcher for incremental index updates."""

import logging
import threading
import time
from pathlib import Path
from typing import Callable, Dict, List, Optional

from indexer.workspace import WorkspaceIndexer

logger = logging.getLogger(__name__)


class FileChangeEvent:
    """Represents a file system change event."""

    def __init__(self, path: str, event_type: str, is_dir: bool = False):
        self.path = path
        self.event_type = event_type  # 'created', 'modified', 'deleted'
        self.is_dir = is_dir
        self.timestamp = time.time()

    def __repr__(self):
        return f"FileChangeEvent({self.event_type}, {self.path})"


class IndexWatcher:
    """Watches a workspace and forwards debounced changes to the indexer."""

    def __init__(self, indexer: WorkspaceIndexer):
        self.indexer = indexer
        self.project_root = indexer.project_root
        config = indexer.config
        self.enabled = config.watch_enabled and not config.disabled
        self.debounce_ms = config.watch_debounce_ms
        self.polling_fallback = config.watch_polling_fallback
        self.polling_interval_ms = config.watch_polling_interval_ms

        self.pending_events: Dict[str, FileChangeEvent] = {}
        self._pending_lock = threading.Lock()

        self.watcher_thread: Optional[threading.Thread] = None
        self.processing_thread: Optional[threading.Thread] = None
        self.stop_event = threading.Event()
        self._observer = None

        self.callbacks: List[Callable[[List[FileChangeEvent]], None]] = [self._update_index]

        # Stats
        self.stats = {
            'events_processed': 0,
            'files_changed': 0,
            'last_update': 0.0,
            'backend': 'none'
        }

    def register_callback(self, callback: Callable[[List[FileChangeEvent]], None]):
        """Register a callback for batched file change events."""
        self.callbacks.append(callback)

    def start(self):
        """Start the file system watcher."""
        if not self.enabled:
            logger.info("Index watcher disabled")
            return

        logger.info("Starting index watcher")
        self.stop_event.clear()

        self.processing_thread = threading.Thread(
            target=self._process_events_loop,
            daemon=True,
            name="IndexWatcher-Processor"
        )
        self.processing_thread.start()

        # Try to start FS watcher, fallback to polling
        if self._start_fs_watcher():
            self.stats['backend'] = 'watchdog'
        elif self.polling_fallback:
            self._start_polling_watcher()
            self.stats['backend'] = 'polling'
        else:
            logger.warning("No file system watcher available and polling disabled")
            return

        logger.info(f"Index watcher started with backend: {self.stats['backend']}")

    def stop(self):
        """Stop the file system watcher."""
        if not self.enabled:
            return

        logger.info("Stopping index watcher")
        self.stop_event.set()

        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout=5.0)
            self._observer = None

        if self.watcher_thread and self.watcher_thread.is_alive():
            self.watcher_thread.join(timeout=5.0)

        if self.processing_thread and self.processing_thread.is_alive():
            self.processing_thread.join(timeout=5.0)

        logger.info("Index watcher stopped")

    def _start_fs_watcher(self) -> bool:
        """Start a watchdog observer on the project root."""
        from watchdog.events import FileSystemEventHandler
        from watchdog.observers import Observer

        class WatcherHandler(FileSystemEventHandler):
            def __init__(self, watcher: 'IndexWatcher'):
                self.watcher = watcher

            def on_created(self, event):
                if not event.is_directory:
                    self.watcher._queue_event(FileChangeEvent(event.src_path, 'created'))

            def on_modified(self, event):
                if not event.is_directory:
                    self.watcher._queue_event(FileChangeEvent(event.src_path, 'modified'))

            def on_deleted(self, event):
                if not event.is_directory:
                    self.watcher._queue_event(FileChangeEvent(event.src_path, 'deleted'))

            def on_moved(self, event):
                if not event.is_directory:
                    # Queue delete for old path and create for new path
                    self.watcher._queue_event(FileChangeEvent(event.src_path, 'deleted'))
                    self.watcher._queue_event(FileChangeEvent(event.dest_path, 'created'))

        try:
            observer = Observer()
            observer.schedule(WatcherHandler(self), str(self.project_root), recursive=True)
            observer.start()
        except OSError as e:
            logger.warning(f"Failed to start watchdog watcher: {e}")
            return False

        self._observer = observer
        return True

    def _start_polling_watcher(self):
        """Start polling-based file system watcher."""
        logger.info(f"Starting polling watcher with {self.polling_interval_ms}ms interval")

        def poll_loop():
            last_mtimes: Dict[str, float] = {}
            first = True

            while not self.stop_event.is_set():
                try:
                    current_mtimes = {}
                    for rel_path in self.indexer.iter_source_files():
                        current_mtimes[rel_path] = (self.project_root / rel_path).stat().st_mtime

                    if not first:
                        for rel_path in current_mtimes.keys() - last_mtimes.keys():
                            self._queue_event(FileChangeEvent(rel_path, 'created'))
                        for rel_path in last_mtimes.keys() - current_mtimes.keys():
                            self._queue_event(FileChangeEvent(rel_path, 'deleted'))
                        for rel_path in current_mtimes.keys() & last_mtimes.keys():
                            if current_mtimes[rel_path] != last_mtimes[rel_path]:
                                self._queue_event(FileChangeEvent(rel_path, 'modified'))

                    last_mtimes = current_mtimes
                    first = False

                except OSError as e:
                    logger.warning(f"Polling watcher error: {e}")

                self.stop_event.wait(self.polling_interval_ms / 1000.0)

        self.watcher_thread = threading.Thread(
            target=poll_loop,
            daemon=True,
            name="IndexWatcher-Polling"
        )
        self.watcher_thread.start()

    def _queue_event(self, event: FileChangeEvent):
        """Queue a file change event with debouncing."""
        if self._is_ignored_path(event.path):
            return

        # Debounce: replace pending event for same path
        with self._pending_lock:
            self.pending_events[event.path] = event

    def _take_expired_events(self, now: Optional[float] = None) -> List[FileChangeEvent]:
        now = time.time() if now is None else now
        expired = []
        with self._pending_lock:
            for path, event in list(self.pending_events.items()):
                if now - event.timestamp >= (self.debounce_ms / 1000.0):
                    expired.append(event)
                    del self.pending_events[path]
        return expired

    def _process_events_loop(self):
        """Flush debounced events in batches."""
        interval = max(self.debounce_ms, 50) / 1000.0
        while not self.stop_event.wait(interval):
            events = self._take_expired_events()
            if events:
                self._process_events_batch(events)

    def _process_events_batch(self, events: List[FileChangeEvent]):
        """Process a batch of file change events."""
        if not events:
            return

        # Deduplicate events (keep latest per path)
        latest_events = {}
        for event in events:
            latest_events[event.path] = event

        batched_events = list(latest_events.values())

        self.stats['events_processed'] += len(batched_events)
        self.stats['files_changed'] = len(latest_events)
        self.stats['last_update'] = time.time()

        for callback in self.callbacks:
            try:
                callback(batched_events)
            except Exception as e:
                logger.error(f"Callback error: {e}")

    def _update_index(self, events: List[FileChangeEvent]):
        for event in events:
            self.indexer.scan_file(event.path, event.event_type)

    def _is_ignored_path(self, path: str) -> bool:
        """Check if path is outside the root or not matched by the scan globs."""
        rel_path = self.indexer.relative_path(path)
        if rel_path is None:
            return True
        if '.git' in rel_path.split('/'):
            return True
        return not self.indexer.should_index(rel_path)

    def get_stats(self) -> Dict:
        """Get watcher statistics."""
        return dict(self.stats)
