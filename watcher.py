"""Watch mode: rebuild the link graph whenever the document tree changes."""

import logging
import os
import threading
import time
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Optional, Set

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from graph.model import LinkGraph
from scanner.builder import build_graph
from scanner.errors import MapdownError

logger = logging.getLogger(__name__)


# Open/close notifications are ignored: a rebuild reads every document and
# would otherwise trigger itself.
WATCHED_EVENTS = {EVENT_TYPE_CREATED, EVENT_TYPE_DELETED, EVENT_TYPE_MODIFIED, EVENT_TYPE_MOVED}


class GraphWatcher:
    """
    Rebuild a link graph on filesystem changes.

    Change notifications are coalesced: a rebuild runs once no new change
    has arrived for ``debounce_seconds``. Rebuilds are serialized, so two
    builds never run at the same time.
    """

    def __init__(
        self,
        root: Path,
        on_rebuild: Callable[[LinkGraph], None],
        debounce_seconds: float = 1.0,
        build_options: Optional[Dict[str, Any]] = None,
        ignore_paths: Iterable[Path] = (),
    ):
        self.root = Path(root).absolute()
        self.on_rebuild = on_rebuild
        self.debounce_seconds = debounce_seconds
        self.build_options = dict(build_options or {})
        self.ignore_paths = {os.path.abspath(p) for p in ignore_paths}
        self.rebuild_count = 0

        self._pending: Set[str] = set()
        self._timer: Optional[threading.Timer] = None
        self._state_lock = threading.Lock()
        self._build_lock = threading.Lock()
        self._observer = None

    @property
    def pending(self) -> Set[str]:
        with self._state_lock:
            return set(self._pending)

    def rebuild(self) -> Optional[LinkGraph]:
        """
        Run one full build and hand the result to ``on_rebuild``.

        A failed build is logged and skipped; the next change retries.
        """
        with self._build_lock:
            try:
                graph = build_graph(self.root, **self.build_options)
            except MapdownError as exc:
                logger.warning("Rebuild of %s failed: %s", self.root, exc)
                return None
            self.rebuild_count += 1
            self.on_rebuild(graph)
            return graph

    def notify(self, path: str) -> None:
        """Record a changed path and (re)arm the debounce timer."""
        if os.path.abspath(path) in self.ignore_paths:
            return
        with self._state_lock:
            self._pending.add(path)
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self.debounce_seconds, self.flush)
            self._timer.daemon = True
            self._timer.start()

    def flush(self) -> Optional[LinkGraph]:
        """Rebuild now if any change is pending."""
        with self._state_lock:
            changed = sorted(self._pending)
            self._pending.clear()
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
        if not changed:
            return None
        logger.info("%d path(s) changed, rebuilding (%s)", len(changed), changed[0])
        return self.rebuild()

    def start(self) -> None:
        """Build once, then start watching the root recursively."""
        self.rebuild()
        observer = Observer()
        observer.schedule(_ChangeHandler(self), str(self.root), recursive=True)
        observer.start()
        self._observer = observer
        logger.info("Watching %s for changes", self.root)

    def stop(self) -> None:
        with self._state_lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
        if self._observer is not None:
            self._observer.stop()
            self._observer.join()
            self._observer = None


class _ChangeHandler(FileSystemEventHandler):
    """Forward relevant watchdog events to a GraphWatcher."""

    def __init__(self, watcher: GraphWatcher):
        super().__init__()
        self.watcher = watcher

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.event_type not in WATCHED_EVENTS:
            return
        # Directory mtime changes duplicate the file events inside them
        if event.is_directory and event.event_type == EVENT_TYPE_MODIFIED:
            return
        self.watcher.notify(os.fsdecode(event.src_path))
        dest_path = getattr(event, "dest_path", "")
        if dest_path:
            self.watcher.notify(os.fsdecode(dest_path))


def watch(
    root: Path,
    on_rebuild: Callable[[LinkGraph], None],
    debounce_seconds: float = 1.0,
    build_options: Optional[Dict[str, Any]] = None,
    ignore_paths: Iterable[Path] = (),
) -> int:
    """
    Watch root until interrupted with Ctrl+C.

    Returns:
        The number of rebuilds performed, the initial build included.
    """
    watcher = GraphWatcher(
        root,
        on_rebuild,
        debounce_seconds=debounce_seconds,
        build_options=build_options,
        ignore_paths=ignore_paths,
    )
    watcher.start()
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        logger.info("Stopped watching %s", watcher.root)
    finally:
        watcher.stop()
    return watcher.rebuild_count
