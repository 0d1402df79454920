"""Live index: keep a :class:`Snapshot` in step with the content directory.

A :class:`Watcher` reports ``add`` / ``unlink`` / ``change`` events: inotify
on Linux (:class:`InotifyWatcher`), mtime polling elsewhere
(:class:`PollingWatcher`).  Each event is put on a queue and a single worker
thread handles them one at a time, so two rescans never overlap and the
later one always wins.

- add / unlink of a note or folder: full rescan, whole snapshot replaced
- any event on the root ``_config.json``: config reloaded on its own
- any other change: ignored (edits go through the write-back path)

After every update the subscriber is called with the complete snapshot.
"""

from __future__ import annotations

import logging
import queue
import sys
import threading
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from mdwiki.config import is_config_file, load_config
from mdwiki.errors import ScanError
from mdwiki.index import scan
from mdwiki.node import Node, Snapshot

logger = logging.getLogger(__name__)

PathHandler = Callable[[Path], None]
Subscriber = Callable[[Snapshot], None]

ADD = "add"
UNLINK = "unlink"
CHANGE = "change"

_STOP = object()


@runtime_checkable
class Watcher(Protocol):
    def start(
        self,
        root: Path,
        *,
        on_add: PathHandler,
        on_unlink: PathHandler,
        on_change: PathHandler,
    ) -> None: ...

    def close(self) -> None: ...


# ---------------------------------------------------------------------------
# Polling watcher
# ---------------------------------------------------------------------------


class PollingWatcher:
    """Watch a tree by comparing ``{path: mtime}`` snapshots every *interval* s.

    Used where inotify is unavailable, or on request (``mdwiki watch --poll``).
    """

    def __init__(self, interval: float = 1.0) -> None:
        self.interval = interval
        self._root: Path | None = None
        self._seen: dict[Path, tuple[bool, float]] = {}
        self._handlers: dict[str, PathHandler] = {}
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def start(
        self,
        root: Path,
        *,
        on_add: PathHandler,
        on_unlink: PathHandler,
        on_change: PathHandler,
    ) -> None:
        self._root = Path(root)
        self._handlers = {ADD: on_add, UNLINK: on_unlink, CHANGE: on_change}
        self._seen = self._walk()
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="mdwiki-poll", daemon=True)
        self._thread.start()
        logger.info("polling %s every %.1fs", self._root, self.interval)

    def _walk(self) -> dict[Path, tuple[bool, float]]:
        assert self._root is not None
        seen: dict[Path, tuple[bool, float]] = {}
        for path in self._root.rglob("*"):
            if any(p.startswith(".") for p in path.relative_to(self._root).parts):
                continue
            try:
                st = path.stat()
            except OSError:
                continue  # vanished mid-walk
            seen[path] = (path.is_dir(), st.st_mtime)
        return seen

    def poll(self) -> None:
        """Compare the tree against the last walk and fire handlers."""
        current = self._walk()
        previous, self._seen = self._seen, current
        for path in sorted(current.keys() - previous.keys()):
            self._handlers[ADD](path)
        for path in sorted(previous.keys() - current.keys()):
            self._handlers[UNLINK](path)
        for path in sorted(current.keys() & previous.keys()):
            is_dir, mtime = current[path]
            if not is_dir and mtime != previous[path][1]:
                self._handlers[CHANGE](path)

    def _loop(self) -> None:
        while not self._stop.wait(self.interval):
            try:
                self.poll()
            except Exception:
                logger.exception("poll failed for %s", self._root)

    def close(self) -> None:
        self._stop.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout=max(1.0, self.interval * 2))
        self._thread = None


# ---------------------------------------------------------------------------
# inotify watcher
# ---------------------------------------------------------------------------

_INOTIFY_TIMEOUT_MS = 500


class InotifyWatcher:
    """Watch a tree with inotify_simple (Linux), one watch per directory.

    A file that is created is reported as ``add`` once it is closed after
    writing, so handlers never see it half written.  New directories are
    watched as they appear.
    """

    def __init__(self) -> None:
        self._root: Path | None = None
        self._inotify = None
        self._flags = None
        self._watched: dict[int, Path] = {}
        self._pending: set[Path] = set()
        self._handlers: dict[str, PathHandler] = {}
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def start(
        self,
        root: Path,
        *,
        on_add: PathHandler,
        on_unlink: PathHandler,
        on_change: PathHandler,
    ) -> None:
        import inotify_simple

        self._root = Path(root)
        self._handlers = {ADD: on_add, UNLINK: on_unlink, CHANGE: on_change}
        self._flags = inotify_simple.flags
        self._inotify = inotify_simple.INotify()
        self._watched = {}
        self._pending = set()
        self._watch_tree(self._root)
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="mdwiki-inotify", daemon=True)
        self._thread.start()
        logger.info("inotify watching %s (%d directories)", self._root, len(self._watched))

    def _hidden(self, path: Path) -> bool:
        assert self._root is not None
        return any(p.startswith(".") for p in path.relative_to(self._root).parts)

    def _watch(self, directory: Path) -> None:
        f = self._flags
        mask = f.CREATE | f.DELETE | f.MOVED_FROM | f.MOVED_TO | f.CLOSE_WRITE
        try:
            wd = self._inotify.add_watch(str(directory), mask)
        except OSError as exc:
            logger.warning("cannot watch %s: %s", directory, exc)
            return
        self._watched[wd] = directory

    def _watch_tree(self, directory: Path) -> None:
        self._watch(directory)
        for sub in sorted(directory.rglob("*")):
            if sub.is_dir() and not self._hidden(sub):
                self._watch(sub)

    def read_events(self, timeout_ms: int = 0) -> None:
        """Read pending inotify events and fire handlers."""
        f = self._flags
        for event in self._inotify.read(timeout=timeout_ms):
            if event.mask & f.IGNORED:
                self._watched.pop(event.wd, None)
                continue
            directory = self._watched.get(event.wd)
            if directory is None or not event.name:
                continue
            path = directory / event.name
            if self._hidden(path):
                continue
            is_dir = bool(event.mask & f.ISDIR)
            if event.mask & f.CREATE and not is_dir:
                self._pending.add(path)
            elif event.mask & (f.CREATE | f.MOVED_TO):
                if is_dir:
                    self._watch_tree(path)
                self._handlers[ADD](path)
            elif event.mask & (f.DELETE | f.MOVED_FROM):
                self._pending.discard(path)
                self._handlers[UNLINK](path)
            elif event.mask & f.CLOSE_WRITE:
                if path in self._pending:
                    self._pending.discard(path)
                    self._handlers[ADD](path)
                else:
                    self._handlers[CHANGE](path)

    def _loop(self) -> None:
        while not self._stop.is_set():
            try:
                self.read_events(_INOTIFY_TIMEOUT_MS)
            except Exception:
                logger.exception("inotify read failed for %s", self._root)

    def close(self) -> None:
        self._stop.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout=_INOTIFY_TIMEOUT_MS / 1000 * 4)
        self._thread = None
        if self._inotify is not None:
            self._inotify.close()
            self._inotify = None


def default_watcher(interval: float = 1.0) -> Watcher:
    """inotify on Linux; mtime polling every *interval* s elsewhere (macOS, Windows)."""
    if sys.platform.startswith("linux"):
        return InotifyWatcher()
    return PollingWatcher(interval)


# ---------------------------------------------------------------------------
# Live index
# ---------------------------------------------------------------------------


class LiveIndex:
    """Owns the in-memory snapshot for one content directory."""

    def __init__(self, subscriber: Subscriber | None = None, watcher: Watcher | None = None) -> None:
        self.subscriber = subscriber
        self.watcher: Watcher = watcher if watcher is not None else default_watcher()
        self.content_dir: Path | None = None
        self.snapshot = Snapshot()
        self._queue: queue.Queue = queue.Queue()
        self._worker: threading.Thread | None = None
        self._closed = True

    @property
    def index(self) -> tuple[Node, ...]:
        return self.snapshot.nodes

    @property
    def config(self) -> Mapping[str, Any]:
        return self.snapshot.config

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self, content_dir: Path) -> Snapshot:
        """Scan *content_dir*, start watching it and publish the first snapshot.

        A :class:`ScanError` propagates; nothing is published or watched then.
        """
        if not self._closed:
            self.teardown()
        content_dir = Path(content_dir)
        snapshot = scan(content_dir)

        self.content_dir = content_dir
        self.snapshot = snapshot
        self._queue = queue.Queue()
        self._closed = False
        self._worker = threading.Thread(target=self._run, name="mdwiki-live", daemon=True)
        self._worker.start()
        self.watcher.start(
            content_dir,
            on_add=self.on_add,
            on_unlink=self.on_unlink,
            on_change=self.on_change,
        )
        self._notify()
        return snapshot

    def teardown(self) -> None:
        """Stop watching; events arriving afterwards are dropped."""
        if self._closed:
            return
        self._closed = True
        self.watcher.close()
        self._queue.put(_STOP)
        if self._worker is not None and self._worker is not threading.current_thread():
            self._worker.join()
        self._worker = None

    def wait_idle(self) -> None:
        """Block until every queued event has been handled."""
        self._queue.join()

    # ------------------------------------------------------------------
    # Watcher callbacks
    # ------------------------------------------------------------------

    def on_add(self, path: Path) -> None:
        self._enqueue(ADD, path)

    def on_unlink(self, path: Path) -> None:
        self._enqueue(UNLINK, path)

    def on_change(self, path: Path) -> None:
        self._enqueue(CHANGE, path)

    def _enqueue(self, kind: str, path: Path) -> None:
        if self._closed:
            return
        self._queue.put((kind, Path(path)))

    # ------------------------------------------------------------------
    # Worker
    # ------------------------------------------------------------------

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                if not self._closed:
                    self._handle(*item)
            except Exception:
                logger.exception("failed to handle event %r", item)
            finally:
                self._queue.task_done()

    def _handle(self, kind: str, path: Path) -> None:
        assert self.content_dir is not None
        if is_config_file(path, self.content_dir):
            self._reload_config()
            return
        if kind in (ADD, UNLINK) and path.suffix != ".json":
            self._rescan()

    def _rescan(self) -> None:
        assert self.content_dir is not None
        try:
            snapshot = scan(self.content_dir)
        except ScanError:
            logger.exception("rescan of %s failed; keeping previous index", self.content_dir)
            return
        self.snapshot = snapshot
        self._notify()

    def _reload_config(self) -> None:
        assert self.content_dir is not None
        config = load_config(self.content_dir)
        self.snapshot = Snapshot(nodes=self.snapshot.nodes, config=config)
        logger.info("reloaded config for %s", self.content_dir)
        self._notify()

    def _notify(self) -> None:
        if self.subscriber is None:
            return
        try:
            self.subscriber(self.snapshot)
        except Exception:
            logger.exception("subscriber failed")
