# ABOUTME: Filesystem watcher reporting external edits to tool config directories
# ABOUTME: Debounces bursts and suppresses the application's own writes
import logging
import os
import queue
import threading
import time
from collections import Counter
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver, ObservedWatch

from cfgsync.config import (
    DEBOUNCE_SECONDS,
    EVENT_QUEUE_SIZE,
    GLOBAL_WATCH_DIRS,
    POLL_INTERVAL_SECONDS,
    PROJECT_WATCH_DIRS,
    TEMP_SUFFIX,
    get_home_dir,
)
from cfgsync.models import ConfigChangeEvent, FileSignature, ToolType, WatchRoot
from cfgsync.utils.validation import WatcherError

logger = logging.getLogger(__name__)

# Access-only events never change file content
READ_ONLY_EVENT_TYPES = frozenset({"opened", "closed_no_write"})

GLOBAL_SCOPE = "global"


def normalize_path(path: str | Path) -> Path:
    """Absolute, lexically normalized path (symlinks are not resolved)."""
    return Path(os.path.abspath(os.fsdecode(path)))


def file_signature(path: Path) -> FileSignature | None:
    """Identity of a file's current content: (inode, size, mtime_ns), None if missing."""
    try:
        stat = path.stat()
    except OSError:
        return None
    return stat.st_ino, stat.st_size, stat.st_mtime_ns


def find_root(roots: Iterable[WatchRoot], path: Path) -> WatchRoot | None:
    """Return the most specific root containing path, if any.

    ABOUTME: Longest-prefix match on path components
    """
    best: WatchRoot | None = None
    for root in roots:
        if path != root.path and root.path not in path.parents:
            continue
        if best is None or len(root.path.parts) > len(best.path.parts):
            best = root
    return best


class Debouncer:
    """Pending change map owned by the watcher's worker thread.

    ABOUTME: Not thread-safe; only the worker touches it
    ABOUTME: A path is emitted once no event was seen for `window` seconds
    """

    def __init__(self, window: float = DEBOUNCE_SECONDS) -> None:
        self.window = window
        self._pending: dict[Path, tuple[ToolType, str, float]] = {}

    def __len__(self) -> int:
        return len(self._pending)

    def __contains__(self, path: Path) -> bool:
        return path in self._pending

    def record(self, path: Path, tool: ToolType, scope: str, now: float) -> None:
        self._pending[path] = (tool, scope, now)

    def purge(self, root: Path) -> None:
        """Drop pending entries at or under root."""
        self._pending = {
            path: entry
            for path, entry in self._pending.items()
            if path != root and root not in path.parents
        }

    def drain(
        self,
        now: float,
        is_suppressed: Callable[[Path], bool],
        is_own_write: Callable[[Path], bool] | None = None,
    ) -> list[ConfigChangeEvent]:
        """Pop every settled, unsuppressed path as a change event.

        ABOUTME: Settled paths inside an active write guard stay pending
        ABOUTME: Settled paths still holding the app's last write are dropped silently
        ABOUTME: Events come out ordered by when they settled
        """
        ready: list[tuple[float, Path, ToolType, str]] = []
        for path, (tool, scope, seen_at) in self._pending.items():
            if now - seen_at < self.window:
                continue
            if is_suppressed(path):
                continue
            ready.append((seen_at, path, tool, scope))

        ready.sort(key=lambda item: item[0])
        events = []
        for _, path, tool, scope in ready:
            del self._pending[path]
            if is_own_write is not None and is_own_write(path):
                logger.debug(f"Ignoring own write: {path}")
                continue
            events.append(ConfigChangeEvent(tool=tool, path=str(path), scope=scope))
        return events


class WriteGuard:
    """Marks a path as being written by the application.

    ABOUTME: Use as a context manager; release() is idempotent
    ABOUTME: mark_written() records what the write produced, before anyone else can touch the file
    """

    def __init__(self, path: Path, release: Callable[[Path, FileSignature | None], None]) -> None:
        self.path = path
        self._release = release
        self._released = False
        self._signature: FileSignature | None = None

    def mark_written(self, signature: FileSignature | None) -> None:
        """Remember the signature of the file this guarded write produced."""
        self._signature = signature

    def release(self) -> None:
        if self._released:
            return
        self._released = True
        self._release(self.path, self._signature)

    def __enter__(self) -> "WriteGuard":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.release()


@dataclass(frozen=True)
class _RawEvent:
    paths: tuple[Path, ...]
    kind: str


class _Stop:
    pass


_Message = _RawEvent | _Stop


class _EventHandler(FileSystemEventHandler):
    """Forwards watchdog events into the watcher's queue."""

    def __init__(self, watcher: "FileWatcher") -> None:
        super().__init__()
        self._watcher = watcher

    def on_any_event(self, event: FileSystemEvent) -> None:
        self._watcher.submit_event(event)


class FileWatcher:
    """Watches tool config directories and reports external changes.

    ABOUTME: One watchdog observer plus one worker thread for the watcher's lifetime
    ABOUTME: Lock order is observer before roots; write guards use their own lock
    ABOUTME: on_change runs on the worker thread and may call remove_root or stop

    Example:
        watcher = FileWatcher(lambda event: print(event.to_dict()))
        watcher.start_global_watch()
        with watcher.begin_write(path) as guard:
            guard.mark_written(adapter.write_rules("...", scope))
        watcher.stop()
    """

    def __init__(
        self,
        on_change: Callable[[ConfigChangeEvent], None],
        home: Path | None = None,
        debounce: float = DEBOUNCE_SECONDS,
        poll_interval: float = POLL_INTERVAL_SECONDS,
        queue_size: int = EVENT_QUEUE_SIZE,
        observer_factory: Callable[[], BaseObserver] = Observer,
    ) -> None:
        self._on_change = on_change
        self._home = home
        self._poll_interval = poll_interval
        self._queue: queue.Queue[_Message] = queue.Queue(maxsize=queue_size)
        self._debouncer = Debouncer(debounce)

        self._observer_lock = threading.Lock()
        self._roots_lock = threading.Lock()
        self._writing_lock = threading.Lock()
        self._projects_lock = threading.Lock()
        self._purge_lock = threading.Lock()

        self._watches: dict[Path, ObservedWatch] = {}
        self._roots: list[WatchRoot] = []
        self._writing: Counter[Path] = Counter()
        self._own_writes: dict[Path, FileSignature | None] = {}
        self._marked: dict[Path, FileSignature] = {}
        self._projects: dict[Path, list[Path]] = {}
        self._purges: list[Path] = []
        self._stopping = threading.Event()
        self._handler = _EventHandler(self)

        try:
            observer = observer_factory()
            observer.start()
        except (OSError, RuntimeError) as e:
            raise WatcherError(f"Failed to start file watcher: {e}") from e
        self._observer: BaseObserver | None = observer

        self._thread = threading.Thread(target=self._run_loop, name="cfgsync-watcher", daemon=True)
        self._thread.start()

    def __enter__(self) -> "FileWatcher":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    @property
    def home(self) -> Path:
        return self._home if self._home is not None else get_home_dir()

    @property
    def is_running(self) -> bool:
        return self._thread.is_alive()

    def watched_roots(self) -> list[WatchRoot]:
        with self._roots_lock:
            return list(self._roots)

    def start_global_watch(self) -> list[Path]:
        """Watch each tool's config directory under home.

        ABOUTME: Missing directories are skipped, not an error
        """
        added = []
        for relative, tool in GLOBAL_WATCH_DIRS:
            path = self.home / relative
            if self.add_root(path, tool, GLOBAL_SCOPE):
                added.append(normalize_path(path))
        return added

    def watch_project(self, project: str | Path) -> list[Path]:
        """Watch each tool's config directory inside a project.

        ABOUTME: Remembers the roots it added so unwatch_project removes exactly those
        """
        project_path = normalize_path(project)
        scope = str(project_path)
        added = []
        for relative, tool in PROJECT_WATCH_DIRS:
            path = project_path / relative
            if self.add_root(path, tool, scope):
                added.append(path)

        if added:
            with self._projects_lock:
                self._projects.setdefault(project_path, []).extend(added)
        return added

    def unwatch_project(self, project: str | Path) -> None:
        with self._projects_lock:
            paths = self._projects.pop(normalize_path(project), [])
        for path in paths:
            self.remove_root(path)

    def add_root(self, path: str | Path, tool: ToolType, scope: str) -> bool:
        """Watch a directory non-recursively.

        ABOUTME: Returns False when the path isn't a directory or is already watched
        ABOUTME: A directory that can't be watched is logged and skipped
        """
        root_path = normalize_path(path)
        if not root_path.is_dir():
            return False

        with self._observer_lock, self._roots_lock:
            if any(root.path == root_path for root in self._roots):
                return False
            if self._observer is None:
                return False

            try:
                watch = self._observer.schedule(self._handler, str(root_path), recursive=False)
            except OSError as e:
                logger.warning(f"Failed to watch {root_path}: {e}")
                return False

            self._watches[root_path] = watch
            self._roots.append(WatchRoot(path=root_path, tool=tool, scope=scope))

        logger.info(f"Watching {tool.display_name} config directory: {root_path}")
        return True

    def remove_root(self, path: str | Path) -> None:
        """Stop watching a directory and drop its pending changes.

        ABOUTME: Never blocks on the worker, so on_change may call it
        """
        root_path = normalize_path(path)

        with self._observer_lock, self._roots_lock:
            watch = self._watches.pop(root_path, None)
            if watch is not None and self._observer is not None:
                try:
                    self._observer.unschedule(watch)
                except (KeyError, OSError) as e:
                    logger.debug(f"Failed to unschedule {root_path}: {e}")
            self._roots = [root for root in self._roots if root.path != root_path]

        # Applied by the worker before its next drain
        with self._purge_lock:
            self._purges.append(root_path)
        logger.info(f"Stopped watching {root_path}")

    def begin_write(self, path: str | Path) -> WriteGuard:
        """Suppress change notifications for path until the guard is released."""
        target = normalize_path(path)
        with self._writing_lock:
            self._writing[target] += 1
        return WriteGuard(target, self.end_write)

    def end_write(self, path: str | Path, signature: FileSignature | None = None) -> None:
        """Release one write mark on path.

        ABOUTME: signature is what the guarded write produced; the last release records it as the own write
        ABOUTME: When no guard marked a signature, the file's signature at release is used
        """
        target = normalize_path(path)
        with self._writing_lock:
            if signature is not None:
                self._marked[target] = signature
            if self._writing[target] > 1:
                self._writing[target] -= 1
                return

            self._writing.pop(target, None)
            marked = self._marked.pop(target, None)
            self._own_writes[target] = marked if marked is not None else file_signature(target)

    def is_writing(self, path: str | Path) -> bool:
        target = normalize_path(path)
        with self._writing_lock:
            return self._writing.get(target, 0) > 0

    def is_own_write(self, path: str | Path) -> bool:
        """Whether path on disk is still exactly what the app last wrote.

        ABOUTME: A mismatch means an external edit happened, so the record is dropped
        """
        target = normalize_path(path)
        with self._writing_lock:
            if target not in self._own_writes:
                return False
            if self._own_writes[target] == file_signature(target):
                return True
            del self._own_writes[target]
            return False

    def submit_event(self, event: FileSystemEvent) -> None:
        """Queue a raw watchdog event for the worker.

        ABOUTME: Read-only access events and temp files are discarded here
        ABOUTME: Drops the event when the queue is full
        """
        if event.event_type in READ_ONLY_EVENT_TYPES:
            return
        # Directory mtime updates duplicate the file events inside it
        if event.is_directory and event.event_type == "modified":
            return

        raw_paths = [event.src_path, getattr(event, "dest_path", "")]
        paths = tuple(
            normalize_path(raw)
            for raw in raw_paths
            if raw and not os.fsdecode(raw).endswith(TEMP_SUFFIX)
        )
        if not paths:
            return

        try:
            self._queue.put_nowait(_RawEvent(paths=paths, kind=event.event_type))
        except queue.Full:
            logger.debug(f"Event queue full, dropping {event.event_type} for {paths[0]}")

    def stop(self) -> None:
        """Stop the observer, then the worker, and wait for both.

        ABOUTME: Safe to call more than once
        ABOUTME: From on_change it returns without joining; the worker exits once the callback returns
        """
        with self._observer_lock:
            observer = self._observer
            self._observer = None
            self._watches.clear()

        if observer is None:
            return

        observer.stop()
        observer.join()

        self._stopping.set()
        try:
            # Wakes the worker early; it also polls the stop flag
            self._queue.put_nowait(_Stop())
        except queue.Full:
            pass

        if threading.current_thread() is not self._thread:
            self._thread.join()
        logger.info("File watcher stopped")

    def _find_root(self, path: Path) -> WatchRoot | None:
        with self._roots_lock:
            return find_root(self._roots, path)

    def _emit(self, event: ConfigChangeEvent) -> None:
        logger.info(f"Detected external change in {event.tool.display_name} config: {event.path}")
        try:
            self._on_change(event)
        except Exception:
            logger.exception(f"Change handler failed for {event.path}")

    def _apply_purges(self) -> None:
        with self._purge_lock:
            purges, self._purges = self._purges, []
        for root_path in purges:
            self._debouncer.purge(root_path)

    def _run_loop(self) -> None:
        while not self._stopping.is_set():
            try:
                message: _Message | None = self._queue.get(timeout=self._poll_interval)
            except queue.Empty:
                message = None

            if isinstance(message, _Stop):
                break
            if isinstance(message, _RawEvent):
                now = time.monotonic()
                for path in message.paths:
                    root = self._find_root(path)
                    if root is None:
                        logger.debug(f"Ignoring {message.kind} outside watched roots: {path}")
                        continue
                    self._debouncer.record(path, root.tool, root.scope, now)

            self._apply_purges()
            for event in self._debouncer.drain(time.monotonic(), self.is_writing, self.is_own_write):
                if self._stopping.is_set():
                    break
                self._emit(event)
