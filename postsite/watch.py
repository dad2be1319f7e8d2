from __future__ import annotations

import queue
import sys
import threading
from pathlib import Path
from typing import Callable

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

_STOP = object()


class WatchError(Exception):
    """The posts directory could not be watched."""


class ChangeHandler(FileSystemEventHandler):
    """Forward create/delete/modify/move events to a queue."""

    def __init__(self, events: queue.Queue) -> None:
        self.events = events

    def on_created(self, event: FileSystemEvent) -> None:
        self.events.put(event)

    def on_deleted(self, event: FileSystemEvent) -> None:
        self.events.put(event)

    def on_modified(self, event: FileSystemEvent) -> None:
        self.events.put(event)

    def on_moved(self, event: FileSystemEvent) -> None:
        self.events.put(event)


class WatchOrchestrator:
    """Rebuild the site once for every filesystem event under ``posts_dir``.

    Events are consumed on a dedicated thread, one at a time, so rebuilds
    never overlap. :meth:`stop` is honoured the next time the thread waits
    for an event; a rebuild that already started runs to completion.
    """

    def __init__(self, posts_dir: Path, rebuild: Callable[[], object], observer_factory=Observer) -> None:
        self.posts_dir = Path(posts_dir)
        self.rebuild = rebuild
        self.observer_factory = observer_factory
        self.events: queue.Queue = queue.Queue()
        self._stop = threading.Event()
        self._observer = None
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        if not self.posts_dir.is_dir():
            raise WatchError(f"Cannot watch missing directory: {self.posts_dir}")
        self.events = queue.Queue()
        observer = self.observer_factory()
        try:
            observer.schedule(ChangeHandler(self.events), str(self.posts_dir), recursive=True)
            observer.start()
        except OSError as exc:
            raise WatchError(f"Cannot watch {self.posts_dir}: {exc}") from exc
        self._observer = observer
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="postsite-watch", daemon=True)
        self._thread.start()
        print(f"Watching: {self.posts_dir}/")

    def stop(self) -> None:
        self._stop.set()
        self.events.put(_STOP)
        if self._observer is not None:
            self._observer.stop()
            self._observer.join()
            self._observer = None
        if self._thread is not None:
            self._thread.join()
            self._thread = None
        print("File watcher stopped")

    def _loop(self) -> None:
        while not self._stop.is_set():
            event = self.events.get()
            if event is _STOP or self._stop.is_set():
                break
            print(f"Detected change in: {event.src_path}")
            print("Rebuilding site...")
            try:
                self.rebuild()
            except Exception as exc:
                print(f"Rebuild failed: {exc}", file=sys.stderr)

    def __enter__(self) -> WatchOrchestrator:
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()
