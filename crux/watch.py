"""File system monitoring with a callback per event."""

from __future__ import annotations

import errno
import os
import stat
import threading
from typing import Callable, Iterable, Iterator

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer


class Event:
    """A file system event: the path that changed and what happened to it."""

    __slots__ = ("_path", "_create", "_write", "_remove", "_rename")

    def __init__(
        self,
        path: str,
        create: bool = False,
        write: bool = False,
        remove: bool = False,
        rename: bool = False,
    ):
        self._path = path
        self._create = create
        self._write = write
        self._remove = remove
        self._rename = rename

    def path(self) -> str:
        """Return the path of the file or directory that triggered the event."""
        return self._path

    def is_create(self) -> bool:
        """True if a file or directory was created."""
        return self._create

    def is_write(self) -> bool:
        """True if a file was written to."""
        return self._write

    def is_remove(self) -> bool:
        """True if a file or directory was removed."""
        return self._remove

    def is_rename(self) -> bool:
        """True if a file or directory was renamed."""
        return self._rename

    def __repr__(self) -> str:
        ops = [
            name
            for name, flag in (
                ("create", self._create),
                ("write", self._write),
                ("remove", self._remove),
                ("rename", self._rename),
            )
            if flag
        ]
        return f"Event({self._path!r}, {'|'.join(ops) or 'none'})"


Callback = Callable[[Event], object]


class _JoinedError(Exception):
    """Several failures reported together."""

    def __init__(self, errors: list[BaseException]):
        self.errors = errors
        super().__init__("\n".join(str(e) for e in errors))


class _Handler(FileSystemEventHandler):
    def __init__(self, watcher: Watcher):
        super().__init__()
        self._watcher = watcher

    def on_any_event(self, event: FileSystemEvent) -> None:
        self._watcher._dispatch(event)


class Watcher:
    """Monitors paths and hands create, write, remove and rename events to a callback.

    If the callback raises, the watcher stops and keeps the exception, which
    :meth:`err`, :meth:`wait` and :meth:`close` then return.
    """

    def __init__(self, callback: Callback):
        self._callback = callback
        self._lock = threading.RLock()
        self._dirs: set[str] = set()
        self._files: set[str] = set()
        self._schedules: dict = {}
        self._error: BaseException | None = None
        self._stop = threading.Event()
        self._stopped = threading.Event()
        self._handler = _Handler(self)
        self._observer = Observer()
        self._observer.daemon = True
        self._observer.start()
        self._runner = threading.Thread(target=self._run, name="crux-watch", daemon=True)
        self._runner.start()

    def __enter__(self) -> Watcher:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> BaseException | None:
        """Stop watching, wait for shutdown and return the error that stopped it, if any.

        Safe to call more than once.
        """
        self._stop.set()
        self._stopped.wait()
        return self.err()

    def wait(self, timeout: float | None = None) -> BaseException | None:
        """Block until the watcher stops and return the error that stopped it, if any.

        Raises TimeoutError if it is still running after ``timeout`` seconds.
        """
        if not self._stopped.wait(timeout):
            raise TimeoutError("watcher is still running")
        return self.err()

    def done(self) -> bool:
        """True once the watcher has fully stopped."""
        return self._stopped.is_set()

    def err(self) -> BaseException | None:
        """Return the error that stopped the watcher, or None."""
        with self._lock:
            return self._error

    def add(self, path: str | os.PathLike[str]) -> None:
        """Start watching a file or a directory's direct entries."""
        target = os.path.normpath(os.fspath(path))
        if not os.path.exists(target):
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), target)
        with self._lock:
            if os.path.isdir(target):
                if target in self._dirs:
                    return
                self._schedule(target)
                self._dirs.add(target)
            else:
                if target in self._files:
                    return
                self._schedule(os.path.dirname(target) or os.curdir)
                self._files.add(target)

    def add_recursive(self, path: str | os.PathLike[str]) -> None:
        """Watch a directory and every subdirectory existing now."""
        self.add_all(collect_dirs(path))

    def add_all(self, paths: Iterable[str | os.PathLike[str]]) -> None:
        """Watch every path, or none of them if any one fails."""
        paths = list(paths)
        for index, path in enumerate(paths):
            try:
                self.add(path)
            except Exception:
                try:
                    self.remove_all(paths[:index])
                except Exception:
                    pass
                raise

    def remove(self, path: str | os.PathLike[str]) -> None:
        """Stop watching a path; raise ValueError if it was not watched."""
        target = os.path.normpath(os.fspath(path))
        with self._lock:
            if target in self._dirs:
                self._dirs.discard(target)
                self._release(target)
            elif target in self._files:
                self._files.discard(target)
                self._release(os.path.dirname(target) or os.curdir)
            else:
                raise ValueError(f"can't remove non-existent watch: {target}")

    def remove_recursive(self, path: str | os.PathLike[str]) -> None:
        """Stop watching a directory and its subdirectories.

        If the directory no longer exists, only the path itself is removed.
        """
        try:
            dirs = collect_dirs(path)
        except FileNotFoundError:
            self.remove(path)
            return
        self.remove_all(dirs)

    def remove_all(self, paths: Iterable[str | os.PathLike[str]]) -> None:
        """Stop watching every path, best effort; failures are raised together."""
        errors: list[BaseException] = []
        for path in paths:
            try:
                self.remove(path)
            except Exception as exc:
                errors.append(exc)
        if len(errors) == 1:
            raise errors[0]
        if errors:
            raise _JoinedError(errors)

    def _schedule(self, directory: str) -> None:
        if directory not in self._schedules:
            self._schedules[directory] = self._observer.schedule(
                self._handler, directory, recursive=False
            )

    def _release(self, directory: str) -> None:
        if directory in self._dirs:
            return
        if any((os.path.dirname(f) or os.curdir) == directory for f in self._files):
            return
        watch = self._schedules.pop(directory, None)
        if watch is not None:
            try:
                self._observer.unschedule(watch)
            except KeyError:
                pass

    def _set_err(self, error: BaseException) -> None:
        with self._lock:
            self._error = error

    def _in_scope(self, path: str) -> bool:
        with self._lock:
            return (
                path in self._dirs
                or path in self._files
                or (os.path.dirname(path) or os.curdir) in self._dirs
            )

    def _translate(self, event: FileSystemEvent) -> Iterator[Event]:
        src = os.fsdecode(event.src_path)
        kind = event.event_type
        if kind == EVENT_TYPE_CREATED:
            if self._in_scope(src):
                yield Event(src, create=True)
        elif kind == EVENT_TYPE_MODIFIED:
            if not event.is_directory and self._in_scope(src):
                yield Event(src, write=True)
        elif kind == EVENT_TYPE_DELETED:
            if self._in_scope(src):
                yield Event(src, remove=True)
        elif kind == EVENT_TYPE_MOVED:
            if self._in_scope(src):
                yield Event(src, rename=True)
            dest = os.fsdecode(getattr(event, "dest_path", "") or "")
            if dest and self._in_scope(dest):
                yield Event(dest, create=True)

    def _dispatch(self, raw: FileSystemEvent) -> None:
        if self._stop.is_set():
            return
        for event in self._translate(raw):
            if self._stop.is_set():
                return
            try:
                self._callback(event)
            except Exception as exc:
                self._set_err(exc)
                self._stop.set()
                return

    def _run(self) -> None:
        try:
            self._stop.wait()
            try:
                self._observer.stop()
                self._observer.join()
            except Exception as exc:
                if self.err() is None:
                    self._set_err(exc)
        finally:
            self._stopped.set()


def watch(path: str | os.PathLike[str], callback: Callback) -> Watcher:
    """Watch a single path."""
    return watch_all([path], callback)


def watch_recursive(path: str | os.PathLike[str], callback: Callback) -> Watcher:
    """Watch a directory and every subdirectory existing now.

    Directories created later are not watched automatically.
    """
    return watch_all(collect_dirs(path), callback)


def watch_all(paths: Iterable[str | os.PathLike[str]], callback: Callback) -> Watcher:
    """Watch several paths; if any cannot be watched, none are and the error is raised."""
    watcher = Watcher(callback)
    try:
        watcher.add_all(paths)
    except Exception:
        watcher.close()
        raise
    return watcher


def collect_dirs(root: str | os.PathLike[str]) -> list[str]:
    """Return every directory under root, root included, in lexical walk order."""
    top = os.fspath(root)
    info = os.lstat(top)
    if not stat.S_ISDIR(info.st_mode):
        return []
    return list(_walk_dirs(top))


def _walk_dirs(path: str) -> Iterator[str]:
    yield path
    with os.scandir(path) as entries:
        subdirs = sorted(e.name for e in entries if e.is_dir(follow_symlinks=False))
    for name in subdirs:
        yield from _walk_dirs(os.path.join(path, name))