from __future__ import annotations

from collections.abc import Iterator

from tgrep.models.search import SearchError, SearchErrorCode
from tgrep.search._queue import WorkQueue
from tgrep.search._sink import ResultSink
from tgrep.services.formatting import describe_os_error
from tgrep.services.fs import DEFAULT_FS, DirEntry, FileSystem


def resolve_root(path: str, fs: FileSystem) -> str | SearchError:
    """Validate and resolve a search root path.

    Returns the resolved absolute path, or a ``SearchError`` on failure.
    """
    expanded = fs.expanduser(path)
    if not fs.exists(expanded):
        return SearchError(
            code=SearchErrorCode.NOT_FOUND,
            path=expanded,
            message="Path does not exist",
        )

    resolved = fs.absolute(expanded)
    try:
        root_stat = fs.stat(resolved)
    except OSError as exc:
        return SearchError(
            code=SearchErrorCode.ROOT_STAT_FAILED,
            path=resolved,
            message=f"Cannot stat root: {describe_os_error(exc)}",
        )
    if not root_stat.is_dir:
        return SearchError(
            code=SearchErrorCode.NOT_DIRECTORY,
            path=resolved,
            message="Path is not a directory",
        )
    return resolved


class DirectoryWalker:
    """Single-threaded producer feeding every entry under a root to the work queue.

    Entries of every type are pushed; deciding what is a regular file is the
    workers' job.  Subdirectories that cannot be listed are skipped.  Symlinked
    directories are only descended into with ``follow_symlinks``, and then each
    directory is visited once per ``(st_dev, st_ino)`` so link cycles terminate.
    """

    def __init__(
        self,
        queue: WorkQueue,
        sink: ResultSink,
        *,
        follow_symlinks: bool = False,
        fs: FileSystem = DEFAULT_FS,
    ) -> None:
        self._queue = queue
        self._sink = sink
        self._follow_symlinks = follow_symlinks
        self._fs = fs

    def walk(self, root: str) -> int:
        """Push every entry under *root*, then close the queue.

        Returns the number of tasks pushed.  Pushed paths keep the form *root*
        was given in (relative stays relative), with only `~` expanded.  A root
        that cannot be resolved or listed is reported to the sink and yields
        zero tasks; the queue is closed on every way out so workers always
        terminate.
        """
        pushed = 0
        start = root
        try:
            resolved = resolve_root(root, self._fs)
            if isinstance(resolved, SearchError):
                self._sink.error(resolved)
                return 0
            start = self._fs.expanduser(root)
            for batch in self._listings(start):
                self._queue.push_many(batch)
                pushed += len(batch)
        except OSError as exc:
            self._sink.error(
                SearchError(
                    code=SearchErrorCode.WALK_FAILED,
                    path=start,
                    message=describe_os_error(exc),
                )
            )
        finally:
            self._queue.close()
        return pushed

    def _listings(self, root: str) -> Iterator[list[str]]:
        """Yield the entry paths of each directory, depth-first, starting at *root*."""
        pending = [root]
        seen: set[tuple[int, int]] = set()
        if self._follow_symlinks:
            root_stat = self._fs.stat(root)
            seen.add((root_stat.dev, root_stat.ino))

        while pending:
            current = pending.pop()
            try:
                entries = self._fs.scandir(current)
            except OSError:
                if current == root:
                    raise
                continue

            yield [entry.path for entry in entries]

            # Reversed so the first listed subdirectory is popped first.
            for entry in reversed(entries):
                if self._should_descend(entry, seen):
                    pending.append(entry.path)

    def _should_descend(self, entry: DirEntry, seen: set[tuple[int, int]]) -> bool:
        if not self._follow_symlinks:
            return entry.is_dir
        if not (entry.is_dir or entry.is_symlink):
            return False
        try:
            target = self._fs.stat(entry.path)
        except OSError:
            return False
        if not target.is_dir:
            return False
        key = (target.dev, target.ino)
        if key in seen:
            return False
        seen.add(key)
        return True
