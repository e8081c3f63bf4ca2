# Worker pool.
#
# Thread safety model:
#   The only shared mutable state is the WorkQueue, the ScanCounter and the
#   ResultSink, each guarded by its own lock.  The SearchPattern is frozen and
#   read without synchronization.  Each worker owns one slot of _states and is
#   the only thread that writes it.
#
# Worker lifecycle:
#   IDLE -> RUNNING      thread started, popping tasks
#   RUNNING -> DRAINING  queue observed closed (a task popped after close, or
#                        the exit sentinel)
#   DRAINING -> TERMINATED  pop() returned None
#
# Per-task failures never leave the worker: search_file returns them as Err
# values and they are routed to the sink's error channel.

from __future__ import annotations

import threading

from result import Err

from tgrep.models.enums import WorkerState
from tgrep.models.search import SearchError, SearchErrorCode
from tgrep.search._counter import ScanCounter
from tgrep.search._queue import WorkQueue
from tgrep.search._sink import ResultSink
from tgrep.services.formatting import describe_os_error
from tgrep.services.fs import DEFAULT_FS, FileSystem
from tgrep.services.matching import SearchPattern, search_file

_TRANSITIONS: dict[WorkerState, WorkerState] = {
    WorkerState.IDLE: WorkerState.RUNNING,
    WorkerState.RUNNING: WorkerState.DRAINING,
    WorkerState.DRAINING: WorkerState.TERMINATED,
}


class WorkerPool:
    """Fixed set of threads draining a WorkQueue and applying a SearchPattern."""

    def __init__(
        self,
        queue: WorkQueue,
        pattern: SearchPattern,
        counter: ScanCounter,
        sink: ResultSink,
        *,
        workers: int = 4,
        fs: FileSystem = DEFAULT_FS,
    ) -> None:
        self._queue = queue
        self._pattern = pattern
        self._counter = counter
        self._sink = sink
        self._fs = fs
        self._size = max(1, workers)
        self._states = [WorkerState.IDLE] * self._size
        self._threads: list[threading.Thread] = []

    @property
    def size(self) -> int:
        return self._size

    @property
    def states(self) -> tuple[WorkerState, ...]:
        return tuple(self._states)

    def start(self) -> None:
        if self._threads:
            msg = "WorkerPool already started"
            raise RuntimeError(msg)
        self._threads = [
            threading.Thread(target=self._run, args=(index,), name=f"tgrep-worker-{index}", daemon=True)
            for index in range(self._size)
        ]
        for thread in self._threads:
            thread.start()

    def join(self) -> None:
        # No timeout: workers exit only after the queue is closed and drained.
        for thread in self._threads:
            thread.join()

    def _advance(self, index: int, target: WorkerState) -> None:
        current = self._states[index]
        if _TRANSITIONS.get(current) is not target:
            msg = f"Invalid worker transition {current.value} -> {target.value}"
            raise RuntimeError(msg)
        self._states[index] = target

    def _run(self, index: int) -> None:
        self._advance(index, WorkerState.RUNNING)
        while True:
            path = self._queue.pop()
            if path is None:
                break
            if self._states[index] is WorkerState.RUNNING and self._queue.closed:
                self._advance(index, WorkerState.DRAINING)
            try:
                self._process(path)
            except Exception as exc:  # noqa: BLE001
                # Anything search_file did not turn into an Err (a bug, a
                # misbehaving filesystem, a sink that failed to write) still
                # costs only this one task.
                self._report_internal(path, exc)

        if self._states[index] is WorkerState.RUNNING:
            self._advance(index, WorkerState.DRAINING)
        self._advance(index, WorkerState.TERMINATED)

    def _report_internal(self, path: str, exc: Exception) -> None:
        try:
            self._sink.error(SearchError(code=SearchErrorCode.INTERNAL, path=path, message=repr(exc)))
        except Exception:  # noqa: BLE001
            # A failing sink loses this one report, not the worker.
            pass

    def _process(self, path: str) -> None:
        try:
            entry = self._fs.stat(path)
        except FileNotFoundError:
            # Vanished between listing and classification, or a dangling symlink.
            return
        except OSError as exc:
            self._sink.error(
                SearchError(
                    code=SearchErrorCode.STAT_FAILED,
                    path=path,
                    message=describe_os_error(exc),
                )
            )
            return

        if not entry.is_file:
            return

        self._counter.increment()
        result = search_file(path, self._pattern, self._fs)
        if isinstance(result, Err):
            self._sink.error(result.unwrap_err())
        elif result.unwrap():
            self._sink.match(path)
