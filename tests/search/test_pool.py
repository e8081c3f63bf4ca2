from __future__ import annotations

from typing_extensions import override

import pytest

from tgrep.models.enums import SearchMode, WorkerState
from tgrep.models.search import SearchError, SearchErrorCode
from tgrep.search import ScanCounter, WorkerPool, WorkQueue
from tgrep.services.fs import FileStat
from tests.factories import RecordingSink, make_pattern
from tests.fs_mock import MemoryFileSystem


def _run_pool(
    fs: MemoryFileSystem,
    tasks: list[str],
    pattern: str = "needle",
    workers: int = 3,
    mode: SearchMode = SearchMode.LITERAL,
) -> tuple[WorkerPool, ScanCounter, RecordingSink]:
    q = WorkQueue()
    counter = ScanCounter()
    sink = RecordingSink()
    pool = WorkerPool(q, make_pattern(pattern, mode), counter, sink, workers=workers, fs=fs)
    pool.start()
    q.push_many(tasks)
    q.close()
    pool.join()
    return pool, counter, sink


class TestWorkerPool:
    def test_reports_matches_and_counts_regular_files_only(self) -> None:
        fs = MemoryFileSystem()
        fs.add_file("/r/hit.txt", "hay needle hay")
        fs.add_file("/r/miss.txt", "hay")
        fs.add_dir("/r/sub")

        _, counter, sink = _run_pool(fs, ["/r/hit.txt", "/r/miss.txt", "/r/sub"])

        assert sink.matches == ["/r/hit.txt"]
        assert sink.errors == []
        assert counter.value == 2
        assert "/r/sub" not in fs.reads

    def test_unreadable_file_reported_and_worker_continues(self) -> None:
        fs = MemoryFileSystem()
        fs.add_file("/r/locked.txt", "needle", unreadable=True)
        fs.add_file("/r/open.txt", "needle")

        _, counter, sink = _run_pool(fs, ["/r/locked.txt", "/r/open.txt"], workers=1)

        assert sink.matches == ["/r/open.txt"]
        assert [(e.code, e.path) for e in sink.errors] == [(SearchErrorCode.READ_FAILED, "/r/locked.txt")]
        assert "Permission denied" in sink.errors[0].message
        assert counter.value == 2

    def test_vanished_entry_skipped_without_error(self) -> None:
        fs = MemoryFileSystem()
        fs.add_file("/r/kept.txt", "needle")

        _, counter, sink = _run_pool(fs, ["/r/gone.txt", "/r/kept.txt"])

        assert sink.matches == ["/r/kept.txt"]
        assert sink.errors == []
        assert counter.value == 1

    def test_stat_failure_reported(self) -> None:
        class _DeniedStatFS(MemoryFileSystem):
            @override
            def stat(self, path: str, follow_symlinks: bool = True) -> FileStat:
                if path.endswith("denied.txt"):
                    raise PermissionError(13, "Permission denied", path)
                return super().stat(path, follow_symlinks)

        fs = _DeniedStatFS()
        fs.add_file("/r/denied.txt", "needle")
        fs.add_file("/r/fine.txt", "needle")

        _, counter, sink = _run_pool(fs, ["/r/denied.txt", "/r/fine.txt"])

        assert sink.matches == ["/r/fine.txt"]
        assert [e.code for e in sink.errors] == [SearchErrorCode.STAT_FAILED]
        assert counter.value == 1

    def test_unexpected_exception_costs_only_one_task(self) -> None:
        class _ExplodingFS(MemoryFileSystem):
            @override
            def read_bytes(self, path: str) -> bytes:
                if path.endswith("bad.txt"):
                    raise ValueError("corrupt")
                return super().read_bytes(path)

        fs = _ExplodingFS()
        fs.add_file("/r/bad.txt", "needle")
        fs.add_file("/r/good.txt", "needle")

        pool, _, sink = _run_pool(fs, ["/r/bad.txt", "/r/good.txt"], workers=1)

        assert sink.matches == ["/r/good.txt"]
        assert [e.code for e in sink.errors] == [SearchErrorCode.INTERNAL]
        assert pool.states == (WorkerState.TERMINATED,)

    def test_regex_mode(self) -> None:
        fs = MemoryFileSystem()
        fs.add_file("/r/a.txt", "id=1234")
        fs.add_file("/r/b.txt", "id=abcd")

        _, _, sink = _run_pool(fs, ["/r/a.txt", "/r/b.txt"], pattern=r"id=\d+", mode=SearchMode.REGEX)

        assert sink.matches == ["/r/a.txt"]


class TestLifecycle:
    def test_states_idle_before_start_terminated_after_join(self) -> None:
        q = WorkQueue()
        pool = WorkerPool(q, make_pattern("x"), ScanCounter(), RecordingSink(), workers=4, fs=MemoryFileSystem())
        assert pool.states == (WorkerState.IDLE,) * 4
        pool.start()
        q.close()
        pool.join()
        assert pool.states == (WorkerState.TERMINATED,) * 4

    @pytest.mark.parametrize("requested", [0, -3])
    def test_non_positive_worker_count_coerced_to_one(self, requested: int) -> None:
        pool = WorkerPool(WorkQueue(), make_pattern("x"), ScanCounter(), RecordingSink(), workers=requested)
        assert pool.size == 1

    def test_start_twice_raises(self) -> None:
        q = WorkQueue()
        pool = WorkerPool(q, make_pattern("x"), ScanCounter(), RecordingSink(), workers=1, fs=MemoryFileSystem())
        pool.start()
        try:
            with pytest.raises(RuntimeError):
                pool.start()
        finally:
            q.close()
            pool.join()

    def test_tasks_queued_before_start_are_drained_after_close(self) -> None:
        fs = MemoryFileSystem()
        for i in range(50):
            fs.add_file(f"/r/f{i}.txt", "needle")
        q = WorkQueue()
        q.push_many(f"/r/f{i}.txt" for i in range(50))
        q.close()
        counter = ScanCounter()
        sink = RecordingSink()
        pool = WorkerPool(q, make_pattern("needle"), counter, sink, workers=4, fs=fs)
        pool.start()
        pool.join()

        assert counter.value == 50
        assert len(sink.matches) == 50
        assert pool.states == (WorkerState.TERMINATED,) * 4


class _FlakySink(RecordingSink):
    """Raises on the first match of *bad_path*; optionally on its error report too."""

    def __init__(self, bad_path: str, *, fail_errors: bool = False) -> None:
        super().__init__()
        self._bad_path = bad_path
        self._fail_errors = fail_errors
        self.failed = 0

    @override
    def match(self, path: str) -> None:
        if path == self._bad_path and not self.failed:
            self.failed += 1
            raise UnicodeEncodeError("utf-8", path, 0, 1, "surrogates not allowed")
        super().match(path)

    @override
    def error(self, error: SearchError) -> None:
        if self._fail_errors and error.path == self._bad_path:
            raise UnicodeEncodeError("utf-8", error.path, 0, 1, "surrogates not allowed")
        super().error(error)


class TestSinkFailures:
    def _fs(self) -> MemoryFileSystem:
        fs = MemoryFileSystem()
        for name in ("a", "bad", "c", "d", "e"):
            fs.add_file(f"/r/{name}.txt", "needle")
        return fs

    def _run(self, sink: RecordingSink) -> tuple[WorkerPool, ScanCounter]:
        q = WorkQueue()
        counter = ScanCounter()
        pool = WorkerPool(q, make_pattern("needle"), counter, sink, workers=1, fs=self._fs())
        pool.start()
        q.push_many(f"/r/{name}.txt" for name in ("a", "bad", "c", "d", "e"))
        q.close()
        pool.join()
        return pool, counter

    def test_failed_match_write_reported_and_rest_processed(self) -> None:
        sink = _FlakySink("/r/bad.txt")

        pool, counter = self._run(sink)

        assert sorted(sink.matches) == ["/r/a.txt", "/r/c.txt", "/r/d.txt", "/r/e.txt"]
        assert [(e.code, e.path) for e in sink.errors] == [(SearchErrorCode.INTERNAL, "/r/bad.txt")]
        assert counter.value == 5
        assert pool.states == (WorkerState.TERMINATED,)

    def test_failed_error_report_costs_only_that_report(self) -> None:
        sink = _FlakySink("/r/bad.txt", fail_errors=True)

        pool, counter = self._run(sink)

        assert sorted(sink.matches) == ["/r/a.txt", "/r/c.txt", "/r/d.txt", "/r/e.txt"]
        assert sink.errors == []
        assert counter.value == 5
        assert pool.states == (WorkerState.TERMINATED,)
