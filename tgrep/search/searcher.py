# One search run, wired end to end.
#
# Lifecycle (search method):
#   1. Create a fresh WorkQueue and ScanCounter for this run only.
#   2. Start the WorkerPool; workers block in pop() until tasks arrive.
#   3. Walk the tree on the calling thread, pushing every entry.  The walker
#      closes the queue when it is done or has failed.
#   4. Join the pool.  Workers drain whatever is still queued, then exit.
#   5. Read the counters (no worker is alive any more) and the elapsed time.

from __future__ import annotations

import time

from tgrep.models.search import SearchStats, SearchSummary
from tgrep.search._counter import ScanCounter
from tgrep.search._pool import WorkerPool
from tgrep.search._queue import WorkQueue
from tgrep.search._sink import ResultSink, TallyingSink
from tgrep.search._walker import DirectoryWalker
from tgrep.services.fs import DEFAULT_FS, FileSystem
from tgrep.services.matching import SearchPattern


class ParallelSearcher:
    def __init__(
        self,
        workers: int = 4,
        *,
        follow_symlinks: bool = False,
        fs: FileSystem = DEFAULT_FS,
    ) -> None:
        self._workers = max(1, workers)
        self._follow_symlinks = follow_symlinks
        self._fs = fs

    @property
    def workers(self) -> int:
        return self._workers

    def search(self, root: str, pattern: SearchPattern, sink: ResultSink) -> SearchSummary:
        started = time.perf_counter()

        queue = WorkQueue()
        counter = ScanCounter()
        tally = TallyingSink(sink)
        pool = WorkerPool(queue, pattern, counter, tally, workers=self._workers, fs=self._fs)
        walker = DirectoryWalker(queue, tally, follow_symlinks=self._follow_symlinks, fs=self._fs)

        pool.start()
        try:
            walker.walk(root)
        finally:
            # walk() already closed the queue; closing again is a no-op and
            # guarantees the join below cannot hang.
            queue.close()
            pool.join()

        elapsed_ms = int((time.perf_counter() - started) * 1000)
        stats = SearchStats(
            files_scanned=counter.value,
            matches=tally.matches.value,
            errors=tally.errors.value,
        )
        return SearchSummary(root=root, stats=stats, elapsed_ms=elapsed_ms)
