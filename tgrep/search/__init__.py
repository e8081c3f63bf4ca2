from __future__ import annotations

from result import Err, Ok

from tgrep.models.enums import SearchMode
from tgrep.models.search import SearchOutcome
from tgrep.search._counter import ScanCounter
from tgrep.search._pool import WorkerPool
from tgrep.search._queue import WorkQueue
from tgrep.search._sink import ConsoleSink, ResultSink, TallyingSink
from tgrep.search._walker import DirectoryWalker, resolve_root
from tgrep.search.searcher import ParallelSearcher
from tgrep.services.fs import DEFAULT_FS, FileSystem
from tgrep.services.matching import compile_pattern


def run_search(
    pattern: str,
    root: str,
    sink: ResultSink,
    *,
    mode: SearchMode = SearchMode.LITERAL,
    workers: int = 4,
    follow_symlinks: bool = False,
    fs: FileSystem = DEFAULT_FS,
) -> SearchOutcome:
    """Compile *pattern* and search *root* with it.

    The pattern is compiled before any thread starts; an invalid regular
    expression comes back as ``Err`` without a single file being opened.
    """
    compiled = compile_pattern(pattern, mode)
    if isinstance(compiled, Err):
        return Err(compiled.unwrap_err())

    searcher = ParallelSearcher(workers=workers, follow_symlinks=follow_symlinks, fs=fs)
    return Ok(searcher.search(root, compiled.unwrap(), sink))


__all__ = [
    "ConsoleSink",
    "DirectoryWalker",
    "ParallelSearcher",
    "ResultSink",
    "ScanCounter",
    "TallyingSink",
    "WorkQueue",
    "WorkerPool",
    "resolve_root",
    "run_search",
]
