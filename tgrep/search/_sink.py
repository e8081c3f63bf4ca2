from __future__ import annotations

import threading
from typing import Protocol

from rich.console import Console

from tgrep.models.search import SearchError
from tgrep.search._counter import ScanCounter
from tgrep.services.formatting import format_error, printable


class ResultSink(Protocol):
    def match(self, path: str) -> None: ...

    def error(self, error: SearchError) -> None: ...


class ConsoleSink:
    """Writes one complete line per record so concurrent workers never interleave output.

    A single lock covers both consoles: a match line and an error line going to
    a shared terminal must not be torn either.

    Paths are escaped for the console's encoding first, so an undecodable file
    name prints as `\\xff` escapes instead of failing the write.
    """

    def __init__(self, out: Console, err: Console, *, show_errors: bool = True) -> None:
        self._out = out
        self._err = err
        self._show_errors = show_errors
        self._lock = threading.Lock()

    def match(self, path: str) -> None:
        line = printable(path, self._out.encoding)
        with self._lock:
            self._out.print(line, markup=False, highlight=False, emoji=False, soft_wrap=True)

    def error(self, error: SearchError) -> None:
        if not self._show_errors:
            return
        line = printable(format_error(error), self._err.encoding)
        with self._lock:
            self._err.print(line, markup=False, highlight=False, emoji=False, soft_wrap=True)


class TallyingSink:
    """Counts records on their way to another sink."""

    def __init__(self, inner: ResultSink) -> None:
        self._inner = inner
        self.matches = ScanCounter()
        self.errors = ScanCounter()

    def match(self, path: str) -> None:
        self.matches.increment()
        self._inner.match(path)

    def error(self, error: SearchError) -> None:
        self.errors.increment()
        self._inner.error(error)
