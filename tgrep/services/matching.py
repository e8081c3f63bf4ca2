# Search predicate.
#
# A pattern is compiled exactly once, before any worker starts, into an
# immutable SearchPattern shared by every worker thread.  Both variants work on
# raw bytes so that binary files and files in any encoding are searched
# byte-for-byte:
#
#   literal  ->  needle in data            (case-sensitive, no normalization)
#   regex    ->  compiled.search(data)     (unanchored, no flags)
#
# Files are read whole.  There is no streaming or line-oriented mode, so the
# largest searchable file is bounded by available memory.

from __future__ import annotations

import os
import re
from dataclasses import dataclass

from result import Err, Ok, Result

from tgrep.models.enums import SearchMode
from tgrep.models.search import FileResult, SearchError, SearchErrorCode
from tgrep.services.formatting import describe_os_error
from tgrep.services.fs import DEFAULT_FS, FileSystem


@dataclass(slots=True, frozen=True)
class SearchPattern:
    source: str
    mode: SearchMode
    needle: bytes
    regex: re.Pattern[bytes] | None = None

    def matches(self, data: bytes) -> bool:
        if self.regex is not None:
            return self.regex.search(data) is not None
        return self.needle in data


def compile_pattern(source: str, mode: SearchMode) -> Result[SearchPattern, SearchError]:
    """Build the shared pattern for a run.

    The text is encoded the same way the OS encodes command-line arguments, so
    undecodable argv bytes round-trip unchanged.  An invalid regular expression
    is returned as an ``INVALID_PATTERN`` error rather than raised.
    """
    needle = os.fsencode(source)
    if mode is SearchMode.LITERAL:
        return Ok(SearchPattern(source=source, mode=mode, needle=needle))

    try:
        compiled = re.compile(needle)
    except re.error as exc:
        return Err(
            SearchError(
                code=SearchErrorCode.INVALID_PATTERN,
                path="",
                message=f"Invalid regular expression {source!r}: {exc}",
            )
        )
    return Ok(SearchPattern(source=source, mode=mode, needle=needle, regex=compiled))


def search_file(path: str, pattern: SearchPattern, fs: FileSystem = DEFAULT_FS) -> FileResult:
    try:
        data = fs.read_bytes(path)
    except OSError as exc:
        return Err(
            SearchError(
                code=SearchErrorCode.READ_FAILED,
                path=path,
                message=describe_os_error(exc),
            )
        )
    return Ok(pattern.matches(data))
