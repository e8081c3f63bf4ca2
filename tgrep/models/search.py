from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from result import Result


class SearchErrorCode(str, Enum):
    INVALID_PATTERN = "invalid_pattern"
    NOT_FOUND = "not_found"
    NOT_DIRECTORY = "not_directory"
    ROOT_STAT_FAILED = "root_stat_failed"
    WALK_FAILED = "walk_failed"
    STAT_FAILED = "stat_failed"
    READ_FAILED = "read_failed"
    INTERNAL = "internal"

    @property
    def is_traversal(self) -> bool:
        return self in _TRAVERSAL_CODES


_TRAVERSAL_CODES = frozenset(
    {
        SearchErrorCode.NOT_FOUND,
        SearchErrorCode.NOT_DIRECTORY,
        SearchErrorCode.ROOT_STAT_FAILED,
        SearchErrorCode.WALK_FAILED,
    }
)


@dataclass(slots=True, frozen=True)
class SearchError:
    code: SearchErrorCode
    path: str
    message: str


@dataclass(slots=True)
class SearchStats:
    files_scanned: int = 0
    matches: int = 0
    errors: int = 0


@dataclass(slots=True, frozen=True)
class SearchSummary:
    root: str
    stats: SearchStats
    elapsed_ms: int


# Outcome of searching one file: Ok(True) on a match, Ok(False) otherwise.
FileResult = Result[bool, SearchError]
SearchOutcome = Result[SearchSummary, SearchError]
