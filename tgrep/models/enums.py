from __future__ import annotations

from enum import Enum


class SearchMode(str, Enum):
    LITERAL = "literal"
    REGEX = "regex"

    @classmethod
    def from_flag(cls, value: int) -> SearchMode:
        """Map the numeric CLI mode to a search mode: ``0`` is literal, anything else is regex."""
        return cls.LITERAL if value == 0 else cls.REGEX


class WorkerState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    DRAINING = "draining"
    TERMINATED = "terminated"
