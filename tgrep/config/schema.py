from __future__ import annotations

from dataclasses import dataclass
from typing import Any

# (json_key, attr_name, minimum)
_INT_FIELDS: tuple[tuple[str, str, int], ...] = (("maxWorkers", "max_workers", 1),)

# (json_key, attr_name)
_BOOL_FIELDS: tuple[tuple[str, str], ...] = (
    ("followSymlinks", "follow_symlinks"),
    ("showErrors", "show_errors"),
    ("showSummary", "show_summary"),
)

KNOWN_KEYS: frozenset[str] = frozenset(key for key, *_ in (*_INT_FIELDS, *_BOOL_FIELDS))


def _get_int(data: dict[str, Any], json_key: str, default: int, minimum: int) -> int:
    raw = data.get(json_key, default)
    # bool is an int subclass; `true` is not a worker count.
    if isinstance(raw, bool) or not isinstance(raw, int):
        msg = f"{json_key} must be an integer, got {raw!r}"
        raise ValueError(msg)
    return max(minimum, raw)


def _get_bool(data: dict[str, Any], json_key: str, default: bool) -> bool:
    raw = data.get(json_key, default)
    if not isinstance(raw, bool):
        msg = f"{json_key} must be true or false, got {raw!r}"
        raise ValueError(msg)
    return raw


@dataclass(slots=True)
class AppConfig:
    follow_symlinks: bool = False
    show_errors: bool = True
    show_summary: bool = True
    max_workers: int = 64

    def effective_workers(self, requested: int) -> int:
        """Coerce a requested worker count into ``[1, max_workers]``."""
        return max(1, min(requested, self.max_workers))

    def to_dict(self) -> dict[str, Any]:
        return {
            "followSymlinks": self.follow_symlinks,
            "showErrors": self.show_errors,
            "showSummary": self.show_summary,
            "maxWorkers": self.max_workers,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], defaults: AppConfig) -> AppConfig:
        """Build a config from parsed JSON, raising ValueError naming the offending key."""
        unknown = sorted(set(data) - KNOWN_KEYS)
        if unknown:
            msg = f"unknown key(s) {', '.join(unknown)}; expected one of {', '.join(sorted(KNOWN_KEYS))}"
            raise ValueError(msg)
        kwargs: dict[str, Any] = {}
        for json_key, attr in _BOOL_FIELDS:
            kwargs[attr] = _get_bool(data, json_key, getattr(defaults, attr))
        for json_key, attr, minimum in _INT_FIELDS:
            kwargs[attr] = _get_int(data, json_key, getattr(defaults, attr), minimum)
        return cls(**kwargs)
