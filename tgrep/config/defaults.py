from __future__ import annotations

from tgrep.config.schema import AppConfig


def default_config() -> AppConfig:
    return AppConfig()
