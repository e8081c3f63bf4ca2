from __future__ import annotations

import json

from result import Err, Ok, Result

from tgrep.config.defaults import default_config
from tgrep.config.schema import AppConfig
from tgrep.services.formatting import describe_os_error
from tgrep.services.fs import DEFAULT_FS, FileSystem

CONFIG_PATH = "~/.config/tgrep/config.json"


def load_config(path: str | None = None, fs: FileSystem = DEFAULT_FS) -> Result[AppConfig, str]:
    """Read the JSON config at *path* (default ``~/.config/tgrep/config.json``).

    A missing file yields the defaults.  Every other problem comes back as an
    Err message naming the file and, where one is at fault, the key.
    """
    resolved = fs.expanduser(path or CONFIG_PATH)
    if not fs.exists(resolved):
        return Ok(default_config())

    try:
        text = fs.read_text(resolved)
    except OSError as exc:
        return Err(f"Cannot read config at {resolved}: {describe_os_error(exc)}.")
    except UnicodeDecodeError:
        return Err(f"Config at {resolved} is not valid UTF-8.")

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        return Err(f"Config at {resolved} is not valid JSON (line {exc.lineno}, column {exc.colno}): {exc.msg}.")

    if not isinstance(payload, dict):
        return Err(f"Config at {resolved} must be a JSON object.")

    try:
        return Ok(AppConfig.from_dict(payload, default_config()))
    except ValueError as exc:
        return Err(f"Invalid config at {resolved}: {exc}.")
