"""Config file discovery and loading.

Walk-up finder locates storyprep.toml, similar to how git finds .git/.
Supports the STORYPREP_CONFIG env var override.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from storyprep.config.models import StoryprepConfig

CONFIG_FILENAME = "storyprep.toml"
CONFIG_ENV_VAR = "STORYPREP_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Walk up from *start* (default: cwd) looking for storyprep.toml.

    Returns the path to the config file, or None if not found.
    Checks STORYPREP_CONFIG env var first.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        if p.is_file():
            return p
        return None

    current = (start or Path.cwd()).resolve()
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent
    return None


def load_config(path: Path | None = None, cwd: Path | None = None) -> StoryprepConfig:
    """Parse and validate a ``storyprep.toml``.

    Without *path*, the file is discovered from *cwd*; no file at all means
    every section keeps its defaults. This is the only place the file is
    parsed: :class:`storyprep.config.settings.TomlSettingsSource` reads
    through it.

    Raises:
        ValueError: If the file is not valid TOML.
        pydantic.ValidationError: If a section has the wrong shape.
    """
    path = path or find_config(cwd)
    if path is None:
        return StoryprepConfig()

    try:
        data: dict[str, Any] = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        msg = f"Invalid TOML in {path}: {exc}"
        raise ValueError(msg) from exc
    return StoryprepConfig.model_validate(data)
