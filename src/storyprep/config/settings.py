"""Unified settings — env vars and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — explicit overrides from the embedding application
  2. Env vars     — ``STORYPREP_*`` prefix, ``__`` for nested sections
  3. TOML file    — ``storyprep.toml`` discovered via walk-up
  4. Code defaults — baked into the section models

The feature-flag record read by :func:`storyprep.services.prepare.prepare_story`
comes from :func:`get_settings`, which builds the settings once per process.
"""

from __future__ import annotations

import functools
import threading
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from storyprep.config.discovery import find_config, load_config
from storyprep.config.models import FeatureFlags, LoggingConfig


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Feed the sections explicitly set in ``storyprep.toml`` to the settings.

    The file is validated by :func:`load_config`; only values the file sets
    are passed on, so env vars and defaults fill the rest.
    """

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            config = load_config(toml_path)
            self._data = config.model_dump(exclude_unset=True, by_alias=True)

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        """Return the full TOML data dict for Pydantic to merge."""
        return self._data


# Thread-local storage for TOML path during construction.
_tls = threading.local()


class StoryprepSettings(BaseSettings):
    """Unified settings for the preparation engine.

    Attributes:
        config_path: The TOML file the settings were read from, if any.
        features: Legacy-compatibility feature flags.
        logging: Log verbosity and renderer choice.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "STORYPREP_",
        "env_nested_delimiter": "__",
    }

    config_path: Path | None = None

    features: FeatureFlags = Field(default_factory=FeatureFlags)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @classmethod
    def load(
        cls,
        *,
        config_path: str | None = None,
        root: Path | None = None,
        **overrides: Any,
    ) -> StoryprepSettings:
        """Construct settings, discovering ``storyprep.toml`` from *root*.

        An explicit *config_path* wins over discovery. *overrides* are
        highest-priority init kwargs.
        """
        toml_path: Path | None = None
        if config_path:
            p = Path(config_path)
            if p.is_file():
                toml_path = p
        else:
            toml_path = find_config(root)

        _tls.toml_path = toml_path
        try:
            return cls(config_path=toml_path, **overrides)
        finally:
            _tls.toml_path = None


@functools.cache
def get_settings() -> StoryprepSettings:
    """Process-wide settings, built on first use from env and TOML."""
    return StoryprepSettings.load()
