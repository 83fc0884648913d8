"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, storyprep.toml only contains
overrides. A project that needs no legacy switches needs no file at all.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class FeatureFlags(BaseModel):
    """[features] section — process-wide legacy-compatibility switches.

    Read once at preparation time; a prepared story never re-reads them.
    """

    model_config = {"frozen": True}

    # When False, prepared parameters mirror id, globals, args and arg types.
    breaking_changes_v7: bool = False
    # When True, args are split by ``arg_types[name]["target"]`` before render.
    arg_type_targets_v7: bool = False


class LoggingConfig(BaseModel):
    """[logging] section."""

    model_config = {"frozen": True, "populate_by_name": True}

    verbose: bool = False
    json_output: bool = Field(default=False, alias="json")


class StoryprepConfig(BaseModel):
    """Root configuration composing all sections."""

    model_config = {"frozen": True}

    features: FeatureFlags = Field(default_factory=FeatureFlags)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
