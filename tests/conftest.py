"""Shared pytest fixtures and test helpers for storyprep tests."""

from __future__ import annotations

from typing import Any

import pytest

from storyprep.config.models import FeatureFlags
from storyprep.domain.annotations import (
    ComponentAnnotations,
    ProjectAnnotations,
    StoryAnnotations,
)
from storyprep.domain.story import PreparedStory
from storyprep.services.deprecation import DeprecationSink
from storyprep.services.prepare import prepare_story


def render_args(args: dict[str, Any], context: Any) -> dict[str, Any]:
    """Render function that returns the args it was called with."""
    return dict(args)


@pytest.fixture
def sink() -> DeprecationSink:
    """A fresh deprecation sink, isolated from the process-wide one."""
    return DeprecationSink()


@pytest.fixture
def features() -> FeatureFlags:
    """Default feature flags (legacy parameter mirroring on, routing off)."""
    return FeatureFlags()


@pytest.fixture
def project() -> ProjectAnnotations:
    return ProjectAnnotations(render=render_args)


@pytest.fixture
def component() -> ComponentAnnotations:
    return ComponentAnnotations(title="Components/Button")


@pytest.fixture
def story() -> StoryAnnotations:
    return StoryAnnotations(name="Primary")


# ---------------------------------------------------------------------------
# Shared test helpers (used across service test modules)
# ---------------------------------------------------------------------------


def prepare(
    story: StoryAnnotations | None = None,
    component: ComponentAnnotations | None = None,
    project: ProjectAnnotations | None = None,
    *,
    features: FeatureFlags | None = None,
    sink: DeprecationSink | None = None,
) -> PreparedStory:
    """Prepare a story with test defaults for any layer not given."""
    return prepare_story(
        story or StoryAnnotations(name="Primary"),
        component or ComponentAnnotations(title="Components/Button"),
        project or ProjectAnnotations(render=render_args),
        features=features or FeatureFlags(),
        deprecations=sink or DeprecationSink(),
    )
