"""Pluggy hook specifications for storyprep extensions.

Plugins contribute project-level annotations (decorators, loaders,
enhancers, step runners, parameters, globals). Contributions are composed
with the project's own annotations before any story is prepared.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from storyprep.domain.annotations import ProjectAnnotations

PROJECT_NAME = "storyprep"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)
hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class StoryprepHookSpec:
    """Hook specifications for the storyprep plugin system."""

    @hookspec
    def project_annotations(self) -> ProjectAnnotations | None:
        """Return project annotations to compose with the project's own."""
