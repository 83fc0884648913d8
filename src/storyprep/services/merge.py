"""Annotation merging — three layers into one set of story inputs.

Precedence for keyed records is story over component over project.
Ordered sequences are concatenated, with an intentional asymmetry:

- decorators: story ++ component ++ project, so the story decorator ends up
  innermost once the chain is composed.
- loaders: project ++ component ++ story, so story loaders win key conflicts
  when loader output is merged.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from storyprep.domain.annotations import (
    ComponentAnnotations,
    ProjectAnnotations,
    StoryAnnotations,
)

logger = logging.getLogger(__name__)


class MissingRenderError(ValueError):
    """No render function is declared on any of the three layers."""

    def __init__(self, story_id: str) -> None:
        self.story_id = story_id
        super().__init__(f"No render function available for story id '{story_id}'")


def combine_parameters(*layers: Mapping[str, Any] | None) -> dict[str, Any]:
    """Deep-merge parameter records, later layers taking precedence.

    Merge policy:
        - mapping + mapping → recursive merge by key
        - anything else (list, scalar, mapping over non-mapping) → replaced
        - ``None`` layers are skipped

    A new structure is always returned; no input is mutated.
    """
    result: dict[str, Any] = {}
    for layer in layers:
        if layer is None:
            continue
        for key, value in layer.items():
            existing = result.get(key)
            if isinstance(existing, Mapping) and isinstance(value, Mapping):
                result[key] = combine_parameters(existing, value)
            elif isinstance(value, Mapping):
                result[key] = combine_parameters(value)
            else:
                result[key] = value
    return result


def merge_shallow(*layers: Mapping[str, Any] | None) -> dict[str, Any]:
    """Key-level merge, later layers taking precedence; values are not merged."""
    result: dict[str, Any] = {}
    for layer in layers:
        if layer:
            result.update(layer)
    return result


@dataclass(frozen=True)
class MergedAnnotations:
    """The merged view of one (project, component, story) triple."""

    parameters: dict[str, Any]
    args: dict[str, Any]
    arg_types: dict[str, dict[str, Any]]
    decorators: tuple[Callable[..., Any], ...]
    loaders: tuple[Callable[..., Any], ...]
    render: Callable[..., Any]


def resolve_render(
    story_id: str,
    story: StoryAnnotations,
    component: ComponentAnnotations,
    project: ProjectAnnotations,
) -> Callable[..., Any]:
    """Pick the most specific render function.

    Raises:
        MissingRenderError: If no layer declares one.
    """
    for candidate in (story.user_story_fn, story.render, component.render, project.render):
        if candidate is not None:
            return candidate
    raise MissingRenderError(story_id)


def merge_annotations(
    story_id: str,
    story: StoryAnnotations,
    component: ComponentAnnotations,
    project: ProjectAnnotations,
) -> MergedAnnotations:
    """Merge the three layers of one story."""
    render = resolve_render(story_id, story, component, project)

    merged = MergedAnnotations(
        parameters=combine_parameters(project.parameters, component.parameters, story.parameters),
        args=merge_shallow(project.args, component.args, story.args),
        arg_types=merge_shallow(project.arg_types, component.arg_types, story.arg_types),
        decorators=(*story.decorators, *component.decorators, *project.decorators),
        loaders=(*project.loaders, *component.loaders, *story.loaders),
        render=render,
    )
    logger.debug(
        "Merged annotations for %s: %d decorators, %d loaders",
        story_id,
        len(merged.decorators),
        len(merged.loaders),
    )
    return merged
