"""Story preparation — three annotation layers into one PreparedStory.

Everything is resolved once, up front: merged parameters, enhanced arg
types, initial args, and the composed render chain. The result is frozen
and stateless with respect to args and globals, which are supplied through
a fresh :class:`StoryContext` on each invocation.

Order of operations:
  1. identity (id, name) and render resolution
  2. parameter / args / arg-type merge
  3. arg-type enhancers
  4. legacy default values (deprecated, signalled once per process)
  5. args enhancers
  6. legacy parameter mirroring (unless ``breaking_changes_v7``)
  7. decorator chain, target routing, loaders, play function
"""

from __future__ import annotations

import dataclasses
import inspect
import logging
from collections.abc import Callable
from typing import Any

from storyprep.config.models import FeatureFlags
from storyprep.config.settings import get_settings
from storyprep.domain.annotations import (
    ComponentAnnotations,
    ProjectAnnotations,
    StoryAnnotations,
)
from storyprep.domain.args import filter_conditional_args, map_args
from storyprep.domain.context import EnhancerContext, StoryContext
from storyprep.domain.ids import sanitize, story_name_from_export, to_id
from storyprep.domain.story import PreparedStory, freeze
from storyprep.domain.types import DecoratorApplier
from storyprep.services.decorators import default_decorate_story, route_args_by_target
from storyprep.services.deprecation import DEPRECATIONS, DeprecationSink
from storyprep.services.enhancers import derive_default_args, enhance_args, enhance_arg_types
from storyprep.services.loaders import apply_loaders
from storyprep.services.merge import merge_annotations
from storyprep.services.play import build_play_function
from storyprep.services.telemetry import traced

logger = logging.getLogger(__name__)

_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


def _resolve_identity(story: StoryAnnotations, component: ComponentAnnotations) -> tuple[str, str]:
    name = story.name
    if name is None and story.export_name is not None:
        name = story_name_from_export(story.export_name)
    if name is None:
        if story.id is None:
            msg = f"Story in {component.title!r} needs a name, export_name, or id"
            raise ValueError(msg)
        name = story.id
    return story.id or to_id(component.title, name), name


def _positional_arity(fn: Callable[..., Any]) -> int:
    """How many positional arguments *fn* accepts (2 for ``*args`` or unknown)."""
    try:
        params = inspect.signature(fn).parameters.values()
    except (TypeError, ValueError):
        return 2
    if any(p.kind is inspect.Parameter.VAR_POSITIONAL for p in params):
        return 2
    return sum(1 for p in params if p.kind in _POSITIONAL)


def _make_undecorated(render: Callable[..., Any]) -> Callable[[StoryContext], Any]:
    arity = _positional_arity(render)

    def undecorated_story_fn(context: StoryContext) -> Any:
        mapped = map_args(context.args, context.arg_types)
        included = filter_conditional_args(mapped, context.arg_types, context.globals)
        included_context = context.evolve(args=included)

        if not context.parameters.get("pass_args_first", True):
            return render(included_context)
        if arity >= 2:
            return render(included, included_context)
        if arity == 1:
            return render(included)
        return render()

    return undecorated_story_fn


@traced
def prepare_story(
    story: StoryAnnotations,
    component: ComponentAnnotations,
    project: ProjectAnnotations,
    *,
    features: FeatureFlags | None = None,
    deprecations: DeprecationSink | None = None,
) -> PreparedStory:
    """Resolve one story into a frozen, render-ready descriptor.

    Args:
        story: Story-level annotations (most specific).
        component: Component-level annotations.
        project: Project-level annotations (least specific; also carries
            enhancers and runner overrides).
        features: Feature flags; defaults to the process-wide settings.
        deprecations: Deprecation sink; defaults to the process-wide one.

    Raises:
        MissingRenderError: If no layer declares a render function.
        ValueError: If the story id cannot be derived.
    """
    features = features if features is not None else get_settings().features
    sink = deprecations if deprecations is not None else DEPRECATIONS

    story_id, name = _resolve_identity(story, component)
    merged = merge_annotations(story_id, story, component, project)
    render = merged.render

    parameters = dict(merged.parameters)
    pass_args_first = parameters.get("pass_args_first", True)
    parameters["__is_args_story"] = bool(pass_args_first) and _positional_arity(render) > 0

    enhancer_context = EnhancerContext(
        id=story_id,
        name=name,
        title=component.title,
        component_id=component.id or sanitize(component.title),
        component=component.component,
        subcomponents=component.subcomponents,
        parameters=parameters,
        initial_args=merged.args,
        arg_types=merged.arg_types,
    )

    arg_types = enhance_arg_types(enhancer_context, project.arg_types_enhancers)
    enhancer_context = dataclasses.replace(enhancer_context, arg_types=arg_types)

    # After arg-type enhancement, since enhancers may add default values.
    defaults = derive_default_args(arg_types, sink)
    initial_args = enhance_args(enhancer_context, project.args_enhancers, defaults=defaults)

    if not features.breaking_changes_v7:
        parameters = {
            **parameters,
            "__id": story_id,
            "globals": project.globals,
            "global_types": project.global_types,
            "args": initial_args,
            "arg_types": arg_types,
        }

    undecorated_story_fn = _make_undecorated(render)
    apply_decorators: DecoratorApplier = project.apply_decorators or default_decorate_story
    decorated = apply_decorators(undecorated_story_fn, list(merged.decorators))
    route_targets = features.arg_type_targets_v7

    def decorated_story_fn(context: StoryContext) -> Any:
        if route_targets:
            context = route_args_by_target(context)
        return decorated(context)

    loaders = merged.loaders

    @traced
    async def apply_story_loaders(context: StoryContext) -> StoryContext:
        return await apply_loaders(loaders, context)

    play_function = build_play_function(story.play, project.run_step) if story.play else None

    logger.debug("Prepared story %s (%s)", story_id, name)
    return PreparedStory(
        id=story_id,
        name=name,
        title=component.title,
        component_id=enhancer_context.component_id,
        component=component.component,
        subcomponents=freeze(dict(component.subcomponents)),
        parameters=freeze(parameters),
        initial_args=freeze(initial_args),
        arg_types=freeze(arg_types),
        original_story_fn=render,
        undecorated_story_fn=undecorated_story_fn,
        decorated_story_fn=decorated_story_fn,
        apply_loaders=apply_story_loaders,
        play_function=play_function,
    )
