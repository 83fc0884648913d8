"""Decorator chain composition and target routing.

A decorator is ``decorator(story_fn, context)``. ``story_fn(update=None)``
renders every layer inside it; *update* is merged into the context first
(identity keys are ignored). A decorator may pass through, change the
context on the way in, or return without calling ``story_fn`` at all.

Composition folds decorators left to right over the base function, so for
``[story_d, component_d, project_d]`` the project decorator is outermost:
``project_d(component_d(story_d(base)))``.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from storyprep.domain.args import NO_TARGET_NAME, group_args_by_target
from storyprep.domain.context import StoryContext
from storyprep.domain.types import BoundStoryFn, Decorator, StoryFn


class _ContextStore:
    """Holds the live context of a single invocation of the chain."""

    def __init__(self, context: StoryContext) -> None:
        self.value = context

    def bind(self, story_fn: StoryFn) -> BoundStoryFn:
        def bound(update: Mapping[str, Any] | None = None) -> Any:
            self.value = self.value.merged(update)
            return story_fn(self.value)

        return bound


def decorate_story(
    story_fn: StoryFn,
    decorator: Decorator,
    store: _ContextStore,
) -> StoryFn:
    """Wrap *story_fn* in one decorator, sharing the invocation's store."""
    bound = store.bind(story_fn)

    def decorated(context: StoryContext) -> Any:
        return decorator(bound, context)

    return decorated


def default_decorate_story(story_fn: StoryFn, decorators: Sequence[Decorator]) -> StoryFn:
    """Compose *decorators* (innermost first) around *story_fn*.

    The chain is rebuilt for each call so that concurrent invocations never
    share a context store.
    """
    chain = tuple(decorators)

    def composed(context: StoryContext) -> Any:
        store = _ContextStore(context)
        wrapped = story_fn
        for decorator in chain:
            wrapped = decorate_story(wrapped, decorator, store)
        return wrapped(context)

    return composed


def route_args_by_target(context: StoryContext) -> StoryContext:
    """Split ``context.args`` by declared delivery target.

    The no-target bucket becomes ``args``; ``args_by_target`` holds every
    bucket and ``all_args`` the undivided set.
    """
    by_target = group_args_by_target(context.args, context.arg_types)
    return context.evolve(
        all_args=context.args,
        args_by_target=by_target,
        args=by_target.get(NO_TARGET_NAME, {}),
    )
