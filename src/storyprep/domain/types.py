"""Callable shapes flowing through the preparation pipeline.

These are structural aliases, not classes: any callable with the right
arguments qualifies. ``StoryContext`` and ``EnhancerContext`` live in
:mod:`storyprep.domain.context`.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from typing import TYPE_CHECKING, Any, TypeAlias

if TYPE_CHECKING:
    from storyprep.domain.context import EnhancerContext, StoryContext

# story_fn(update=None) -> rendered output of the next-inner layer
BoundStoryFn: TypeAlias = Callable[..., Any]
StoryFn: TypeAlias = Callable[["StoryContext"], Any]
Decorator: TypeAlias = Callable[[BoundStoryFn, "StoryContext"], Any]
DecoratorApplier: TypeAlias = Callable[[StoryFn, "list[Decorator]"], StoryFn]

LoaderResult: TypeAlias = "Mapping[str, Any] | Awaitable[Mapping[str, Any] | None] | None"
Loader: TypeAlias = Callable[["StoryContext"], LoaderResult]

ArgTypesEnhancer: TypeAlias = Callable[["EnhancerContext"], Mapping[str, Mapping[str, Any]]]
ArgsEnhancer: TypeAlias = Callable[["EnhancerContext"], Mapping[str, Any]]

PlayFn: TypeAlias = Callable[["StoryContext"], Any]
StepRunnerFn: TypeAlias = Callable[[str, PlayFn, "StoryContext"], Any]
