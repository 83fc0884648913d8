"""PreparedStory — the frozen, render-ready descriptor.

INVARIANT: A PreparedStory is never mutated after construction. Attribute
assignment is rejected by the frozen dataclass and every mapping field is a
read-only view. Nested dicts become mapping proxies and nested lists become
tuples, so no part of a descriptor aliases an input annotation or a
context handed out by :meth:`PreparedStory.prepare_context`.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from storyprep.domain.context import StoryContext


class _FrozenList(tuple):  # type: ignore[type-arg]
    """A list captured by :func:`freeze`; :func:`thaw` turns it back into a list."""

    __slots__ = ()


def freeze(value: Any) -> Any:
    """Deep-copy *value* into read-only form.

    Dicts become mapping proxies, lists become tuples, and plain tuples are
    rebuilt from their frozen items. Other values are shared as-is.
    """
    if isinstance(value, Mapping):
        return MappingProxyType({key: freeze(item) for key, item in value.items()})
    if isinstance(value, list):
        return _FrozenList(freeze(item) for item in value)
    if type(value) is tuple:
        return tuple(freeze(item) for item in value)
    return value


def thaw(value: Any) -> Any:
    """Inverse of :func:`freeze`: a fresh mutable copy of dicts and lists."""
    if isinstance(value, Mapping):
        return {key: thaw(item) for key, item in value.items()}
    if isinstance(value, _FrozenList | list):
        return [thaw(item) for item in value]
    if type(value) is tuple:
        return tuple(thaw(item) for item in value)
    return value


@dataclass(frozen=True)
class PreparedStory:
    """One fully-resolved story, safe to share across concurrent invocations.

    Attributes:
        original_story_fn: The render function resolved from the layers.
        undecorated_story_fn: Applies arg mappings and conditional args, then
            calls the render function.
        decorated_story_fn: Target routing (when enabled) plus the composed
            decorator chain around ``undecorated_story_fn``.
        apply_loaders: ``await apply_loaders(context)`` returns a new context
            whose ``loaded`` holds the combined loader output.
        play_function: Instrumented play callback, or None.
    """

    id: str
    name: str
    title: str
    component_id: str | None
    component: Any
    subcomponents: Mapping[str, Any]
    parameters: Mapping[str, Any]
    initial_args: Mapping[str, Any]
    arg_types: Mapping[str, Mapping[str, Any]]
    original_story_fn: Callable[..., Any]
    undecorated_story_fn: Callable[[StoryContext], Any]
    decorated_story_fn: Callable[[StoryContext], Any]
    apply_loaders: Callable[[StoryContext], Awaitable[StoryContext]]
    play_function: Callable[[StoryContext], Awaitable[Any]] | None = None

    def prepare_context(
        self,
        *,
        args: Mapping[str, Any] | None = None,
        globals_: Mapping[str, Any] | None = None,
        **extra: Any,
    ) -> StoryContext:
        """Build a fresh context for one invocation.

        *args* default to a copy of :attr:`initial_args`.
        """
        return StoryContext(
            id=self.id,
            name=self.name,
            title=self.title,
            component_id=self.component_id,
            parameters=self.parameters,
            initial_args=self.initial_args,
            arg_types=self.arg_types,
            args=thaw(self.initial_args) if args is None else dict(args),
            globals=dict(globals_ or {}),
            extra=extra,
        )
