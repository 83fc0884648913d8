"""Per-invocation and per-preparation context records.

:class:`StoryContext` is built fresh for every render or play call and is
threaded through loaders, decorators and step runners. It is never shared
between invocations.

:class:`EnhancerContext` is the frozen view handed to arg-type and args
enhancers during preparation.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

# Keys a decorator may not overwrite through a context update.
IDENTITY_KEYS: frozenset[str] = frozenset(
    {"id", "name", "title", "component_id", "parameters", "initial_args", "arg_types"}
)


@dataclass(frozen=True)
class EnhancerContext:
    """Everything an enhancer may inspect while the story is being prepared."""

    id: str
    name: str
    title: str
    component_id: str | None
    component: Any
    subcomponents: Mapping[str, Any]
    parameters: Mapping[str, Any]
    initial_args: Mapping[str, Any]
    arg_types: Mapping[str, Mapping[str, Any]]


@dataclass
class StoryContext:
    """Mutable-during-construction record for one render or play invocation.

    Attributes:
        args: Current arg values (after target routing, the no-target bucket).
        loaded: Combined loader output, set by ``apply_loaders``.
        all_args: Undivided args when target routing is active.
        args_by_target: Args grouped by delivery target when routing is active.
        step: The step primitive, present only inside play functions.
        extra: Collaborator-owned values (canvas handles, view mode, ...).
    """

    id: str
    name: str
    title: str
    component_id: str | None = None
    parameters: Mapping[str, Any] = field(default_factory=dict)
    initial_args: Mapping[str, Any] = field(default_factory=dict)
    arg_types: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)
    args: dict[str, Any] = field(default_factory=dict)
    globals: dict[str, Any] = field(default_factory=dict)
    loaded: dict[str, Any] = field(default_factory=dict)
    all_args: dict[str, Any] | None = None
    args_by_target: dict[str, dict[str, Any]] | None = None
    step: Callable[..., Any] | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def evolve(self, **changes: Any) -> StoryContext:
        """Return a copy with *changes* applied; the original is untouched."""
        return dataclasses.replace(self, **changes)

    def merged(self, update: Mapping[str, Any] | None) -> StoryContext:
        """Apply a decorator's context update.

        Identity keys are ignored. Known fields are replaced; unknown keys
        are merged into :attr:`extra`.
        """
        if not update:
            return self.evolve()
        known = {f.name for f in dataclasses.fields(self)}
        changes: dict[str, Any] = {}
        extra = dict(self.extra)
        for key, value in update.items():
            if key in IDENTITY_KEYS:
                continue
            if key == "extra":
                extra.update(value)
            elif key in known:
                changes[key] = value
            else:
                extra[key] = value
        return self.evolve(extra=extra, **changes)
