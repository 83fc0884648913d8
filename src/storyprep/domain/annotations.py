"""Annotation layers — the three declarative inputs to story preparation.

Project, component and story annotations are supplied by an external
collaborator (an indexer, a test harness, a plugin) and are only ever read
here. They are frozen pydantic models; callable fields are validated as
callables and otherwise left opaque.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, Field


class BaseAnnotations(BaseModel):
    """Fields every layer may declare."""

    model_config = {"frozen": True}

    parameters: dict[str, Any] = Field(default_factory=dict)
    args: dict[str, Any] = Field(default_factory=dict)
    arg_types: dict[str, dict[str, Any]] = Field(default_factory=dict)
    decorators: tuple[Callable[..., Any], ...] = ()
    loaders: tuple[Callable[..., Any], ...] = ()
    render: Callable[..., Any] | None = None


class ProjectAnnotations(BaseAnnotations):
    """Project-wide layer. Enhancers and runner overrides live only here."""

    globals: dict[str, Any] = Field(default_factory=dict)
    global_types: dict[str, Any] = Field(default_factory=dict)
    arg_types_enhancers: tuple[Callable[..., Any], ...] = ()
    args_enhancers: tuple[Callable[..., Any], ...] = ()
    apply_decorators: Callable[..., Any] | None = None
    run_step: Callable[..., Any] | None = None


class ComponentAnnotations(BaseAnnotations):
    """Component layer, shared by every story of one component."""

    id: str | None = None
    title: str
    component: Any = None
    subcomponents: dict[str, Any] = Field(default_factory=dict)


class StoryAnnotations(BaseAnnotations):
    """Story layer — the most specific of the three.

    ``id`` and ``name`` may be omitted; they are derived from the component
    title and ``export_name`` at preparation time.
    """

    id: str | None = None
    name: str | None = None
    export_name: str | None = None
    user_story_fn: Callable[..., Any] | None = None
    play: Callable[..., Any] | None = None
