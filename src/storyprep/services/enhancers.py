"""Enhancer pipelines — arg types first, then default values, then args.

Both pipelines are strict left folds: enhancer *n* sees the output of
enhancer *n-1*, so reordering enhancers changes results.

The two folds differ in how output accumulates:

- arg-type enhancers *replace* the accumulated mapping.
- args enhancers are *spread over* the accumulated mapping, so a later
  enhancer's key beats an explicitly declared arg of the same name.
"""

from __future__ import annotations

import dataclasses
import functools
import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from storyprep.domain.args import get_values_from_arg_types
from storyprep.domain.context import EnhancerContext
from storyprep.domain.types import ArgsEnhancer, ArgTypesEnhancer
from storyprep.services.deprecation import ARG_TYPE_DEFAULT_VALUE, DeprecationSink

logger = logging.getLogger(__name__)


def enhance_arg_types(
    context: EnhancerContext,
    enhancers: Sequence[ArgTypesEnhancer],
) -> dict[str, dict[str, Any]]:
    """Fold *enhancers* over ``context.arg_types``; each result replaces the last."""

    def step(
        accumulated: Mapping[str, Mapping[str, Any]], enhancer: Callable[..., Any]
    ) -> dict[str, Any]:
        return dict(enhancer(dataclasses.replace(context, arg_types=accumulated)))

    return functools.reduce(step, enhancers, dict(context.arg_types))


def derive_default_args(
    arg_types: Mapping[str, Mapping[str, Any]],
    sink: DeprecationSink,
) -> dict[str, Any]:
    """Extract legacy inline defaults, signalling the deprecation once per process."""
    defaults = get_values_from_arg_types(arg_types)
    if defaults:
        logger.debug("Derived default args from arg types: %s", sorted(defaults))
        sink.warn_once(ARG_TYPE_DEFAULT_VALUE)
    return defaults


def enhance_args(
    context: EnhancerContext,
    enhancers: Sequence[ArgsEnhancer],
    *,
    defaults: Mapping[str, Any],
) -> dict[str, Any]:
    """Fold *enhancers* over ``{**defaults, **context.initial_args}``.

    Each enhancer's output is spread on top of the accumulator. An enhancer
    returning ``{"x": 9}`` therefore overrides an explicit ``args={"x": 1}``.
    """
    seed = {**defaults, **context.initial_args}

    def step(accumulated: dict[str, Any], enhancer: Callable[..., Any]) -> dict[str, Any]:
        return {**accumulated, **enhancer(dataclasses.replace(context, initial_args=accumulated))}

    return functools.reduce(step, enhancers, seed)
