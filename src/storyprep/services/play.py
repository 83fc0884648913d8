"""Play functions and the instrumented step runner.

Inside a play function, ``await context.step(label, fn)`` runs *fn* with
the same play context (which itself carries ``step``, so steps nest).
Steps run strictly in the order they are awaited; a failing step aborts the
play call and its exception reaches the caller unchanged.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from storyprep.domain.context import StoryContext
from storyprep.domain.types import PlayFn, StepRunnerFn
from storyprep.services.telemetry import trace_span, traced

logger = logging.getLogger(__name__)


async def _resolve(result: Any) -> Any:
    if inspect.isawaitable(result):
        return await result
    return result


class StepRunner:
    """Default ``run_step``: one telemetry span and a debug log line per step."""

    async def __call__(
        self,
        label: str,
        play: PlayFn,
        context: StoryContext,
    ) -> Any:
        logger.debug("Step started: %s (%s)", label, context.id)
        with trace_span(f"step:{label}"):
            result = await _resolve(play(context))
        logger.debug("Step finished: %s (%s)", label, context.id)
        return result


def compose_step_runners(
    runners: list[StepRunnerFn],
) -> Callable[[str, PlayFn, StoryContext], Awaitable[Any]]:
    """Chain step runners so the first runner is outermost.

    Each runner receives a ``play`` that invokes the next runner, and the
    innermost ``play`` is the step's own callback.
    """

    async def run_step(label: str, play: PlayFn, context: StoryContext) -> Any:
        async def innermost(_: StoryContext) -> Any:
            return await _resolve(play(context))

        composed: PlayFn = innermost
        for runner in reversed(runners):
            composed = _wrap_runner(runner, label, composed)
        return await _resolve(composed(context))

    return run_step


def _wrap_runner(
    runner: StepRunnerFn,
    label: str,
    inner: PlayFn,
) -> PlayFn:
    async def wrapped(context: StoryContext) -> Any:
        return await _resolve(runner(label, inner, context))

    return wrapped


def build_play_function(
    play: PlayFn,
    run_step: StepRunnerFn | None = None,
) -> Callable[[StoryContext], Awaitable[Any]]:
    """Wrap *play* so it receives a context exposing ``step(label, fn)``."""
    runner = run_step or StepRunner()

    @traced
    async def play_function(context: StoryContext) -> Any:
        play_context = context.evolve()

        async def step(label: str, fn: PlayFn) -> Any:
            return await _resolve(runner(label, fn, play_context))

        play_context.step = step
        return await _resolve(play(play_context))

    return play_function
