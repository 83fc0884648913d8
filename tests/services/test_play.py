"""Tests for play functions, the step primitive, and step runners."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from storyprep.domain.context import StoryContext
from storyprep.services.play import StepRunner, build_play_function, compose_step_runners
from storyprep.services.telemetry import Span, _current_span, disable_telemetry, enable_telemetry


def _context() -> StoryContext:
    return StoryContext(id="a--b", name="B", title="A", args={"x": 1})


class TestBuildPlayFunction:
    @pytest.mark.asyncio
    async def test_steps_run_sequentially(self) -> None:
        events: list[str] = []

        async def step_a(context: StoryContext) -> None:
            events.append("a-start")
            await asyncio.sleep(0.01)
            events.append("a-end")

        async def step_b(context: StoryContext) -> None:
            events.append("b-start")
            events.append("b-end")

        async def play(context: StoryContext) -> None:
            await context.step("a", step_a)
            await context.step("b", step_b)

        await build_play_function(play)(_context())
        assert events == ["a-start", "a-end", "b-start", "b-end"]

    @pytest.mark.asyncio
    async def test_step_returns_callback_result(self) -> None:
        async def play(context: StoryContext) -> Any:
            return await context.step("compute", lambda ctx: ctx.args["x"] + 1)

        assert await build_play_function(play)(_context()) == 2

    @pytest.mark.asyncio
    async def test_nested_steps_share_context(self) -> None:
        seen: list[StoryContext] = []

        async def inner(context: StoryContext) -> None:
            seen.append(context)

        async def outer(context: StoryContext) -> None:
            seen.append(context)
            await context.step("inner", inner)

        async def play(context: StoryContext) -> None:
            seen.append(context)
            await context.step("outer", outer)

        await build_play_function(play)(_context())
        assert len(seen) == 3
        assert seen[0] is seen[1] is seen[2]
        assert seen[0].step is not None

    @pytest.mark.asyncio
    async def test_original_context_untouched(self) -> None:
        original = _context()
        await build_play_function(lambda ctx: None)(original)
        assert original.step is None

    @pytest.mark.asyncio
    async def test_failing_step_aborts_remaining(self) -> None:
        events: list[str] = []

        async def broken(context: StoryContext) -> None:
            msg = "click failed"
            raise AssertionError(msg)

        async def play(context: StoryContext) -> None:
            await context.step("broken", broken)
            events.append("after")

        with pytest.raises(AssertionError, match="click failed"):
            await build_play_function(play)(_context())
        assert events == []

    @pytest.mark.asyncio
    async def test_custom_run_step(self) -> None:
        labels: list[str] = []

        async def run_step(label: str, play: Any, context: StoryContext) -> Any:
            labels.append(label)
            return await play(context)

        async def noop(context: StoryContext) -> str:
            return "done"

        async def play(context: StoryContext) -> Any:
            return await context.step("custom", noop)

        assert await build_play_function(play, run_step)(_context()) == "done"
        assert labels == ["custom"]


class TestStepRunner:
    @pytest.mark.asyncio
    async def test_records_span_per_step(self) -> None:
        enable_telemetry()
        root = Span(name="root")
        token = _current_span.set(root)
        try:
            runner = StepRunner()
            await runner("first", lambda ctx: None, _context())
            await runner("second", lambda ctx: None, _context())
            assert [c.name for c in root.children] == ["step:first", "step:second"]
        finally:
            _current_span.reset(token)
            disable_telemetry()


class TestComposeStepRunners:
    @pytest.mark.asyncio
    async def test_first_runner_outermost(self) -> None:
        events: list[str] = []

        def make_runner(name: str) -> Any:
            async def runner(label: str, play: Any, context: StoryContext) -> Any:
                events.append(f"{name}-before:{label}")
                result = await play(context)
                events.append(f"{name}-after:{label}")
                return result

            return runner

        def callback(context: StoryContext) -> str:
            events.append("callback")
            return "ok"

        run_step = compose_step_runners([make_runner("r1"), make_runner("r2")])
        assert await run_step("click", callback, _context()) == "ok"
        assert events == [
            "r1-before:click",
            "r2-before:click",
            "callback",
            "r2-after:click",
            "r1-after:click",
        ]
