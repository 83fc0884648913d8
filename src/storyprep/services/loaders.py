"""Loader aggregation — fork all loaders, join, merge in declaration order.

Loaders run concurrently as one task each. Their results are folded in the
order the loaders were declared (project, component, story), never in
completion order, so a later-declared loader wins key conflicts.

The first loader failure cancels every task still pending, waits for them
to finish, and propagates unchanged; no partial ``loaded`` record is
produced. There is no timeout: a hung loader hangs the call.
Callers own timeouts and retries.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Mapping, Sequence
from typing import Any

from storyprep.domain.context import StoryContext
from storyprep.domain.types import Loader
from storyprep.services.telemetry import trace_span

logger = logging.getLogger(__name__)


async def _run_loader(loader: Loader, context: StoryContext) -> Mapping[str, Any] | None:
    result = loader(context)
    if inspect.isawaitable(result):
        result = await result
    return result


async def apply_loaders(
    loaders: Sequence[Loader],
    context: StoryContext,
) -> StoryContext:
    """Run *loaders* against *context* and return a copy with ``loaded`` set."""
    with trace_span("loaders") as span:
        tasks = [asyncio.ensure_future(_run_loader(loader, context)) for loader in loaders]
        try:
            results = await asyncio.gather(*tasks)
        except BaseException:
            pending = [task for task in tasks if not task.done()]
            for task in pending:
                task.cancel()
            # Collect the cancelled tasks so their outcomes are retrieved.
            await asyncio.gather(*pending, return_exceptions=True)
            raise

        loaded: dict[str, Any] = {}
        for result in results:
            if result:
                loaded.update(result)

        if span is not None:
            span.annotate("loaders", len(tasks))
            span.annotate("keys", sorted(loaded))

    logger.debug("Loaded %d keys from %d loaders for %s", len(loaded), len(tasks), context.id)
    return context.evolve(loaded=loaded)
