"""Compose several project annotation sets into one.

Used when plugins contribute project-level annotations alongside the
project's own. Later sets take precedence for keyed records; sequences keep
every contribution in order.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

from storyprep.domain.annotations import ProjectAnnotations
from storyprep.services.merge import combine_parameters, merge_shallow
from storyprep.services.play import compose_step_runners


def _concat(annotations: Sequence[ProjectAnnotations], attr: str) -> tuple[Any, ...]:
    return tuple(item for a in annotations for item in getattr(a, attr))


def _last_defined(
    annotations: Sequence[ProjectAnnotations], attr: str
) -> Callable[..., Any] | None:
    for a in reversed(annotations):
        value = getattr(a, attr)
        if value is not None:
            return value
    return None


def compose_project_annotations(*annotations: ProjectAnnotations) -> ProjectAnnotations:
    """Merge project annotation sets, first to last.

    - parameters: deep-merged
    - args, arg_types, globals, global_types: shallow-merged
    - decorators, loaders, enhancers: concatenated in order
    - render, apply_decorators: last defined wins
    - run_step: every defined runner chained, first one outermost
    """
    runners = [a.run_step for a in annotations if a.run_step is not None]
    run_step: Callable[..., Any] | None
    if not runners:
        run_step = None
    elif len(runners) == 1:
        run_step = runners[0]
    else:
        run_step = compose_step_runners(runners)

    return ProjectAnnotations(
        parameters=combine_parameters(*(a.parameters for a in annotations)),
        args=merge_shallow(*(a.args for a in annotations)),
        arg_types=merge_shallow(*(a.arg_types for a in annotations)),
        globals=merge_shallow(*(a.globals for a in annotations)),
        global_types=merge_shallow(*(a.global_types for a in annotations)),
        decorators=_concat(annotations, "decorators"),
        loaders=_concat(annotations, "loaders"),
        arg_types_enhancers=_concat(annotations, "arg_types_enhancers"),
        args_enhancers=_concat(annotations, "args_enhancers"),
        render=_last_defined(annotations, "render"),
        apply_decorators=_last_defined(annotations, "apply_decorators"),
        run_step=run_step,
    )
