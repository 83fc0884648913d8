"""Built-in arg-type inference.

Contributes an arg-types enhancer that describes every initial arg by the
shape of its value, so stories get usable arg types without declaring them.
User-declared arg types always win over inferred ones.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from storyprep.domain.annotations import ProjectAnnotations
from storyprep.domain.context import EnhancerContext
from storyprep.plugins.hookspecs import hookimpl
from storyprep.services.merge import combine_parameters

logger = logging.getLogger(__name__)


def infer_type(value: Any, path: str, visited: frozenset[int] = frozenset()) -> dict[str, Any]:
    """Describe *value* as a ``{"name": ..., "value": ...}`` type record."""
    if isinstance(value, bool):
        return {"name": "boolean"}
    if isinstance(value, str):
        return {"name": "string"}
    if isinstance(value, int | float):
        return {"name": "number"}
    if callable(value):
        return {"name": "function"}
    if value is None:
        return {"name": "object", "value": {}}

    if id(value) in visited:
        logger.warning("Cyclic object found in %s, marking as 'other'", path)
        return {"name": "other", "value": "cyclic object"}
    seen = visited | {id(value)}

    if isinstance(value, list | tuple):
        if not value:
            return {"name": "array", "value": {"name": "other", "value": "unknown"}}
        return {"name": "array", "value": infer_type(value[0], path, seen)}
    if isinstance(value, Mapping):
        return {
            "name": "object",
            "value": {key: infer_type(field, path, seen) for key, field in value.items()},
        }
    return {"name": "other", "value": type(value).__name__}


def infer_arg_types(context: EnhancerContext) -> dict[str, Any]:
    """Arg-types enhancer: inferred types under the user's own declarations."""
    inferred = {
        key: {"name": key, "type": infer_type(arg, f"{context.id}.{key}")}
        for key, arg in context.initial_args.items()
    }
    names = {key: {"name": key} for key in context.arg_types}
    return combine_parameters(inferred, names, context.arg_types)


class ArgTypeInferencePlugin:
    """Registers :func:`infer_arg_types` as a project-level enhancer."""

    @hookimpl
    def project_annotations(self) -> ProjectAnnotations:
        return ProjectAnnotations(arg_types_enhancers=(infer_arg_types,))
