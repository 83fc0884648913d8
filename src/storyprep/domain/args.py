"""Arg and arg-type rules — value mapping, conditional args, targets, defaults.

An arg type is a plain mapping describing one named arg. Recognized keys:

- ``mapping``: substitution table applied to the arg value before render.
- ``if``: conditional predicate, ``{"arg" | "global": name, <test>}`` where
  the test is at most one of ``exists``, ``eq``, ``neq``, ``truthy``.
- ``target``: delivery target name for multi-target stories.
- ``default_value``: deprecated inline default.

Everything here is pure: inputs are never mutated.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

NO_TARGET_NAME = ""
DEFAULT_VALUE_KEY = "default_value"

_MISSING: Any = object()
_TESTS = ("exists", "eq", "neq", "truthy")


def _lookup(mapping: Mapping[Any, Any], value: Any) -> Any:
    # Unhashable values, including tuples holding lists, pass through.
    try:
        return mapping[value] if value in mapping else value
    except TypeError:
        return value


def map_args(args: Mapping[str, Any], arg_types: Mapping[str, Mapping[str, Any]]) -> dict[str, Any]:
    """Replace each arg value found in its arg type's ``mapping`` table."""
    mapped: dict[str, Any] = {}
    for key, value in args.items():
        mapping = (arg_types.get(key) or {}).get("mapping")
        mapped[key] = _lookup(mapping, value) if mapping else value
    return mapped


def _test_value(condition: Mapping[str, Any], value: Any) -> bool:
    present = [name for name in _TESTS if name in condition]
    if len(present) > 1:
        msg = (
            f"Invalid conditional test {dict(condition)!r}: "
            f"use at most one of {', '.join(_TESTS)}"
        )
        raise ValueError(msg)

    if "eq" in condition:
        return value is not _MISSING and value == condition["eq"]
    if "neq" in condition:
        return value is _MISSING or value != condition["neq"]
    if "exists" in condition:
        exists = value is not _MISSING
        return exists if condition["exists"] else not exists

    truthy = value is not _MISSING and bool(value)
    return truthy if condition.get("truthy", True) else not truthy


def include_conditional_arg(
    arg_type: Mapping[str, Any],
    args: Mapping[str, Any],
    globals_: Mapping[str, Any],
) -> bool:
    """Whether an arg passes its arg type's ``if`` predicate.

    Args without a predicate are always included.

    Raises:
        ValueError: If the predicate names both or neither of ``arg`` and
            ``global``, or combines more than one test.
    """
    condition = arg_type.get("if")
    if not condition:
        return True

    has_arg = "arg" in condition
    has_global = "global" in condition
    if has_arg == has_global:
        msg = (
            f"Invalid conditional value {dict(condition)!r}: "
            "name exactly one of 'arg' or 'global'"
        )
        raise ValueError(msg)

    if has_arg:
        value = args.get(condition["arg"], _MISSING)
    else:
        value = globals_.get(condition["global"], _MISSING)
    return _test_value(condition, value)


def filter_conditional_args(
    args: Mapping[str, Any],
    arg_types: Mapping[str, Mapping[str, Any]],
    globals_: Mapping[str, Any],
) -> dict[str, Any]:
    """Drop args whose ``if`` predicate is not satisfied."""
    return {
        key: value
        for key, value in args.items()
        if include_conditional_arg(arg_types.get(key) or {}, args, globals_)
    }


def group_args_by_target(
    args: Mapping[str, Any],
    arg_types: Mapping[str, Mapping[str, Any]],
) -> dict[str, dict[str, Any]]:
    """Partition args by their arg type's ``target``.

    Args without a declared target land in the :data:`NO_TARGET_NAME` bucket.
    """
    grouped: dict[str, dict[str, Any]] = {}
    for name, value in args.items():
        target = (arg_types.get(name) or {}).get("target", NO_TARGET_NAME)
        grouped.setdefault(target, {})[name] = value
    return grouped


def get_values_from_arg_types(arg_types: Mapping[str, Mapping[str, Any]]) -> dict[str, Any]:
    """Collect the legacy inline ``default_value`` of every arg type carrying one."""
    return {
        name: arg_type[DEFAULT_VALUE_KEY]
        for name, arg_type in arg_types.items()
        if arg_type and DEFAULT_VALUE_KEY in arg_type
    }
