"""Emit-once deprecation signalling.

The process-wide :data:`DEPRECATIONS` sink is the only piece of global
mutable state in the engine. It is created at import time and never reset;
each deprecation key fires at most once for the process lifetime, however
many stories are prepared and from however many threads.

Each emission is both a :class:`DeprecationWarning` (for Python tooling) and
a structlog warning event (for operators).
"""

from __future__ import annotations

import threading
import warnings

import structlog

ARG_TYPE_DEFAULT_VALUE = "arg_type.default_value"

MESSAGES: dict[str, str] = {
    ARG_TYPE_DEFAULT_VALUE: (
        "`arg_type['default_value']` is deprecated and will be removed; "
        "declare initial values in `args` instead."
    ),
}


class DeprecationSink:
    """Records which deprecations have fired and fires each one only once."""

    def __init__(self) -> None:
        self._emitted: set[str] = set()
        self._lock = threading.Lock()
        self._log = structlog.get_logger("storyprep.deprecation")

    @property
    def emitted(self) -> frozenset[str]:
        """Keys already signalled."""
        with self._lock:
            return frozenset(self._emitted)

    def warn_once(self, key: str, message: str | None = None) -> bool:
        """Signal deprecation *key* unless it already fired.

        Returns True when this call emitted the signal.
        """
        with self._lock:
            if key in self._emitted:
                return False
            self._emitted.add(key)

        text = message or MESSAGES.get(key, key)
        self._log.warning("deprecation", key=key, message=text)
        warnings.warn(text, DeprecationWarning, stacklevel=3)
        return True


DEPRECATIONS = DeprecationSink()
