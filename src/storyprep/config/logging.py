"""structlog configuration for storyprep.

Stdlib loggers (``logging.getLogger(__name__)`` in every module) and
structlog loggers (deprecation and telemetry events) share one handler on
the root logger, rendered either for humans or as JSON lines on stderr.

The engine never calls :func:`configure_logging` itself; the embedding
application does, usually from ``get_settings().logging``.
"""

from __future__ import annotations

import logging
import sys

import structlog

from storyprep.config.models import LoggingConfig

# Loggers kept at WARNING even in verbose mode.
_QUIET_LOGGERS = ("asyncio",)

_SHARED_PROCESSORS: tuple[structlog.types.Processor, ...] = (
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.UnicodeDecoder(),
)


def _renderer(log_json: bool) -> structlog.types.Processor:
    if log_json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_logging(
    config: LoggingConfig | None = None,
    *,
    verbose: bool | None = None,
    log_json: bool | None = None,
) -> None:
    """Route storyprep's stdlib and structlog output through one stderr handler.

    Explicit *verbose* / *log_json* win over the values in *config*.
    Calling this again replaces the previous handler.
    """
    config = config or LoggingConfig()
    verbose = config.verbose if verbose is None else verbose
    log_json = config.json_output if log_json is None else log_json

    structlog.configure(
        processors=[*_SHARED_PROCESSORS, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=list(_SHARED_PROCESSORS),
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_json),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.WARNING)

    logging.getLogger("storyprep").setLevel(logging.DEBUG if verbose else logging.WARNING)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
