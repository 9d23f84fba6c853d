"""structlog setup for the ontoctl CLI.

Logs always go to stderr so stdout stays clean for generated programs,
exported Turtle and ``--json`` documents. Stdlib loggers in the pipeline
modules and structlog loggers share one formatter, so both pick up the
``op`` and ``stage`` keys telemetry binds while a stage runs.

Human mode drops timestamps and the ``ontoctl.`` logger prefix; JSON mode
(``--log-json``) keeps every field.
"""

from __future__ import annotations

import logging
import sys
from typing import IO, Any

import structlog

# Libraries whose debug chatter would drown out pipeline logs under -v.
_THIRD_PARTY_LEVELS = {
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "rdflib": logging.ERROR,
    "mcp": logging.WARNING,
}


def _short_logger_name(_logger: Any, _method: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    name = event_dict.get("logger")
    if isinstance(name, str) and name.startswith("ontoctl."):
        event_dict["logger"] = name.removeprefix("ontoctl.")
    return event_dict


def configure_logging(*, verbose: bool = False, log_json: bool = False, stream: IO[str] | None = None) -> None:
    """Route stdlib and structlog records through one stderr handler.

    ``verbose`` opens ontoctl's own loggers to DEBUG; everything else stays
    at WARNING. Safe to call more than once: the root handler is replaced.
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    output = stream or sys.stderr
    renderer: structlog.types.Processor
    if log_json:
        shared_processors.insert(3, structlog.processors.TimeStamper(fmt="iso"))
        renderer = structlog.processors.JSONRenderer()
    else:
        shared_processors.append(_short_logger_name)
        renderer = structlog.dev.ConsoleRenderer(colors=output.isatty())

    structlog.configure(
        processors=[*shared_processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(output)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.WARNING)

    logging.getLogger("ontoctl").setLevel(logging.DEBUG if verbose else logging.WARNING)
    for name, level in _THIRD_PARTY_LEVELS.items():
        logging.getLogger(name).setLevel(level)
