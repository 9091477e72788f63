from __future__ import annotations

import logging
import sys
from pathlib import Path

import structlog
from structlog.types import Processor


def _build_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ]


def setup_logging(
    level: str = "INFO",
    json_format: bool = False,
    log_dir: str | Path | None = None,
) -> structlog.stdlib.BoundLogger:
    """Configure structlog output.

    With ``log_dir`` set, events go to ``log_dir/jappend.ndjson``; otherwise to
    stderr. ``json_format`` selects NDJSON lines over the console renderer.
    """

    handler: logging.Handler
    if log_dir is not None:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_path / "jappend.ndjson", encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)

    renderer: Processor = (
        structlog.processors.JSONRenderer()
        if json_format
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    formatter = structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
        ],
    )
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(level.upper())
    root_logger.addHandler(handler)

    structlog.configure(
        processors=_build_processors(),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    return structlog.stdlib.get_logger("jappend")
