"""Structured logging: structlog over the stdlib logging tree.

Modules log through logging.getLogger(__name__); the app entry point uses
structlog.get_logger(). Both end up in one formatter, so a generation run's
bound context (generation id, project type) shows up on every line either way.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path

import structlog

# One line per HTTP request at INFO
_NOISY_LOGGERS = ("httpx", "httpcore")

_SHARED_PROCESSORS = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
]


def _formatter(as_json: bool) -> structlog.stdlib.ProcessorFormatter:
    renderer = structlog.processors.JSONRenderer() if as_json else structlog.dev.ConsoleRenderer()
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_SHARED_PROCESSORS,
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
    )


def _file_handler(file_path: str, max_mb: int, backups: int) -> logging.Handler | None:
    """Rotating handler, or None when the file cannot be opened."""
    path = Path(file_path).resolve()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        return RotatingFileHandler(path, maxBytes=max_mb * 1024 * 1024, backupCount=backups, encoding="utf-8")
    except OSError as e:
        sys.stderr.write(f"Log file disabled: could not open {path}: {e}\n")
        return None


def setup_logging(
    level: str = "INFO",
    file_path: str = "",
    rotation_max_mb: int = 5,
    rotation_backups: int = 3,
) -> None:
    """Route structlog and stdlib records through one handler set.

    JSON lines unless the level is DEBUG, which gets the console renderer.
    With file_path set, records are also written to a rotating file.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_SHARED_PROCESSORS,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    formatter = _formatter(as_json=log_level != logging.DEBUG)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if file_path.strip():
        file_handler = _file_handler(file_path.strip(), rotation_max_mb, rotation_backups)
        if file_handler is not None:
            handlers.append(file_handler)

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(log_level)
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(log_level)
        root.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))


@contextmanager
def generation_log_context(**values: object) -> Iterator[None]:
    """Bind key/values to every record logged inside the block, then restore."""
    with structlog.contextvars.bound_contextvars(**values):
        yield
