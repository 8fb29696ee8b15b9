import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Optional

import structlog


def resolve_log_level(verbose: bool = False, quiet: bool = False) -> str:
    if verbose:
        return "DEBUG"
    if quiet:
        return "ERROR"
    return "INFO"


def setup_logging(
    log_level_name: str = "INFO",
    log_file_path: Optional[Path] = None,
    console_output: bool = True,
    json_output: bool = False,
) -> None:
    """
    Configure logging for the current invocation.
    - Uses structlog on top of the stdlib logging handlers.
    - Console output goes to stdout, human readable unless json_output is set.
    - A rotating file handler is added if log_file_path is given. Files whose
      name ends with '.json' get JSON lines.
    - The MEOW_LOG_LEVEL environment variable overrides log_level_name.

    Calling it again replaces the previous configuration.
    """
    effective_log_level_name = os.environ.get("MEOW_LOG_LEVEL", log_level_name).upper()
    log_level = getattr(logging, effective_log_level_name, logging.INFO)

    foreign_pre_chain = [
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    def _formatter(renderer) -> structlog.stdlib.ProcessorFormatter:
        return structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
            foreign_pre_chain=foreign_pre_chain,
        )

    handlers: list[logging.Handler] = []

    if log_file_path:
        log_file_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file_path,
            maxBytes=5 * 1024 * 1024,  # 5 MB
            backupCount=5,
        )
        if log_file_path.name.endswith(".json"):
            file_handler.setFormatter(_formatter(structlog.processors.JSONRenderer()))
        else:
            file_handler.setFormatter(_formatter(structlog.dev.ConsoleRenderer(colors=False)))
        handlers.append(file_handler)

    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        if json_output:
            console_handler.setFormatter(_formatter(structlog.processors.JSONRenderer()))
        else:
            console_handler.setFormatter(_formatter(structlog.dev.ConsoleRenderer()))
        handlers.append(console_handler)

    if not handlers:
        handlers.append(logging.NullHandler())

    # Mute noisy loggers
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("docker").setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(log_level)


def get_logger(name: str | None = None):
    return structlog.get_logger(name)
