"""Console logging with per-module context."""

import logging
import sys
from datetime import datetime
from typing import Optional

ROOT_LOGGER_NAME = "docindex"


class DocIndexLogFormatter(logging.Formatter):
    """Compact formatter that prefixes the module being indexed."""

    def __init__(self, use_colors: bool = True):
        super().__init__()
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")

        module_context = ""
        if hasattr(record, "doc_module"):
            module_context = f"[{record.doc_module}] "

        if self.use_colors:
            level_colors = {
                "DEBUG": "\033[36m",      # Cyan
                "INFO": "\033[32m",       # Green
                "WARNING": "\033[33m",    # Yellow
                "ERROR": "\033[31m",      # Red
                "CRITICAL": "\033[35m",   # Magenta
            }
            reset = "\033[0m"
            level_color = level_colors.get(record.levelname, "")
        else:
            level_color = ""
            reset = ""

        message = (
            f"{timestamp} {level_color}{record.levelname:8s}{reset} "
            f"{module_context}{record.getMessage()}"
        )
        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)
        return message


class ModuleContextLogger(logging.LoggerAdapter):
    """Logger adapter that tags records with the documented module."""

    def __init__(self, logger: logging.Logger, module: Optional[str] = None):
        super().__init__(logger, {})
        self.module = module

    def for_module(self, module: str) -> "ModuleContextLogger":
        return ModuleContextLogger(self.logger, module)

    def process(self, msg, kwargs):
        extra = kwargs.get("extra", {})
        if self.module:
            extra["doc_module"] = self.module
        kwargs["extra"] = extra
        return msg, kwargs


def get_logger(name: str) -> ModuleContextLogger:
    return ModuleContextLogger(logging.getLogger(name))


def setup_logging(log_level: str = "INFO", use_colors: Optional[bool] = None) -> logging.Logger:
    """
    Install the docindex formatter on the package logger.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        use_colors: Force ANSI colors on or off; defaults to stderr being a TTY

    Returns:
        The configured ``docindex`` logger
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(getattr(logging, log_level.upper()))

    # Close existing handlers before clearing (prevents file descriptor leak)
    for handler in logger.handlers[:]:
        handler.close()
        logger.removeHandler(handler)

    if use_colors is None:
        use_colors = sys.stderr.isatty() if hasattr(sys.stderr, "isatty") else False

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(DocIndexLogFormatter(use_colors=use_colors))
    logger.addHandler(handler)
    return logger
