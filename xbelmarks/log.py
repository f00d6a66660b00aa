from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from typing import Optional, TextIO

from rich.console import Console
from rich.logging import RichHandler

PLAIN_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Third-party loggers that are chatty at DEBUG while parsing.
_NOISY = ("bs4",)


@dataclass(frozen=True)
class LogConfig:
    level: str = "INFO"
    no_color: bool = False
    stream: Optional[TextIO] = None


def setup_logging(cfg: LogConfig) -> logging.Handler:
    """Route records to stderr so command output on stdout stays parseable."""
    level = getattr(logging, cfg.level.upper(), logging.INFO)
    stream = cfg.stream or sys.stderr

    root = logging.getLogger()
    root.setLevel(level)
    for h in list(root.handlers):
        root.removeHandler(h)

    force_no_color = cfg.no_color or os.getenv("NO_COLOR") is not None
    is_tty = hasattr(stream, "isatty") and stream.isatty()

    handler: logging.Handler
    if (not force_no_color) and is_tty:
        handler = RichHandler(
            console=Console(file=stream),
            rich_tracebacks=True,
            show_time=False,
            show_level=True,
            show_path=False,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
    else:
        handler = logging.StreamHandler(stream)
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT))

    handler.setLevel(level)
    root.addHandler(handler)
    for name in _NOISY:
        logging.getLogger(name).setLevel(max(level, logging.INFO))
    return handler


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
