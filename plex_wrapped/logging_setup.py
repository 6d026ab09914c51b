from __future__ import annotations

import logging
from pathlib import Path

from rich.logging import RichHandler

from .console import ConsoleOptions, make_console

# Tautulli and Overseerr calls go through requests; below DEBUG their per-request chatter stays at WARNING.
NOISY_LOGGERS = ("urllib3", "requests")

FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _file_handler(log_file: str, level: int) -> logging.Handler:
    path = Path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=FILE_FORMAT, datefmt=FILE_DATEFMT))
    return handler


def setup_logging(
    *,
    level: str = "INFO",
    log_file: str | None = None,
    console_width: int | None = None,
    no_color: bool = False,
) -> None:
    """Route every plex_wrapped logger to the terminal through Rich.

    Titles are printed without markup interpretation, call paths only at DEBUG.
    ``log_file`` adds a plain timestamped copy of the same records. Handlers from
    an earlier call are replaced.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    debugging = numeric_level <= logging.DEBUG

    rich_handler = RichHandler(
        console=make_console(ConsoleOptions(width=console_width, no_color=no_color)),
        markup=False,
        rich_tracebacks=True,
        show_path=debugging,
    )
    handlers: list[logging.Handler] = [rich_handler]
    if log_file:
        handlers.append(_file_handler(log_file, numeric_level))

    logging.basicConfig(level=numeric_level, handlers=handlers, force=True)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.NOTSET if debugging else logging.WARNING)
