from __future__ import annotations

import os
import shutil
from dataclasses import dataclass

from rich.console import Console
from rich.theme import Theme as RichTheme


@dataclass(frozen=True)
class ConsoleOptions:
    # If None, use terminal size.
    width: int | None = None
    # If True, disable color.
    no_color: bool = False


WRAPPED_THEME = RichTheme(
    {
        "info": "cyan",
        "ok": "green",
        "warn": "yellow",
        "err": "red",
        "dim": "dim",
        "k": "bold",
        "fact": "magenta",
    }
)


def _env_width() -> int | None:
    # Override via env var (useful for CI / piping to files)
    raw = os.getenv("PLEX_WRAPPED_CONSOLE_WIDTH")
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


def make_console(opts: ConsoleOptions | None = None) -> Console:
    opts = opts or ConsoleOptions()

    width = opts.width if opts.width is not None else _env_width()
    if width is None:
        width = shutil.get_terminal_size(fallback=(120, 40)).columns

    return Console(
        width=width,
        theme=WRAPPED_THEME,
        color_system=None if opts.no_color else "auto",
        # Tables truncate with ellipsis instead of wrapping.
        soft_wrap=False,
        highlight=False,
    )
