# # CLI entrypoint: parse args, load config, run orchestrator.

from __future__ import annotations

import argparse
import dataclasses
from pathlib import Path
from typing import List, Optional

from .config import Config, load_config
from .debug_views import render_debug_sample
from .logging_setup import setup_logging
from .orchestrator import load_events, run


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser("plex-wrapped")

    # # Core IO
    p.add_argument("--config", default="config.json")
    p.add_argument("--history-file", default=None, help="JSON export of Tautulli history records")
    p.add_argument("--enrichment-file", default=None, help="JSON request stats (summary or raw requests)")
    p.add_argument("--user-id", type=int, default=None)
    p.add_argument("--user-name", default=None)
    p.add_argument("--year", type=int, default=None)
    p.add_argument("--timezone", default=None)
    p.add_argument("--out", default=None)

    # # CLI
    p.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    p.add_argument("--log-file", default=None)
    p.add_argument("--console-width", type=int, default=None)
    p.add_argument("--no-color", action="store_true")
    p.add_argument("--quiet", action="store_true", help="Skip the terminal summary")
    p.add_argument("--debug-sample", action="store_true", help="Prints sample events and exits")

    # # Feature toggles
    p.add_argument("--no-overseerr", action="store_true")
    p.add_argument("--strict", action="store_true", help="Fail on multi-user or out-of-year events")

    return p


def apply_overrides(cfg: Config, args: argparse.Namespace) -> Config:
    if args.history_file is not None:
        cfg.history_file = args.history_file
    if args.enrichment_file is not None:
        cfg.enrichment_file = args.enrichment_file
    if args.user_id is not None:
        cfg.user_id = args.user_id
    if args.user_name is not None:
        cfg.user_name = args.user_name
    if args.year is not None:
        cfg.year = args.year
    if args.timezone is not None:
        cfg.timezone = args.timezone
    if args.out is not None:
        cfg.out_dir = args.out
    if args.no_overseerr:
        cfg.enable_overseerr = False
        cfg.enrichment_file = ""
    if args.strict:
        cfg.engine = dataclasses.replace(cfg.engine, strict=True)
    return cfg


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)

    setup_logging(
        level=args.log_level,
        log_file=args.log_file,
        console_width=args.console_width,
        no_color=args.no_color,
    )

    cfg = apply_overrides(load_config(Path(args.config)), args)

    try:
        if args.debug_sample:
            render_debug_sample(
                load_events(cfg),
                width=args.console_width,
                no_color=args.no_color,
                timezone=cfg.timezone,
            )
            raise SystemExit(0)

        run(cfg, show_summary=not args.quiet)
    except (ValueError, FileNotFoundError) as exc:
        raise SystemExit(f"plex-wrapped: {exc}") from exc


if __name__ == "__main__":
    main()
