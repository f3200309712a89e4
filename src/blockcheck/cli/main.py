"""CLI entrypoint for blockcheck."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from blockcheck import __version__
from blockcheck.cache import CacheStore
from blockcheck.config import load_config
from blockcheck.constants.reporting import CLI_DESCRIPTION
from blockcheck.exceptions import BlocksError, ConfigError
from blockcheck.io import dump_json_text
from blockcheck.pipeline import ValidationSession
from blockcheck.reporting import PlanReporter


def build_parser() -> argparse.ArgumentParser:
    """Build top-level CLI parser."""
    parser = argparse.ArgumentParser(
        prog="blockcheck",
        description=CLI_DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    plan = subparsers.add_parser("plan", help="Show which validators would run for each block")
    plan.add_argument("blocks", nargs="*", help="Block names (default: every configured block)")
    plan.add_argument("-r", "--root", type=Path, default=Path("."), help="Project root path")
    plan.add_argument("-c", "--config", type=Path, help="Explicit config file")
    plan.add_argument("-f", "--force", action="store_true", help="Ignore cached results")
    plan.add_argument("-n", "--no-cache", action="store_true", help="Disable cache reads")
    plan.add_argument("-w", "--workers", type=int, default=None, help="Hashing worker threads")
    plan.add_argument("--json", action="store_true", help="Print decisions as JSON")
    plan.add_argument("--no-color", action="store_true", help="Disable colored output")
    plan.add_argument("-v", "--verbose", action="store_true", help="Show per-validator decisions and diagnostics")

    clear = subparsers.add_parser("clear-cache", help="Delete the project's validation cache")
    clear.add_argument("-r", "--root", type=Path, default=Path("."), help="Project root path")

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint."""
    parser = build_parser()
    args = parser.parse_args(argv)

    level = logging.DEBUG if getattr(args, "verbose", False) else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s %(message)s")

    if args.command == "clear-cache":
        return _handle_clear_cache(args)

    if args.command != "plan":
        parser.error(f"Unsupported command: {args.command}")

    try:
        config = load_config(args.root, args.config)
        session = ValidationSession(
            args.root,
            config,
            force=args.force,
            no_cache=args.no_cache,
            max_workers=args.workers,
        )
        decisions = session.plan(args.blocks)
    except ConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2
    except BlocksError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.json:
        sys.stdout.write(dump_json_text([decision.to_dict() for decision in decisions]))
        return 0

    use_color = not args.no_color and sys.stdout.isatty()
    print(PlanReporter(decisions, color=use_color, verbose=args.verbose).render())
    return 0


def _handle_clear_cache(args: argparse.Namespace) -> int:
    store = CacheStore(args.root.resolve(), disabled=True)
    existed = store.path.is_file()
    store.clear()
    print(f"Cache cleared: {store.path}" if existed else "No cache to clear.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
