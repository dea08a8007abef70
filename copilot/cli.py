#!/usr/bin/env python3
"""
turnkey-copilot CLI

A smart assistant that fixes common Turnkey integration blockers and
simulates policy behavior.

Usage:
    turnkey-copilot check ./config.json
    turnkey-copilot check ./policy.json --verbose

Exit codes:
    0 - report printed (whether or not issues were found)
    1 - file not found, parse failure, or any other error
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Optional, Sequence

from copilot.engine import analyze_file
from copilot.errors import CopilotError
from copilot.explain import build_explainer
from copilot.report import Palette, print_report, render_json
from copilot.settings import Settings

__version__ = "0.1.0"

EPILOG = """
Examples:
  $ turnkey-copilot check ./config.json
  $ turnkey-copilot check ./policy.json --verbose
"""


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="turnkey-copilot",
        description=(
            "A smart assistant that fixes common Turnkey integration blockers "
            "and simulates policy behavior"
        ),
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = ap.add_subparsers(dest="command")

    check = sub.add_parser("check", help="Check a Turnkey policy or configuration file for issues")
    check.add_argument("file", help="Path to the policy JSON or config file")
    check.add_argument("-v", "--verbose", action="store_true",
                       help="Show detailed output (AI explanation per issue)")
    check.add_argument("--json", action="store_true", help="Print the report as JSON")
    check.add_argument("--no-color", action="store_true", help="Disable ANSI colors")
    check.add_argument("--log-level", default=None, help="Logging level (default: COPILOT_LOG_LEVEL or WARNING)")
    return ap


def check_command(args: argparse.Namespace, settings: Settings) -> int:
    palette = Palette(enabled=not (args.no_color or settings.no_color or args.json))
    if not args.json:
        print(palette.info("🔍 Analyzing Turnkey configuration..."))

    report = analyze_file(args.file)

    if args.json:
        print(render_json(report))
        return 0

    if not args.verbose:
        print_report(report, palette=palette)
        return 0

    with build_explainer(settings) as explainer:
        print_report(report, explainer=explainer, palette=palette)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)

    if args.command is None:
        ap.print_help()
        return 0

    palette = Palette(enabled=not (args.no_color or "NO_COLOR" in os.environ))
    try:
        settings = Settings.load()
        level = (args.log_level or settings.log_level).upper()
        logging.basicConfig(
            level=getattr(logging, level, logging.WARNING),
            format="%(levelname)s %(name)s: %(message)s",
            stream=sys.stderr,
        )
        return check_command(args, settings)
    except CopilotError as exc:
        print(palette.error("Error:"), str(exc), file=sys.stderr)
        return 1
    except Exception as exc:
        logging.getLogger(__name__).debug("Unhandled error", exc_info=True)
        print(palette.error("Error:"), str(exc), file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
