"""Main CLI entry point for projgen.

Provides commands: generate, impact, lint
"""

import argparse
import logging
import sys
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from projgen.cli import generate_command, impact_command, lint_command

logger = logging.getLogger("projgen.cli")


def setup_logging(
    verbose: bool = False,
    console: Optional[Console] = None,
    log_file: Optional[str] = None,
) -> None:
    """Setup logging configuration with Rich integration.

    Args:
        verbose: Enable verbose logging.
        console: Rich Console instance for coordinated output (optional).
        log_file: Also write logs to this file (optional).
    """
    if verbose:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    handler = RichHandler(
        console=console,
        show_time=True,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
        tracebacks_show_locals=verbose,
        log_time_format="[%H:%M:%S]",
    )
    handlers: list = [handler]

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s [%(name)s] [%(levelname)s] %(message)s")
        )
        handlers.append(file_handler)

    logging.basicConfig(
        level=level,
        format="[%(name)s] [%(levelname)s] %(message)s",
        handlers=handlers,
    )


def _add_workspace_arguments(subparser: argparse.ArgumentParser) -> None:
    subparser.add_argument(
        "workspace",
        help="Resolved workspace JSON file (projects, targets and external dependencies)",
    )
    subparser.add_argument(
        "-c",
        "--config",
        help=(
            "Optional pipeline configuration. Can be a path to a TOML/JSON "
            "file or an inline TOML/JSON string. When omitted, built-in "
            "defaults are used."
        ),
    )


def _add_impact_arguments(subparser: argparse.ArgumentParser) -> None:
    subparser.add_argument(
        "--target-ref",
        help="Baseline git ref the changes are compared against",
    )
    subparser.add_argument(
        "--source-ref",
        help="Git ref holding the changes (default: HEAD)",
    )
    subparser.add_argument(
        "--debug",
        action="store_true",
        help="Compare the working tree against HEAD instead of two refs",
    )
    subparser.add_argument(
        "--changed-target",
        action="append",
        help="Mark a target as changed regardless of the diff (repeatable)",
    )
    subparser.add_argument(
        "--changed-product",
        action="append",
        help="Mark every target with this product name as changed (repeatable)",
    )
    subparser.add_argument(
        "--symlinks",
        action="store_true",
        help="Also attribute changes made through symbolic links",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Projgen - Project generation and impact analysis",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--log-file",
        help="Output log to file (optional). When specified, logs are written to this file in addition to console.",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Generate command
    generate_parser = subparsers.add_parser(
        "generate",
        help="Run the mapper pipeline and apply its side effects",
    )
    _add_workspace_arguments(generate_parser)
    _add_impact_arguments(generate_parser)
    generate_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Collect side effects without touching the filesystem",
    )
    generate_parser.add_argument(
        "--graph-output",
        help="Write the final graph as node-link JSON",
    )
    generate_parser.add_argument(
        "-o",
        "--output",
        help="Write a JSON run report",
    )

    # Impact command
    impact_parser = subparsers.add_parser(
        "impact",
        help="Report the targets affected by the changes between two refs",
    )
    _add_workspace_arguments(impact_parser)
    _add_impact_arguments(impact_parser)
    impact_parser.add_argument(
        "-o",
        "--output",
        help="Write the impact report as JSON",
    )
    impact_parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Do not print the affected targets table",
    )

    # Lint command
    lint_parser = subparsers.add_parser(
        "lint",
        help="Check the dependency graph for cycles and dangling references",
    )
    _add_workspace_arguments(lint_parser)
    lint_parser.add_argument(
        "--limit",
        type=int,
        default=20,
        help="Maximum number of cycles to report (default: 20, <=0 for no limit)",
    )
    lint_parser.add_argument(
        "--fail-on-error",
        action="store_true",
        help="Exit with non-zero status when an error-level issue is found",
    )
    return parser


def main(argv: Optional[list] = None) -> int:
    """Main CLI entry point.

    Returns:
        int: Exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose, log_file=getattr(args, "log_file", None))

    # Dispatch to subcommand
    if args.command == "generate":
        return generate_command(args)
    elif args.command == "impact":
        return impact_command(args)
    elif args.command == "lint":
        return lint_command(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
