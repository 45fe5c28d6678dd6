"""CLI command linting the graph of a resolved workspace.

Reports dangling target references, dependency cycles, unresolved external
dependencies and duplicated bundle identifiers. With ``--fail-on-error`` the
process exits non-zero when an error-level issue is found, so CI pipelines
can enforce a clean graph.
"""

from __future__ import annotations

import logging

from projgen.cli.common import load_inputs
from projgen.errors import ProjgenError
from projgen.graph import GraphLinter, GraphLoader, Severity

logger = logging.getLogger("projgen.cli.lint")


def lint_command(args) -> int:
    """Execute the lint command.

    Args:
        args: Parsed command-line arguments.

    Returns:
        int: Exit code (0 for success, non-zero for failure).
    """
    limit_arg = getattr(args, "limit", None)
    fail_on_error = getattr(args, "fail_on_error", False)

    # <= 0 means "no limit"
    limit = limit_arg if isinstance(limit_arg, int) and limit_arg > 0 else None

    try:
        workspace, external = load_inputs(args)
        graph = GraphLoader(external).load(workspace)
    except (ProjgenError, OSError) as exc:
        logger.error("%s", exc)
        return 1

    issues = GraphLinter(cycle_limit=limit).lint(graph)
    if not issues:
        logger.info("Graph has no linting issues")
        return 0

    errors = 0
    for issue in issues:
        if issue.severity == Severity.ERROR:
            errors += 1
            logger.error("%s", issue.reason)
        else:
            logger.warning("%s", issue.reason)

    if errors and fail_on_error:
        logger.error("Graph lint failed with %d error(s)", errors)
        return 1
    return 0
