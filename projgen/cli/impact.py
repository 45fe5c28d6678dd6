"""CLI command reporting the targets affected by a change.

The workspace is prepared exactly as for generation (shared test targets,
glob caching) so that generated wrappers show up in the report, but no side
effect is applied.
"""

from __future__ import annotations

import logging
from typing import Optional

from rich.console import Console
from rich.table import Table

from projgen.cli.common import load_config, load_inputs, write_json
from projgen.errors import MissingBaselineRefError, ProjgenError
from projgen.impact import ImpactAnalyzer, ImpactResult
from projgen.mappers import (
    CacheTargetFileGlobsProjectMapper,
    GenerateSharedTestTargetMapper,
)
from projgen.runtime import MapperPipeline

logger = logging.getLogger("projgen.cli.impact")


def render_result(result: ImpactResult, console: Optional[Console] = None) -> None:
    console = console or Console()
    if result.short_circuited:
        console.print(
            f"Workspace configuration changed ({len(result.config_files)} file(s)): "
            "every target is affected."
        )

    table = Table(title=f"Affected targets ({len(result.affected_targets)})")
    table.add_column("Target")
    table.add_column("Project")
    table.add_column("Reason")
    for node in result.affected_targets:
        if node in result.from_sources:
            reason = "sources"
        elif node in result.from_lockfile:
            reason = "lockfile"
        elif node in result.from_overrides:
            reason = "marked"
        elif node in result.initially_changed:
            reason = "configuration"
        else:
            reason = "dependency"
        table.add_row(node.name or "", str(node.path), reason)
    console.print(table)


def impact_command(args) -> int:
    """Execute the impact command.

    Args:
        args: Parsed command-line arguments.

    Returns:
        int: Exit code (0 for success, 1 on failure).
    """
    try:
        config = load_config(args)
        if config.impact is None:
            raise MissingBaselineRefError()
        workspace, external = load_inputs(args)

        pipeline = MapperPipeline(
            workspace_mapper=GenerateSharedTestTargetMapper(),
            project_mapper=CacheTargetFileGlobsProjectMapper(),
            apply_side_effects=False,
        )
        prepared = pipeline.run(workspace, external)

        analyzer = ImpactAnalyzer(prepared.graph, prepared.side_table, config.impact)
        result = analyzer.analyze()
    except (ProjgenError, OSError) as exc:
        logger.error("%s", exc)
        return 1

    if not getattr(args, "quiet", False):
        render_result(result)

    output = getattr(args, "output", None)
    if output:
        write_json(result.to_dict(), output)
    return 0
