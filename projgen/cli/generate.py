"""CLI command running the full mapper pipeline over a resolved workspace."""

from __future__ import annotations

import logging
from pathlib import Path

from projgen.cli.common import load_config, load_inputs, write_json
from projgen.errors import ProjgenError
from projgen.graph.io import export_graph_json
from projgen.runtime import MapperPipeline

logger = logging.getLogger("projgen.cli.generate")


def generate_command(args) -> int:
    """Execute the generate command.

    Args:
        args: Parsed command-line arguments.

    Returns:
        int: Exit code (0 for success, 1 on failure).
    """
    dry_run = getattr(args, "dry_run", False)
    graph_output = getattr(args, "graph_output", None)
    report_output = getattr(args, "output", None)

    try:
        config = load_config(args)
        if dry_run:
            config = config.model_copy(update={"apply_side_effects": False})
        workspace, external = load_inputs(args)

        pipeline = MapperPipeline.from_config(config)
        result = pipeline.run(workspace, external)
    except (ProjgenError, OSError) as exc:
        logger.error("%s", exc)
        return 1

    if dry_run:
        for descriptor in result.side_effects:
            logger.info("Would apply: %s %s", descriptor.state.value, descriptor.path)

    pruned = [] if result.impact is None else result.impact.pruned
    logger.info(
        "Generated graph with %d target(s); %d pruned, %d side effect(s) applied",
        sum(1 for _ in result.graph.iter_targets()),
        len(pruned),
        result.applied,
    )

    if graph_output:
        export_graph_json(result.graph, Path(graph_output).expanduser())
    if report_output:
        write_json(
            {
                "elapsed": result.elapsed,
                "applied": result.applied,
                "side_effects": [
                    {"path": str(d.path), "state": d.state.value}
                    for d in result.side_effects
                ],
                "impact": result.impact.to_dict() if result.impact else None,
            },
            report_output,
        )
    return 0
