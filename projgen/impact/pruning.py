"""Detach unaffected generated test wrappers from shared test hosts."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Set

from projgen.graph.graph import Graph
from projgen.graph.models import GraphDependency, SideTable, TargetFlags, TargetKey

logger = logging.getLogger("projgen.impact.pruning")


def shared_test_hosts(graph: Graph, side_table: SideTable, project_path: Path) -> List[str]:
    """Names of the targets of ``project_path`` flagged as shared test hosts."""
    project = graph.project(project_path)
    if project is None:
        return []
    return [
        target.name
        for target in project.targets
        if side_table.has_flag(TargetFlags.SHARED_TEST_TARGET, project.path, target.name)
    ]


def prune_unaffected(
    graph: Graph,
    side_table: SideTable,
    affected: Set[GraphDependency],
    project_path: Path,
    host_names: List[str],
) -> List[TargetKey]:
    """Remove unaffected generated wrappers from the dependencies of each host.

    Every removed wrapper is marked ``prune`` so a later mapper can drop it
    from the graph.

    Returns:
        List[TargetKey]: Removed wrappers, in removal order.
    """
    pruned: List[TargetKey] = []
    for host_name in host_names:
        host = GraphDependency.target(host_name, project_path)
        dependencies = graph.dependencies.get(host)
        if not dependencies:
            continue

        before = len(dependencies)
        for member in sorted(dependencies, key=GraphDependency.sort_key):
            key = member.target_key
            if member in affected or key is None:
                continue
            if not side_table.has_flag(
                TargetFlags.SHARED_TEST_TARGET_GENERATED_FRAMEWORK, key.path, key.name
            ):
                continue
            dependencies.discard(member)
            graph.edges.pop((host, member), None)
            target = graph.target(key.path, key.name)
            if target is not None:
                target.prune = True
            pruned.append(key)

        logger.debug(
            "Host %s keeps %d of %d dependencies", host_name, len(dependencies), before
        )
    return pruned
