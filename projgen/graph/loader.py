"""Build a ``Graph`` from a resolved workspace.

The loader turns the declared ``TargetDependency`` values of every target into
``GraphDependency`` edges. ``external`` declarations are expanded through the
external dependency resolution table; unknown names become unresolved
``external`` nodes so they stay visible to the linter.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from projgen.graph.graph import Graph
from projgen.graph.models import (
    EdgeAttributes,
    GraphDependency,
    Project,
    Target,
    TargetDependency,
    TargetDependencyKind,
    WorkspaceWithProjects,
)

logger = logging.getLogger("projgen.graph.loader")

SDK_ROOT = Path("/System/Library/Frameworks")


class GraphLoader:
    """Resolves declared dependencies into graph nodes and edges."""

    def __init__(
        self,
        external_dependencies: Optional[Mapping[str, List[GraphDependency]]] = None,
    ) -> None:
        self.external_dependencies: Dict[str, List[GraphDependency]] = {
            name: list(nodes) for name, nodes in (external_dependencies or {}).items()
        }

    def load(self, value: WorkspaceWithProjects) -> Graph:
        workspace = value.workspace
        graph = Graph(
            name=workspace.name,
            path=Path(workspace.path),
            workspace=workspace,
            external_dependencies={
                name: list(nodes) for name, nodes in self.external_dependencies.items()
            },
        )

        for project in value.projects:
            graph.projects[project.path] = project
            graph.targets[project.path] = {t.name: t for t in project.targets}

        for project in value.projects:
            for target in project.targets:
                self._load_target(graph, project, target)

        logger.info(
            "Loaded graph '%s': %d projects, %d targets, %d nodes with dependencies",
            graph.name,
            len(graph.projects),
            sum(len(targets) for targets in graph.targets.values()),
            len(graph.dependencies),
        )
        return graph

    def _load_target(self, graph: Graph, project: Project, target: Target) -> None:
        source = GraphDependency.target(target.name, project.path)
        graph.dependencies.setdefault(source, set())
        for declared in target.dependencies:
            attributes = EdgeAttributes(declared.status, declared.condition)
            for node in self.resolve(declared, project):
                graph.add_dependency(source, node, attributes)

    def resolve(
        self, declared: TargetDependency, project: Project
    ) -> List[GraphDependency]:
        """Map one declared dependency of a target in ``project`` to graph nodes."""
        kind = declared.kind
        if kind == TargetDependencyKind.TARGET:
            return [GraphDependency.target(declared.name, project.path)]
        if kind == TargetDependencyKind.PROJECT:
            return [GraphDependency.target(declared.name, declared.path)]
        if kind == TargetDependencyKind.FRAMEWORK:
            return [GraphDependency.framework(declared.path)]
        if kind == TargetDependencyKind.LIBRARY:
            return [GraphDependency.library(declared.path)]
        if kind == TargetDependencyKind.XCFRAMEWORK:
            return [GraphDependency.xcframework(declared.path)]
        if kind == TargetDependencyKind.BUNDLE:
            return [GraphDependency.bundle(declared.path)]
        if kind == TargetDependencyKind.SDK:
            return [GraphDependency.sdk(declared.name, SDK_ROOT / declared.name)]
        if kind == TargetDependencyKind.EXTERNAL:
            resolved = self.external_dependencies.get(declared.name)
            if resolved is None:
                logger.warning(
                    "External dependency '%s' of project %s has no resolution",
                    declared.name,
                    project.name,
                )
                return [GraphDependency.external(declared.name)]
            return list(resolved)
        raise ValueError(f"Unsupported dependency kind: {kind}")
