"""The resolved dependency graph.

``Graph`` is a plain container: it owns the project map, the per-project
target map, the dependency adjacency and the edge attributes. Algorithms
live elsewhere (``traverser``, ``linter``, ``projgen.impact``) and operate on
it through the small set of helpers defined here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Set, Tuple

import networkx as nx

from projgen.errors import GraphIntegrityError
from projgen.graph.models import (
    EdgeAttributes,
    GraphDependency,
    Project,
    Target,
    TargetKey,
    Workspace,
)

logger = logging.getLogger("projgen.graph")

Edge = Tuple[GraphDependency, GraphDependency]

_DEFAULT_EDGE = EdgeAttributes()


@dataclass
class Graph:
    """Dependency graph of one workspace.

    Attributes:
        name: Workspace name.
        path: Workspace root (absolute).
        workspace: The workspace the graph was built from.
        projects: Projects keyed by their absolute path.
        targets: Targets keyed by project path, then target name.
        dependencies: Adjacency ``node -> set of direct dependencies``.
        edges: Attributes of ``(from, to)`` edges; missing entries mean
            a required, unconditional edge.
        external_dependencies: Resolution table of package-manager product
            names to the graph nodes they expand to.
    """

    name: str
    path: Path
    workspace: Workspace
    projects: Dict[Path, Project] = field(default_factory=dict)
    targets: Dict[Path, Dict[str, Target]] = field(default_factory=dict)
    dependencies: Dict[GraphDependency, Set[GraphDependency]] = field(
        default_factory=dict
    )
    edges: Dict[Edge, EdgeAttributes] = field(default_factory=dict)
    external_dependencies: Dict[str, List[GraphDependency]] = field(
        default_factory=dict
    )

    # ------------------------------------------------------------------ #
    #  Lookups                                                             #
    # ------------------------------------------------------------------ #
    def target(self, path: Path, name: str) -> Optional[Target]:
        return self.targets.get(Path(path), {}).get(name)

    def project(self, path: Path) -> Optional[Project]:
        return self.projects.get(Path(path))

    def project_named(self, name: str) -> Optional[Project]:
        for project in sorted(self.projects.values(), key=lambda p: str(p.path)):
            if project.name == name:
                return project
        return None

    def iter_targets(self) -> Iterator[Tuple[Project, Target]]:
        """Yield every ``(project, target)`` pair in a stable order."""
        for path in sorted(self.targets, key=str):
            project = self.projects.get(path)
            if project is None:
                continue
            for name in sorted(self.targets[path]):
                yield project, self.targets[path][name]

    def target_nodes(self) -> List[GraphDependency]:
        return [
            GraphDependency.target(target.name, project.path)
            for project, target in self.iter_targets()
        ]

    def all_nodes(self) -> Set[GraphDependency]:
        """Every node that appears in the graph: targets, keys and edge endpoints."""
        nodes: Set[GraphDependency] = set(self.target_nodes())
        for source, deps in self.dependencies.items():
            nodes.add(source)
            nodes.update(deps)
        return nodes

    # ------------------------------------------------------------------ #
    #  Edges                                                               #
    # ------------------------------------------------------------------ #
    def edge_attributes(
        self, source: GraphDependency, dependency: GraphDependency
    ) -> EdgeAttributes:
        return self.edges.get((source, dependency), _DEFAULT_EDGE)

    def add_dependency(
        self,
        source: GraphDependency,
        dependency: GraphDependency,
        attributes: Optional[EdgeAttributes] = None,
    ) -> None:
        self.dependencies.setdefault(source, set()).add(dependency)
        if attributes is not None and attributes != _DEFAULT_EDGE:
            self.edges[(source, dependency)] = attributes

    def linked_dependencies(self, source: GraphDependency) -> Iterator[GraphDependency]:
        """Direct dependencies of ``source`` whose edge is actually linked."""
        for dependency in self.dependencies.get(source, ()):
            if self.edge_attributes(source, dependency).is_linked:
                yield dependency

    # ------------------------------------------------------------------ #
    #  Mutation                                                            #
    # ------------------------------------------------------------------ #
    def remove_target(self, key: TargetKey) -> bool:
        """Remove a target from the project, the target map and the adjacency.

        Returns:
            bool: True if the target existed.
        """
        node = GraphDependency.target(key.name, key.path)
        project_targets = self.targets.get(key.path, {})
        existed = project_targets.pop(key.name, None) is not None

        project = self.projects.get(key.path)
        if project is not None:
            project.targets = [t for t in project.targets if t.name != key.name]

        self.dependencies.pop(node, None)
        for source, deps in self.dependencies.items():
            if node in deps:
                deps.discard(node)
                self.edges.pop((source, node), None)
        for edge in [edge for edge in self.edges if edge[0] == node]:
            del self.edges[edge]

        if existed:
            logger.debug("Removed target %s", key)
        return existed

    # ------------------------------------------------------------------ #
    #  Integrity / views                                                   #
    # ------------------------------------------------------------------ #
    def dangling_target_edges(self) -> List[str]:
        """Describe every target edge whose endpoint is missing from the target map."""
        dangling: List[str] = []
        for source in sorted(self.dependencies, key=GraphDependency.sort_key):
            for dependency in sorted(
                self.dependencies[source], key=GraphDependency.sort_key
            ):
                for node in (source, dependency):
                    key = node.target_key
                    if key is not None and self.target(key.path, key.name) is None:
                        dangling.append(f"{source.description} -> {dependency.description}")
                        break
        return dangling

    def check_integrity(self) -> None:
        """Raise GraphIntegrityError if a target edge references an unknown target."""
        dangling = self.dangling_target_edges()
        if dangling:
            raise GraphIntegrityError(dangling)

    def to_networkx(self, linked_only: bool = False) -> nx.DiGraph:
        """Build a ``networkx.DiGraph`` view: nodes are GraphDependency values.

        Args:
            linked_only: Skip edges whose linking status is ``none``.
        """
        view = nx.DiGraph()
        for node in self.all_nodes():
            view.add_node(node, kind=node.kind.value, label=node.display_name)
        for source, deps in self.dependencies.items():
            for dependency in deps:
                attributes = self.edge_attributes(source, dependency)
                if linked_only and not attributes.is_linked:
                    continue
                view.add_edge(
                    source,
                    dependency,
                    status=attributes.status.value,
                    condition=attributes.condition,
                )
        return view
