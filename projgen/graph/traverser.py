"""Read-only query facade over a ``Graph``.

Queries are answered on a ``networkx.DiGraph`` view built once at
construction. The view is a snapshot: create a new traverser after mappers
mutated the graph.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Set

import networkx as nx

from projgen.graph.graph import Graph
from projgen.graph.models import GraphDependency, Product, Project, Target

logger = logging.getLogger("projgen.graph.traverser")


class GraphTraverser:
    """Dependency and dependent queries on a resolved graph."""

    def __init__(self, graph: Graph, linked_only: bool = True) -> None:
        self.graph = graph
        self.linked_only = linked_only
        self._view: nx.DiGraph = graph.to_networkx(linked_only=linked_only)

    @property
    def view(self) -> nx.DiGraph:
        return self._view

    # ------------------------------------------------------------------ #
    #  Targets                                                             #
    # ------------------------------------------------------------------ #
    def target(self, path: Path, name: str) -> Optional[Target]:
        return self.graph.target(path, name)

    def targets(self, product: Optional[Product] = None) -> List[GraphDependency]:
        """All target nodes, optionally restricted to one product kind."""
        return [
            GraphDependency.target(target.name, project.path)
            for project, target in self.graph.iter_targets()
            if product is None or target.product == product
        ]

    def project_targets(self, project: Project) -> List[GraphDependency]:
        return [GraphDependency.target(t.name, project.path) for t in project.targets]

    # ------------------------------------------------------------------ #
    #  Dependencies                                                        #
    # ------------------------------------------------------------------ #
    def direct_dependencies(self, node: GraphDependency) -> Set[GraphDependency]:
        if not self._view.has_node(node):
            return set()
        return set(self._view.successors(node))

    def direct_target_dependencies(self, node: GraphDependency) -> Set[GraphDependency]:
        return {dep for dep in self.direct_dependencies(node) if dep.is_target}

    def transitive_dependencies(self, node: GraphDependency) -> Set[GraphDependency]:
        if not self._view.has_node(node):
            return set()
        return set(nx.descendants(self._view, node))

    def precompiled_dependencies(self, node: GraphDependency) -> Set[GraphDependency]:
        """Transitive precompiled artifacts (frameworks, libraries, …) of ``node``."""
        return {dep for dep in self.transitive_dependencies(node) if dep.is_precompiled}

    # ------------------------------------------------------------------ #
    #  Dependents                                                          #
    # ------------------------------------------------------------------ #
    def direct_dependents(self, node: GraphDependency) -> Set[GraphDependency]:
        if not self._view.has_node(node):
            return set()
        return set(self._view.predecessors(node))

    def transitive_dependents(self, node: GraphDependency) -> Set[GraphDependency]:
        if not self._view.has_node(node):
            return set()
        return set(nx.ancestors(self._view, node))

    def dependents_of_any(self, nodes: Iterable[GraphDependency]) -> Set[GraphDependency]:
        """Union of ``nodes`` and everything that transitively depends on them."""
        result: Set[GraphDependency] = set()
        for node in nodes:
            result.add(node)
            result.update(self.transitive_dependents(node))
        return result

    # ------------------------------------------------------------------ #
    #  Artifacts and files                                                 #
    # ------------------------------------------------------------------ #
    def contains(self, node: GraphDependency) -> bool:
        """True if ``node`` is a target or an endpoint of any edge."""
        return self._view.has_node(node)

    def target_files(self, node: GraphDependency) -> List[Path]:
        """Concrete files (sources, resources, additional files) of a target."""
        key = node.target_key
        if key is None:
            return []
        target = self.graph.target(key.path, key.name)
        if target is None:
            return []
        files = [source.path for source in target.sources]
        files.extend(element.path for element in target.resources)
        files.extend(element.path for element in target.additional_files)
        return sorted(set(files))

    def cycles(self, limit: Optional[int] = None) -> List[List[GraphDependency]]:
        """Elementary cycles among nodes, at most ``limit`` of them."""
        found: List[List[GraphDependency]] = []
        for cycle in nx.simple_cycles(self._view):
            found.append(cycle)
            if limit is not None and len(found) >= limit:
                break
        return found
