"""Transitive closure of the changed set over linked dependency edges."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Dict, Iterable, List

from projgen.graph.graph import Graph
from projgen.graph.models import GraphDependency

logger = logging.getLogger("projgen.impact.closure")


def reverse_linked_edges(graph: Graph) -> Dict[GraphDependency, List[GraphDependency]]:
    """Map every node to the nodes that depend on it through a linked edge."""
    dependents: Dict[GraphDependency, List[GraphDependency]] = defaultdict(list)
    for source, dependencies in graph.dependencies.items():
        for dependency in dependencies:
            if graph.edge_attributes(source, dependency).is_linked:
                dependents[dependency].append(source)
    return dependents


def affected_memo(
    graph: Graph, changed: Iterable[GraphDependency]
) -> Dict[GraphDependency, bool]:
    """Decide for every node whether it is affected by ``changed``.

    A node is affected when it is changed itself or reaches a changed node
    through linked edges. Reachability is computed once, backwards from the
    changed set, with an explicit stack; the result holds an entry for every
    node of the graph plus every changed node.
    """
    memo: Dict[GraphDependency, bool] = {node: False for node in graph.all_nodes()}
    dependents = reverse_linked_edges(graph)

    stack = list(changed)
    while stack:
        current = stack.pop()
        if memo.get(current):
            continue
        memo[current] = True
        for dependent in dependents.get(current, ()):
            if not memo.get(dependent):
                stack.append(dependent)
    return memo
