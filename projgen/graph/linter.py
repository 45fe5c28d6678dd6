"""Graph linting: cycles, dangling target edges and unresolved externals."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

import networkx as nx

from projgen.graph.graph import Graph
from projgen.graph.models import DependencyKind

logger = logging.getLogger("projgen.graph.linter")


class Severity(str, Enum):
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class LintingIssue:
    reason: str
    severity: Severity

    def __str__(self) -> str:
        return f"[{self.severity.value}] {self.reason}"


def check_graph_integrity(graph: Graph) -> None:
    """Raise GraphIntegrityError when a target edge points at an unknown target.

    Mappers that walk target dependencies call this before trusting the
    adjacency.
    """
    graph.check_integrity()


class GraphLinter:
    """Collects linting issues for a graph."""

    def __init__(self, cycle_limit: Optional[int] = 20) -> None:
        self.cycle_limit = cycle_limit

    def lint(self, graph: Graph) -> List[LintingIssue]:
        issues: List[LintingIssue] = []
        issues.extend(self._lint_dangling(graph))
        issues.extend(self._lint_cycles(graph))
        issues.extend(self._lint_unresolved_externals(graph))
        issues.extend(self._lint_bundle_ids(graph))
        logger.info("Graph lint found %d issue(s)", len(issues))
        return issues

    def _lint_dangling(self, graph: Graph) -> List[LintingIssue]:
        return [
            LintingIssue(f"Dependency references an unknown target: {edge}", Severity.ERROR)
            for edge in graph.dangling_target_edges()
        ]

    def _lint_cycles(self, graph: Graph) -> List[LintingIssue]:
        view = graph.to_networkx(linked_only=True)
        issues: List[LintingIssue] = []
        for cycle in nx.simple_cycles(view):
            names = [node.display_name for node in cycle]
            names.append(names[0])
            issues.append(
                LintingIssue(
                    "Found circular dependency between targets: " + " -> ".join(names),
                    Severity.ERROR,
                )
            )
            if self.cycle_limit is not None and len(issues) >= self.cycle_limit:
                logger.warning("Cycle report truncated at %d", self.cycle_limit)
                break
        return issues

    def _lint_unresolved_externals(self, graph: Graph) -> List[LintingIssue]:
        names = sorted(
            {
                node.display_name
                for node in graph.all_nodes()
                if node.kind == DependencyKind.EXTERNAL
            }
        )
        return [
            LintingIssue(
                f"External dependency '{name}' is not resolved; "
                "run dependency resolution before generating.",
                Severity.WARNING,
            )
            for name in names
        ]

    def _lint_bundle_ids(self, graph: Graph) -> List[LintingIssue]:
        owners: Dict[str, List[str]] = defaultdict(list)
        for project, target in graph.iter_targets():
            if target.bundle_id:
                owners[target.bundle_id].append(f"{project.name}/{target.name}")
        return [
            LintingIssue(
                f"Bundle id '{bundle_id}' is shared by targets: {', '.join(targets)}",
                Severity.WARNING,
            )
            for bundle_id, targets in sorted(owners.items())
            if len(targets) > 1
        ]
