"""Graph mappers driven by impact analysis."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from projgen.config.schema import ImpactAnalysisConfig
from projgen.graph.graph import Graph
from projgen.graph.linter import check_graph_integrity
from projgen.graph.models import SideTable, TargetKey
from projgen.impact.engine import ImpactAnalyzer, ImpactResult
from projgen.impact.pruning import prune_unaffected, shared_test_hosts
from projgen.mappers.base import GraphMapping, MapResult

logger = logging.getLogger("projgen.mappers.impact")

AnalyzerFactory = Callable[[Graph, SideTable, ImpactAnalysisConfig], ImpactAnalyzer]


class ImpactAnalysisGraphMapper(GraphMapping):
    """Detaches generated test wrappers that a change does not affect.

    Does nothing when the workspace configures no shared test target or when
    no shared host exists in the ``install_to`` project.

    Attributes:
        last_result: Result of the most recent analysis, for reporting.
    """

    def __init__(
        self,
        config: ImpactAnalysisConfig,
        analyzer_factory: Optional[AnalyzerFactory] = None,
    ) -> None:
        self.config = config
        self.analyzer_factory: AnalyzerFactory = analyzer_factory or ImpactAnalyzer
        self.last_result: Optional[ImpactResult] = None

    def map(self, value: Graph, side_table: SideTable) -> MapResult[Graph]:
        options = value.workspace.generation_options.shared_test_target
        if options is None:
            return MapResult(value, side_table)

        project = value.project_named(options.install_to)
        if project is None:
            logger.warning(
                "Project %s holding shared test targets is not part of the graph",
                options.install_to,
            )
            return MapResult(value, side_table)

        hosts = shared_test_hosts(value, side_table, project.path)
        if not hosts:
            return MapResult(value, side_table)

        check_graph_integrity(value)
        analyzer = self.analyzer_factory(value, side_table, self.config)
        result = analyzer.analyze()
        result.pruned = prune_unaffected(
            value, side_table, result.affected, project.path, hosts
        )
        logger.info(
            "Pruned %d unaffected test wrapper(s) from %d host(s)",
            len(result.pruned),
            len(hosts),
        )
        self.last_result = result
        return MapResult(value, side_table)


class TreeShakePrunedTargetsGraphMapper(GraphMapping):
    """Removes targets marked ``prune`` from the graph."""

    def map(self, value: Graph, side_table: SideTable) -> MapResult[Graph]:
        pruned = [
            (project, target)
            for project, target in value.iter_targets()
            if target.prune
        ]
        for project, target in pruned:
            value.remove_target(TargetKey(project.path, target.name))
        if pruned:
            logger.info("Tree-shook %d pruned target(s)", len(pruned))
        return MapResult(value, side_table)
