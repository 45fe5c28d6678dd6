"""
Mapper pipeline driver.

``MapperPipeline`` creates the stage instances, runs them in order against a
shared ``PipelineState`` and assembles the result. Side effects collected by
mappers are only applied by the final APPLY stage, so a failure in any
earlier stage leaves the filesystem untouched.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from projgen.config.schema import PipelineConfig
from projgen.graph.graph import Graph
from projgen.graph.models import (
    GraphDependency,
    SideEffectDescriptor,
    SideTable,
    WorkspaceWithProjects,
)
from projgen.impact.engine import ImpactResult
from projgen.mappers import (
    CacheTargetFileGlobsProjectMapper,
    DeleteDerivedDirectoryWorkspaceMapper,
    GenerateSharedTestTargetAppHostFilesProjectMapper,
    GenerateSharedTestTargetMapper,
    GraphMapping,
    ImpactAnalysisGraphMapper,
    ProjectMapping,
    SequentialGraphMapper,
    SequentialProjectMapper,
    SequentialWorkspaceMapper,
    TreeShakePrunedTargetsGraphMapper,
    WorkspaceMapping,
)
from projgen.runtime.effects import SideEffectApplier
from projgen.runtime.lifecycle import PipelineStage
from projgen.runtime.stages import (
    ApplyStage,
    BaseStage,
    GraphStage,
    LoadStage,
    ProjectStage,
    WorkspaceStage,
)
from projgen.runtime.state import PipelineState

logger = logging.getLogger("projgen.runtime.pipeline")


@dataclass
class PipelineResult:
    graph: Graph
    side_table: SideTable
    side_effects: List[SideEffectDescriptor] = field(default_factory=list)
    applied: int = 0
    impact: Optional[ImpactResult] = None
    elapsed: float = 0.0


class MapperPipeline:
    """Runs workspace, project and graph mappers, then applies side effects."""

    def __init__(
        self,
        workspace_mapper: Optional[WorkspaceMapping] = None,
        project_mapper: Optional[ProjectMapping] = None,
        graph_mapper: Optional[GraphMapping] = None,
        applier: Optional[SideEffectApplier] = None,
        apply_side_effects: bool = True,
    ) -> None:
        self.workspace_mapper = workspace_mapper
        self.project_mapper = project_mapper
        self.graph_mapper = graph_mapper
        self.applier = applier or SideEffectApplier()
        self.apply_side_effects = apply_side_effects

    @classmethod
    def from_config(cls, config: PipelineConfig) -> "MapperPipeline":
        """Build the default mapper chain for a configuration."""
        graph_mappers: List[GraphMapping] = []
        if config.impact is not None:
            graph_mappers.append(ImpactAnalysisGraphMapper(config.impact))
        graph_mappers.append(TreeShakePrunedTargetsGraphMapper())

        return cls(
            workspace_mapper=SequentialWorkspaceMapper(
                [
                    DeleteDerivedDirectoryWorkspaceMapper(config.derived_directory_name),
                    GenerateSharedTestTargetMapper(),
                ]
            ),
            project_mapper=SequentialProjectMapper(
                [
                    CacheTargetFileGlobsProjectMapper(),
                    GenerateSharedTestTargetAppHostFilesProjectMapper(
                        derived_directory_name=config.derived_directory_name
                    ),
                ]
            ),
            graph_mapper=SequentialGraphMapper(graph_mappers),
            apply_side_effects=config.apply_side_effects,
        )

    def _create_stages(self, state: PipelineState) -> Dict[PipelineStage, BaseStage]:
        return {
            PipelineStage.WORKSPACE: WorkspaceStage(state, self.workspace_mapper),
            PipelineStage.PROJECT: ProjectStage(state, self.project_mapper),
            PipelineStage.LOAD: LoadStage(state),
            PipelineStage.GRAPH: GraphStage(state, self.graph_mapper),
            PipelineStage.APPLY: ApplyStage(
                state, self.applier, enabled=self.apply_side_effects
            ),
        }

    def run(
        self,
        workspace: WorkspaceWithProjects,
        external_dependencies: Optional[Dict[str, List[GraphDependency]]] = None,
        side_table: Optional[SideTable] = None,
    ) -> PipelineResult:
        """Run every stage in order.

        Raises:
            PipelineError: If a stage fails; no side effect is applied then.
        """
        start = time.perf_counter()
        state = PipelineState(
            workspace=workspace,
            external_dependencies=dict(external_dependencies or {}),
            side_table=side_table or SideTable(),
        )
        stages = self._create_stages(state)
        for stage in PipelineStage:
            stages[stage].run()

        elapsed = time.perf_counter() - start
        logger.info(
            "Pipeline finished in %.3fs with %d side effect(s)",
            elapsed,
            len(state.side_effects),
        )
        return PipelineResult(
            graph=state.require_graph(),
            side_table=state.side_table,
            side_effects=list(state.side_effects),
            applied=state.applied,
            impact=self._impact_result(),
            elapsed=elapsed,
        )

    def _impact_result(self) -> Optional[ImpactResult]:
        mappers = []
        if isinstance(self.graph_mapper, SequentialGraphMapper):
            mappers = self.graph_mapper.mappers
        elif self.graph_mapper is not None:
            mappers = [self.graph_mapper]
        for mapper in mappers:
            if isinstance(mapper, ImpactAnalysisGraphMapper):
                return mapper.last_result
        return None
