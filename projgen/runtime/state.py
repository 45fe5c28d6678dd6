"""State shared by the stages of one pipeline run."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from projgen.graph.graph import Graph
from projgen.graph.models import (
    GraphDependency,
    SideEffectDescriptor,
    SideTable,
    WorkspaceWithProjects,
)
from projgen.runtime.lifecycle import PipelineStage

logger = logging.getLogger("projgen.runtime.state")


@dataclass
class PipelineState:
    """
    Centralized state container for a pipeline run.

    Attributes:
        workspace: Workspace and projects, rewritten by workspace/project mappers.
        external_dependencies: Resolution table handed to the graph loader.
        side_table: Per-target metadata threaded through every mapper.
        graph: Dependency graph, available from the LOAD stage on.
        side_effects: Descriptors collected so far, in emission order.
        current_stage: Stage being executed.
        completed_stages: Stages that finished successfully.
        applied: Number of side effects applied by the APPLY stage.
    """

    workspace: WorkspaceWithProjects
    external_dependencies: Dict[str, List[GraphDependency]] = field(default_factory=dict)
    side_table: SideTable = field(default_factory=SideTable)
    graph: Optional[Graph] = None
    side_effects: List[SideEffectDescriptor] = field(default_factory=list)
    current_stage: Optional[PipelineStage] = None
    completed_stages: List[PipelineStage] = field(default_factory=list)
    applied: int = 0

    def add_side_effects(self, descriptors: List[SideEffectDescriptor]) -> None:
        if descriptors:
            logger.debug(
                "[%s] collected %d side effect(s)", self.current_stage, len(descriptors)
            )
            self.side_effects.extend(descriptors)

    def require_graph(self) -> Graph:
        if self.graph is None:
            raise RuntimeError("Graph not loaded. Run the LOAD stage first.")
        return self.graph
