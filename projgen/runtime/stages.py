"""
Pipeline stages implementing a template method.

``BaseStage.run`` fixes the execution flow of every stage (logging, state
bookkeeping, error wrapping); subclasses only implement ``execute``.

Any failure inside ``execute`` is re-raised as ``PipelineError`` carrying the
stage name and the original error. The side effects collected so far stay
unapplied.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional

from projgen.errors import PipelineError, ProjgenError
from projgen.graph.loader import GraphLoader
from projgen.mappers.base import (
    GraphMapping,
    ProjectMapping,
    ProjectWorkspaceMapper,
    WorkspaceMapping,
)
from projgen.runtime.effects import SideEffectApplier
from projgen.runtime.lifecycle import PipelineStage
from projgen.runtime.state import PipelineState

logger = logging.getLogger("projgen.runtime.stage")

# Errors a stage may raise besides ProjgenError
_STAGE_EXCEPTIONS = (
    ProjgenError,
    RuntimeError,
    ValueError,
    TypeError,
    KeyError,
    LookupError,
    OSError,
)


class BaseStage(ABC):
    """
    Abstract base class for pipeline stages.

    Execution Flow:
        1. _before_execute() - logging, state update
        2. execute() - **SUBCLASS IMPLEMENTS THIS**
        3. _after_execute() - bookkeeping

    Attributes:
        state: PipelineState shared by all stages of the run.
    """

    def __init__(self, state: PipelineState) -> None:
        self.state = state

    @property
    def stage(self) -> PipelineStage:
        """Infer the PipelineStage from the class name (``GraphStage`` -> GRAPH)."""
        class_name = self.__class__.__name__
        if class_name.endswith("Stage"):
            class_name = class_name[: -len("Stage")]
        try:
            return PipelineStage[class_name.upper()]
        except KeyError as exc:
            raise ValueError(
                f"Cannot map class {self.__class__.__name__} to PipelineStage"
            ) from exc

    def run(self) -> None:
        """Template method: execute the stage with the standard flow.

        Raises:
            PipelineError: If ``execute`` fails.
        """
        self._before_execute()
        try:
            self.execute()
        except _STAGE_EXCEPTIONS as error:
            logger.error("Stage %s failed: %s", self.stage.name, error)
            raise PipelineError(
                self.stage.name, error, discarded=len(self.state.side_effects)
            ) from error
        self._after_execute()

    @abstractmethod
    def execute(self) -> None:
        """Stage-specific work; read and update ``self.state``."""
        raise NotImplementedError

    def _before_execute(self) -> None:
        logger.info("=== Stage: %s ===", self.stage.name)
        self.state.current_stage = self.stage

    def _after_execute(self) -> None:
        self.state.completed_stages.append(self.stage)


class WorkspaceStage(BaseStage):
    def __init__(self, state: PipelineState, mapper: Optional[WorkspaceMapping]) -> None:
        super().__init__(state)
        self.mapper = mapper

    def execute(self) -> None:
        if self.mapper is None:
            return
        result = self.mapper.map(self.state.workspace, self.state.side_table)
        self.state.workspace = result.value
        self.state.side_table = result.side_table
        self.state.add_side_effects(result.side_effects)


class ProjectStage(BaseStage):
    def __init__(self, state: PipelineState, mapper: Optional[ProjectMapping]) -> None:
        super().__init__(state)
        self.mapper = mapper

    def execute(self) -> None:
        if self.mapper is None:
            return
        result = ProjectWorkspaceMapper(self.mapper).map(
            self.state.workspace, self.state.side_table
        )
        self.state.workspace = result.value
        self.state.side_table = result.side_table
        self.state.add_side_effects(result.side_effects)


class LoadStage(BaseStage):
    def execute(self) -> None:
        loader = GraphLoader(self.state.external_dependencies)
        self.state.graph = loader.load(self.state.workspace)


class GraphStage(BaseStage):
    def __init__(self, state: PipelineState, mapper: Optional[GraphMapping]) -> None:
        super().__init__(state)
        self.mapper = mapper

    def execute(self) -> None:
        if self.mapper is None:
            return
        result = self.mapper.map(self.state.require_graph(), self.state.side_table)
        self.state.graph = result.value
        self.state.side_table = result.side_table
        self.state.add_side_effects(result.side_effects)


class ApplyStage(BaseStage):
    def __init__(
        self,
        state: PipelineState,
        applier: SideEffectApplier,
        enabled: bool = True,
    ) -> None:
        super().__init__(state)
        self.applier = applier
        self.enabled = enabled

    def execute(self) -> None:
        if not self.enabled:
            logger.info("Skipping %d side effect(s)", len(self.state.side_effects))
            return
        self.state.applied = self.applier.apply(self.state.side_effects)
        logger.info("Applied %d side effect(s)", self.state.applied)
