"""Mapper contracts and combinators.

A mapper receives a value (workspace, project or graph) and the side table,
and returns both, possibly transformed, together with the side effects it
wants applied. Mappers never perform side effects themselves and may raise
to abort the pipeline.

Example:
    class RenameMapper(ProjectMapping):
        def map(self, project, side_table):
            project.name = project.name.lower()
            return MapResult(project, side_table)
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Generic, List, Sequence, TypeVar

from projgen.graph.graph import Graph
from projgen.graph.models import (
    Project,
    SideEffectDescriptor,
    SideTable,
    WorkspaceWithProjects,
)

logger = logging.getLogger("projgen.mappers")

T = TypeVar("T")


@dataclass
class MapResult(Generic[T]):
    value: T
    side_table: SideTable
    side_effects: List[SideEffectDescriptor] = field(default_factory=list)


class WorkspaceMapping(ABC):
    """Maps a workspace together with all of its projects."""

    @abstractmethod
    def map(
        self, value: WorkspaceWithProjects, side_table: SideTable
    ) -> MapResult[WorkspaceWithProjects]:
        raise NotImplementedError

    def __repr__(self) -> str:
        return self.__class__.__name__


class ProjectMapping(ABC):
    """Maps a single project."""

    @abstractmethod
    def map(self, value: Project, side_table: SideTable) -> MapResult[Project]:
        raise NotImplementedError

    def __repr__(self) -> str:
        return self.__class__.__name__


class GraphMapping(ABC):
    """Maps the resolved dependency graph."""

    @abstractmethod
    def map(self, value: Graph, side_table: SideTable) -> MapResult[Graph]:
        raise NotImplementedError

    def __repr__(self) -> str:
        return self.__class__.__name__


class SequentialWorkspaceMapper(WorkspaceMapping):
    """Runs workspace mappers in order; each sees the previous one's output."""

    def __init__(self, mappers: Sequence[WorkspaceMapping]) -> None:
        self.mappers = list(mappers)

    def map(
        self, value: WorkspaceWithProjects, side_table: SideTable
    ) -> MapResult[WorkspaceWithProjects]:
        side_effects: List[SideEffectDescriptor] = []
        for mapper in self.mappers:
            logger.debug("Running workspace mapper %r", mapper)
            result = mapper.map(value, side_table)
            value, side_table = result.value, result.side_table
            side_effects.extend(result.side_effects)
        return MapResult(value, side_table, side_effects)


class SequentialProjectMapper(ProjectMapping):
    """Runs project mappers in order."""

    def __init__(self, mappers: Sequence[ProjectMapping]) -> None:
        self.mappers = list(mappers)

    def map(self, value: Project, side_table: SideTable) -> MapResult[Project]:
        side_effects: List[SideEffectDescriptor] = []
        for mapper in self.mappers:
            result = mapper.map(value, side_table)
            value, side_table = result.value, result.side_table
            side_effects.extend(result.side_effects)
        return MapResult(value, side_table, side_effects)


class SequentialGraphMapper(GraphMapping):
    """Runs graph mappers in order; each sees the previous one's output."""

    def __init__(self, mappers: Sequence[GraphMapping]) -> None:
        self.mappers = list(mappers)

    def map(self, value: Graph, side_table: SideTable) -> MapResult[Graph]:
        side_effects: List[SideEffectDescriptor] = []
        for mapper in self.mappers:
            logger.debug("Running graph mapper %r", mapper)
            result = mapper.map(value, side_table)
            value, side_table = result.value, result.side_table
            side_effects.extend(result.side_effects)
        return MapResult(value, side_table, side_effects)


class ProjectWorkspaceMapper(WorkspaceMapping):
    """Lifts a project mapper to workspace scope: it runs once per project."""

    def __init__(self, mapper: ProjectMapping) -> None:
        self.mapper = mapper

    def map(
        self, value: WorkspaceWithProjects, side_table: SideTable
    ) -> MapResult[WorkspaceWithProjects]:
        side_effects: List[SideEffectDescriptor] = []
        projects: List[Project] = []
        for project in value.projects:
            result = self.mapper.map(project, side_table)
            projects.append(result.value)
            side_table = result.side_table
            side_effects.extend(result.side_effects)
        value.projects = projects
        return MapResult(value, side_table, side_effects)

    def __repr__(self) -> str:
        return f"ProjectWorkspaceMapper({self.mapper!r})"
