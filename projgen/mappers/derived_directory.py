"""Cleanup of per-project derived directories before regeneration."""

from __future__ import annotations

import logging
from typing import List

from projgen.graph.models import (
    DescriptorState,
    DirectoryDescriptor,
    SideEffectDescriptor,
    SideTable,
    WorkspaceWithProjects,
)
from projgen.mappers.base import MapResult, WorkspaceMapping

logger = logging.getLogger("projgen.mappers.derived_directory")


class DeleteDerivedDirectoryWorkspaceMapper(WorkspaceMapping):
    """Emits a directory-absent side effect for every existing derived folder."""

    def __init__(self, derived_directory_name: str = "Derived") -> None:
        self.derived_directory_name = derived_directory_name

    def map(
        self, value: WorkspaceWithProjects, side_table: SideTable
    ) -> MapResult[WorkspaceWithProjects]:
        side_effects: List[SideEffectDescriptor] = []
        for project in value.projects:
            derived = project.path / self.derived_directory_name
            logger.debug("Checking derived directory %s", derived)
            if derived.is_dir():
                side_effects.append(DirectoryDescriptor(derived, DescriptorState.ABSENT))
        return MapResult(value, side_table, side_effects)
