"""Workspace, project and graph mappers."""

from .app_host_files import GenerateSharedTestTargetAppHostFilesProjectMapper
from .base import (
    GraphMapping,
    MapResult,
    ProjectMapping,
    ProjectWorkspaceMapper,
    SequentialGraphMapper,
    SequentialProjectMapper,
    SequentialWorkspaceMapper,
    WorkspaceMapping,
)
from .derived_directory import DeleteDerivedDirectoryWorkspaceMapper
from .file_globs import CacheTargetFileGlobsProjectMapper
from .impact import ImpactAnalysisGraphMapper, TreeShakePrunedTargetsGraphMapper
from .shared_test_target import GenerateSharedTestTargetMapper

__all__ = [
    "CacheTargetFileGlobsProjectMapper",
    "DeleteDerivedDirectoryWorkspaceMapper",
    "GenerateSharedTestTargetAppHostFilesProjectMapper",
    "GenerateSharedTestTargetMapper",
    "GraphMapping",
    "ImpactAnalysisGraphMapper",
    "MapResult",
    "ProjectMapping",
    "ProjectWorkspaceMapper",
    "SequentialGraphMapper",
    "SequentialProjectMapper",
    "SequentialWorkspaceMapper",
    "TreeShakePrunedTargetsGraphMapper",
    "WorkspaceMapping",
]
