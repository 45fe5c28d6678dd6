"""Value types of the dependency graph, the side table and side effects."""

from .dependency import (
    PRECOMPILED_KINDS,
    DependencyKind,
    EdgeAttributes,
    GraphDependency,
    LinkingStatus,
    PlatformCondition,
    TargetKey,
)
from .project import (
    BuildableFolder,
    FileElement,
    FileElementKind,
    GenerationOptions,
    Product,
    Project,
    SharedTestTarget,
    SharedTestTargetOptions,
    SourceFile,
    Target,
    TargetDependency,
    TargetDependencyKind,
    Workspace,
    WorkspaceWithProjects,
)
from .side_effects import (
    DescriptorState,
    DirectoryDescriptor,
    FileDescriptor,
    SideEffectDescriptor,
)
from .side_table import SideTable, SourceFileGlob, TargetFlags, TargetSideTable

__all__ = [
    "PRECOMPILED_KINDS",
    "BuildableFolder",
    "DependencyKind",
    "DescriptorState",
    "DirectoryDescriptor",
    "EdgeAttributes",
    "FileDescriptor",
    "FileElement",
    "FileElementKind",
    "GenerationOptions",
    "GraphDependency",
    "LinkingStatus",
    "PlatformCondition",
    "Product",
    "Project",
    "SharedTestTarget",
    "SharedTestTargetOptions",
    "SideEffectDescriptor",
    "SideTable",
    "SourceFile",
    "SourceFileGlob",
    "Target",
    "TargetDependency",
    "TargetDependencyKind",
    "TargetFlags",
    "TargetKey",
    "TargetSideTable",
    "Workspace",
    "WorkspaceWithProjects",
]
