"""Read resolved workspace descriptions and export graphs.

The resolved workspace is the hand-off format of the manifest loader: a JSON
document with the workspace, its projects and the external dependency
resolution table. Documents are validated with Pydantic before being
converted into the graph model dataclasses.

Relative paths are accepted for convenience: the workspace path is resolved
against the document's directory, project paths against the workspace path
and file paths against their project's path.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import networkx as nx
from pydantic import BaseModel, Field, ValidationError, field_validator

from projgen.errors import WorkspaceFormatError
from projgen.graph.graph import Graph
from projgen.graph.models import (
    BuildableFolder,
    DependencyKind,
    FileElement,
    FileElementKind,
    GenerationOptions,
    GraphDependency,
    LinkingStatus,
    PlatformCondition,
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

logger = logging.getLogger("projgen.graph.io")


# =============================================================================
# Document schema
# =============================================================================


class DependencySpec(BaseModel):
    kind: TargetDependencyKind
    name: Optional[str] = None
    path: Optional[str] = None
    status: LinkingStatus = LinkingStatus.REQUIRED
    platform_filters: List[str] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("dependency name must not be empty")
        return v


class SourceSpec(BaseModel):
    path: str
    glob: Optional[str] = None
    excluding: List[str] = Field(default_factory=list)


class FileElementSpec(BaseModel):
    path: str
    kind: FileElementKind = FileElementKind.FILE
    glob: Optional[str] = None


class BuildableFolderSpec(BaseModel):
    path: str
    exceptions: List[str] = Field(default_factory=list)


class TargetSpec(BaseModel):
    name: str
    product: Product
    product_name: Optional[str] = None
    bundle_id: Optional[str] = None
    dependencies: List[DependencySpec] = Field(default_factory=list)
    sources: List[Union[str, SourceSpec]] = Field(default_factory=list)
    resources: List[Union[str, FileElementSpec]] = Field(default_factory=list)
    additional_files: List[Union[str, FileElementSpec]] = Field(default_factory=list)
    buildable_folders: List[Union[str, BuildableFolderSpec]] = Field(
        default_factory=list
    )
    settings: Dict[str, Any] = Field(default_factory=dict)

    model_config = {"extra": "allow"}


class ProjectSpec(BaseModel):
    path: str
    name: str
    targets: List[TargetSpec] = Field(default_factory=list)
    settings: Dict[str, Any] = Field(default_factory=dict)
    podspec_path: Optional[str] = None

    model_config = {"extra": "allow"}

    @field_validator("targets")
    @classmethod
    def validate_unique_targets(cls, v: List[TargetSpec]) -> List[TargetSpec]:
        seen = set()
        for target in v:
            if target.name in seen:
                raise ValueError(f"duplicate target name '{target.name}'")
            seen.add(target.name)
        return v


class SharedTestTargetSpec(BaseModel):
    name: str
    tests_pattern: str
    except_pattern: Optional[str] = None
    count: int = Field(default=1, ge=1)
    use: List[str] = Field(default_factory=list)
    need_app_host: bool = False


class SharedTestTargetOptionsSpec(BaseModel):
    install_to: str
    targets: List[SharedTestTargetSpec] = Field(default_factory=list)


class GenerationOptionsSpec(BaseModel):
    shared_test_target: Optional[SharedTestTargetOptionsSpec] = None


class WorkspaceSpec(BaseModel):
    path: str = "."
    name: str
    projects: List[str] = Field(default_factory=list)
    generation_options: GenerationOptionsSpec = Field(
        default_factory=GenerationOptionsSpec
    )


class NodeSpec(BaseModel):
    kind: DependencyKind
    name: Optional[str] = None
    path: Optional[str] = None


class ResolvedWorkspaceDocument(BaseModel):
    """Top level of a resolved workspace JSON document."""

    workspace: WorkspaceSpec
    projects: List[ProjectSpec] = Field(default_factory=list)
    external_dependencies: Dict[str, List[NodeSpec]] = Field(default_factory=dict)


# =============================================================================
# Conversion
# =============================================================================


def _absolute(base: Path, value: str) -> Path:
    path = Path(value)
    if not path.is_absolute():
        path = base / path
    return Path(os.path.normpath(str(path)))


def _source(project_path: Path, spec: Union[str, SourceSpec]) -> SourceFile:
    if isinstance(spec, str):
        return SourceFile(_absolute(project_path, spec))
    return SourceFile(
        _absolute(project_path, spec.path),
        glob=str(_absolute(project_path, spec.glob)) if spec.glob else None,
        excluding=tuple(str(_absolute(project_path, e)) for e in spec.excluding),
    )


def _element(project_path: Path, spec: Union[str, FileElementSpec]) -> FileElement:
    if isinstance(spec, str):
        return FileElement.file(_absolute(project_path, spec))
    glob = str(_absolute(project_path, spec.glob)) if spec.glob else None
    return FileElement(_absolute(project_path, spec.path), spec.kind, glob)


def _buildable_folder(
    project_path: Path, spec: Union[str, BuildableFolderSpec]
) -> BuildableFolder:
    if isinstance(spec, str):
        return BuildableFolder(_absolute(project_path, spec))
    return BuildableFolder(
        _absolute(project_path, spec.path),
        tuple(_absolute(project_path, e) for e in spec.exceptions),
    )


def _dependency(project_path: Path, spec: DependencySpec) -> TargetDependency:
    kind = spec.kind
    needs_name = {
        TargetDependencyKind.TARGET,
        TargetDependencyKind.PROJECT,
        TargetDependencyKind.SDK,
        TargetDependencyKind.EXTERNAL,
    }
    needs_path = {
        TargetDependencyKind.PROJECT,
        TargetDependencyKind.FRAMEWORK,
        TargetDependencyKind.LIBRARY,
        TargetDependencyKind.XCFRAMEWORK,
        TargetDependencyKind.BUNDLE,
    }
    if kind in needs_name and not spec.name:
        raise WorkspaceFormatError(f"{kind.value} dependency requires a name")
    if kind in needs_path and not spec.path:
        raise WorkspaceFormatError(f"{kind.value} dependency requires a path")
    return TargetDependency(
        kind=kind,
        name=spec.name,
        path=_absolute(project_path, spec.path) if spec.path else None,
        condition=PlatformCondition.when(*spec.platform_filters),
        status=spec.status,
    )


def _target(project_path: Path, spec: TargetSpec) -> Target:
    return Target(
        name=spec.name,
        product=spec.product,
        product_name=spec.product_name,
        bundle_id=spec.bundle_id,
        dependencies=[_dependency(project_path, d) for d in spec.dependencies],
        sources=[_source(project_path, s) for s in spec.sources],
        resources=[_element(project_path, r) for r in spec.resources],
        additional_files=[_element(project_path, f) for f in spec.additional_files],
        buildable_folders=[
            _buildable_folder(project_path, b) for b in spec.buildable_folders
        ],
        settings=dict(spec.settings),
    )


def _node(base: Path, spec: NodeSpec) -> GraphDependency:
    path = _absolute(base, spec.path) if spec.path else None
    if spec.kind == DependencyKind.EXTERNAL:
        if not spec.name:
            raise WorkspaceFormatError("external node requires a name")
        return GraphDependency.external(spec.name)
    if spec.kind in (DependencyKind.TARGET, DependencyKind.SDK):
        if not spec.name or path is None:
            raise WorkspaceFormatError(f"{spec.kind.value} node requires a name and a path")
        return GraphDependency(spec.kind, spec.name, path)
    if path is None:
        raise WorkspaceFormatError(f"{spec.kind.value} node requires a path")
    return GraphDependency(spec.kind, None, path)


def _generation_options(spec: GenerationOptionsSpec) -> GenerationOptions:
    shared = spec.shared_test_target
    if shared is None:
        return GenerationOptions()
    return GenerationOptions(
        shared_test_target=SharedTestTargetOptions(
            install_to=shared.install_to,
            targets=[
                SharedTestTarget(
                    name=t.name,
                    tests_pattern=t.tests_pattern,
                    except_pattern=t.except_pattern,
                    count=t.count,
                    use=list(t.use),
                    need_app_host=t.need_app_host,
                )
                for t in shared.targets
            ],
        )
    )


def parse_workspace_document(
    data: Dict[str, Any], base_dir: Optional[Path] = None
) -> Tuple[WorkspaceWithProjects, Dict[str, List[GraphDependency]]]:
    """Validate and convert a resolved workspace document.

    Args:
        data: Decoded JSON document.
        base_dir: Directory relative workspace paths are resolved against.
            Defaults to the current working directory.

    Returns:
        Tuple of the workspace with its projects and the external dependency
        resolution table.

    Raises:
        WorkspaceFormatError: If the document does not match the schema.
    """
    try:
        document = ResolvedWorkspaceDocument.model_validate(data)
    except ValidationError as exc:
        raise WorkspaceFormatError(f"Invalid resolved workspace: {exc}") from exc

    base = Path(base_dir) if base_dir is not None else Path.cwd()
    workspace_path = _absolute(base, document.workspace.path)

    projects: List[Project] = []
    for spec in document.projects:
        project_path = _absolute(workspace_path, spec.path)
        projects.append(
            Project(
                path=project_path,
                name=spec.name,
                targets=[_target(project_path, t) for t in spec.targets],
                settings=dict(spec.settings),
                podspec_path=(
                    _absolute(project_path, spec.podspec_path)
                    if spec.podspec_path
                    else None
                ),
            )
        )

    project_paths = [_absolute(workspace_path, p) for p in document.workspace.projects]
    if not project_paths:
        project_paths = [p.path for p in projects]

    workspace = Workspace(
        path=workspace_path,
        name=document.workspace.name,
        projects=project_paths,
        generation_options=_generation_options(document.workspace.generation_options),
    )
    external = {
        name: [_node(workspace_path, node) for node in nodes]
        for name, nodes in document.external_dependencies.items()
    }
    return WorkspaceWithProjects(workspace, projects), external


def load_workspace(
    path: Union[str, Path],
) -> Tuple[WorkspaceWithProjects, Dict[str, List[GraphDependency]]]:
    """Load a resolved workspace JSON file."""
    file_path = Path(path).expanduser()
    try:
        with file_path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except json.JSONDecodeError as exc:
        raise WorkspaceFormatError(f"Invalid JSON in {file_path}: {exc}") from exc
    if not isinstance(data, dict):
        raise WorkspaceFormatError(f"Expected a JSON object in {file_path}")

    value, external = parse_workspace_document(data, base_dir=file_path.parent.resolve())
    logger.info(
        "Loaded workspace '%s' with %d project(s) from %s",
        value.workspace.name,
        len(value.projects),
        file_path,
    )
    return value, external


def _node_id(node: GraphDependency) -> str:
    return ":".join(part for part in (node.kind.value, str(node.path or ""), node.name or "") if part)


def export_graph_json(graph: Graph, output_path: Path) -> None:
    """Write the graph in networkx node-link format."""
    view = graph.to_networkx()
    labelled = nx.relabel_nodes(view, {node: _node_id(node) for node in view.nodes})
    for source, target, attributes in labelled.edges(data=True):
        condition = attributes.get("condition")
        attributes["condition"] = (
            sorted(condition.platform_filters) if condition is not None else None
        )
    data = nx.readwrite.json_graph.node_link_data(labelled)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
    logger.info("Graph exported to %s", output_path)
