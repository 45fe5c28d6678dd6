"""Shared fixtures: an in-memory git double and small workspace builders."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional

import pytest

from projgen.graph.graph import Graph
from projgen.graph.loader import GraphLoader
from projgen.graph.models import (
    GraphDependency,
    Product,
    Project,
    SideTable,
    SourceFile,
    Target,
    TargetDependency,
    Workspace,
    WorkspaceWithProjects,
)
from projgen.impact.git import DiffFilter


class FakeGit:
    """Answers the GitClient calls made by impact analysis from dictionaries."""

    def __init__(
        self,
        changed: Iterable[str] = (),
        deleted: Iterable[str] = (),
        files: Optional[Dict[str, Dict[str, str]]] = None,
        worktree: Optional[Dict[str, str]] = None,
    ) -> None:
        self.changed = set(changed)
        self.deleted = set(deleted)
        self.files = files or {}
        self.worktree = worktree or {}
        self.diff_calls: List[tuple] = []

    def diff(self, diff_filter, target_ref=None, source_ref=None):
        self.diff_calls.append((diff_filter, target_ref, source_ref))
        if diff_filter == DiffFilter.DELETED:
            return set(self.deleted)
        return set(self.changed)

    def show(self, ref, path):
        return self.files.get(ref, {}).get(path)

    def read_worktree(self, path):
        return self.worktree.get(path)


@pytest.fixture
def fake_git() -> type:
    return FakeGit


@pytest.fixture
def workspace_root(tmp_path: Path) -> Path:
    root = tmp_path / "ws"
    root.mkdir()
    return root


@pytest.fixture
def make_target() -> Callable[..., Target]:
    """Build a target whose sources live under ``<project>/Sources/<name>/``."""

    def _make(
        project_path: Path,
        name: str,
        deps: Iterable[TargetDependency] = (),
        product: Product = Product.FRAMEWORK,
        files: Iterable[str] = ("main.swift",),
    ) -> Target:
        return Target(
            name=name,
            product=product,
            dependencies=list(deps),
            sources=[SourceFile(project_path / "Sources" / name / f) for f in files],
        )

    return _make


@pytest.fixture
def make_graph(workspace_root: Path) -> Callable[..., Graph]:
    """Load a graph from projects, keyed by name, placed under the workspace root."""

    def _make(
        projects: Dict[str, List[Target]],
        external: Optional[Dict[str, List[GraphDependency]]] = None,
        workspace: Optional[Workspace] = None,
    ) -> Graph:
        value = WorkspaceWithProjects(
            workspace=workspace
            or Workspace(
                path=workspace_root,
                name="Workspace",
                projects=[workspace_root / name for name in projects],
            ),
            projects=[
                Project(path=workspace_root / name, name=name, targets=targets)
                for name, targets in projects.items()
            ],
        )
        return GraphLoader(external).load(value)

    return _make


@pytest.fixture
def side_table() -> SideTable:
    return SideTable()
