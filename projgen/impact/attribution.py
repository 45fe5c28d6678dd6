"""Attribute changed and deleted repository files to graph targets."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, List, Optional, Pattern, Set

from projgen.config.schema import ImpactAnalysisConfig
from projgen.errors import UnresolvedGlobError
from projgen.graph.graph import Graph
from projgen.graph.models import (
    BuildableFolder,
    FileElement,
    FileElementKind,
    GraphDependency,
    Project,
    SideTable,
    Target,
)
from projgen.impact.glob import PatternCache
from projgen.utils.path_utils import (
    PathTraversalError,
    join_relative,
    relative_posix,
    resolve_symlinks,
    strip_root,
)

logger = logging.getLogger("projgen.impact.attribution")

_SUFFIX = r"(\+[A-Za-z0-9_]+)?"


def workspace_manifest_regex(extension: str) -> Pattern[str]:
    return re.compile(rf"^Workspace{_SUFFIX}\.{re.escape(extension)}$")


def project_manifest_regex(project_relative: str, extension: str) -> Pattern[str]:
    manifest = rf"Project{_SUFFIX}\.{re.escape(extension)}$"
    if project_relative == ".":
        return re.compile("^" + manifest)
    return re.compile(f"^{re.escape(project_relative)}/" + manifest)


def affected_config_files(
    changed: Set[str], deleted: Set[str], config: ImpactAnalysisConfig
) -> Set[str]:
    """Changed files that invalidate every target of the workspace.

    Those are files under the reserved configuration folder (except the
    lockfile and the dependencies manifest, which are diffed precisely) and
    workspace manifests at the repository root.
    """
    candidates = (changed | deleted) - set(config.excluded_config_paths)
    prefix = config.config_directory + "/"
    workspace_regex = workspace_manifest_regex(config.manifest_extension)
    return {
        path
        for path in candidates
        if path.startswith(prefix) or workspace_regex.search(path)
    }


def marked_targets(
    graph: Graph, target_names: Iterable[str], product_names: Iterable[str]
) -> Set[GraphDependency]:
    """Targets forced into the changed set by name or product name."""
    names = set(target_names)
    products = set(product_names)
    if not names and not products:
        return set()
    return {
        GraphDependency.target(target.name, project.path)
        for project, target in graph.iter_targets()
        if target.name in names or target.product_name in products
    }


class FileAttributor:
    """Maps repository-relative paths to the targets that own them."""

    def __init__(
        self,
        graph: Graph,
        side_table: SideTable,
        manifest_extension: str = "swift",
        patterns: Optional[PatternCache] = None,
    ) -> None:
        self.graph = graph
        self.side_table = side_table
        self.root_path = Path(graph.path)
        self.resolved_root = resolve_symlinks(graph.path)
        self.manifest_extension = manifest_extension
        self.patterns = patterns or PatternCache()

    # ------------------------------------------------------------------ #
    #  Entry point                                                         #
    # ------------------------------------------------------------------ #
    def changed_targets(self, changed: Set[str], deleted: Set[str]) -> Set[GraphDependency]:
        result: Set[GraphDependency] = set()
        changed_absolute = self._absolute_paths(changed)
        deleted_absolute = self._absolute_paths(deleted)

        for project in sorted(self.graph.projects.values(), key=lambda p: str(p.path)):
            if self.is_affected_project_manifest(project, changed, deleted):
                logger.debug("Manifest of project %s changed", project.name)
                result.update(
                    GraphDependency.target(t.name, project.path) for t in project.targets
                )
                continue

            for target in project.targets:
                if self._target_changed(target, changed, changed_absolute) or (
                    deleted and self._target_lost_file(project, target, deleted, deleted_absolute)
                ):
                    result.add(GraphDependency.target(target.name, project.path))
        return result

    # ------------------------------------------------------------------ #
    #  Manifests                                                           #
    # ------------------------------------------------------------------ #
    def is_affected_project_manifest(
        self, project: Project, changed: Set[str], deleted: Set[str]
    ) -> bool:
        if project.podspec_path is not None:
            return relative_posix(project.podspec_path, self.root_path) in changed

        project_relative = relative_posix(project.path, self.root_path)
        regex = project_manifest_regex(project_relative, self.manifest_extension)
        return any(regex.search(path) for path in changed | deleted)

    # ------------------------------------------------------------------ #
    #  Changed files                                                       #
    # ------------------------------------------------------------------ #
    def _relative(self, path: Path) -> str:
        return relative_posix(resolve_symlinks(path), self.resolved_root)

    def _absolute_paths(self, paths: Iterable[str]) -> List[Path]:
        absolute: List[Path] = []
        for path in paths:
            try:
                absolute.append(join_relative(self.root_path, path))
            except PathTraversalError as exc:
                logger.warning("Skipping %s", exc)
        return absolute

    def _target_changed(
        self, target: Target, changed: Set[str], changed_absolute: List[Path]
    ) -> bool:
        for source in target.sources:
            if self._relative(source.path) in changed:
                return True

        for element in target.resources:
            if self._element_changed(element, changed):
                return True

        for element in target.additional_files:
            if self._element_changed(element, changed):
                return True

        return self._in_buildable_folders(target.buildable_folders, changed_absolute)

    def _element_changed(self, element: FileElement, changed: Set[str]) -> bool:
        if element.kind == FileElementKind.GLOB:
            raise UnresolvedGlobError(str(element.glob or element.path))

        relative = self._relative(element.path)
        if element.kind == FileElementKind.FILE:
            return relative in changed
        prefix = relative + "/"
        return any(path == relative or path.startswith(prefix) for path in changed)

    @staticmethod
    def _in_buildable_folders(folders: List[BuildableFolder], paths: List[Path]) -> bool:
        return any(folder.contains(path) for folder in folders for path in paths)

    # ------------------------------------------------------------------ #
    #  Deleted files                                                       #
    # ------------------------------------------------------------------ #
    def _target_lost_file(
        self,
        project: Project,
        target: Target,
        deleted: Set[str],
        deleted_absolute: List[Path],
    ) -> bool:
        entry = self.side_table.get(project.path, target.name)

        for source_glob in entry.sources:
            matched = {
                path
                for path in deleted
                if self._matches(source_glob.pattern, path)
            }
            for exclude in source_glob.excluding:
                matched = {path for path in matched if not self._matches(exclude, path)}
            if matched:
                return True

        for pattern in entry.resources:
            if any(self._matches(pattern, path, flags="g") for path in deleted):
                return True

        for pattern in entry.additional_files:
            if any(self._matches(pattern, path) for path in deleted):
                return True

        return self._in_buildable_folders(target.buildable_folders, deleted_absolute)

    def _matches(self, pattern: str, path: str, flags: str = "") -> bool:
        return self.patterns.matches(strip_root(pattern, self.root_path), path, flags=flags)
