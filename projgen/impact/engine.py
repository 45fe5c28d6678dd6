"""Impact analysis: which targets does a source control change affect?

Order of operations:

1. collect changed and deleted files from git
2. alias them through workspace symlinks (optional)
3. short-circuit to "everything changed" when workspace configuration changed
4. otherwise attribute files to targets, add manually marked targets and
   the targets behind changed lockfile entries
5. close the changed set over reversed linked edges
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from projgen.config.schema import ImpactAnalysisConfig
from projgen.errors import MissingBaselineRefError
from projgen.graph.graph import Graph
from projgen.graph.traverser import GraphTraverser
from projgen.graph.models import DependencyKind, GraphDependency, SideTable, TargetKey
from projgen.impact.attribution import (
    FileAttributor,
    affected_config_files,
    marked_targets,
)
from projgen.impact.closure import affected_memo
from projgen.impact.git import DiffFilter, GitClient
from projgen.impact.glob import PatternCache
from projgen.impact.lockfile import Lockfile, changed_pods
from projgen.impact.symlinks import SymlinksFinder, expand_with_symlinks

logger = logging.getLogger("projgen.impact.engine")

_GRAPH_BOUND_KINDS = {
    DependencyKind.FRAMEWORK,
    DependencyKind.LIBRARY,
    DependencyKind.XCFRAMEWORK,
}


@dataclass
class ImpactResult:
    """Outcome of one impact analysis run.

    Attributes:
        changed_files: Changed repository paths (symlink aliases included).
        deleted_files: Deleted repository paths (symlink aliases included).
        config_files: Files that triggered the whole-workspace short-circuit.
        initially_changed: Targets changed before closure.
        from_sources: Part of ``initially_changed`` attributed from files.
        from_lockfile: Part of ``initially_changed`` caused by the lockfile.
        from_overrides: Part of ``initially_changed`` marked manually.
        affected: Every node reached by the closure.
        memo: Affected flag of every node in the graph.
        pruned: Generated wrapper targets detached from the shared hosts.
        elapsed: Wall time of the analysis in seconds.
    """

    changed_files: Set[str] = field(default_factory=set)
    deleted_files: Set[str] = field(default_factory=set)
    config_files: Set[str] = field(default_factory=set)
    initially_changed: Set[GraphDependency] = field(default_factory=set)
    from_sources: Set[GraphDependency] = field(default_factory=set)
    from_lockfile: Set[GraphDependency] = field(default_factory=set)
    from_overrides: Set[GraphDependency] = field(default_factory=set)
    affected: Set[GraphDependency] = field(default_factory=set)
    memo: Dict[GraphDependency, bool] = field(default_factory=dict)
    pruned: List[TargetKey] = field(default_factory=list)
    elapsed: float = 0.0

    @property
    def short_circuited(self) -> bool:
        return bool(self.config_files)

    @property
    def affected_targets(self) -> List[GraphDependency]:
        return sorted(
            (node for node in self.affected if node.is_target),
            key=GraphDependency.sort_key,
        )

    def to_dict(self) -> Dict[str, object]:
        def names(nodes: Set[GraphDependency]) -> List[str]:
            return sorted(
                f"{node.path}:{node.name}" if node.is_target else node.description
                for node in nodes
            )

        return {
            "changed_files": sorted(self.changed_files),
            "deleted_files": sorted(self.deleted_files),
            "short_circuited": self.short_circuited,
            "config_files": sorted(self.config_files),
            "initially_changed": names(self.initially_changed),
            "affected_targets": names(set(self.affected_targets)),
            "affected": names(self.affected),
            "pruned": sorted(str(key) for key in self.pruned),
            "elapsed": round(self.elapsed, 3),
        }


class ImpactAnalyzer:
    """Computes the affected set of a graph for one pair of revisions."""

    def __init__(
        self,
        graph: Graph,
        side_table: SideTable,
        config: ImpactAnalysisConfig,
        git: Optional[GitClient] = None,
        symlinks: Optional[Dict[str, str]] = None,
    ) -> None:
        if not config.debug and not config.target_ref:
            raise MissingBaselineRefError()
        self.graph = graph
        self.side_table = side_table
        self.config = config
        self.git = git or GitClient(graph.path)
        if symlinks is None:
            symlinks = (
                SymlinksFinder().find(graph.path) if config.symlinks_support else {}
            )
        self.symlinks = symlinks
        self.patterns = PatternCache()

    # ------------------------------------------------------------------ #
    #  Diff collection                                                     #
    # ------------------------------------------------------------------ #
    def _git_files(self, diff_filter: DiffFilter) -> Set[str]:
        if self.config.debug:
            files = self.git.diff(diff_filter)
        else:
            files = self.git.diff(diff_filter, self.config.target_ref, self.config.source_ref)
        if self.config.symlinks_support:
            files = expand_with_symlinks(files, self.symlinks)
        return files

    # ------------------------------------------------------------------ #
    #  Lockfile                                                            #
    # ------------------------------------------------------------------ #
    def _lockfiles(self) -> Tuple[Optional[Lockfile], Optional[Lockfile]]:
        path = self.config.lockfile
        if self.config.debug:
            original_ref, original_text = "HEAD", self.git.show("HEAD", path)
            new_location, new_text = path, self.git.read_worktree(path)
        else:
            original_ref = self.config.target_ref
            original_text = self.git.show(original_ref, path)
            new_location = f"{self.config.source_ref}:{path}"
            new_text = self.git.show(self.config.source_ref, path)

        if original_text is None and new_text is None:
            logger.debug("No lockfile at %s in either revision", path)
            return None, None

        original = (
            Lockfile.from_text(original_text, f"{original_ref}:{path}")
            if original_text is not None
            else Lockfile.empty()
        )
        new = (
            Lockfile.from_text(new_text, new_location)
            if new_text is not None
            else Lockfile.empty()
        )
        return original, new

    def lockfile_changes(self) -> Set[GraphDependency]:
        original, new = self._lockfiles()
        if original is None:
            return set()

        traverser = GraphTraverser(self.graph, linked_only=False)
        result: Set[GraphDependency] = set()
        for name in sorted(changed_pods(original, new)):
            nodes = self.graph.external_dependencies.get(name)
            if nodes is None:
                logger.debug("Changed pod %s is no longer resolved; skipping", name)
                continue
            for node in nodes:
                if node.kind in _GRAPH_BOUND_KINDS:
                    # artifacts no target links are skipped
                    if traverser.contains(node):
                        result.add(node)
                elif node.kind in (DependencyKind.BUNDLE, DependencyKind.TARGET):
                    result.add(node)
        return result

    # ------------------------------------------------------------------ #
    #  Analysis                                                            #
    # ------------------------------------------------------------------ #
    def analyze(self) -> ImpactResult:
        start = time.perf_counter()
        result = ImpactResult()

        result.changed_files = self._git_files(DiffFilter.CHANGED)
        result.deleted_files = self._git_files(DiffFilter.DELETED)
        logger.debug(
            "%d changed and %d deleted file(s)",
            len(result.changed_files),
            len(result.deleted_files),
        )

        result.config_files = affected_config_files(
            result.changed_files, result.deleted_files, self.config
        )
        if result.config_files:
            result.initially_changed = set(self.graph.target_nodes())
            logger.info("Workspace configuration was affected, so all targets will be affected.")
            logger.info("Affected configuration files: %s", ", ".join(sorted(result.config_files)))
        else:
            attributor = FileAttributor(
                self.graph,
                self.side_table,
                manifest_extension=self.config.manifest_extension,
                patterns=self.patterns,
            )
            result.from_sources = attributor.changed_targets(
                result.changed_files, result.deleted_files
            )
            result.from_lockfile = self.lockfile_changes()
            result.from_overrides = marked_targets(
                self.graph, self.config.changed_targets, self.config.changed_products
            )
            result.initially_changed = (
                result.from_sources | result.from_lockfile | result.from_overrides
            )
            logger.info(
                "Initially affected targets: %s", _describe(result.initially_changed)
            )
            logger.debug("Changed targets from source: %s", _describe(result.from_sources))
            logger.debug("Changed targets from lockfile: %s", _describe(result.from_lockfile))

        result.memo = affected_memo(self.graph, result.initially_changed)
        result.affected = {node for node, affected in result.memo.items() if affected}
        logger.info("All affected targets: %s", _describe(set(result.affected_targets)))

        result.elapsed = time.perf_counter() - start
        logger.info("Impact analysis took %.3fs", result.elapsed)
        return result


def _describe(nodes: Set[GraphDependency]) -> str:
    if not nodes:
        return "none"
    return ", ".join(sorted(node.description for node in nodes))
