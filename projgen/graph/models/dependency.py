"""Graph node identity: the GraphDependency tagged union and edge attributes.

A ``GraphDependency`` identifies any node in the dependency graph: a target
defined in a project, a precompiled artifact referenced by path, an SDK, or an
external package-manager product that has not been resolved yet. The same
value is used as an adjacency key and as an edge endpoint, so equality and
hashing only consider the identifying fields of each variant.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import FrozenSet, Optional, Tuple


class DependencyKind(str, Enum):
    """Variants of the GraphDependency union."""

    TARGET = "target"
    FRAMEWORK = "framework"
    LIBRARY = "library"
    XCFRAMEWORK = "xcframework"
    BUNDLE = "bundle"
    SDK = "sdk"
    EXTERNAL = "external"


PRECOMPILED_KINDS = frozenset(
    {
        DependencyKind.FRAMEWORK,
        DependencyKind.LIBRARY,
        DependencyKind.XCFRAMEWORK,
        DependencyKind.BUNDLE,
    }
)


class LinkingStatus(str, Enum):
    """How a dependency edge is linked.

    ``NONE`` marks an edge that is present in the manifest but not linked;
    such edges never propagate impact.
    """

    REQUIRED = "required"
    OPTIONAL = "optional"
    NONE = "none"


@dataclass(frozen=True)
class PlatformCondition:
    """Restricts an edge to a set of platform filters (e.g. ``ios``, ``macos``)."""

    platform_filters: FrozenSet[str]

    @classmethod
    def when(cls, *filters: str) -> Optional["PlatformCondition"]:
        if not filters:
            return None
        return cls(frozenset(filters))


@dataclass(frozen=True)
class EdgeAttributes:
    """Attributes carried by a single ``from -> to`` dependency edge."""

    status: LinkingStatus = LinkingStatus.REQUIRED
    condition: Optional[PlatformCondition] = None

    @property
    def is_linked(self) -> bool:
        return self.status != LinkingStatus.NONE


@dataclass(frozen=True)
class TargetKey:
    """Composite key identifying a target: owning project path + target name."""

    path: Path
    name: str

    def __str__(self) -> str:
        return f"{self.path}:{self.name}"


@dataclass(frozen=True)
class GraphDependency:
    """A node of the dependency graph.

    Use the classmethod constructors instead of instantiating directly:

        GraphDependency.target("App", Path("/ws/App"))
        GraphDependency.framework(Path("/ws/Vendor/Foo.framework"))
        GraphDependency.external("Alamofire")
    """

    kind: DependencyKind
    name: Optional[str] = None
    path: Optional[Path] = None

    # ------------------------------------------------------------------ #
    #  Constructors                                                        #
    # ------------------------------------------------------------------ #
    @classmethod
    def target(cls, name: str, path: Path) -> "GraphDependency":
        return cls(DependencyKind.TARGET, name, Path(path))

    @classmethod
    def framework(cls, path: Path) -> "GraphDependency":
        return cls(DependencyKind.FRAMEWORK, None, Path(path))

    @classmethod
    def library(cls, path: Path) -> "GraphDependency":
        return cls(DependencyKind.LIBRARY, None, Path(path))

    @classmethod
    def xcframework(cls, path: Path) -> "GraphDependency":
        return cls(DependencyKind.XCFRAMEWORK, None, Path(path))

    @classmethod
    def bundle(cls, path: Path) -> "GraphDependency":
        return cls(DependencyKind.BUNDLE, None, Path(path))

    @classmethod
    def sdk(cls, name: str, path: Path) -> "GraphDependency":
        return cls(DependencyKind.SDK, name, Path(path))

    @classmethod
    def external(cls, name: str) -> "GraphDependency":
        return cls(DependencyKind.EXTERNAL, name, None)

    # ------------------------------------------------------------------ #
    #  Queries                                                             #
    # ------------------------------------------------------------------ #
    @property
    def is_target(self) -> bool:
        return self.kind == DependencyKind.TARGET

    @property
    def is_precompiled(self) -> bool:
        return self.kind in PRECOMPILED_KINDS

    @property
    def target_key(self) -> Optional[TargetKey]:
        """TargetKey for target nodes, None for every other variant."""
        if self.kind != DependencyKind.TARGET or self.path is None or self.name is None:
            return None
        return TargetKey(self.path, self.name)

    @property
    def display_name(self) -> str:
        if self.name is not None:
            return self.name
        return self.path.name if self.path is not None else ""

    @property
    def description(self) -> str:
        return f"{self.kind.value} '{self.display_name}'"

    def sort_key(self) -> Tuple[str, str, str]:
        return (self.kind.value, str(self.path or ""), self.name or "")

    def __str__(self) -> str:
        return self.description
