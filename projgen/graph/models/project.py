"""Workspace, project and target models.

These are the already-resolved forms of the manifest DSL: every path is
absolute and every glob has been expanded to concrete files. The original
glob pattern of a file is kept next to it so that files deleted by a change
(which can no longer be expanded) can still be attributed to their target.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .dependency import LinkingStatus, PlatformCondition


class Product(str, Enum):
    """Product kind of a target."""

    APP = "app"
    STATIC_LIBRARY = "static_library"
    DYNAMIC_LIBRARY = "dynamic_library"
    FRAMEWORK = "framework"
    STATIC_FRAMEWORK = "static_framework"
    BUNDLE = "bundle"
    UNIT_TESTS = "unit_tests"
    UI_TESTS = "ui_tests"
    APP_EXTENSION = "app_extension"
    COMMAND_LINE_TOOL = "command_line_tool"

    @property
    def is_linkable(self) -> bool:
        return self in {
            Product.STATIC_LIBRARY,
            Product.DYNAMIC_LIBRARY,
            Product.FRAMEWORK,
            Product.STATIC_FRAMEWORK,
        }


class FileElementKind(str, Enum):
    FILE = "file"
    FOLDER_REFERENCE = "folder_reference"
    GLOB = "glob"


@dataclass(frozen=True)
class SourceFile:
    """A concrete source file.

    Attributes:
        path: Absolute path of the file.
        glob: Pattern the file was expanded from, if any.
        excluding: Exclusion patterns declared next to ``glob``.
    """

    path: Path
    glob: Optional[str] = None
    excluding: Tuple[str, ...] = ()


@dataclass(frozen=True)
class FileElement:
    """A resource or additional file entry."""

    path: Path
    kind: FileElementKind = FileElementKind.FILE
    glob: Optional[str] = None

    @classmethod
    def file(cls, path: Path, glob: Optional[str] = None) -> "FileElement":
        return cls(Path(path), FileElementKind.FILE, glob)

    @classmethod
    def folder_reference(cls, path: Path) -> "FileElement":
        return cls(Path(path), FileElementKind.FOLDER_REFERENCE)


@dataclass(frozen=True)
class BuildableFolder:
    """A directory whose whole subtree belongs to a target, minus exceptions."""

    path: Path
    exceptions: Tuple[Path, ...] = ()

    def contains(self, candidate: Path) -> bool:
        candidate = Path(candidate)
        if candidate == self.path or not candidate.is_relative_to(self.path):
            return False
        return candidate not in self.exceptions


class TargetDependencyKind(str, Enum):
    TARGET = "target"
    PROJECT = "project"
    FRAMEWORK = "framework"
    LIBRARY = "library"
    XCFRAMEWORK = "xcframework"
    BUNDLE = "bundle"
    SDK = "sdk"
    EXTERNAL = "external"


@dataclass(frozen=True)
class TargetDependency:
    """A dependency as declared in a manifest, before graph resolution.

    ``target`` refers to a target of the same project, ``project`` to a target
    of the project at ``path``. ``external`` names a package-manager product
    resolved through the external dependency table.
    """

    kind: TargetDependencyKind
    name: Optional[str] = None
    path: Optional[Path] = None
    condition: Optional[PlatformCondition] = None
    status: LinkingStatus = LinkingStatus.REQUIRED

    @classmethod
    def target(cls, name: str, **kwargs: Any) -> "TargetDependency":
        return cls(TargetDependencyKind.TARGET, name=name, **kwargs)

    @classmethod
    def project(cls, target: str, path: Path, **kwargs: Any) -> "TargetDependency":
        return cls(TargetDependencyKind.PROJECT, name=target, path=Path(path), **kwargs)

    @classmethod
    def framework(cls, path: Path, **kwargs: Any) -> "TargetDependency":
        return cls(TargetDependencyKind.FRAMEWORK, path=Path(path), **kwargs)

    @classmethod
    def library(cls, path: Path, **kwargs: Any) -> "TargetDependency":
        return cls(TargetDependencyKind.LIBRARY, path=Path(path), **kwargs)

    @classmethod
    def xcframework(cls, path: Path, **kwargs: Any) -> "TargetDependency":
        return cls(TargetDependencyKind.XCFRAMEWORK, path=Path(path), **kwargs)

    @classmethod
    def bundle(cls, path: Path, **kwargs: Any) -> "TargetDependency":
        return cls(TargetDependencyKind.BUNDLE, path=Path(path), **kwargs)

    @classmethod
    def sdk(cls, name: str, **kwargs: Any) -> "TargetDependency":
        return cls(TargetDependencyKind.SDK, name=name, **kwargs)

    @classmethod
    def external(cls, name: str, **kwargs: Any) -> "TargetDependency":
        return cls(TargetDependencyKind.EXTERNAL, name=name, **kwargs)


@dataclass
class Target:
    """A buildable target. Names are unique within their project."""

    name: str
    product: Product
    product_name: Optional[str] = None
    bundle_id: Optional[str] = None
    dependencies: List[TargetDependency] = field(default_factory=list)
    sources: List[SourceFile] = field(default_factory=list)
    resources: List[FileElement] = field(default_factory=list)
    additional_files: List[FileElement] = field(default_factory=list)
    buildable_folders: List[BuildableFolder] = field(default_factory=list)
    settings: Dict[str, Any] = field(default_factory=dict)
    prune: bool = False

    def __post_init__(self) -> None:
        if self.product_name is None:
            self.product_name = self.name


@dataclass
class Project:
    """A project: its absolute path is its identity."""

    path: Path
    name: str
    targets: List[Target] = field(default_factory=list)
    settings: Dict[str, Any] = field(default_factory=dict)
    podspec_path: Optional[Path] = None

    def target_named(self, name: str) -> Optional[Target]:
        for target in self.targets:
            if target.name == name:
                return target
        return None


@dataclass
class SharedTestTarget:
    """One shared test host definition.

    Attributes:
        name: Base name of the generated host targets.
        tests_pattern: Regex a unit-test target name must fully match.
        except_pattern: Regex excluding matching names.
        count: Number of hosts the wrappers are spread across.
        use: Existing targets of the install project to use as hosts.
        need_app_host: Generate an application target hosting the tests.
    """

    name: str
    tests_pattern: str
    except_pattern: Optional[str] = None
    count: int = 1
    use: List[str] = field(default_factory=list)
    need_app_host: bool = False


@dataclass
class SharedTestTargetOptions:
    install_to: str
    targets: List[SharedTestTarget] = field(default_factory=list)


@dataclass
class GenerationOptions:
    shared_test_target: Optional[SharedTestTargetOptions] = None


@dataclass
class Workspace:
    path: Path
    name: str
    projects: List[Path] = field(default_factory=list)
    generation_options: GenerationOptions = field(default_factory=GenerationOptions)


@dataclass
class WorkspaceWithProjects:
    workspace: Workspace
    projects: List[Project] = field(default_factory=list)
