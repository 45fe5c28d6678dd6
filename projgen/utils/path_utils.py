"""Path helpers shared by the loader and the impact analysis engine.

Source control reports repository-relative POSIX paths, while the graph
stores absolute paths. These helpers convert between the two forms.
"""
import os
from pathlib import Path, PurePosixPath
from typing import Union


class PathTraversalError(ValueError):
    """Raised when a repository-relative path escapes the workspace root."""

    pass


def resolve_symlinks(path: Union[Path, str]) -> Path:
    """Resolve symlinks without requiring the path to exist."""
    return Path(os.path.realpath(str(path)))


def relative_posix(path: Union[Path, str], root_path: Union[Path, str]) -> str:
    """
    Express ``path`` relative to ``root_path`` using forward slashes.

    Paths outside the root are expressed with ``..`` components, mirroring
    what ``git`` would print for them.

    Examples:
        >>> relative_posix(Path("/ws/App/Sources/a.swift"), Path("/ws"))
        'App/Sources/a.swift'
        >>> relative_posix(Path("/ws"), Path("/ws"))
        '.'
    """
    rel = os.path.relpath(str(path), str(root_path))
    return rel.replace(os.sep, "/")


def join_relative(root_path: Union[Path, str], relative: str) -> Path:
    """
    Convert a repository-relative path back to an absolute path.

    Raises:
        PathTraversalError: If ``relative`` is absolute or climbs above the root.
    """
    pure = PurePosixPath(relative)
    if pure.is_absolute() or ".." in pure.parts:
        raise PathTraversalError(f"Path escapes workspace root: {relative}")
    return Path(root_path).joinpath(*pure.parts)


def is_ancestor(ancestor: Union[Path, str], path: Union[Path, str]) -> bool:
    """Return True if ``ancestor`` strictly contains ``path``."""
    ancestor = Path(ancestor)
    path = Path(path)
    return ancestor != path and path.is_relative_to(ancestor)


def strip_root(pattern: str, root_path: Union[Path, str]) -> str:
    """Make an absolute glob pattern relative to ``root_path``.

    Relative patterns are returned unchanged.
    """
    root = str(root_path).rstrip("/") + "/"
    if pattern.startswith(root):
        return pattern[len(root):]
    return pattern
