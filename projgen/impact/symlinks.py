"""Workspace symlink discovery and changed-path aliasing.

Git reports changes under the real location of a file. When a target
references the file through a symlinked directory the change has to be
re-expressed through the link as well.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, Iterable, Set

from projgen.utils.path_utils import relative_posix

logger = logging.getLogger("projgen.impact.symlinks")

_SKIPPED_DIRS = {".git", ".build", "DerivedData"}


class SymlinksFinder:
    """Collects ``{link -> target}`` for symlinks that point inside the root."""

    def find(self, root_path: Path) -> Dict[str, str]:
        root = os.path.realpath(str(root_path))
        symlinks: Dict[str, str] = {}

        for dirpath, dirnames, filenames in os.walk(root, followlinks=False):
            dirnames[:] = [d for d in dirnames if d not in _SKIPPED_DIRS]
            for name in dirnames + filenames:
                full = os.path.join(dirpath, name)
                if not os.path.islink(full):
                    continue
                resolved = os.path.realpath(full)
                if resolved != root and not resolved.startswith(root + os.sep):
                    logger.debug("Ignoring symlink %s pointing outside workspace", full)
                    continue
                symlinks[relative_posix(full, root)] = relative_posix(resolved, root)

        logger.info("Found %d symlink(s) in %s", len(symlinks), root)
        return symlinks


def aliases(path: str, symlinks: Dict[str, str]) -> Set[str]:
    """Paths through which ``path`` is also reachable via the given symlinks."""
    result: Set[str] = set()
    for link, target in symlinks.items():
        if path == target:
            result.add(link)
        elif path.startswith(target + "/"):
            result.add(link + path[len(target):])
    return result


def expand_with_symlinks(paths: Iterable[str], symlinks: Dict[str, str]) -> Set[str]:
    """Return ``paths`` together with every alias through ``symlinks``."""
    expanded = set(paths)
    if not symlinks:
        return expanded
    for path in list(expanded):
        expanded.update(aliases(path, symlinks))
    return expanded
