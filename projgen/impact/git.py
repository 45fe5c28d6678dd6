"""Thin git client used by impact analysis.

Every command runs with the workspace root as working directory. Any
non-zero exit status is surfaced as ``GitCommandError``; the only expected
failure, a missing file at a revision, is probed first with
``git cat-file -e``.
"""

from __future__ import annotations

import logging
import subprocess
from enum import Enum
from pathlib import Path
from typing import List, Optional, Set

from projgen.errors import GitCommandError

logger = logging.getLogger("projgen.impact.git")


class DiffFilter(str, Enum):
    """Values passed to ``git diff --diff-filter``."""

    CHANGED = "d"  # everything except deletions
    DELETED = "D"


class GitClient:
    """Runs the git commands impact analysis needs."""

    def __init__(self, root_path: Path, executable: str = "git") -> None:
        self.root_path = Path(root_path)
        self.executable = executable

    def _run(self, args: List[str], allowed_codes: tuple = (0,)) -> subprocess.CompletedProcess:
        command = [self.executable, *args]
        logger.debug("Running %s", " ".join(command))
        try:
            result = subprocess.run(
                command,
                cwd=str(self.root_path),
                capture_output=True,
                text=True,
                encoding="utf-8",
                check=False,
            )
        except OSError as exc:
            raise GitCommandError(command, -1, str(exc)) from exc
        if result.returncode not in allowed_codes:
            raise GitCommandError(command, result.returncode, result.stderr or "")
        return result

    def diff(
        self,
        diff_filter: DiffFilter,
        target_ref: Optional[str] = None,
        source_ref: Optional[str] = None,
    ) -> Set[str]:
        """Repository-relative paths changed between two revisions.

        Without ``target_ref`` the working tree is compared against the index
        (``git diff`` without a range).
        """
        # -z keeps non-ASCII paths verbatim instead of C-quoting them
        args = ["diff", "-z"]
        if target_ref is not None:
            args.append(f"{target_ref}...{source_ref or 'HEAD'}")
        args.extend(["--name-only", "--no-renames", f"--diff-filter={diff_filter.value}"])
        output = self._run(args).stdout
        return {path for path in output.split("\0") if path}

    def file_exists(self, ref: str, path: str) -> bool:
        result = self._run(["cat-file", "-e", f"{ref}:{path}"], allowed_codes=(0, 1, 128))
        return result.returncode == 0

    def show(self, ref: str, path: str) -> Optional[str]:
        """Contents of ``path`` at ``ref``, or None when it does not exist there."""
        if not self.file_exists(ref, path):
            logger.debug("%s does not exist at %s", path, ref)
            return None
        return self._run(["show", f"{ref}:{path}"]).stdout

    def read_worktree(self, path: str) -> Optional[str]:
        file_path = self.root_path / path
        if not file_path.is_file():
            return None
        return file_path.read_text(encoding="utf-8")
