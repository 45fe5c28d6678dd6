"""Error hierarchy shared by the graph, mapper and impact-analysis layers.

Errors carry an ``ErrorType`` that tells the pipeline driver and the CLI how
to report them:

- ABORT: the run cannot continue (missing configuration, failing git call).
- BUG: the input data is malformed or inconsistent (unparsable lockfile,
  dangling target edges, unexpanded globs).

Ignorable problems (a glob that does not compile into a regex) are not
modelled as exceptions at all; they are logged and absorbed where they occur.
"""

from __future__ import annotations

from enum import Enum
from typing import Sequence


class ErrorType(str, Enum):
    """Severity category attached to every ProjgenError."""

    ABORT = "abort"
    BUG = "bug"


class ProjgenError(Exception):
    """Base class for all errors raised by projgen."""

    error_type: ErrorType = ErrorType.ABORT


class AbortError(ProjgenError):
    """The process cannot continue."""

    error_type = ErrorType.ABORT


class BugError(ProjgenError):
    """Malformed or inconsistent input data."""

    error_type = ErrorType.BUG


# =============================================================================
# Impact analysis
# =============================================================================


class MissingBaselineRefError(AbortError):
    """Raised when impact analysis runs without a target ref outside debug mode."""

    def __init__(self) -> None:
        super().__init__(
            "Impact analysis requires a target (baseline) ref. "
            "Pass --target-ref or enable debug mode to compare the working tree against HEAD."
        )


class GitCommandError(AbortError):
    """A git invocation exited with a non-zero status."""

    def __init__(self, command: Sequence[str], returncode: int, stderr: str) -> None:
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(
            f"Command '{' '.join(self.command)}' failed with exit code {returncode}: {stderr.strip()}"
        )


class LockfileParseError(BugError):
    """The external-dependency lockfile could not be parsed."""

    def __init__(self, location: str, reason: str) -> None:
        self.location = location
        super().__init__(f"Unable to parse lockfile at {location}: {reason}")


class UnresolvedGlobError(BugError):
    """A resource or additional-file glob reached impact analysis unexpanded."""

    def __init__(self, pattern: str) -> None:
        self.pattern = pattern
        super().__init__(
            f"Globs must be expanded before applying impact analysis: {pattern}"
        )


# =============================================================================
# Graph
# =============================================================================


class GraphIntegrityError(BugError):
    """A target edge references a target missing from the project map."""

    def __init__(self, dangling: Sequence[str]) -> None:
        self.dangling = list(dangling)
        listing = "\n".join(f" · {item}" for item in self.dangling)
        super().__init__(f"Dependency graph references unknown targets:\n{listing}")


class WorkspaceFormatError(BugError):
    """The resolved workspace description is malformed."""


# =============================================================================
# Mappers
# =============================================================================


class NoProjectError(AbortError):
    """Shared test target configuration points at an unknown project."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            f"Cannot find project with name {name} while creating shared test target. "
            "Maybe you misspelled project name in install_to parameter?"
        )


class NoTargetError(AbortError):
    """Shared test target configuration points at an unknown host target."""

    def __init__(self, target_name: str, project_name: str) -> None:
        super().__init__(
            f"Cannot find target with name {target_name} in project {project_name}."
        )


class InvalidPatternError(AbortError):
    """A user supplied regular expression does not compile."""

    def __init__(self, pattern: str) -> None:
        self.pattern = pattern
        super().__init__(f'Invalid regex "{pattern}" passed to shared target.')


class PipelineError(ProjgenError):
    """A pipeline stage failed; collected side effects were discarded."""

    def __init__(self, stage: str, cause: Exception, discarded: int = 0) -> None:
        self.stage = stage
        self.cause = cause
        self.discarded = discarded
        if isinstance(cause, ProjgenError):
            self.error_type = cause.error_type
        super().__init__(f"Stage {stage} failed: {cause}")
