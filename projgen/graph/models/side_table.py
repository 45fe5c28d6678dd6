"""Pipeline-internal target metadata that the project emitter never sees.

The side table travels next to the workspace/graph through every mapper.
Entries are keyed by ``TargetKey`` (project path + target name).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Flag, auto
from pathlib import Path
from typing import Dict, Iterator, List, Tuple

from .dependency import TargetKey


class TargetFlags(Flag):
    NONE = 0
    SHARED_TEST_TARGET = auto()
    SHARED_TEST_TARGET_APP_HOST = auto()
    SHARED_TEST_TARGET_GENERATED_FRAMEWORK = auto()


@dataclass(frozen=True)
class SourceFileGlob:
    """A source glob pattern together with its exclusion patterns."""

    pattern: str
    excluding: Tuple[str, ...] = ()


@dataclass
class TargetSideTable:
    flags: TargetFlags = TargetFlags.NONE
    sources: List[SourceFileGlob] = field(default_factory=list)
    resources: List[str] = field(default_factory=list)
    additional_files: List[str] = field(default_factory=list)


@dataclass
class SideTable:
    """Auxiliary per-target metadata for one pipeline run."""

    targets: Dict[TargetKey, TargetSideTable] = field(default_factory=dict)

    def entry(self, path: Path, name: str) -> TargetSideTable:
        """Return the entry for a target, creating an empty one if missing."""
        key = TargetKey(Path(path), name)
        if key not in self.targets:
            self.targets[key] = TargetSideTable()
        return self.targets[key]

    def get(self, path: Path, name: str) -> TargetSideTable:
        """Return the entry for a target without inserting it.

        Missing targets get a fresh empty entry that is not stored.
        """
        entry = self.targets.get(TargetKey(Path(path), name))
        return TargetSideTable() if entry is None else entry

    # ------------------------------------------------------------------ #
    #  Flags                                                               #
    # ------------------------------------------------------------------ #
    def flags(self, path: Path, name: str) -> TargetFlags:
        return self.get(path, name).flags

    def set_flags(self, flags: TargetFlags, path: Path, name: str) -> None:
        self.entry(path, name).flags = flags

    def insert_flags(self, flags: TargetFlags, path: Path, name: str) -> None:
        entry = self.entry(path, name)
        entry.flags = entry.flags | flags

    def has_flag(self, flag: TargetFlags, path: Path, name: str) -> bool:
        return flag in self.flags(path, name)

    def keys_with_flag(self, flag: TargetFlags) -> Iterator[TargetKey]:
        for key, entry in self.targets.items():
            if flag in entry.flags:
                yield key

    # ------------------------------------------------------------------ #
    #  Cached glob listings                                                #
    # ------------------------------------------------------------------ #
    def sources(self, path: Path, name: str) -> List[SourceFileGlob]:
        return self.get(path, name).sources

    def set_sources(self, sources: List[SourceFileGlob], path: Path, name: str) -> None:
        self.entry(path, name).sources = list(sources)

    def resources(self, path: Path, name: str) -> List[str]:
        return self.get(path, name).resources

    def set_resources(self, resources: List[str], path: Path, name: str) -> None:
        self.entry(path, name).resources = list(resources)

    def additional_files(self, path: Path, name: str) -> List[str]:
        return self.get(path, name).additional_files

    def set_additional_files(self, files: List[str], path: Path, name: str) -> None:
        self.entry(path, name).additional_files = list(files)

