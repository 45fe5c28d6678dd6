"""Apply side effect descriptors to the filesystem."""

from __future__ import annotations

import logging
import shutil
from typing import Iterable

from projgen.graph.models import (
    DescriptorState,
    DirectoryDescriptor,
    FileDescriptor,
    SideEffectDescriptor,
)

logger = logging.getLogger("projgen.runtime.effects")


class SideEffectApplier:
    """Writes and removes files and directories, in descriptor order."""

    def __init__(self, dry_run: bool = False) -> None:
        self.dry_run = dry_run

    def apply(self, descriptors: Iterable[SideEffectDescriptor]) -> int:
        """Apply every descriptor.

        Returns:
            int: Number of descriptors applied.
        """
        count = 0
        for descriptor in descriptors:
            if isinstance(descriptor, FileDescriptor):
                self._apply_file(descriptor)
            elif isinstance(descriptor, DirectoryDescriptor):
                self._apply_directory(descriptor)
            else:
                raise TypeError(f"Unsupported side effect: {descriptor!r}")
            count += 1
        return count

    def _apply_file(self, descriptor: FileDescriptor) -> None:
        path = descriptor.path
        if descriptor.state == DescriptorState.PRESENT:
            logger.debug("Writing file %s", path)
            if self.dry_run:
                return
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(descriptor.contents or b"")
        else:
            logger.debug("Removing file %s", path)
            if self.dry_run:
                return
            if path.is_file() or path.is_symlink():
                path.unlink()

    def _apply_directory(self, descriptor: DirectoryDescriptor) -> None:
        path = descriptor.path
        if descriptor.state == DescriptorState.PRESENT:
            logger.debug("Creating directory %s", path)
            if not self.dry_run:
                path.mkdir(parents=True, exist_ok=True)
        else:
            logger.debug("Removing directory %s", path)
            if not self.dry_run and path.is_dir():
                shutil.rmtree(path)
