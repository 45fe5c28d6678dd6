"""Side effect descriptors produced by mappers.

Mappers never touch the filesystem themselves. They describe the desired
state of files and directories and the pipeline applies the descriptors once
every stage succeeded.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Union


class DescriptorState(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"


@dataclass(frozen=True)
class FileDescriptor:
    """Desired state of a file; ``contents`` is only used when present."""

    path: Path
    contents: Optional[bytes] = None
    state: DescriptorState = DescriptorState.PRESENT


@dataclass(frozen=True)
class DirectoryDescriptor:
    path: Path
    state: DescriptorState = DescriptorState.PRESENT


SideEffectDescriptor = Union[FileDescriptor, DirectoryDescriptor]
