"""External dependency lockfile model, parsing and diffing.

The lockfile is YAML keyed by source URL::

    https://cdn.cocoapods.org/:
      type: cdn
      pods:
        Alamofire:
          hash: 1c4f...
          version: 5.8.0
    https://github.com/org/Specs.git:
      type: git
      ref: 4d2a...
      pods:
        Networking:
          version: 1.2.0
          subspecs: [Core, Mocks]
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Set

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from projgen.errors import LockfileParseError

logger = logging.getLogger("projgen.impact.lockfile")


def _number_to_str(value: Any) -> Any:
    # YAML reads unquoted versions, tags and all-digit hashes as numbers
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


class SourceType(str, Enum):
    CDN = "cdn"
    GIT = "git"
    PATH = "path"
    GIT_REPO = "gitRepo"


class PodData(BaseModel):
    hash: Optional[str] = None
    version: str
    subspecs: Optional[List[str]] = None

    model_config = {"frozen": True}

    @field_validator("hash", "version", mode="before")
    @classmethod
    def coerce_scalars(cls, v: Any) -> Any:
        return _number_to_str(v)

    @field_validator("subspecs", mode="before")
    @classmethod
    def coerce_subspecs(cls, v: Any) -> Any:
        if isinstance(v, list):
            return [_number_to_str(item) for item in v]
        return v


class SourceData(BaseModel):
    type: SourceType
    ref: Optional[str] = None
    pods: Dict[str, PodData] = Field(default_factory=dict)

    @field_validator("ref", mode="before")
    @classmethod
    def coerce_ref(cls, v: Any) -> Any:
        return _number_to_str(v)

    @field_validator("pods", mode="before")
    @classmethod
    def empty_pods(cls, v: Any) -> Any:
        return {} if v is None else v


class Lockfile(BaseModel):
    """Pods grouped by the source they were resolved from."""

    pods_by_source: Dict[str, SourceData] = Field(default_factory=dict)

    @classmethod
    def empty(cls) -> "Lockfile":
        return cls()

    @classmethod
    def from_text(cls, text: str, location: str) -> "Lockfile":
        """Parse YAML lockfile contents.

        Args:
            text: Raw YAML.
            location: Human readable origin used in error messages
                (e.g. ``HEAD:Projgen/Dependencies/Cocoapods.lock``).

        Raises:
            LockfileParseError: If the YAML or its structure is invalid.
        """
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise LockfileParseError(location, str(exc)) from exc

        if data is None:
            return cls.empty()
        if not isinstance(data, dict):
            raise LockfileParseError(location, "top level must be a mapping of sources")

        try:
            return cls(pods_by_source=data)
        except ValidationError as exc:
            raise LockfileParseError(location, str(exc)) from exc


def _one_way_changes(original: Lockfile, new: Lockfile, changed: Set[str]) -> None:
    for source, original_data in original.pods_by_source.items():
        new_data = new.pods_by_source.get(source)
        if new_data is None:
            changed.update(original_data.pods)
            continue

        if original_data.ref != new_data.ref:
            changed.update(original_data.pods)
            changed.update(new_data.pods)
            continue

        for pod, original_pod in original_data.pods.items():
            if original_pod != new_data.pods.get(pod):
                changed.add(pod)


def changed_pods(original: Lockfile, new: Lockfile) -> Set[str]:
    """Names of pods that differ between two lockfiles.

    The comparison runs in both directions so that added and removed
    sources and pods are reported alike.
    """
    changed: Set[str] = set()
    _one_way_changes(original, new, changed)
    _one_way_changes(new, original, changed)
    if changed:
        logger.debug("Changed pods: %s", ", ".join(sorted(changed)))
    return changed
