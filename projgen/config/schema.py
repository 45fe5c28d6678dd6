"""Configuration schema definitions using Pydantic for validation.

``ImpactAnalysisConfig`` is immutable: the impact engine receives it once and
never mutates it. ``PipelineConfig`` groups the knobs of a full generation
run.
"""

from pathlib import PurePosixPath
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

DEFAULT_CONFIG_DIRECTORY = "Projgen"


class ImpactAnalysisConfig(BaseModel):
    """Inputs of the impact analysis engine.

    Attributes:
        source_ref: Revision holding the change. Defaults to ``HEAD``.
        target_ref: Baseline revision; required unless ``debug`` is set.
        debug: Compare the working tree against ``HEAD`` instead of a range.
        changed_targets: Target names to mark changed unconditionally.
        changed_products: Product names to mark changed unconditionally.
        symlinks_support: Expand changed paths through workspace symlinks.
        config_directory: Reserved configuration folder (repo-relative).
        lockfile_path: External dependency lockfile (repo-relative).
        dependencies_manifest_path: External dependency manifest (repo-relative).
        manifest_extension: Extension of workspace/project manifests.
    """

    source_ref: str = "HEAD"
    target_ref: Optional[str] = None
    debug: bool = False
    changed_targets: List[str] = Field(default_factory=list)
    changed_products: List[str] = Field(default_factory=list)
    symlinks_support: bool = False
    config_directory: str = DEFAULT_CONFIG_DIRECTORY
    lockfile_path: Optional[str] = None
    dependencies_manifest_path: Optional[str] = None
    manifest_extension: str = "swift"

    model_config = {"frozen": True, "extra": "forbid"}

    @field_validator("config_directory")
    @classmethod
    def validate_config_directory(cls, v: str) -> str:
        v = v.strip().strip("/")
        if not v or PurePosixPath(v).is_absolute() or ".." in PurePosixPath(v).parts:
            raise ValueError("config_directory must be a relative folder inside the workspace")
        return v

    @field_validator("manifest_extension")
    @classmethod
    def validate_extension(cls, v: str) -> str:
        v = v.lstrip(".")
        if not v.isalnum():
            raise ValueError(f"Invalid manifest extension '{v}'")
        return v

    @property
    def lockfile(self) -> str:
        if self.lockfile_path:
            return self.lockfile_path
        return f"{self.config_directory}/Dependencies/Cocoapods.lock"

    @property
    def dependencies_manifest(self) -> str:
        if self.dependencies_manifest_path:
            return self.dependencies_manifest_path
        return f"{self.config_directory}/Dependencies.{self.manifest_extension}"

    @property
    def excluded_config_paths(self) -> List[str]:
        """Paths under the config folder that do not trigger a full rebuild."""
        return [self.lockfile, self.dependencies_manifest]


class PipelineConfig(BaseModel):
    """Top-level configuration of a generation run.

    Attributes:
        impact: Impact analysis configuration; None disables the analysis.
        derived_directory_name: Per-project folder holding generated files.
        apply_side_effects: Apply collected side effects after the run.
    """

    impact: Optional[ImpactAnalysisConfig] = None
    derived_directory_name: str = "Derived"
    apply_side_effects: bool = True

    model_config = {"extra": "allow"}

    @field_validator("derived_directory_name")
    @classmethod
    def validate_derived_directory(cls, v: str) -> str:
        if not v or "/" in v or v in {".", ".."}:
            raise ValueError(f"Invalid derived directory name '{v}'")
        return v

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PipelineConfig":
        return cls.model_validate(data)

    @classmethod
    def default(cls) -> "PipelineConfig":
        return cls()
