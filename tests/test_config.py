"""Pipeline configuration loading and validation."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from projgen.config import ConfigError, ImpactAnalysisConfig, PipelineConfig, load_pipeline_config


def test_default_config() -> None:
    config = load_pipeline_config(None)

    assert config == PipelineConfig.default()
    assert config.impact is None
    assert config.derived_directory_name == "Derived"
    assert config.apply_side_effects is True


def test_inline_toml() -> None:
    config = load_pipeline_config('[impact]\ntarget_ref = "origin/main"\nchanged_targets = ["App"]\n')

    assert config.impact.target_ref == "origin/main"
    assert config.impact.source_ref == "HEAD"
    assert config.impact.changed_targets == ["App"]


def test_json_file(tmp_path: Path) -> None:
    path = tmp_path / "projgen.json"
    path.write_text(
        json.dumps({"derived_directory_name": "Gen", "impact": {"debug": True}}),
        encoding="utf-8",
    )

    config = load_pipeline_config(path)

    assert config.derived_directory_name == "Gen"
    assert config.impact.debug is True


def test_toml_file(tmp_path: Path) -> None:
    path = tmp_path / "projgen.toml"
    path.write_text('apply_side_effects = false\n[impact]\nconfig_directory = "Tuist"\n', encoding="utf-8")

    config = load_pipeline_config(str(path))

    assert config.apply_side_effects is False
    assert config.impact.lockfile == "Tuist/Dependencies/Cocoapods.lock"
    assert config.impact.dependencies_manifest == "Tuist/Dependencies.swift"


@pytest.mark.parametrize(
    "source",
    [
        "[impact\n",
        '{"impact": ',
        '["not", "a", "mapping"]',
        {"impact": {"unknown_option": 1}},
        {"impact": {"config_directory": "../outside"}},
        {"derived_directory_name": "a/b"},
    ],
)
def test_invalid_sources(source) -> None:
    with pytest.raises(ConfigError):
        load_pipeline_config(source)


def test_impact_config_is_frozen() -> None:
    config = ImpactAnalysisConfig(target_ref="main")

    with pytest.raises(ValidationError):
        config.target_ref = "other"


def test_explicit_paths_win_and_are_excluded() -> None:
    config = ImpactAnalysisConfig(
        target_ref="main",
        lockfile_path="Pods/Podfile.lock",
        manifest_extension=".swift",
    )

    assert config.lockfile == "Pods/Podfile.lock"
    assert config.manifest_extension == "swift"
    assert config.excluded_config_paths == ["Pods/Podfile.lock", "Projgen/Dependencies.swift"]
