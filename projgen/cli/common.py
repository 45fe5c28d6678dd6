"""Helpers shared by the CLI commands."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError

from projgen.config import (
    ConfigError,
    ImpactAnalysisConfig,
    PipelineConfig,
    load_pipeline_config,
)
from projgen.graph.io import load_workspace
from projgen.graph.models import GraphDependency, WorkspaceWithProjects

logger = logging.getLogger("projgen.cli")


def load_config(args) -> PipelineConfig:
    """Load the pipeline config and apply impact-related CLI overrides."""
    config = load_pipeline_config(getattr(args, "config", None))
    overrides = impact_overrides(args)
    if not overrides and config.impact is None:
        return config

    base: Dict[str, Any] = config.impact.model_dump() if config.impact else {}
    base.update(overrides)
    try:
        impact = ImpactAnalysisConfig(**base)
    except ValidationError as exc:
        raise ConfigError(f"Invalid impact analysis options: {exc}") from exc
    return config.model_copy(update={"impact": impact})


def impact_overrides(args) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    for option in ("source_ref", "target_ref"):
        value = getattr(args, option, None)
        if value:
            overrides[option] = value
    if getattr(args, "debug", False):
        overrides["debug"] = True
    if getattr(args, "symlinks", False):
        overrides["symlinks_support"] = True
    for option, field_name in (
        ("changed_target", "changed_targets"),
        ("changed_product", "changed_products"),
    ):
        values: Optional[List[str]] = getattr(args, option, None)
        if values:
            overrides[field_name] = list(values)
    return overrides


def load_inputs(args) -> Tuple[WorkspaceWithProjects, Dict[str, List[GraphDependency]]]:
    path = Path(args.workspace).expanduser()
    logger.debug("Loading resolved workspace from %s", path)
    return load_workspace(path)


def write_json(data: Dict[str, Any], output: str) -> None:
    output_path = Path(output).expanduser()
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
    logger.info("Report written to %s", output_path)
