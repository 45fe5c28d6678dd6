"""Load pipeline configuration from TOML/JSON sources.

``load_pipeline_config`` accepts:

* None -> default PipelineConfig
* dict -> already-parsed mapping
* Path / path-like string -> .toml/.json file
* Inline JSON/TOML strings
"""

from __future__ import annotations

import json
import logging
import tomllib
from pathlib import Path
from typing import Any, Dict, Union

from pydantic import ValidationError

from projgen.config.schema import PipelineConfig
from projgen.errors import AbortError

logger = logging.getLogger("projgen.config.loader")

ConfigSource = Union[str, Path, Dict[str, Any], None]


class ConfigError(AbortError):
    """The configuration source could not be read or validated."""


def _detect_format(text: str) -> str:
    return "json" if text.lstrip().startswith(("{", "[")) else "toml"


def _read_source(source: Union[str, Path]) -> Dict[str, Any]:
    path = Path(source)
    try:
        is_file = path.is_file()
    except OSError:
        # inline documents can exceed the maximum path length
        is_file = False
    if is_file:
        text = path.read_text(encoding="utf-8")
        suffix = path.suffix.lower()
        if suffix in {".toml", ".tml"}:
            fmt = "toml"
        elif suffix == ".json":
            fmt = "json"
        else:
            fmt = _detect_format(text)
        logger.info("Loading configuration from file: %s (fmt=%s)", path, fmt)
    else:
        text = str(source)
        fmt = _detect_format(text)
        logger.info("Loading configuration from inline %s string", fmt)

    try:
        data = json.loads(text) if fmt == "json" else tomllib.loads(text)
    except (json.JSONDecodeError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Unable to parse {fmt} configuration: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError("Top-level configuration must be a mapping/dict")
    return data


def load_pipeline_config(source: ConfigSource) -> PipelineConfig:
    """Load a PipelineConfig.

    Args:
        source: None, a mapping, a path to a .toml/.json file or an inline
            TOML/JSON string.

    Raises:
        ConfigError: If the source cannot be parsed or fails validation.
    """
    if source is None:
        logger.debug("No config source provided; using default PipelineConfig")
        return PipelineConfig.default()

    if isinstance(source, dict):
        data = source
    elif isinstance(source, (str, Path)):
        data = _read_source(source)
    else:
        raise TypeError(f"Unsupported config source type: {type(source)!r}")

    try:
        return PipelineConfig.from_dict(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


__all__ = ["ConfigError", "ConfigSource", "load_pipeline_config"]
