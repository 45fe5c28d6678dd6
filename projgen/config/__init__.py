"""Configuration models and loaders."""

from .loader import ConfigError, load_pipeline_config
from .schema import ImpactAnalysisConfig, PipelineConfig

__all__ = [
    "ConfigError",
    "ImpactAnalysisConfig",
    "PipelineConfig",
    "load_pipeline_config",
]
