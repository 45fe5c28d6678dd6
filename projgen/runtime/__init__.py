"""Pipeline runtime: stages, shared state and side effect application."""

from .effects import SideEffectApplier
from .lifecycle import PipelineStage
from .pipeline import MapperPipeline, PipelineResult
from .state import PipelineState

__all__ = [
    "MapperPipeline",
    "PipelineResult",
    "PipelineStage",
    "PipelineState",
    "SideEffectApplier",
]
