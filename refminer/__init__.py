"""refminer - find citations for knowledge-base facts on pages linked from their articles."""

from refminer.config import ReferencerConfig
from refminer.pipeline import ReferencePipeline, RunSummary, EntityOutcome, EntityState

__version__ = "0.1.0"

__all__ = [
    "ReferencerConfig",
    "ReferencePipeline",
    "RunSummary",
    "EntityOutcome",
    "EntityState",
]
