"""Document ingestion pipeline."""

from contextual_rag.ingestion.pipeline import (
    PipelineStage,
    ProcessingPipeline,
    create_processing_pipeline,
)

__all__ = [
    "PipelineStage",
    "ProcessingPipeline",
    "create_processing_pipeline",
]
