"""Pydantic data models for the batch progress engine."""

from src.models.batch_result import BatchResult, PhasedResults, PhaseResult
from src.models.config import Config
from src.models.item_result import Failure, ItemOutcome, ItemResult, Success
from src.models.processing_error import ProcessingError
from src.models.progress_snapshot import ProgressSnapshot, ProgressStatus

__all__ = [
    "BatchResult",
    "Config",
    "Failure",
    "ItemOutcome",
    "ItemResult",
    "PhaseResult",
    "PhasedResults",
    "ProcessingError",
    "ProgressSnapshot",
    "ProgressStatus",
    "Success",
]
