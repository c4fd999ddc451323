"""Services package initialization."""

from .fallback import FallbackSimulator
from .poller import PredictionPoller
from .prediction_client import PredictionClient
from .progress import ProgressEvent, ProgressReporter, ProgressStream
from .prompt_builder import PromptBuilder, build_prompt
from .results import ResultStore, StorageError
from .style_transfer import StyleTransferService

__all__ = [
    "FallbackSimulator",
    "PredictionPoller",
    "PredictionClient",
    "ProgressEvent",
    "ProgressReporter",
    "ProgressStream",
    "PromptBuilder",
    "build_prompt",
    "ResultStore",
    "StorageError",
    "StyleTransferService"
]
