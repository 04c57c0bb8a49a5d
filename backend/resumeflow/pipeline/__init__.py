"""Resume processing pipeline: registry, transfer, analysis queue and service facade."""

from .analysis_queue import AnalysisQueue
from .gateway import UploadGateway
from .registry import ChangeListener, DocumentRegistry
from .service import DocumentPipeline
from .transfer import TransferTracker

__all__ = [
    "AnalysisQueue",
    "ChangeListener",
    "DocumentPipeline",
    "DocumentRegistry",
    "TransferTracker",
    "UploadGateway",
]
