"""Service layer for picmark.

Services:
    - UploadOrchestrator: concurrent uploads to the image host
    - OutputManager: output naming and writing
"""

from picmark.services.output_manager import OutputManager
from picmark.services.uploader import ProgressEvent, UploadOrchestrator

__all__ = [
    "OutputManager",
    "ProgressEvent",
    "UploadOrchestrator",
]
