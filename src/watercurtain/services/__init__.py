"""Services for the pattern store and sequence upload."""

from .pattern_store import PatternStore
from .upload_service import UploadResult, UploadService

__all__ = [
    "PatternStore",
    "UploadResult",
    "UploadService",
]
