"""Data types shared across cloudy."""

from cloudy.models.upload import UploadOutcome, UploadResponse, UploadTask

__all__ = ["UploadOutcome", "UploadResponse", "UploadTask"]
