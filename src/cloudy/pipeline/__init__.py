"""Pipeline for selecting and uploading files in batches."""

from .batch import BatchCoordinator, build_tasks
from .select import ExplicitPathSelector, InteractiveSelector, selector_for
from .upload import save_urls, upload_files

__all__ = [
    "BatchCoordinator",
    "ExplicitPathSelector",
    "InteractiveSelector",
    "build_tasks",
    "save_urls",
    "selector_for",
    "upload_files",
]
