"""Concurrent upload of a batch of files."""

import logging
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path

from cloudy.cloudinary.client import UploadClient
from cloudy.errors import SignatureError, UnexpectedError
from cloudy.models.upload import UploadOutcome, UploadTask
from cloudy.pipeline._shared import BatchReport, ResultCollector
from cloudy.pipeline.progress import NullProgress, ProgressSink

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 8


def build_tasks(
    paths: Iterable[Path],
    folder: str | None = None,
    transform: str | None = None,
) -> list[UploadTask]:
    """Create one task per path, all sharing the same folder and transform."""
    return [UploadTask(path=Path(p), folder=folder, transform=transform) for p in paths]


def describe_outcome(outcome: UploadOutcome) -> str:
    """One-line, human-readable summary of an outcome."""
    if outcome.ok:
        return f"Uploaded: {outcome.path} -> {outcome.secure_url}"
    return f"Failed to upload {outcome.path}: {outcome.error}"


class BatchCoordinator:
    """
    Runs uploads on a fixed-size thread pool and gathers their outcomes.

    Worker threads only call ``UploadClient.upload``. Finished futures are
    drained on the calling thread, which is the only writer to the result
    collector and the progress sink. Outcomes arrive in completion order.
    """

    def __init__(
        self,
        client: UploadClient,
        max_workers: int = DEFAULT_MAX_WORKERS,
        progress: ProgressSink | None = None,
    ):
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.client = client
        self.max_workers = max_workers
        self.progress = progress or NullProgress()

    def run(self, tasks: list[UploadTask]) -> BatchReport:
        """
        Upload every task and return once each has an outcome.

        Individual upload failures end up in the report. The only errors
        raised are a SignatureError (the batch is aborted and queued uploads
        are cancelled) or a failure to start the worker pool.

        Args:
            tasks: Tasks to upload

        Returns:
            BatchReport with one outcome per task
        """
        collector = ResultCollector(expected=len(tasks))
        if not tasks:
            return collector.finalize()

        workers = min(self.max_workers, len(tasks))
        logger.info("Uploading %d files with %d workers", len(tasks), workers)

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="cloudy-upload") as pool:
            future_to_task = {pool.submit(self.client.upload, task): task for task in tasks}

            for future in as_completed(future_to_task):
                task = future_to_task[future]
                try:
                    outcome = future.result()
                except SignatureError:
                    logger.error("Signing failed, aborting batch")
                    # Only futures that have not started can be cancelled;
                    # running uploads finish before the pool shuts down.
                    for pending in future_to_task:
                        pending.cancel()
                    raise
                except Exception as e:
                    logger.exception("Upload worker crashed for %s", task.path)
                    outcome = UploadOutcome.failure(
                        task, UnexpectedError(task.path, f"Unexpected error: {e}")
                    )

                collector.add(outcome)
                self.progress.advance(describe_outcome(outcome))

        report = collector.finalize()
        logger.info(
            "Batch complete: %d of %d uploaded, %d failed",
            report.succeeded,
            report.total,
            report.failed,
        )
        return report
