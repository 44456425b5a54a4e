"""Upload pipeline for the ``upload`` command."""

from pathlib import Path

from rich.console import Console

from cloudy.cloudinary.client import FORMAT_TRANSFORMS, UploadClient
from cloudy.config import Config
from cloudy.errors import NoFilesSelectedError
from cloudy.pipeline._shared import BatchReport
from cloudy.pipeline.batch import BatchCoordinator, build_tasks
from cloudy.pipeline.progress import NullProgress, ProgressSink, TqdmProgress

MAX_FAILURES_SHOWN = 10


def save_urls(urls: list[str], output_path: Path):
    """Write one URL per line, replacing the file."""
    with open(output_path, "w", encoding="utf-8") as f:
        for url in urls:
            f.write(f"{url}\n")


def upload_files(
    files: list[Path],
    config: Config,
    console: Console,
    folder: str | None = None,
    transform: str | None = None,
    output: Path | None = None,
    max_workers: int | None = None,
    client: UploadClient | None = None,
    show_progress: bool = True,
) -> BatchReport:
    """
    Full pipeline: build tasks -> upload concurrently -> report -> save URLs.

    Flow:
    1. Create one task per file
    2. Upload on a bounded worker pool, printing a line per file
    3. Print the summary and any failures
    4. Write successful URLs to ``output`` if given

    Args:
        files: Files to upload
        config: Resolved configuration with credentials
        console: Rich console for output
        folder: Destination folder, overriding the configured default
        transform: Format transform (``webp`` or ``avif``)
        output: File to write successful URLs to
        max_workers: Concurrent uploads, defaults to the configured value
        client: Upload client to use instead of building one from ``config``
        show_progress: Draw a progress bar

    Returns:
        BatchReport for the batch

    Raises:
        NoFilesSelectedError: If ``files`` is empty
    """
    if not files:
        raise NoFilesSelectedError("No files selected for upload.")

    if transform and transform not in FORMAT_TRANSFORMS:
        console.print(
            f"[yellow]⚠[/yellow] Unknown transform '{transform}', uploading without conversion"
        )

    workers = max_workers or config.options.max_workers
    tasks = build_tasks(files, folder=folder, transform=transform)

    console.print(f"[bold blue]ℹ[/bold blue] Uploading {len(tasks)} files to Cloudinary...")

    owns_client = client is None
    if client is None:
        client = UploadClient(config.cloudinary, timeout=config.options.timeout_seconds)

    progress: ProgressSink = TqdmProgress(len(tasks)) if show_progress else NullProgress()
    try:
        report = BatchCoordinator(client, max_workers=workers, progress=progress).run(tasks)
    finally:
        if isinstance(progress, TqdmProgress):
            progress.close()
        if owns_client:
            client.close()

    console.print(
        f"[bold green]✓[/bold green] Successfully uploaded "
        f"{report.succeeded} of {report.total} files."
    )

    if report.failures:
        console.print(f"\n[red]Failed uploads ({report.failed}):[/red]")
        for failure in report.failures[:MAX_FAILURES_SHOWN]:
            console.print(f"  {failure.path}: {failure.error}")
        if report.failed > MAX_FAILURES_SHOWN:
            console.print(f"  ... and {report.failed - MAX_FAILURES_SHOWN} more")

    if output:
        save_urls(report.success_urls, output)
        console.print(f"[bold green]✓[/bold green] URLs saved to: {output}")

    return report
