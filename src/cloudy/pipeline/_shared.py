"""Shared result types for upload pipelines."""

from dataclasses import dataclass, field

from cloudy.models.upload import UploadOutcome


@dataclass(frozen=True)
class BatchReport:
    """Final results of one batch.

    ``success_urls`` is in completion order, not the order files were given.
    """

    total: int = 0
    success_urls: list[str] = field(default_factory=list)
    failures: list[UploadOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return len(self.success_urls)

    @property
    def failed(self) -> int:
        return len(self.failures)


class ResultCollector:
    """
    Accumulates outcomes for a batch of a known size.

    Not thread-safe: only the coordinating thread adds outcomes.
    """

    def __init__(self, expected: int):
        self.expected = expected
        self.outcomes: list[UploadOutcome] = []
        self._finalized = False

    def add(self, outcome: UploadOutcome):
        if self._finalized:
            raise RuntimeError("Cannot add outcomes to a finalized batch")
        self.outcomes.append(outcome)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def success_urls(self) -> list[str]:
        return [o.secure_url for o in self.outcomes if o.ok]

    @property
    def failures(self) -> list[UploadOutcome]:
        return [o for o in self.outcomes if not o.ok]

    @property
    def succeeded(self) -> int:
        return len(self.success_urls)

    @property
    def failed(self) -> int:
        return len(self.failures)

    def finalize(self) -> BatchReport:
        """Freeze the collected outcomes into a report."""
        if self.total != self.expected:
            raise RuntimeError(
                f"Batch expected {self.expected} outcomes but collected {self.total}"
            )
        self._finalized = True
        return BatchReport(
            total=self.total,
            success_urls=self.success_urls,
            failures=self.failures,
        )
