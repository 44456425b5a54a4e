from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel

from cloudy.errors import UploadError


class UploadResponse(BaseModel):
    """Success body returned by the upload endpoint."""

    public_id: str
    version: int
    signature: str
    width: int | None = None
    height: int | None = None
    format: str | None = None
    resource_type: str
    created_at: str
    tags: list[str] | None = None
    bytes: int
    url: str
    secure_url: str


@dataclass(frozen=True)
class UploadTask:
    """One file waiting to be uploaded."""

    path: Path
    folder: str | None = None
    transform: str | None = None


@dataclass(frozen=True)
class UploadOutcome:
    """Terminal result of one task: exactly one of response or error is set."""

    task: UploadTask
    response: UploadResponse | None = None
    error: UploadError | None = None

    def __post_init__(self):
        if (self.response is None) == (self.error is None):
            raise ValueError("UploadOutcome needs exactly one of response or error")

    @classmethod
    def success(cls, task: UploadTask, response: UploadResponse) -> UploadOutcome:
        return cls(task=task, response=response)

    @classmethod
    def failure(cls, task: UploadTask, error: UploadError) -> UploadOutcome:
        return cls(task=task, error=error)

    @property
    def ok(self) -> bool:
        return self.response is not None

    @property
    def path(self) -> Path:
        return self.task.path

    @property
    def secure_url(self) -> str | None:
        return self.response.secure_url if self.response else None

    @property
    def message(self) -> str:
        if self.response is not None:
            return self.response.secure_url
        return str(self.error)
