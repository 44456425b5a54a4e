"""Exception types raised by cloudy."""

from pathlib import Path


class CloudyError(Exception):
    """Base error for everything cloudy raises on purpose."""


class SignatureError(CloudyError):
    """Raised when request parameters cannot be encoded for signing.

    No request built after this can be trusted, so it aborts the whole batch.
    """


class UploadError(CloudyError):
    """Base error for a single file's failed upload.

    Always carries the originating path. Captured into that file's outcome
    and never propagated to sibling uploads.
    """

    def __init__(self, path: Path, message: str):
        super().__init__(message)
        self.path = path
        self.message = message


class FileAccessError(UploadError):
    """Raised when the local file cannot be read."""


class NetworkError(UploadError):
    """Raised on connection or transport failure."""


class ApiError(UploadError):
    """Raised when the API answers with a non-success status."""

    def __init__(self, path: Path, status_code: int, body: str):
        super().__init__(path, f"Upload failed ({status_code}): {body}")
        self.status_code = status_code
        self.body = body


class ResponseParseError(UploadError):
    """Raised when a success response body cannot be parsed."""


class UnexpectedError(UploadError):
    """A worker crashed with an exception that is not an UploadError."""


class ConfigError(CloudyError):
    """Raised when the config file cannot be read, parsed or written."""


class ConfigNotFoundError(ConfigError):
    """Raised when no config file exists at the expected path."""


class NoCredentialsError(CloudyError):
    """Raised when neither the config file nor the environment has credentials."""


class FileSelectionError(CloudyError):
    """Raised when files could not be selected for upload."""


class NoFilesSelectedError(FileSelectionError):
    """Raised when selection finished with nothing to upload."""
