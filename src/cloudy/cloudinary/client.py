"""Signed uploads against the Cloudinary REST API."""

import logging
import mimetypes
import time
from pathlib import Path

import requests
from pydantic import ValidationError

from cloudy.cloudinary.signing import sign_params
from cloudy.config import CloudinaryConfig
from cloudy.errors import (
    ApiError,
    FileAccessError,
    NetworkError,
    ResponseParseError,
    UploadError,
)
from cloudy.models.upload import UploadOutcome, UploadResponse, UploadTask

logger = logging.getLogger(__name__)

API_BASE_URL = "https://api.cloudinary.com/v1_1"
CDN_BASE_URL = "https://res.cloudinary.com"

# Transform names the API accepts as a target ``format``.
FORMAT_TRANSFORMS = frozenset({"webp", "avif"})

RESOURCE_TYPES = {
    "image": "image",
    "video": "video",
    "audio": "raw",
}

# Built from Python's own table only, so host mime.types files cannot change
# how a file is classified.
_MIME_TYPES = mimetypes.MimeTypes(filenames=())
for _suffix, _mime_type in {
    ".webp": "image/webp",
    ".avif": "image/avif",
    ".heic": "image/heic",
    ".flac": "audio/flac",
    ".m4a": "audio/mp4",
    ".ogg": "audio/ogg",
    ".opus": "audio/opus",
    ".aac": "audio/aac",
    ".wav": "audio/wav",
    ".mkv": "video/x-matroska",
    ".webm": "video/webm",
    ".mov": "video/quicktime",
}.items():
    _MIME_TYPES.add_type(_mime_type, _suffix)


def guess_mime_type(path: Path) -> str | None:
    """Guess a file's media type from its extension."""
    mime_type, _ = _MIME_TYPES.guess_type(path.name)
    return mime_type


def resource_type_for(path: Path) -> str:
    """Map a file to the API resource type used in the upload URL."""
    mime_type = guess_mime_type(path)
    if mime_type is None:
        return "auto"
    return RESOURCE_TYPES.get(mime_type.split("/", 1)[0], "auto")


class UploadClient:
    """
    Builds, signs and sends upload requests.

    Holds no per-call state, so one instance (and its session's connection
    pool) can be shared by every upload thread.
    """

    def __init__(
        self,
        config: CloudinaryConfig,
        session: requests.Session | None = None,
        timeout: float | None = None,
    ):
        self.config = config
        self.session = session or requests.Session()
        self.timeout = timeout

    def close(self):
        self.session.close()

    def upload_url(self, resource_type: str) -> str:
        return f"{API_BASE_URL}/{self.config.cloud_name}/{resource_type}/upload"

    def build_params(
        self,
        folder: str | None,
        transform: str | None,
        resource_type: str,
        timestamp: int | None = None,
    ) -> dict[str, str]:
        """
        Assemble and sign the form fields for one upload.

        Args:
            folder: Destination folder; falls back to the configured default
            transform: Requested format transform, ignored unless whitelisted
            resource_type: Resource type of the file being uploaded
            timestamp: Unix time in seconds, defaults to now

        Returns:
            Form fields including ``signature``
        """
        if timestamp is None:
            timestamp = int(time.time())

        params = {
            "timestamp": str(timestamp),
            "api_key": self.config.api_key,
        }

        effective_folder = folder if folder is not None else self.config.default_folder
        if effective_folder:
            params["folder"] = effective_folder

        if transform in FORMAT_TRANSFORMS:
            if resource_type == "image":
                params["format"] = transform
            else:
                logger.debug(
                    "Ignoring transform %r for %s upload; only images are converted",
                    transform,
                    resource_type,
                )

        params["signature"] = sign_params(params, self.config.api_secret)
        return params

    def upload_file(
        self,
        path: Path,
        folder: str | None = None,
        transform: str | None = None,
    ) -> UploadResponse:
        """
        Upload a single file.

        Raises:
            FileAccessError: If the file cannot be read
            NetworkError: On connection or timeout failures
            ApiError: If the API rejects the upload
            ResponseParseError: If the success body is not a valid upload response
            SignatureError: If the parameters cannot be signed
        """
        try:
            content = path.read_bytes()
        except OSError as e:
            raise FileAccessError(path, f"Cannot read {path}: {e.strerror or e}") from e

        resource_type = resource_type_for(path)
        params = self.build_params(folder, transform, resource_type)
        content_type = guess_mime_type(path) or "application/octet-stream"
        url = self.upload_url(resource_type)

        logger.debug("Uploading %s (%d bytes) as %s", path, len(content), resource_type)
        try:
            response = self.session.post(
                url,
                data=params,
                files={"file": (path.name, content, content_type)},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise NetworkError(path, f"Failed to send upload request: {e}") from e

        if not response.ok:
            raise ApiError(path, response.status_code, response.text)

        try:
            return UploadResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise ResponseParseError(path, f"Failed to parse upload response: {e}") from e

    def upload(self, task: UploadTask) -> UploadOutcome:
        """Upload one task, capturing per-file errors into its outcome."""
        try:
            response = self.upload_file(task.path, task.folder, task.transform)
        except UploadError as e:
            logger.debug("Upload of %s failed: %s", task.path, e)
            return UploadOutcome.failure(task, e)
        logger.debug("Uploaded %s -> %s", task.path, response.secure_url)
        return UploadOutcome.success(task, response)

    def get_url(self, public_id: str, resource_type: str, transform: str | None = None) -> str:
        """Delivery URL for an uploaded asset, optionally converted on the fly."""
        base_url = f"{CDN_BASE_URL}/{self.config.cloud_name}/{resource_type}/upload"
        if transform in FORMAT_TRANSFORMS:
            return f"{base_url}/f_{transform}/{public_id}"
        return f"{base_url}/{public_id}"
