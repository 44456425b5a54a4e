"""Tests for the Cloudinary upload client."""

import mimetypes
from pathlib import Path

import pytest
import requests
from conftest import FakeResponse, FakeSession, upload_payload

from cloudy.cloudinary.client import UploadClient, resource_type_for
from cloudy.cloudinary.signing import sign_params
from cloudy.errors import (
    ApiError,
    FileAccessError,
    NetworkError,
    ResponseParseError,
    SignatureError,
)
from cloudy.models.upload import UploadTask


class TestResourceTypeFor:
    """Tests for resource_type_for()."""

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("photo.jpg", "image"),
            ("clip.mp4", "video"),
            ("track.mp3", "raw"),
            ("photo.webp", "image"),
            ("track.flac", "raw"),
            ("track.m4a", "raw"),
            ("clip.mkv", "video"),
            ("archive.zip", "auto"),
            ("no_extension", "auto"),
        ],
    )
    def test_maps_media_type(self, name, expected):
        """The media type should pick the resource type."""
        assert resource_type_for(Path(name)) == expected

    def test_stable(self):
        """The directory part of a path should not change the resource type."""
        assert resource_type_for(Path("a/b/photo.PNG")) == resource_type_for(Path("photo.PNG"))

    def test_ignores_host_mime_database(self, monkeypatch):
        """Classification should not depend on the global mimetypes registry."""
        monkeypatch.setattr(mimetypes, "guess_type", lambda *args, **kwargs: (None, None))
        assert resource_type_for(Path("a.webp")) == "image"
        assert resource_type_for(Path("a.flac")) == "raw"


class TestBuildParams:
    """Tests for UploadClient.build_params()."""

    def test_always_has_timestamp_api_key_and_signature(self, cloudinary_config):
        """Every request should carry timestamp, api_key and signature."""
        client = UploadClient(cloudinary_config, session=FakeSession())
        params = client.build_params(None, None, "image", timestamp=1315060510)
        assert params["timestamp"] == "1315060510"
        assert params["api_key"] == cloudinary_config.api_key
        assert set(params) == {"timestamp", "api_key", "signature"}

    def test_signature_covers_sent_params(self, cloudinary_config):
        """The signature should cover folder, format and timestamp."""
        client = UploadClient(cloudinary_config, session=FakeSession())
        params = client.build_params("trips", "webp", "image", timestamp=1)
        expected = sign_params(
            {"timestamp": "1", "folder": "trips", "format": "webp"},
            cloudinary_config.api_secret,
        )
        assert params["signature"] == expected

    def test_folder_override_wins_over_default(self, cloudinary_config):
        """An explicit folder should replace the configured default."""
        cloudinary_config.default_folder = "default"
        client = UploadClient(cloudinary_config, session=FakeSession())
        assert client.build_params("override", None, "image")["folder"] == "override"

    def test_default_folder_used_when_no_override(self, cloudinary_config):
        """The configured default folder should apply without an override."""
        cloudinary_config.default_folder = "default"
        client = UploadClient(cloudinary_config, session=FakeSession())
        assert client.build_params(None, None, "image")["folder"] == "default"

    def test_empty_folder_is_omitted(self, cloudinary_config):
        """An empty folder should not be sent."""
        client = UploadClient(cloudinary_config, session=FakeSession())
        assert "folder" not in client.build_params(None, None, "image")
        assert "folder" not in client.build_params("", None, "image")

    @pytest.mark.parametrize("transform", ["webp", "avif"])
    def test_known_transform_sets_format(self, cloudinary_config, transform):
        """webp and avif should be sent as the format."""
        client = UploadClient(cloudinary_config, session=FakeSession())
        assert client.build_params(None, transform, "image")["format"] == transform

    @pytest.mark.parametrize("transform", ["png", "WEBP", "", None])
    def test_unknown_transform_is_ignored(self, cloudinary_config, transform):
        """Any other transform should not set a format."""
        client = UploadClient(cloudinary_config, session=FakeSession())
        assert "format" not in client.build_params(None, transform, "image")

    def test_transform_ignored_for_non_images(self, cloudinary_config):
        """Non-image uploads should not get a format."""
        client = UploadClient(cloudinary_config, session=FakeSession())
        assert "format" not in client.build_params(None, "webp", "video")


class TestUploadFile:
    """Tests for UploadClient.upload_file()."""

    def test_posts_multipart_to_resource_endpoint(self, cloudinary_config, make_files):
        """upload_file should post the file to the resource type's endpoint."""
        (path,) = make_files("photo.jpg")
        session = FakeSession()
        client = UploadClient(cloudinary_config, session=session, timeout=5)

        response = client.upload_file(path, folder="trips", transform="avif")

        assert response.secure_url == "https://res.cloudinary.com/demo/image/upload/photo"
        call = session.calls[0]
        assert call["url"] == "https://api.cloudinary.com/v1_1/demo/image/upload"
        assert call["files"]["file"] == ("photo.jpg", b"abc", "image/jpeg")
        assert call["data"]["folder"] == "trips"
        assert call["data"]["format"] == "avif"
        assert call["timeout"] == 5

    def test_audio_goes_to_raw_endpoint(self, cloudinary_config, make_files):
        """Audio files should be uploaded as raw."""
        (path,) = make_files("track.mp3")
        session = FakeSession()
        UploadClient(cloudinary_config, session=session).upload_file(path)
        assert session.calls[0]["url"].endswith("/demo/raw/upload")

    def test_missing_file_raises_file_access_error(self, cloudinary_config, tmp_path):
        """A missing file should fail before any request."""
        session = FakeSession()
        client = UploadClient(cloudinary_config, session=session)
        with pytest.raises(FileAccessError) as exc_info:
            client.upload_file(tmp_path / "missing.jpg")
        assert exc_info.value.path == tmp_path / "missing.jpg"
        assert session.calls == []

    def test_error_status_raises_api_error_with_body(self, cloudinary_config, make_files):
        """An error status should raise ApiError with the response body."""
        (path,) = make_files("photo.jpg")
        body = '{"error": {"message": "Invalid Signature"}}'
        session = FakeSession(lambda url, data, files: FakeResponse(401, text=body))
        client = UploadClient(cloudinary_config, session=session)

        with pytest.raises(ApiError) as exc_info:
            client.upload_file(path)
        assert exc_info.value.status_code == 401
        assert exc_info.value.body == body

    def test_transport_failure_raises_network_error(self, cloudinary_config, make_files):
        """A connection failure should raise NetworkError."""
        (path,) = make_files("photo.jpg")

        def handler(url, data, files):
            raise requests.ConnectionError("connection refused")

        client = UploadClient(cloudinary_config, session=FakeSession(handler))
        with pytest.raises(NetworkError):
            client.upload_file(path)

    def test_invalid_json_raises_parse_error(self, cloudinary_config, make_files):
        """A non-JSON body should raise ResponseParseError."""
        (path,) = make_files("photo.jpg")
        session = FakeSession(lambda url, data, files: FakeResponse(200, text="<html>"))
        client = UploadClient(cloudinary_config, session=session)
        with pytest.raises(ResponseParseError):
            client.upload_file(path)

    def test_raw_response_without_format(self, cloudinary_config, make_files):
        """Raw uploads come back without format, width or height."""
        (path,) = make_files("track.mp3")
        payload = upload_payload("track", "raw")
        for key in ("format", "width", "height"):
            del payload[key]
        session = FakeSession(lambda url, data, files: FakeResponse(200, payload))
        response = UploadClient(cloudinary_config, session=session).upload_file(path)
        assert response.format is None
        assert response.secure_url.endswith("/raw/upload/track")

    def test_incomplete_json_raises_parse_error(self, cloudinary_config, make_files):
        """A body missing required fields should raise ResponseParseError."""
        (path,) = make_files("photo.jpg")
        session = FakeSession(lambda url, data, files: FakeResponse(200, {"public_id": "x"}))
        client = UploadClient(cloudinary_config, session=session)
        with pytest.raises(ResponseParseError):
            client.upload_file(path)


class TestUpload:
    """Tests for UploadClient.upload()."""

    def test_success_outcome(self, cloudinary_config, make_files):
        """upload should wrap a parsed response in a success outcome."""
        (path,) = make_files("photo.jpg")
        outcome = UploadClient(cloudinary_config, session=FakeSession()).upload(UploadTask(path))
        assert outcome.ok
        assert outcome.response.public_id == "photo"
        assert outcome.response.resource_type == "image"

    def test_failure_is_captured(self, cloudinary_config, tmp_path):
        """upload should turn an upload error into a failure outcome."""
        task = UploadTask(tmp_path / "missing.jpg")
        outcome = UploadClient(cloudinary_config, session=FakeSession()).upload(task)
        assert not outcome.ok
        assert isinstance(outcome.error, FileAccessError)
        assert outcome.path == task.path

    def test_signature_error_is_not_captured(self, cloudinary_config, make_files):
        """upload should let a signing failure propagate."""
        (path,) = make_files("photo.jpg")
        cloudinary_config.api_secret = "bad\ud800"
        client = UploadClient(cloudinary_config, session=FakeSession())
        with pytest.raises(SignatureError):
            client.upload(UploadTask(path))


class TestGetUrl:
    """Tests for UploadClient.get_url()."""

    def test_with_webp(self, cloudinary_config):
        """get_url should insert f_webp for webp."""
        client = UploadClient(cloudinary_config, session=FakeSession())
        assert (
            client.get_url("abc123", "image", "webp")
            == "https://res.cloudinary.com/demo/image/upload/f_webp/abc123"
        )

    def test_with_avif(self, cloudinary_config):
        """get_url should insert f_avif for avif."""
        client = UploadClient(cloudinary_config, session=FakeSession())
        assert client.get_url("abc123", "image", "avif").endswith("/upload/f_avif/abc123")

    def test_without_transform(self, cloudinary_config):
        """get_url without a transform should append the public id directly."""
        client = UploadClient(cloudinary_config, session=FakeSession())
        assert (
            client.get_url("abc123", "image")
            == "https://res.cloudinary.com/demo/image/upload/abc123"
        )

    def test_unknown_transform_appends_id_directly(self, cloudinary_config):
        """get_url should ignore an unknown transform."""
        client = UploadClient(cloudinary_config, session=FakeSession())
        assert client.get_url("abc123", "video", "gif").endswith("/video/upload/abc123")
