"""Unit tests for R2 video storage with a mocked S3 client."""

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from services import video_storage
from services.video_storage import VideoStorage, VideoStorageError, get_video_storage, video_key


@pytest.fixture
def s3_client():
    return MagicMock()


@pytest.fixture
def storage(s3_client):
    return VideoStorage(
        account_id="acct",
        access_key_id="key",
        secret_access_key="secret",
        bucket_name="videos-bucket",
        public_url="https://cdn.example.test/",
        client=s3_client,
    )


def client_error(code: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, "Operation")


class TestUpload:
    @pytest.mark.unit
    def test_uploads_mp4_and_returns_public_url(self, storage, s3_client):
        url = storage.upload_video("proj_1", b"mp4 bytes")

        assert url == "https://cdn.example.test/videos/proj_1.mp4"
        args, kwargs = s3_client.upload_fileobj.call_args
        assert args[1:] == ("videos-bucket", "videos/proj_1.mp4")
        assert kwargs["ExtraArgs"] == {"ContentType": "video/mp4"}

    @pytest.mark.unit
    def test_empty_video_rejected(self, storage, s3_client):
        with pytest.raises(VideoStorageError):
            storage.upload_video("proj_1", b"")
        s3_client.upload_fileobj.assert_not_called()

    @pytest.mark.unit
    def test_client_error_wrapped(self, storage, s3_client):
        s3_client.upload_fileobj.side_effect = client_error("AccessDenied")

        with pytest.raises(VideoStorageError, match="Failed to upload"):
            storage.upload_video("proj_1", b"data")

    @pytest.mark.unit
    def test_url_without_public_base(self, s3_client):
        storage = VideoStorage("acct", "key", "secret", bucket_name="b", client=s3_client)
        assert storage.public_url_for("videos/x.mp4") == "https://b.acct.r2.cloudflarestorage.com/videos/x.mp4"


class TestDelete:
    @pytest.mark.unit
    def test_delete_by_url(self, storage, s3_client):
        assert storage.delete_video("https://cdn.example.test/videos/proj_1.mp4?v=2") is True
        s3_client.delete_object.assert_called_once_with(Bucket="videos-bucket", Key="videos/proj_1.mp4")

    @pytest.mark.unit
    def test_delete_by_key(self, storage, s3_client):
        assert storage.delete_video(video_key("proj_2")) is True
        s3_client.delete_object.assert_called_once_with(Bucket="videos-bucket", Key="videos/proj_2.mp4")

    @pytest.mark.unit
    def test_foreign_url_skipped(self, storage, s3_client):
        assert storage.delete_video("https://elsewhere.test/clip.mp4") is False
        s3_client.delete_object.assert_not_called()

    @pytest.mark.unit
    def test_missing_object(self, storage, s3_client):
        s3_client.delete_object.side_effect = client_error("NoSuchKey")
        assert storage.delete_video("videos/gone.mp4") is False

    @pytest.mark.unit
    def test_other_errors_raise(self, storage, s3_client):
        s3_client.delete_object.side_effect = client_error("InternalError")
        with pytest.raises(VideoStorageError):
            storage.delete_video("videos/proj_1.mp4")


@pytest.mark.unit
def test_get_video_storage_requires_credentials(monkeypatch):
    monkeypatch.setattr(video_storage, "_storage_instance", None)
    assert get_video_storage({"r2_account_id": "acct"}) is None
