"""Tests for the S3 image store."""

from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from cloudmart.errors import InvalidArgument, UpstreamUnavailable
from cloudmart.storage import ALLOWED_IMAGE_EXTENSIONS, ImageStorage, allowed_image


@pytest.mark.parametrize(
    "filename, expected",
    [
        ("photo.jpg", True),
        ("photo.JPEG", True),
        ("anim.gif", True),
        ("pic.webp", True),
        ("archive.tar.png", True),
        ("script.php", False),
        ("noext", False),
        ("", False),
        (None, False),
    ],
)
def test_allowed_image(filename, expected):
    assert allowed_image(filename, ALLOWED_IMAGE_EXTENSIONS) is expected


class TestStore:
    def test_uploads_and_returns_public_url(self, storage, s3_client):
        url, key = storage.store(b"data", "image/jpeg", "abc123", "Photo.JPG")

        assert key.startswith("products/abc123/")
        assert key.endswith(".jpg")
        assert url == f"https://test-bucket.s3.us-east-1.amazonaws.com/{key}"
        s3_client.put_object.assert_called_once_with(
            Bucket="test-bucket", Key=key, Body=b"data", ContentType="image/jpeg"
        )

    def test_empty_payload(self, storage, s3_client):
        with pytest.raises(InvalidArgument):
            storage.store(b"", "image/png", "abc123", "a.png")
        s3_client.put_object.assert_not_called()

    def test_client_error_becomes_upstream_unavailable(self, storage, s3_client):
        s3_client.put_object.side_effect = ClientError(
            {"Error": {"Code": "AccessDenied", "Message": "denied"}}, "PutObject"
        )
        with pytest.raises(UpstreamUnavailable) as excinfo:
            storage.store(b"data", "image/png", "abc123", "a.png")
        assert excinfo.value.status_code == 503

    def test_connection_error_becomes_upstream_unavailable(self, storage, s3_client):
        s3_client.put_object.side_effect = EndpointConnectionError(endpoint_url="https://s3.example")
        with pytest.raises(UpstreamUnavailable):
            storage.store(b"data", "image/png", "abc123", "a.png")


class TestDelete:
    def test_deletes_key(self, storage, s3_client):
        storage.delete("products/1/a.png")
        s3_client.delete_object.assert_called_once_with(Bucket="test-bucket", Key="products/1/a.png")

    def test_no_key_is_a_no_op(self, storage, s3_client):
        storage.delete(None)
        storage.delete("")
        s3_client.delete_object.assert_not_called()

    def test_errors_are_swallowed(self, storage, s3_client):
        s3_client.delete_object.side_effect = ClientError(
            {"Error": {"Code": "NoSuchKey", "Message": "gone"}}, "DeleteObject"
        )
        storage.delete("products/1/a.png")


class TestSignedUrl:
    def test_returns_presigned_url(self, storage, s3_client):
        assert storage.signed_url("products/1/a.png", ttl=60) == "https://signed.example/url"
        s3_client.generate_presigned_url.assert_called_once_with(
            "get_object",
            Params={"Bucket": "test-bucket", "Key": "products/1/a.png"},
            ExpiresIn=60,
        )

    def test_failure_returns_none(self, storage, s3_client):
        s3_client.generate_presigned_url.side_effect = ClientError(
            {"Error": {"Code": "500", "Message": "boom"}}, "GetObject"
        )
        assert storage.signed_url("products/1/a.png") is None

    def test_no_key(self, storage):
        assert storage.signed_url(None) is None


class TestReachability:
    def test_reachable(self, storage, s3_client):
        assert storage.is_reachable()
        s3_client.head_bucket.assert_called_once_with(Bucket="test-bucket")

    def test_unreachable(self, storage, s3_client):
        s3_client.head_bucket.side_effect = ClientError({"Error": {"Code": "404", "Message": "nope"}}, "HeadBucket")
        assert not storage.is_reachable()


class TestFromConfig:
    @patch("cloudmart.storage.boto3.client")
    def test_uses_explicit_keys_when_both_set(self, client_factory):
        client_factory.return_value = MagicMock()
        config = {
            "AWS_REGION": "eu-west-1",
            "AWS_S3_BUCKET": "shop-images",
            "AWS_ACCESS_KEY_ID": "AKIA",
            "AWS_SECRET_ACCESS_KEY": "secret",
        }

        storage = ImageStorage.from_config(config)

        client_factory.assert_called_once_with(
            "s3", region_name="eu-west-1", aws_access_key_id="AKIA", aws_secret_access_key="secret"
        )
        assert storage.bucket == "shop-images"
        assert storage.public_url("k") == "https://shop-images.s3.eu-west-1.amazonaws.com/k"

    @patch("cloudmart.storage.boto3.client")
    def test_falls_back_to_default_credentials(self, client_factory):
        ImageStorage.from_config({"AWS_REGION": "us-east-1", "AWS_S3_BUCKET": "b", "AWS_ACCESS_KEY_ID": "AKIA"})
        client_factory.assert_called_once_with("s3", region_name="us-east-1")
