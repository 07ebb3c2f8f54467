"""Product image storage on S3.

Upload failures raise UpstreamUnavailable so the caller can decide what to do
with them; deletes are best-effort and only logged.
"""

import os
import time

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from flask import current_app

from cloudmart.errors import InvalidArgument, UpstreamUnavailable
from cloudmart.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_URL_TTL = 3600
ALLOWED_IMAGE_EXTENSIONS = frozenset({"jpeg", "jpg", "png", "gif", "webp"})


def get_storage():
    """Return the ImageStorage bound to the current app."""
    return current_app.extensions["cloudmart.storage"]


def allowed_image(filename, allowed_extensions):
    """True when ``filename`` has one of the allowed image extensions."""
    ext = os.path.splitext(filename or "")[1].lower().lstrip(".")
    return ext in allowed_extensions


class ImageStorage:
    def __init__(self, client, bucket, region="us-east-1"):
        self.client = client
        self.bucket = bucket
        self.region = region

    @classmethod
    def from_config(cls, config):
        """Build an S3 client from app config; explicit keys only when both are set."""
        kwargs = {"region_name": config.get("AWS_REGION", "us-east-1")}
        if config.get("AWS_ACCESS_KEY_ID") and config.get("AWS_SECRET_ACCESS_KEY"):
            kwargs["aws_access_key_id"] = config["AWS_ACCESS_KEY_ID"]
            kwargs["aws_secret_access_key"] = config["AWS_SECRET_ACCESS_KEY"]
        client = boto3.client("s3", **kwargs)
        return cls(client, config["AWS_S3_BUCKET"], kwargs["region_name"])

    def build_key(self, product_id, filename=None):
        ext = os.path.splitext(filename or "")[1].lower()
        return f"products/{product_id}/{int(time.time() * 1000)}{ext}"

    def public_url(self, key):
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"

    def store(self, payload, content_type, product_id, filename=None):
        """Upload image bytes for a product; returns ``(url, key)``."""
        if not payload:
            raise InvalidArgument("Image file is empty")
        key = self.build_key(product_id, filename)
        try:
            self.client.put_object(Bucket=self.bucket, Key=key, Body=payload, ContentType=content_type)
        except (BotoCoreError, ClientError) as exc:
            logger.error("image_upload_failed", key=key, error=str(exc))
            raise UpstreamUnavailable(f"Failed to upload image: {exc}")

        logger.info("image_uploaded", key=key)
        return self.public_url(key), key

    def delete(self, key):
        """Remove an image; never raises."""
        if not key:
            return
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as exc:
            logger.error("image_delete_failed", key=key, error=str(exc))
            return
        logger.info("image_deleted", key=key)

    def signed_url(self, key, ttl=DEFAULT_URL_TTL):
        """Time-limited GET URL for ``key``, or None when it cannot be generated."""
        if not key:
            return None
        try:
            return self.client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket, "Key": key},
                ExpiresIn=ttl,
            )
        except (BotoCoreError, ClientError) as exc:
            logger.error("image_presign_failed", key=key, error=str(exc))
            return None

    def is_reachable(self):
        try:
            self.client.head_bucket(Bucket=self.bucket)
        except (BotoCoreError, ClientError):
            return False
        return True
