"""S3 upload for certificate PDFs.

Thin wrapper around aioboto3. The session is built once at startup and
passed in; every upload opens its own short-lived client.
"""

from __future__ import annotations

import logging
from urllib.parse import quote

import aioboto3
from botocore.exceptions import BotoCoreError, ClientError

from app.config import Settings
from app.exceptions import StorageError

logger = logging.getLogger(__name__)


def build_session(settings: Settings) -> aioboto3.Session:
    return aioboto3.Session(
        aws_access_key_id=settings.aws_access_key_id or None,
        aws_secret_access_key=settings.aws_secret_access_key or None,
        region_name=settings.s3_region,
    )


def object_name(certificate_id: str) -> str:
    return f"{certificate_id}.pdf"


class S3Uploader:
    """Stores certificate PDFs under ``<prefix><id>.pdf`` in a fixed bucket."""

    def __init__(
        self,
        session: aioboto3.Session,
        bucket: str,
        key_prefix: str = "",
        region: str = "us-east-1",
        public_base_url: str = "",
    ) -> None:
        self._session = session
        self.bucket = bucket
        self.key_prefix = key_prefix
        self.region = region
        self.public_base_url = public_base_url.rstrip("/")

    @classmethod
    def from_settings(cls, settings: Settings) -> S3Uploader:
        return cls(
            build_session(settings),
            bucket=settings.s3_bucket,
            key_prefix=settings.s3_key_prefix,
            region=settings.s3_region,
            public_base_url=settings.s3_public_base_url,
        )

    def key_for(self, certificate_id: str) -> str:
        return f"{self.key_prefix}{object_name(certificate_id)}"

    def public_url(self, key: str) -> str:
        # Path-style so bucket names containing dots still resolve over HTTPS
        path = quote(key, safe="/")
        if self.public_base_url:
            return f"{self.public_base_url}/{path}"
        return f"https://s3.{self.region}.amazonaws.com/{self.bucket}/{path}"

    async def upload(self, pdf_bytes: bytes, certificate_id: str) -> str:
        """Upload PDF bytes and return the public URL. Overwrites any existing object."""
        key = self.key_for(certificate_id)
        try:
            async with self._session.client("s3") as s3:
                await s3.put_object(
                    Bucket=self.bucket,
                    Key=key,
                    Body=pdf_bytes,
                    ContentType="application/pdf",
                )
        except (BotoCoreError, ClientError) as exc:
            logger.error("S3 put_object failed for %s/%s: %s", self.bucket, key, exc)
            raise StorageError(key, exc) from exc
        return self.public_url(key)
