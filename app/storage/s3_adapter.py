"""
S3 storage backend for finished result trees.

Dependencies: boto3
"""

import mimetypes
from pathlib import Path
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from app.logging.logger import Log
from app.storage.base import BaseStorage
from app.storage.exceptions import UploadError


class S3Storage(BaseStorage):
    """Uploads result trees to an S3 bucket."""

    def __init__(
        self,
        bucket: str,
        region: str,
        endpoint_url: str | None = None,
        client: Any = None,
    ) -> None:
        """
        Args:
            bucket: Target bucket name
            region: AWS region of the bucket
            endpoint_url: Optional S3-compatible endpoint
            client: Preconfigured boto3 S3 client (tests)
        """
        self._bucket = bucket
        self._client = client or boto3.client(
            "s3", region_name=region, endpoint_url=endpoint_url or None
        )

    def upload_directory(self, local_path: Path, remote_prefix: str) -> int:
        if not local_path.is_dir():
            raise UploadError(f"Not a directory: {local_path}")
        prefix = remote_prefix.strip("/")
        uploaded = 0
        for path in sorted(p for p in local_path.rglob("*") if p.is_file()):
            relative = path.relative_to(local_path).as_posix()
            key = f"{prefix}/{relative}" if prefix else relative
            try:
                self._client.upload_file(
                    str(path),
                    self._bucket,
                    key,
                    ExtraArgs={"ContentType": _content_type(path)},
                )
            except (BotoCoreError, ClientError, OSError) as exc:
                raise UploadError(f"Failed to upload {path} to s3://{self._bucket}/{key}: {exc}") from exc
            uploaded += 1
        Log.info(f"Uploaded {uploaded} files to s3://{self._bucket}/{prefix}")
        return uploaded


def _content_type(path: Path) -> str:
    guessed, _ = mimetypes.guess_type(path.name)
    return guessed or "application/octet-stream"
