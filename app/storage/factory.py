from pathlib import Path

from app.config.settings import Settings
from app.storage.base import BaseStorage
from app.storage.local_adapter import LocalStorage
from app.storage.s3_adapter import S3Storage


class StorageFactory:
    """Creates the storage backend selected in settings."""

    BACKENDS = ("s3", "local")

    @classmethod
    def create(cls, settings: Settings) -> BaseStorage:
        backend = settings.storage_backend.lower()
        if backend == "s3":
            if not settings.s3_bucket:
                raise ValueError("s3_bucket is required for storage_backend=s3")
            return S3Storage(
                bucket=settings.s3_bucket,
                region=settings.s3_region,
                endpoint_url=settings.s3_endpoint_url or None,
            )
        if backend == "local":
            if not settings.storage_local_root:
                raise ValueError("storage_local_root is required for storage_backend=local")
            return LocalStorage(Path(settings.storage_local_root))
        raise ValueError(
            f"Unknown storage backend '{backend}'. Choose from: {list(cls.BACKENDS)}"
        )
