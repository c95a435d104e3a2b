from abc import ABC, abstractmethod
from pathlib import Path


class BaseStorage(ABC):
    """Contract for result storage backends."""

    @abstractmethod
    def upload_directory(self, local_path: Path, remote_prefix: str) -> int:
        """Upload every file under local_path, keyed below remote_prefix.

        Existing objects with the same key are overwritten.

        Returns:
            Number of files uploaded.

        Raises:
            UploadError: on any failure.
        """
