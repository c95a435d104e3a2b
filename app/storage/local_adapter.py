import shutil
from pathlib import Path

from app.logging.logger import Log
from app.storage.base import BaseStorage
from app.storage.exceptions import UploadError


class LocalStorage(BaseStorage):
    """Copies result trees into a local directory. Used in development."""

    def __init__(self, root: Path) -> None:
        self._root = root

    def upload_directory(self, local_path: Path, remote_prefix: str) -> int:
        if not local_path.is_dir():
            raise UploadError(f"Not a directory: {local_path}")
        target = self._root / remote_prefix.strip("/")
        try:
            if target.exists():
                # files of an earlier upload under the same prefix
                shutil.rmtree(target)
            shutil.copytree(local_path, target)
        except (shutil.Error, OSError) as exc:
            raise UploadError(f"Failed to copy {local_path} to {target}: {exc}") from exc
        uploaded = sum(1 for p in local_path.rglob("*") if p.is_file())
        Log.info(f"Copied {uploaded} files to {target}")
        return uploaded
