import os
import shutil
import tarfile
import tempfile
from collections.abc import Iterable
from pathlib import Path

from app.artifacts.exceptions import ArchiveError
from app.logging.logger import Log

_DEFAULT_ASSETS_DIR = Path(__file__).parent / "assets"

WORKING_FILES: tuple[str, ...] = (
    "data",
    "config.json",
    "sitespeed.io.log",
    "browsermobproxy.log",
    "browsertime.log",
)


class ArtifactPackager:
    """Prepares a finished result tree for upload."""

    def __init__(self, assets_dir: Path | None = None) -> None:
        self._assets_dir = assets_dir if assets_dir is not None else _DEFAULT_ASSETS_DIR

    def prune(self, output_dir: Path, targets: Iterable[str] = WORKING_FILES) -> list[str]:
        """Remove working files and directories. Best-effort.

        A target that does not exist counts as removed.

        Returns:
            One message per target that could not be removed.
        """
        errors: list[str] = []
        for name in targets:
            path = output_dir / name
            try:
                if path.is_dir() and not path.is_symlink():
                    shutil.rmtree(path)
                else:
                    path.unlink(missing_ok=True)
            except OSError as exc:
                message = f"Could not remove {path}: {exc}"
                Log.warning(message)
                errors.append(message)
        return errors

    def inject_assets(self, output_dir: Path) -> list[str]:
        """Copy shared static assets into the result tree. Best-effort.

        Returns:
            One message per failure.
        """
        try:
            shutil.copytree(self._assets_dir, output_dir, dirs_exist_ok=True)
        except shutil.Error as exc:
            messages = [f"Could not copy {src} to {dst}: {why}" for src, dst, why in exc.args[0]]
        except OSError as exc:
            messages = [f"Could not copy assets from {self._assets_dir}: {exc}"]
        else:
            return []
        for message in messages:
            Log.warning(message)
        return messages

    def archive(self, output_dir: Path, destination: Path) -> Path:
        """Compress output_dir into a gzip tarball at destination.

        The destination may live inside output_dir; it is never archived into itself.

        Raises:
            ArchiveError: if the tree cannot be read or the archive cannot be written.
        """
        tmp_name = ""
        try:
            with tempfile.NamedTemporaryFile(
                dir=destination.parent, prefix=".archive-", suffix=".tmp", delete=False
            ) as tmp:
                tmp_name = tmp.name
            skip = {destination.resolve(), Path(tmp_name).resolve()}
            with tarfile.open(tmp_name, "w:gz") as tar:
                tar.add(output_dir, arcname=output_dir.name, recursive=False)
                for path in sorted(output_dir.rglob("*")):
                    if path.resolve() in skip:
                        continue
                    tar.add(path, arcname=str(Path(output_dir.name) / path.relative_to(output_dir)), recursive=False)
            os.replace(tmp_name, destination)
        except (OSError, tarfile.TarError) as exc:
            if tmp_name:
                Path(tmp_name).unlink(missing_ok=True)
            raise ArchiveError(f"Failed to archive {output_dir}: {exc}") from exc
        Log.debug(f"Compressed {output_dir} into {destination}")
        return destination
