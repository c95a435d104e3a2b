from dataclasses import dataclass
from pathlib import Path

from app.jobs.models import Job


@dataclass(frozen=True)
class MeasurementConfig:
    """Parameters handed to one measurement run."""

    url: str
    output_path: str
    data_dir: Path
    browser: str | None = None
    connection: str | None = None
    page_limit: int = 1
    iteration_count: int = 1
    depth: int = 0

    @classmethod
    def for_job(cls, job: Job, data_dir: Path) -> "MeasurementConfig":
        return cls(
            url=job.url,
            output_path=job.output_path,
            data_dir=data_dir,
            browser=job.browser,
            connection=job.connection,
            page_limit=job.page_limit,
            iteration_count=job.iteration_count,
            depth=job.depth,
        )

    def tool_arguments(self) -> list[str]:
        """Command-line arguments understood by the sitespeed.io CLI."""
        args = [
            "-u", self.url,
            "-m", str(self.page_limit),
            "-n", str(self.iteration_count),
            "-d", str(self.depth),
            "--outputFolderName", self.output_path,
        ]
        if self.browser:
            args += ["-b", self.browser]
        if self.connection:
            args += ["--connection", self.connection]
        return args
