import subprocess

from app.logging.logger import Log
from app.measurement.base import BaseMeasurementRunner, run_command
from app.measurement.exceptions import MeasurementError
from app.measurement.models import MeasurementConfig

CONTAINER_WORKDIR = "/sitespeed.io"


class DockerMeasurementRunner(BaseMeasurementRunner):
    """Runs sitespeed.io inside a container via the docker CLI."""

    def __init__(
        self,
        image: str,
        timeout_seconds: int = 0,
        docker_binary: str = "docker",
        tool_binary: str = "sitespeed.io",
    ) -> None:
        self._image = image
        self._timeout_seconds = timeout_seconds
        self._docker = docker_binary
        self._tool = tool_binary

    def prepare(self) -> None:
        Log.info(f"Start downloading container {self._image}")
        try:
            with subprocess.Popen(
                [self._docker, "pull", self._image],
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
            ) as proc:
                if proc.stdout is None:
                    raise MeasurementError(f"No output stream from {self._docker} pull")
                for line in proc.stdout:
                    Log.debug(f"event: {line.rstrip()}")
                returncode = proc.wait()
        except OSError as exc:
            raise MeasurementError(f"Could not run {self._docker} pull: {exc}") from exc
        if returncode != 0:
            raise MeasurementError(
                f"Pulling {self._image} failed with exit code {returncode}"
            )
        Log.info(f"Finished downloading container {self._image}")

    def run(self, config: MeasurementConfig) -> None:
        command = [
            self._docker, "run", "--rm",
            "-v", f"{config.data_dir.resolve()}:{CONTAINER_WORKDIR}",
            self._image,
            self._tool,
            *config.tool_arguments(),
        ]
        Log.debug(f"Running measurement: {' '.join(command)}")
        run_command(command, timeout_seconds=self._timeout_seconds)
