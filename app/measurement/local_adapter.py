import shutil

from app.logging.logger import Log
from app.measurement.base import BaseMeasurementRunner, run_command
from app.measurement.exceptions import MeasurementError
from app.measurement.models import MeasurementConfig


class LocalMeasurementRunner(BaseMeasurementRunner):
    """Runs a sitespeed.io installation found on PATH."""

    def __init__(self, binary: str, timeout_seconds: int = 0) -> None:
        self._binary = binary
        self._timeout_seconds = timeout_seconds

    def prepare(self) -> None:
        if shutil.which(self._binary) is None:
            raise MeasurementError(f"{self._binary} not found on PATH")
        Log.info(f"Using local measurement tool {self._binary}")

    def run(self, config: MeasurementConfig) -> None:
        command = [self._binary, *config.tool_arguments()]
        Log.debug(f"Running measurement: {' '.join(command)}")
        run_command(
            command,
            cwd=str(config.data_dir),
            timeout_seconds=self._timeout_seconds,
        )
