import subprocess
from abc import ABC, abstractmethod

from app.measurement.exceptions import MeasurementError
from app.measurement.models import MeasurementConfig

_STDERR_TAIL_CHARS = 2000


class BaseMeasurementRunner(ABC):
    """Contract for all measurement tool adapters."""

    @abstractmethod
    def prepare(self) -> None:
        """Fetch or verify the measurement runtime before jobs are accepted.

        Raises:
            MeasurementError: if the runtime is not available.
        """

    @abstractmethod
    def run(self, config: MeasurementConfig) -> None:
        """Run one measurement; results land under <data_dir>/sitespeed-result/<output_path>.

        Raises:
            MeasurementError: on non-zero exit, timeout or a missing executable.
        """


def run_command(
    command: list[str],
    *,
    cwd: str | None = None,
    timeout_seconds: int = 0,
) -> subprocess.CompletedProcess[str]:
    """Run an external command and convert every failure mode into MeasurementError."""
    try:
        completed = subprocess.run(
            command,
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout_seconds or None,
            check=False,
        )
    except FileNotFoundError as exc:
        raise MeasurementError(f"Executable not found: {command[0]}") from exc
    except subprocess.TimeoutExpired as exc:
        raise MeasurementError(
            f"{command[0]} timed out after {timeout_seconds}s"
        ) from exc
    except OSError as exc:
        raise MeasurementError(f"Could not start {command[0]}: {exc}") from exc
    if completed.returncode != 0:
        stderr = (completed.stderr or "").strip()[-_STDERR_TAIL_CHARS:]
        raise MeasurementError(
            f"{command[0]} exited with code {completed.returncode}: {stderr}"
        )
    return completed
