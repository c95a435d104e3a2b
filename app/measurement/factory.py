from app.config.settings import Settings
from app.measurement.base import BaseMeasurementRunner
from app.measurement.docker_adapter import DockerMeasurementRunner
from app.measurement.local_adapter import LocalMeasurementRunner


class MeasurementRunnerFactory:
    """Creates the measurement runner selected in settings."""

    ENGINES = ("docker", "local")

    @classmethod
    def create(cls, settings: Settings) -> BaseMeasurementRunner:
        engine = settings.measurement_engine.lower()
        if engine == "docker":
            return DockerMeasurementRunner(
                image=settings.measurement_image,
                timeout_seconds=settings.measurement_timeout_seconds,
                tool_binary=settings.measurement_binary,
            )
        if engine == "local":
            return LocalMeasurementRunner(
                binary=settings.measurement_binary,
                timeout_seconds=settings.measurement_timeout_seconds,
            )
        raise ValueError(
            f"Unknown measurement engine '{engine}'. Choose from: {list(cls.ENGINES)}"
        )
