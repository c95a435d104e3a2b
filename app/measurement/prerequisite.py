import threading

from app.logging.logger import Log
from app.measurement.base import BaseMeasurementRunner
from app.measurement.exceptions import MeasurementNotReadyError

STATE_PENDING = "pending"
STATE_READY = "ready"
STATE_FAILED = "failed"


class RuntimePrerequisite:
    """Tracks whether the measurement runtime has been fetched.

    prepare() runs once at startup. Jobs call ensure_ready() before measuring;
    after a failed startup each call retries the fetch once.
    """

    def __init__(self, runner: BaseMeasurementRunner) -> None:
        self._runner = runner
        self._lock = threading.Lock()
        self._state = STATE_PENDING
        self._error = ""

    @property
    def state(self) -> str:
        return self._state

    @property
    def ready(self) -> bool:
        return self._state == STATE_READY

    def prepare(self) -> bool:
        """Fetch the runtime and record the outcome. Never raises."""
        with self._lock:
            return self._prepare_locked()

    def ensure_ready(self) -> None:
        """Raises MeasurementNotReadyError unless the runtime is available."""
        if self._state == STATE_READY:
            return
        with self._lock:
            if self._state == STATE_FAILED:
                self._prepare_locked()
            if self._state != STATE_READY:
                raise MeasurementNotReadyError(
                    f"Measurement runtime not ready ({self._state}): {self._error or 'not prepared'}"
                )

    def _prepare_locked(self) -> bool:
        try:
            self._runner.prepare()
        except Exception as exc:
            self._state = STATE_FAILED
            self._error = str(exc)
            Log.error(f"Couldn't prepare measurement runtime: {exc}")
            return False
        self._state = STATE_READY
        self._error = ""
        return True
