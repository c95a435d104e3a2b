from collections.abc import Callable

from app.jobs.models import Job
from app.logging.logger import Log
from app.processor.processor import Processor


class JobRunner:
    """Run one job, catch exceptions, and always signal completion."""

    def __init__(self, processor: Processor) -> None:
        self._processor = processor

    def run(self, job: Job, on_complete: Callable[[], None]) -> None:
        """Execute a single job. Never raises; on_complete is called exactly once."""
        Log.info(f"Running job {job.id}")
        try:
            self._processor.process(job)
            Log.info(f"Job {job.id} completed successfully")
        except Exception as exc:
            Log.error(f"Job {job.id} failed: {exc}")
        finally:
            try:
                on_complete()
            except Exception as exc:
                Log.error(f"Completion callback for job {job.id} failed: {exc}")
