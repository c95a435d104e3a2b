import threading
import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor

from app.config.settings import Settings
from app.jobs.decoder import decode_message
from app.jobs.exceptions import JobValidationError, MessageDecodeError
from app.logging.logger import Log
from app.queue.lease_queue import LeaseQueue
from app.queue.models import QueueMessage
from app.worker.job_runner import JobRunner


class Worker:
    """Consume loop: wait for a slot -> receive -> decode -> dispatch to the pool."""

    def __init__(
        self,
        fetch_queue: LeaseQueue,
        job_runner: JobRunner,
        settings: Settings,
    ) -> None:
        self._fetch_queue = fetch_queue
        self._job_runner = job_runner
        self._settings = settings
        self._concurrency = settings.worker_concurrency
        self._slots = threading.BoundedSemaphore(self._concurrency)

    def run(self, max_jobs: int | None = None) -> None:
        """Main consume loop. Runs forever until interrupted.

        If max_jobs is set, stop after dispatching that many jobs (for testing).
        In-flight jobs are awaited before returning.
        """
        Log.info(
            f"Worker listening on queue {self._fetch_queue.name} "
            f"with {self._concurrency} slot(s)"
        )
        jobs_done = 0
        with ThreadPoolExecutor(
            max_workers=self._concurrency, thread_name_prefix="job"
        ) as pool:
            try:
                while max_jobs is None or jobs_done < max_jobs:
                    self._slots.acquire()
                    if self._poll_once(pool):
                        jobs_done += 1
            except KeyboardInterrupt:
                Log.info("Worker shutting down gracefully")
        Log.info("Worker stopped")

    def _poll_once(self, pool: ThreadPoolExecutor) -> bool:
        """Receive one message with a held slot. Returns True if a job was dispatched."""
        message = self._try_receive()
        if message is None:
            self._slots.release()
            Log.debug("No messages available, sleeping")
            time.sleep(self._settings.queue_poll_interval_seconds)
            return False

        try:
            job = decode_message(message.body)
        except MessageDecodeError as exc:
            # left unacknowledged: the lease expiry and receive cap bound redelivery
            Log.error(f"Error decoding message {message.id}: {exc}")
            self._slots.release()
            return False
        except JobValidationError as exc:
            Log.error(f"Dropping message {message.id}: {exc}")
            self._acknowledge(message)
            self._slots.release()
            return False

        pool.submit(self._job_runner.run, job, self._completion(message))
        return True

    def _try_receive(self) -> QueueMessage | None:
        """Attempt to lease the next message. Gracefully handle transport errors."""
        try:
            return self._fetch_queue.receive()
        except Exception as exc:
            Log.warning(f"Error fetching message, will retry: {exc}")
            return None

    def _completion(self, message: QueueMessage) -> Callable[[], None]:
        lock = threading.Lock()
        called = False

        def on_complete() -> None:
            nonlocal called
            with lock:
                if called:
                    Log.warning(f"Message {message.id} already acknowledged")
                    return
                called = True
            try:
                self._acknowledge(message)
            finally:
                self._slots.release()

        return on_complete

    def _acknowledge(self, message: QueueMessage) -> None:
        try:
            self._fetch_queue.delete(message.id)
        except Exception as exc:
            Log.error(f"Could not acknowledge message {message.id}: {exc}")
