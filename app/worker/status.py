import json

from app.jobs.models import StatusMessage
from app.logging.logger import Log
from app.queue.lease_queue import LeaseQueue


class StatusPublisher:
    """Sends job status records to the result queue. Never raises."""

    def __init__(self, result_queue: LeaseQueue) -> None:
        self._queue = result_queue

    def publish(self, message: StatusMessage) -> bool:
        """Best-effort send. Returns False when the transport failed."""
        try:
            self._queue.send(json.dumps(message.to_payload()))
        except Exception as exc:
            Log.error(f"Could not send status '{message.status}' for job {message.id}: {exc}")
            return False
        Log.debug(f"Sent status '{message.status}' for job {message.id}")
        return True
