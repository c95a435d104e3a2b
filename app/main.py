import sys

import redis
from pydantic import ValidationError

from app.config.settings import Settings
from app.logging.logger import Log
from app.measurement.factory import MeasurementRunnerFactory
from app.measurement.prerequisite import RuntimePrerequisite
from app.processor.processor import build_processor
from app.queue.connection import close_client, init_client
from app.queue.exceptions import QueueError
from app.queue.lease_queue import LeaseQueue
from app.storage.factory import StorageFactory
from app.worker.job_runner import JobRunner
from app.worker.status import StatusPublisher
from app.worker.worker import Worker


def load_settings() -> Settings:
    """Load settings or exit with status 1 when required configuration is missing."""
    try:
        return Settings()
    except ValidationError as exc:
        Log.configure("INFO")
        Log.error(f"Missing or invalid configuration: {exc}")
        sys.exit(1)


def open_queues(settings: Settings) -> tuple[LeaseQueue, LeaseQueue]:
    """Connect to Redis and create the fetch and result queues, or exit with status 1."""
    queue_options = {
        "namespace": settings.queue_namespace,
        "visibility_timeout_seconds": settings.queue_visibility_timeout_seconds,
        "max_receive_count": settings.queue_max_receive_count,
    }
    try:
        client = init_client(settings)
        fetch_queue = LeaseQueue(client, settings.fetch_queue, **queue_options)
        result_queue = LeaseQueue(client, settings.result_queue, **queue_options)
        fetch_queue.create()
        result_queue.create()
    except (redis.RedisError, QueueError) as exc:
        Log.error(
            f"Could not open queues on {settings.redis_host}:{settings.redis_port}: {exc}"
        )
        close_client()
        sys.exit(1)
    return fetch_queue, result_queue


def main() -> None:
    """Entry point: connect queues -> fetch measurement runtime -> start consume loop."""
    settings = load_settings()
    Log.configure(settings.log_level, settings.log_file)

    fetch_queue, result_queue = open_queues(settings)
    try:
        runner = MeasurementRunnerFactory.create(settings)
        prerequisite = RuntimePrerequisite(runner)
        prerequisite.prepare()

        processor = build_processor(
            settings,
            runner=runner,
            prerequisite=prerequisite,
            storage=StorageFactory.create(settings),
            publisher=StatusPublisher(result_queue),
        )
        Log.info(
            f"Starting worker listening on queue {settings.fetch_queue} "
            f"send result to queue {settings.result_queue}"
        )
        worker = Worker(fetch_queue, JobRunner(processor), settings)
        worker.run()
    finally:
        close_client()


if __name__ == "__main__":
    main()
