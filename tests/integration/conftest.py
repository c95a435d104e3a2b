import uuid
from collections.abc import Generator

import pytest
import redis

from app.config.settings import Settings
from app.queue.connection import close_client, init_client
from app.queue.lease_queue import LeaseQueue


@pytest.fixture
def redis_client(settings: Settings) -> Generator[redis.Redis, None, None]:
    try:
        client = init_client(settings)
    except redis.RedisError as e:
        pytest.skip(
            f"Redis not available: {e}. Set REDIS_HOST/REDIS_PORT to run integration tests"
        )
    try:
        yield client
    finally:
        close_client()


@pytest.fixture
def queue_namespace(redis_client: redis.Redis) -> Generator[str, None, None]:
    """A throwaway key namespace, removed after the test."""
    namespace = f"pagetest-test-{uuid.uuid4().hex[:8]}"
    yield namespace
    keys = list(redis_client.scan_iter(match=f"{namespace}:*"))
    if keys:
        redis_client.delete(*keys)


@pytest.fixture
def make_queue(redis_client: redis.Redis, queue_namespace: str):
    def _make(name: str, **options: int) -> LeaseQueue:
        queue = LeaseQueue(redis_client, name, namespace=queue_namespace, **options)
        queue.create()
        return queue

    return _make
