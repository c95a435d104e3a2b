import redis

from app.config.settings import Settings

_client: redis.Redis | None = None


def init_client(settings: Settings) -> redis.Redis:
    """Initialize the shared Redis client from settings and check it responds."""
    global _client  # noqa: PLW0603
    client = redis.Redis(
        host=settings.redis_host,
        port=settings.redis_port,
        db=settings.redis_db,
        password=settings.redis_password or None,
        decode_responses=True,
    )
    client.ping()
    _client = client
    return client


def close_client() -> None:
    """Close the shared Redis client."""
    global _client  # noqa: PLW0603
    if _client is not None:
        _client.close()
        _client = None


def get_client() -> redis.Redis:
    """Return the shared client. Its connection pool is thread-safe."""
    if _client is None:
        raise RuntimeError("Redis client not initialized. Call init_client() first.")
    return _client
