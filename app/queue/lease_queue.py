"""Redis-backed message queue with visibility leases and receive counting.

Layout per queue (namespace ``ns``, queue ``q``):
  ``ns:q``    sorted set of message ids scored by the time (ms) they become visible
  ``ns:q:Q``  hash holding ``<id>`` -> body and ``<id>:rc`` -> receive count,
              plus the queue attributes (``vt``, ``delay``, ``maxsize``, ``created``)
              RSMQ clients read when they open the queue
"""

import time
import uuid

import redis

from app.logging.logger import Log
from app.queue.exceptions import QueueError
from app.queue.models import QueueMessage

# attribute value RSMQ clients use for an unbounded message size
RSMQ_MAX_SIZE = -1

_NOW_MS = """
local t = redis.call('TIME')
local now = tonumber(t[1]) * 1000 + math.floor(tonumber(t[2]) / 1000)
"""

_SEND_SCRIPT = _NOW_MS + """
redis.call('HSET', KEYS[2], ARGV[1], ARGV[2])
redis.call('ZADD', KEYS[1], now, ARGV[1])
return ARGV[1]
"""

_RECEIVE_SCRIPT = _NOW_MS + """
local ids = redis.call('ZRANGEBYSCORE', KEYS[1], '-inf', now, 'LIMIT', 0, 1)
if #ids == 0 then
  return false
end
local id = ids[1]
local body = redis.call('HGET', KEYS[2], id)
if not body then
  redis.call('ZREM', KEYS[1], id)
  return false
end
redis.call('ZADD', KEYS[1], now + tonumber(ARGV[1]), id)
local rc = redis.call('HINCRBY', KEYS[2], id .. ':rc', 1)
return {id, body, rc}
"""


class LeaseQueue:
    """One named queue. receive() leases, delete() acknowledges."""

    def __init__(
        self,
        client: redis.Redis,
        name: str,
        *,
        namespace: str = "rsmq",
        visibility_timeout_seconds: int = 1800,
        max_receive_count: int = 2,
    ) -> None:
        self._client = client
        self._name = name
        self._namespace = namespace
        self._visibility_ms = visibility_timeout_seconds * 1000
        self._max_receive_count = max_receive_count
        self._send_script = client.register_script(_SEND_SCRIPT)
        self._receive_script = client.register_script(_RECEIVE_SCRIPT)

    @property
    def name(self) -> str:
        return self._name

    @property
    def _keys(self) -> list[str]:
        base = f"{self._namespace}:{self._name}"
        return [base, f"{base}:Q"]

    def create(self) -> None:
        """Register the queue. Safe to call on an existing queue."""
        try:
            now = int(time.time())
            attributes = {
                "vt": self._visibility_ms // 1000,
                "delay": 0,
                "maxsize": RSMQ_MAX_SIZE,
                "created": now,
                "modified": now,
            }
            for field, value in attributes.items():
                self._client.hsetnx(self._keys[1], field, value)
            self._client.sadd(f"{self._namespace}:QUEUES", self._name)
        except redis.RedisError as exc:
            raise QueueError(f"Failed to create queue {self._name}: {exc}") from exc

    def send(self, body: str) -> str:
        """Enqueue body and return the new message id."""
        message_id = f"{time.time_ns():020d}-{uuid.uuid4().hex[:12]}"
        try:
            self._send_script(keys=self._keys, args=[message_id, body])
        except redis.RedisError as exc:
            raise QueueError(f"Failed to send to {self._name}: {exc}") from exc
        return message_id

    def receive(self) -> QueueMessage | None:
        """Lease the next visible message, or None when the queue is empty.

        Messages received more than max_receive_count times are deleted instead.
        """
        while True:
            try:
                raw = self._receive_script(keys=self._keys, args=[self._visibility_ms])
            except redis.RedisError as exc:
                raise QueueError(f"Failed to receive from {self._name}: {exc}") from exc
            if not raw:
                return None
            message_id, body, receive_count = raw[0], raw[1], int(raw[2])
            if receive_count > self._max_receive_count:
                Log.warning(
                    f"Message {message_id} on {self._name} exceeded "
                    f"{self._max_receive_count} receives, dropping it"
                )
                self.delete(message_id)
                continue
            return QueueMessage(id=message_id, body=body, receive_count=receive_count)

    def delete(self, message_id: str) -> bool:
        """Acknowledge a message. Returns False if it was already gone."""
        try:
            pipe = self._client.pipeline(transaction=True)
            pipe.zrem(self._keys[0], message_id)
            pipe.hdel(self._keys[1], message_id, f"{message_id}:rc")
            removed, _ = pipe.execute()
        except redis.RedisError as exc:
            raise QueueError(f"Failed to delete {message_id} from {self._name}: {exc}") from exc
        return bool(removed)
