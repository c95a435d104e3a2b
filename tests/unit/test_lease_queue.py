from unittest.mock import MagicMock

import pytest
import redis

from app.queue.exceptions import QueueError
from app.queue.lease_queue import LeaseQueue


def _make_queue(max_receive_count: int = 2) -> tuple[LeaseQueue, MagicMock, MagicMock, MagicMock]:
    """Create a LeaseQueue over a mocked Redis client."""
    client = MagicMock()
    send_script = MagicMock()
    receive_script = MagicMock()
    client.register_script.side_effect = [send_script, receive_script]
    pipe = MagicMock()
    pipe.execute.return_value = [1, 2]
    client.pipeline.return_value = pipe
    queue = LeaseQueue(
        client,
        "fetch",
        namespace="rsmq",
        visibility_timeout_seconds=120,
        max_receive_count=max_receive_count,
    )
    return queue, client, send_script, receive_script


class TestSend:
    def test_runs_send_script_with_body(self) -> None:
        queue, _client, send_script, _receive = _make_queue()

        message_id = queue.send('{"id": "j1"}')

        send_script.assert_called_once_with(
            keys=["rsmq:fetch", "rsmq:fetch:Q"], args=[message_id, '{"id": "j1"}']
        )

    def test_ids_are_unique(self) -> None:
        queue, *_ = _make_queue()

        assert queue.send("a") != queue.send("a")

    def test_redis_error_raises_queue_error(self) -> None:
        queue, _client, send_script, _receive = _make_queue()
        send_script.side_effect = redis.ConnectionError("down")

        with pytest.raises(QueueError, match="down"):
            queue.send("a")


class TestReceive:
    def test_returns_none_when_empty(self) -> None:
        queue, _client, _send, receive_script = _make_queue()
        receive_script.return_value = None

        assert queue.receive() is None

    def test_returns_leased_message(self) -> None:
        queue, _client, _send, receive_script = _make_queue()
        receive_script.return_value = ["m1", '{"id": "j1"}', 1]

        message = queue.receive()

        assert message is not None
        assert (message.id, message.body, message.receive_count) == ("m1", '{"id": "j1"}', 1)
        receive_script.assert_called_once_with(
            keys=["rsmq:fetch", "rsmq:fetch:Q"], args=[120_000]
        )

    def test_redelivery_within_limit_is_returned(self) -> None:
        queue, _client, _send, receive_script = _make_queue(max_receive_count=2)
        receive_script.return_value = ["m1", "body", 2]

        message = queue.receive()

        assert message is not None
        assert message.receive_count == 2

    def test_drops_message_over_receive_limit(self) -> None:
        queue, client, _send, receive_script = _make_queue(max_receive_count=2)
        receive_script.side_effect = [["m1", "poison", 3], ["m2", "ok", 1]]

        message = queue.receive()

        assert message is not None
        assert message.id == "m2"
        client.pipeline.return_value.zrem.assert_called_once_with("rsmq:fetch", "m1")

    def test_redis_error_raises_queue_error(self) -> None:
        queue, _client, _send, receive_script = _make_queue()
        receive_script.side_effect = redis.TimeoutError("slow")

        with pytest.raises(QueueError):
            queue.receive()


class TestDelete:
    def test_removes_message_and_counter(self) -> None:
        queue, client, _send, _receive = _make_queue()
        pipe = client.pipeline.return_value

        assert queue.delete("m1") is True

        pipe.zrem.assert_called_once_with("rsmq:fetch", "m1")
        pipe.hdel.assert_called_once_with("rsmq:fetch:Q", "m1", "m1:rc")

    def test_returns_false_when_already_gone(self) -> None:
        queue, client, _send, _receive = _make_queue()
        client.pipeline.return_value.execute.return_value = [0, 0]

        assert queue.delete("m1") is False


class TestCreate:
    def test_registers_queue(self) -> None:
        queue, client, _send, _receive = _make_queue()

        queue.create()

        client.sadd.assert_called_once_with("rsmq:QUEUES", "fetch")

    def test_writes_queue_attributes_without_overwriting(self) -> None:
        queue, client, _send, _receive = _make_queue()

        queue.create()

        written = {c.args[1]: c.args[2] for c in client.hsetnx.call_args_list}
        assert {c.args[0] for c in client.hsetnx.call_args_list} == {"rsmq:fetch:Q"}
        assert written["vt"] == 120
        assert written["delay"] == 0
        assert written["maxsize"] == -1
        assert {"created", "modified"} <= written.keys()
        client.hset.assert_not_called()

    def test_redis_error_raises_queue_error(self) -> None:
        queue, client, _send, _receive = _make_queue()
        client.hsetnx.side_effect = redis.ConnectionError("refused")

        with pytest.raises(QueueError, match="create queue fetch"):
            queue.create()
