from dataclasses import dataclass


@dataclass(frozen=True)
class QueueMessage:
    """A leased message. Hidden from other consumers until deleted or the lease expires."""

    id: str
    body: str
    receive_count: int
