class QueueError(Exception):
    """Raised when the queue transport fails."""
