class JobError(Exception):
    """Base exception for inbound job messages."""


class MessageDecodeError(JobError):
    """Raised when a queue payload is not a JSON object."""


class JobValidationError(JobError):
    """Raised when a decoded message does not describe a runnable job."""
