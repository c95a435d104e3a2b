class ProcessorError(Exception):
    """Base exception for all pipeline stage errors raised by the processor."""


class SummaryReadError(ProcessorError):
    """Raised when the measurement summary cannot be loaded."""


class ResultPageError(ProcessorError):
    """Raised when the raw result page cannot be moved aside."""


class OutputPathError(ProcessorError):
    """Raised when a job's output directory falls outside the result root."""
