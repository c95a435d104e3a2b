class ReportError(Exception):
    """Raised when the result report cannot be rendered or written."""
