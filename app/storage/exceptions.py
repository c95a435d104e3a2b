class UploadError(Exception):
    """Raised when a result tree cannot be uploaded."""
