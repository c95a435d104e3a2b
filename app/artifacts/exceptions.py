class ArchiveError(Exception):
    """Raised when the result tree cannot be compressed."""
