class MeasurementError(Exception):
    """Raised when the external measurement run fails."""


class MeasurementNotReadyError(MeasurementError):
    """Raised when the measurement runtime was never prepared successfully."""
