"""Custom exceptions for API."""


class BatchJobNotFoundError(Exception):
    """Raised when a batch job id is unknown."""

    pass


class BatchNotReadyError(Exception):
    """Raised when results are requested before a batch has finished."""

    pass


class InvalidPayeeColumnError(Exception):
    """Raised when the selected payee column is missing from the uploaded rows."""

    pass
