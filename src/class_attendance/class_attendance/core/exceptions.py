class DomainError(Exception):
    """Base exception for business rule violations."""

    status_code = 400


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""

    status_code = 401


class NotFoundError(DomainError):
    status_code = 404


class AlreadyStoppedError(DomainError):
    status_code = 409


class SubmissionError(DomainError):
    """Base for every reason a student submission is turned away.

    All of these are recoverable by the student (fix input, move closer,
    ask the teacher for a fresh link).
    """


class MissingFieldError(SubmissionError):
    pass


class DomainRejectedError(SubmissionError):
    status_code = 403


class NoActiveSessionError(SubmissionError):
    status_code = 404


class SessionEndedError(SubmissionError):
    status_code = 410


class DuplicateSubmissionError(SubmissionError):
    status_code = 409


class SessionExpiredError(SubmissionError):
    status_code = 410


class LocationRequiredError(SubmissionError):
    pass


class TooFarError(SubmissionError):
    status_code = 403

    def __init__(self, message: str, *, distance_m: float):
        super().__init__(message)
        self.distance_m = distance_m


class PersistenceError(RuntimeError):
    """The data file could not be read or durably rewritten.

    Not a DomainError: the request fails with 500 and the in-memory state is
    left as it was before the transaction.
    """
