# stockforum/domain/errors.py
"""
Business rule violations raised by the service layer.

They subclass ValueError so callers that only care about "the request was
wrong" can keep catching ValueError. The API layer maps each class to a
status code.
"""


class ForumError(ValueError):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ForumError):
    status_code = 400


class DuplicateError(ForumError):
    status_code = 400


class NotFoundError(ForumError):
    status_code = 404


class AuthenticationError(ForumError):
    status_code = 401


class ForbiddenError(ForumError):
    status_code = 403


class AlreadyVotedError(ForumError):
    status_code = 400

    def __init__(self, direction, subject: str = "item"):
        self.direction = direction
        super().__init__(f"You already {direction.past_tense} this {subject}")


class QuoteError(Exception):
    """The quote provider returned an error or an unusable payload."""

    def __init__(self, symbol: str, message: str, rate_limited: bool = False):
        super().__init__(f"{symbol}: {message}")
        self.symbol = symbol
        self.message = message
        self.rate_limited = rate_limited


class MissingConfigurationError(RuntimeError):
    pass
