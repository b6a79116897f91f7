"""Failures raised by the services and reported as GraphQL field errors."""


class ShopError(Exception):
    message = "Internal error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)


class Unauthorized(ShopError):
    message = "Unauthorized"


class Forbidden(ShopError):
    message = "Forbidden"


class InvalidCredentials(ShopError):
    # Same message whether the email or the password was wrong
    message = "Invalid credentials"


class DuplicateEmail(ShopError):
    message = "Email already registered"


class InvalidToken(ShopError):
    """Token failed verification. Only seen while resolving the request context."""

    message = "Invalid token"
