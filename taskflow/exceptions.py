"""Application error taxonomy.

``AppError`` subclasses are client-facing: each carries the HTTP status and a
message that is safe to show. Several internal causes are deliberately merged
into one client-facing kind (unknown email and wrong password both become
``InvalidCredentials``) so responses do not reveal which check failed.

``TokenError`` subclasses are internal only. Services catch them, log the
specific cause and raise the matching ``AppError``.
"""


class AppError(Exception):
    """Base class for errors rendered as ``{success: false, message}``."""

    status_code: int = 400
    message: str = "Request failed"
    headers: dict[str, str] | None = None

    def __init__(self, message: str | None = None, status_code: int | None = None) -> None:
        if message is not None:
            self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class DuplicateEmail(AppError):
    status_code = 400
    message = "User with this email already exists"


class InvalidCredentials(AppError):
    status_code = 401
    message = "Invalid credentials"


class AccountDeactivated(AppError):
    status_code = 401
    message = "Account is deactivated. Please contact support."


class InvalidRefreshToken(AppError):
    status_code = 401
    message = "Invalid or expired refresh token"


class SelfActionForbidden(AppError):
    status_code = 400
    message = "Cannot perform this action on your own account"


class Unauthenticated(AppError):
    status_code = 401
    message = "Not authenticated"
    headers = {"WWW-Authenticate": "Bearer"}


class Forbidden(AppError):
    status_code = 403
    message = "Not authorized to access this route"


class NotFound(AppError):
    status_code = 404
    message = "Resource not found"


class StoreUnavailable(AppError):
    """The database could not complete the call; safe to retry."""

    status_code = 503
    message = "Service temporarily unavailable. Please try again."


class AssistantNotConfigured(AppError):
    status_code = 400
    message = "AI assistant is not configured. Set GROQ_API_KEY to enable it."


class AssistantUnavailable(AppError):
    """The language model provider failed or timed out."""

    status_code = 500
    message = "AI service temporarily unavailable. Please try again later."


class TokenError(Exception):
    """A token failed verification."""


class ExpiredToken(TokenError):
    pass


class InvalidSignature(TokenError):
    pass


class MalformedToken(TokenError):
    pass


class WrongTokenKind(MalformedToken):
    """Token is valid but of the other kind (access vs refresh)."""
