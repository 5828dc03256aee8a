"""
Custom domain exceptions for the application.

These exceptions are raised by the service layer and converted to HTTP responses
by centralized exception handlers in main.py, maintaining proper separation of concerns.

The authentication module (auth.py) also uses these domain exceptions to remain
HTTP-agnostic, allowing reuse in non-HTTP contexts (CLI tools, scripts).

Every exception carries a correlation ID so a failed request can be traced
across logs and Sentry.
"""

from core.correlation import generate_correlation_id, get_correlation_id


class DomainException(Exception):
    """
    Base class for all domain exceptions.

    Attributes:
        message: Human-readable error message.
        correlation_id: Unique ID for error tracking (auto-generated if not provided).
    """

    def __init__(self, message: str, correlation_id: str | None = None):
        self.message = message
        # Use request correlation ID if available, otherwise generate new one
        self.correlation_id = (
            correlation_id or get_correlation_id() or generate_correlation_id()
        )
        super().__init__(self.message)


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    pass


class PermissionDeniedException(DomainException):
    """Raised when user lacks required permissions."""

    pass


class ValidationException(DomainException):
    """Raised when input validation fails."""

    pass


class ConflictException(DomainException):
    """Raised when operation conflicts with existing data."""

    pass


class AuthenticationException(DomainException):
    """Raised when authentication fails."""

    pass


class AlreadyExistsException(ConflictException):
    """Raised when trying to create a resource that already exists."""

    pass


class BusinessRuleException(DomainException):
    """Raised when a business rule is violated."""

    pass


class ServiceUnavailableException(DomainException):
    """Raised when an optional collaborator is not configured or reachable."""

    pass


class ExternalServiceException(DomainException):
    """Raised when an upstream service answered with an error."""

    pass


# Specific exceptions for domain entities


class UserNotFoundException(NotFoundException):
    """User not found."""

    def __init__(self, message: str = "User not found") -> None:
        super().__init__(message)


class UserAlreadyExistsException(AlreadyExistsException):
    """Email or username already registered."""

    pass


class QuestionNotFoundException(NotFoundException):
    """Question not found."""

    def __init__(self) -> None:
        super().__init__("Question not found")


class AnswerNotFoundException(NotFoundException):
    """Answer not found."""

    def __init__(self) -> None:
        super().__init__("Answer not found")


class CommentNotFoundException(NotFoundException):
    """Comment not found."""

    def __init__(self) -> None:
        super().__init__("Comment not found")


class ReportNotFoundException(NotFoundException):
    """Report not found."""

    def __init__(self) -> None:
        super().__init__("Report not found")


class NotificationNotFoundException(NotFoundException):
    """Notification not found (or owned by someone else)."""

    def __init__(self) -> None:
        super().__init__("Notification not found")


class InvalidCredentialsException(AuthenticationException):
    """Invalid email or password."""

    def __init__(self) -> None:
        super().__init__("Invalid email or password")


class TokenExpiredException(AuthenticationException):
    """Bearer token signature has expired."""

    def __init__(self) -> None:
        super().__init__("Token expired")


class EmailNotVerifiedException(PermissionDeniedException):
    """Login attempted before the email address was verified."""

    def __init__(self) -> None:
        super().__init__("Please verify your email address before logging in.")


class InactiveUserException(PermissionDeniedException):
    """User account is banned or suspended."""

    pass


class InsufficientPermissionsException(PermissionDeniedException):
    """User doesn't have sufficient permissions."""

    pass


class SelfVoteException(BusinessRuleException):
    """Users cannot vote on their own content."""

    def __init__(self, content_label: str) -> None:
        super().__init__(f"Cannot vote on your own {content_label}")


class DuplicateReportException(BusinessRuleException):
    """The reporter already reported this content."""

    def __init__(self) -> None:
        super().__init__("You have already reported this content")


class AIServiceNotConfiguredException(ServiceUnavailableException):
    """No API key configured for the generative AI provider."""

    def __init__(self) -> None:
        super().__init__("AI service not configured")
