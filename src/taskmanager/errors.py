"""Domain error taxonomy.

Learn: Services raise these instead of HTTPException so they stay
usable outside a request (CLI, tests). Each class carries the HTTP
status it maps to; main.py registers one handler that renders any
TaskManagerError as {"detail": message} with its status.
"""


class TaskManagerError(Exception):
    """Base class for all expected failures."""

    status_code: int = 500
    default_message: str = "Internal Server Error"
    headers: dict[str, str] | None = None

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"detail": self.message}


class ValidationError(TaskManagerError):
    """Required fields missing or malformed.

    Carries the per-field errors when there are any; they replace the
    message as `detail`.
    """

    status_code = 400
    default_message = "Invalid request"

    def __init__(self, message: str | None = None, errors: list[dict] | None = None):
        super().__init__(message)
        self.errors = errors or []

    def to_dict(self) -> dict:
        return {"detail": self.errors or self.message}


class InvalidCredentials(TaskManagerError):
    """Unknown email or password mismatch."""

    status_code = 401
    default_message = "Invalid credentials"


class Unauthenticated(TaskManagerError):
    """No bearer token, or one that failed verification."""

    status_code = 401
    default_message = "Authentication required"
    headers = {"WWW-Authenticate": "Bearer"}

    def to_dict(self) -> dict:
        # `login: false` is what existing clients test for
        return {"detail": self.message, "login": False}


class Forbidden(TaskManagerError):
    """Authenticated but not allowed. Reserved; nothing raises it today."""

    status_code = 403
    default_message = "Forbidden"


class NotFound(TaskManagerError):
    status_code = 404
    default_message = "Not found"


class Conflict(TaskManagerError):
    status_code = 409
    default_message = "Conflict"


class ConfigurationError(TaskManagerError):
    """Server misconfiguration, e.g. an empty signing secret."""

    status_code = 500
    default_message = "Server misconfigured"


class MailDeliveryError(TaskManagerError):
    status_code = 500
    default_message = "Failed to send email."


class InternalError(TaskManagerError):
    status_code = 500
