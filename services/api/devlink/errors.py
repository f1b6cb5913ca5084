"""
Domain error taxonomy.

Services raise these instead of HTTP exceptions; ``main.py`` maps each kind
to a status code and JSON body in a single exception handler.

  ValidationFailed / InvalidCredentials  → 400  {"errors": [...]}
  Conflict (AlreadyLiked, DuplicateEmail) → 400  {"msg": ...}
  Unauthorized, Forbidden                 → 401  {"msg": ...}
  NotFound (NotLiked)                     → 404  {"msg": ...}
  InternalError                           → 500  {"msg": "Server Error"}
"""
from typing import Optional


class DevlinkError(Exception):
    status_code = 500
    default_message = "Server Error"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_body(self) -> dict:
        return {"msg": self.message}


class ValidationFailed(DevlinkError):
    """Malformed input. Carries field-level messages."""

    status_code = 400
    default_message = "Invalid input"

    def __init__(self, errors: list[dict]) -> None:
        self.errors = errors
        super().__init__("; ".join(e["msg"] for e in errors) or None)

    def to_body(self) -> dict:
        return {"errors": self.errors}


class InvalidCredentials(ValidationFailed):
    def __init__(self) -> None:
        super().__init__([{"msg": "Invalid Credentials"}])


class Unauthorized(DevlinkError):
    status_code = 401
    default_message = "Token is not valid"


class Forbidden(DevlinkError):
    # The public API reports ownership failures as 401.
    status_code = 401
    default_message = "User not authorized"


class NotFound(DevlinkError):
    status_code = 404
    default_message = "Not found"


class NotLiked(NotFound):
    default_message = "Post has not yet been liked"


class Conflict(DevlinkError):
    status_code = 400
    default_message = "Conflicting update, please retry"


class AlreadyLiked(Conflict):
    default_message = "Post already liked"


class DuplicateEmail(Conflict):
    default_message = "User already exists"

    def to_body(self) -> dict:
        return {"errors": [{"msg": self.message, "param": "email"}]}


class InternalError(DevlinkError):
    status_code = 500
