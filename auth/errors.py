"""
Domain errors raised by the auth flows.

Each error kind carries its own HTTP status and response body.  Flows
raise them; only ``api.error_handlers`` turns them into responses.
"""

from __future__ import annotations

from typing import Any, Dict


class AuthError(Exception):
    """Base class for expected, client-recoverable auth failures."""

    status_code: int = 400

    def payload(self) -> Dict[str, Any]:
        return {"message": str(self)}


class ValidationFailed(AuthError):
    """Malformed or incomplete input."""

    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def payload(self) -> Dict[str, Any]:
        return {
            "statusCode": self.status_code,
            "error": "Bad Request",
            "message": self.message,
        }


class UsernameTaken(AuthError):
    status_code = 400
    message = "username already registered"

    def __init__(self) -> None:
        super().__init__(self.message)

    def payload(self) -> Dict[str, Any]:
        return {
            "statusCode": self.status_code,
            "error": "Bad Request",
            "message": self.message,
        }


class InvalidPassword(AuthError):
    """Wrong password, or a username that does not exist."""

    status_code = 400

    def __init__(self) -> None:
        super().__init__("Invalid password")

    def payload(self) -> Dict[str, Any]:
        return {"status": "Invalid password"}


class InvalidToken(AuthError):
    """
    Missing, malformed, tampered or expired bearer token.

    The message never says which check failed.
    """

    status_code = 401

    def __init__(self, message: str = "Authorization token is invalid") -> None:
        super().__init__(message)
        self.message = message

    def payload(self) -> Dict[str, Any]:
        return {
            "statusCode": self.status_code,
            "error": "Unauthorized",
            "message": self.message,
        }


class MissingSecretError(RuntimeError):
    """No token signing secret configured; the service must not start."""
