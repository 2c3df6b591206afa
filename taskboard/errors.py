"""
taskboard/errors.py

Error taxonomy shared by the stores, the auth service and the board engine.

Services raise these; main.py turns them into JSON responses of the form
{"error": true, "message": "..."} with the status code carried by the class.
"""

from __future__ import annotations


class TaskboardError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(TaskboardError):
    """Malformed or missing required input."""
    status_code = 422


class ConflictError(TaskboardError):
    """Uniqueness violation or a lost optimistic-version race."""
    status_code = 422


class NotFoundError(TaskboardError):
    """Referenced entity is absent."""
    status_code = 404


class AuthError(TaskboardError):
    """Missing, invalid or expired token or session."""
    status_code = 401


class StoreError(TaskboardError):
    """Underlying persistence failure."""
    status_code = 500
