# services/api/core/errors.py
"""
Error taxonomy for ArchiSheets.

Every error carries a short machine code and the HTTP status the API layer
answers with. Nothing here is fatal: the user can always retry or sign in again.
"""
from __future__ import annotations


class ArchiSheetsError(Exception):
    """Base class for all domain errors."""

    code = "ERROR"
    status_code = 500

    def __init__(self, message: str = "", *, code: str | None = None) -> None:
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__
        if code:
            self.code = code


# ---- (a) authentication ----

class AuthenticationError(ArchiSheetsError):
    """Expired/invalid credential. The session credential must be cleared."""

    code = "AUTH_REQUIRED"
    status_code = 401


# ---- (b) not found ----

class NotFoundError(ArchiSheetsError):
    code = "NOT_FOUND"
    status_code = 404


# ---- (c) validation (rejected locally, before any network call) ----

class ValidationError(ArchiSheetsError):
    code = "VALIDATION_ERROR"
    status_code = 400


class EmptyTitleError(ValidationError):
    code = "EMPTY_TITLE"


class DuplicateKeyError(ValidationError):
    code = "DUPLICATE_KEY"
    status_code = 409


class DuplicateTabNameError(ValidationError):
    code = "DUPLICATE_TAB_NAME"
    status_code = 409


# ---- (d) remote/transient ----

class RemoteStoreError(ArchiSheetsError):
    """Remote store failure, surfaced with the raw message. Not retried."""

    code = "REMOTE_ERROR"
    status_code = 502


# ---- session guards ----

class BusyError(ArchiSheetsError):
    code = "BUSY"
    status_code = 409


class InvalidTransitionError(ArchiSheetsError):
    code = "INVALID_TRANSITION"
    status_code = 409
