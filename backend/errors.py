# backend/errors.py
"""
Typed errors for the tussle tracker.

Every error carries a machine-readable ``code`` so screens can decide how to
surface it without parsing messages:

    TussleError
    +-- ConfigurationError     (fatal, full-screen)
    +-- AuthenticationError    (inline on the login form)
    +-- PermissionDeniedError
    +-- FetchError             (logged, no retry)
    |   +-- RecordError        (row could not be converted at the boundary)
    +-- WriteError             (blocking alert, form stays editable)
    |   +-- StorageError
    +-- ValidationError        (blocks submit before any write)
    +-- RedirectLoopError
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional


class TussleError(Exception):
    code: str = "TUSSLE_ERROR"

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = details

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, **self.details}


class ConfigurationError(TussleError):
    code = "CONFIGURATION_ERROR"

    def __init__(self, missing: List[str]):
        super().__init__("Missing required settings: " + ", ".join(missing), missing=list(missing))
        self.missing = list(missing)


class AuthenticationError(TussleError):
    code = "AUTHENTICATION_ERROR"


class PermissionDeniedError(TussleError):
    code = "PERMISSION_DENIED"


class FetchError(TussleError):
    code = "FETCH_ERROR"

    def __init__(self, message: str, collection: Optional[str] = None, **details: Any):
        super().__init__(message, collection=collection, **details)
        self.collection = collection


class RecordError(FetchError):
    code = "RECORD_ERROR"


class WriteError(TussleError):
    code = "WRITE_ERROR"

    def __init__(self, message: str, collection: Optional[str] = None, **details: Any):
        super().__init__(message, collection=collection, **details)
        self.collection = collection


class StorageError(WriteError):
    code = "STORAGE_ERROR"


class ValidationError(TussleError):
    code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, field=field)
        self.field = field


class RedirectLoopError(TussleError):
    code = "REDIRECT_LOOP"
