"""
'intent_core/exceptions.py': Error types shared by services and the HTTP layer.

Every error carries the HTTP status it maps to, a human readable message and,
when available, the raw upstream payload so the UI can show it for debugging.
"""
from typing import Any, Dict, Optional


class IntentGuardError(Exception):
    """Base class for errors that terminate a request."""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        error: Any = None,
        cause: Optional[Exception] = None,
        extra: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.error = error
        self.cause = cause
        self.extra = extra or {}

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"success": False, "message": self.message}
        if self.error is not None:
            payload["error"] = self.error
        payload.update(self.extra)
        return payload

    def __str__(self):
        base = f"{type(self).__name__}: {self.message}"
        if self.cause:
            return f"{base} (caused by {repr(self.cause)})"
        return base


class AuthenticationError(IntentGuardError):
    status_code = 401


class RequestValidationFailed(IntentGuardError):
    status_code = 400


class NotFoundError(IntentGuardError):
    status_code = 404


class NluCoordinatesNotFound(IntentGuardError):
    """The flow configuration holds no usable NLU domain/version pair."""

    status_code = 400

    def __init__(self, flow_config: Dict[str, Any]):
        super().__init__(
            "Domain ID or version ID not found in flow configuration",
            extra={"flowConfig": flow_config},
        )
        self.flow_config = flow_config


class LLMConfigurationError(IntentGuardError):
    status_code = 500


class LLMResponseError(IntentGuardError):
    status_code = 500
