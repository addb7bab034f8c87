from typing import Any, Optional

from ..exceptions import IntentGuardError


class PlatformAPIError(IntentGuardError):
    """Raised when the contact-center platform answers with an error status."""

    def __init__(self, message: str, *, status_code: Optional[int] = None, error: Any = None, cause: Optional[Exception] = None):
        super().__init__(message, status_code=status_code or 500, error=error, cause=cause)


class PlatformAuthError(PlatformAPIError):
    """401/403 from the platform: the caller has to re-authenticate."""

    def __init__(self, message: str = "Platform rejected the access token", *, status_code: int = 401, error: Any = None):
        super().__init__(message, status_code=status_code, error=error)
