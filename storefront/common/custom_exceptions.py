from typing import Any, Optional
from storefront.common.utils import extract_error_message


class ShopClientError(Exception):
    """Base for every failure the client surfaces to its caller."""

    retryable = False
    default_message = "request failed"

    def __init__(self, message: Optional[str] = None, *, status_code: Optional[int] = None,
                 details: Any = None):
        self.message = message or self.default_message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message={self.message!r}, status_code={self.status_code!r})"


class AuthenticationFailure(ShopClientError):
    """Token missing, invalid or expired. The caller must log in again."""

    default_message = "authentication required"


class ValidationFailure(ShopClientError):
    """Input rejected, either locally before sending or by the server (4xx)."""

    default_message = "request rejected"


class NotFound(ValidationFailure):
    default_message = "resource not found"


class TransportFailure(ShopClientError):
    """Network unreachable, timeout, server error or malformed response."""

    retryable = True
    default_message = "service unavailable"


def classify_http_error(status_code: int, payload: Any = None) -> ShopClientError:
    """Map a non-success HTTP status onto the client's failure taxonomy."""

    message = extract_error_message(payload)

    if status_code == 401:
        return AuthenticationFailure(message, status_code=status_code, details=payload)
    if status_code == 404:
        return NotFound(message, status_code=status_code, details=payload)
    if 400 <= status_code < 500:
        return ValidationFailure(message, status_code=status_code, details=payload)

    return TransportFailure(message or f"server error ({status_code})", status_code=status_code, details=payload)
