import contextvars
from decimal import Decimal
from typing import Optional

# Context variable for the id of the request currently in flight
request_id_ctx: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("request_id", default=None)

REQUEST_ID_HEADER = "X-Request-ID"

AUTH_HEADER = "Authorization"

CURRENCY_PRECISION = Decimal("0.01")

SENSITIVE_PATTERNS = [
    "password", "secret", "token", "key", "authorization",
    "api_key", "access_token", "refresh_token",
]
