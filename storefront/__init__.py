from storefront.common.custom_exceptions import (
    AuthenticationFailure,
    NotFound,
    ShopClientError,
    TransportFailure,
    ValidationFailure,
)
from storefront.main import ShopClient

__all__ = [
    "ShopClient",
    "ShopClientError",
    "AuthenticationFailure",
    "ValidationFailure",
    "NotFound",
    "TransportFailure",
]
