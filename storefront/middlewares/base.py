from typing import Any, Awaitable, Callable

from storefront.api.transport import ClientRequest

CallNext = Callable[[ClientRequest], Awaitable[Any]]


class BaseClientMiddleware:
    """Client side counterpart of starlette's BaseHTTPMiddleware: wraps every outgoing call."""

    async def dispatch(self, request: ClientRequest, call_next: CallNext) -> Any:
        raise NotImplementedError
