from typing import Any, Dict, List, Optional

from storefront.api.transport import ClientRequest, Transport
from storefront.middlewares.base import BaseClientMiddleware, CallNext


class RequestPipeline:
    """
    Runs every call through the registered middlewares before it reaches the transport.
    As with starlette, the middleware added last is the outermost one.
    Requests are forwarded in the order callers issue them; nothing is retried or reordered.
    """

    def __init__(self, transport: Transport):
        self.transport = transport
        self._middlewares: List[BaseClientMiddleware] = []

    def add_middleware(self, middleware_cls, **options) -> BaseClientMiddleware:
        middleware = middleware_cls(**options)
        self._middlewares.append(middleware)
        return middleware

    def _build_chain(self) -> CallNext:
        call_next: CallNext = self.transport.send
        for middleware in self._middlewares:
            call_next = _bind(middleware, call_next)
        return call_next

    async def send(self, request: ClientRequest) -> Any:
        return await self._build_chain()(request)

    async def request(self, method: str, path: str, body: Any = None,
                      params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.send(ClientRequest(method=method, path=path, body=body, params=params))

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, body: Any = None) -> Any:
        return await self.request("POST", path, body=body)

    async def put(self, path: str, body: Any = None) -> Any:
        return await self.request("PUT", path, body=body)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)


def _bind(middleware: BaseClientMiddleware, call_next: CallNext) -> CallNext:
    async def handler(request: ClientRequest) -> Any:
        return await middleware.dispatch(request, call_next)
    return handler
