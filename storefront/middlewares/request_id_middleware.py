from uuid6 import uuid7
from storefront.api.transport import ClientRequest
from storefront.common.constants import REQUEST_ID_HEADER, request_id_ctx
from storefront.middlewares.base import BaseClientMiddleware, CallNext


class RequestIdMiddleware(BaseClientMiddleware):
    async def dispatch(self, request: ClientRequest, call_next: CallNext):

        req_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid7())
        request.headers[REQUEST_ID_HEADER] = req_id

        token = request_id_ctx.set(req_id)
        try:
            return await call_next(request)
        finally:
            request_id_ctx.reset(token)
