from storefront.api.transport import ClientRequest
from storefront.auth.session import SessionManager
from storefront.common.constants import AUTH_HEADER
from storefront.common.custom_exceptions import AuthenticationFailure
from storefront.middlewares.base import BaseClientMiddleware, CallNext
from storefront.middlewares.constants import logger


class AuthenticationMiddleware(BaseClientMiddleware):
    """
    Outgoing: attach the session token as a bearer credential when one is held.
    Incoming: an authentication failure tears down the session whose token was sent,
    and only that one. A late 401 for a token replaced by a newer login is passed
    to the caller without touching the current session.
    This is the only place a session ends involuntarily.
    """

    def __init__(self, *, session: SessionManager):
        self.session = session

    async def dispatch(self, request: ClientRequest, call_next: CallNext):

        token = self.session.current_token()
        if token:
            request.headers[AUTH_HEADER] = f"Bearer {token}"
            request.token = token

        try:
            return await call_next(request)
        except AuthenticationFailure as exc:
            if request.authenticated:
                invalidated = self.session.invalidate_token(request.token, reason="token_rejected")
                logger.warning("auth.middleware.token_rejected", extra={
                    "path": request.path,
                    "method": request.method,
                    "reason": exc.message,
                    "session_ended": invalidated,
                })
            raise
