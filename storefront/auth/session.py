from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional

from storefront.auth.constants import logger
from storefront.auth.token_store import MemoryTokenStore, TokenStore
from storefront.common.custom_exceptions import ShopClientError
from storefront.user.models import UserProfile

ProfileLoader = Callable[[], Awaitable[UserProfile]]
TeardownListener = Callable[[], None]


@dataclass(frozen=True)
class SessionState:
    token: str
    user: Optional[UserProfile] = None


class SessionManager:
    """
    Sole owner of the auth token and the current user.

    The whole state is one immutable SessionState swapped by a single assignment,
    so a reader racing with invalidate() sees either the old session or none at all.
    """

    def __init__(self, token_store: Optional[TokenStore] = None):
        self.token_store: TokenStore = token_store if token_store is not None else MemoryTokenStore()
        self._state: Optional[SessionState] = None
        self._teardown_listeners: List[TeardownListener] = []

    def current_token(self) -> Optional[str]:
        state = self._state
        return state.token if state else None

    @property
    def current_user(self) -> Optional[UserProfile]:
        state = self._state
        return state.user if state else None

    @property
    def is_authenticated(self) -> bool:
        return self._state is not None

    def add_teardown_listener(self, listener: TeardownListener) -> None:
        """Called (synchronously) whenever the session ends."""
        self._teardown_listeners.append(listener)

    def establish(self, token: str, user: UserProfile) -> None:
        if not token:
            raise ValueError("cannot establish a session without a token")
        self._state = SessionState(token=token, user=user)
        self.token_store.save(token)
        logger.info("auth.session.established", extra={"user_id": user.id})

    def update_user(self, user: UserProfile) -> None:
        state = self._state
        if state is None:
            return
        self._state = SessionState(token=state.token, user=user)

    def invalidate(self, reason: str = "logout") -> None:
        state = self._state
        self._state = None
        self.token_store.clear()

        if state is None:
            return

        logger.info("auth.session.invalidated", extra={"reason": reason,
                                                       "user_id": state.user.id if state.user else None})
        for listener in list(self._teardown_listeners):
            listener()

    def invalidate_token(self, token: str, reason: str) -> bool:
        """
        End the session only if it still holds `token`.
        Returns False when the token was already replaced or dropped.
        """
        state = self._state
        if state is None or state.token != token:
            return False
        self.invalidate(reason=reason)
        return True

    async def restore(self, profile_loader: ProfileLoader) -> Optional[UserProfile]:
        """
        Pick up a token persisted by an earlier run and confirm it with the server.
        Any failure leaves the client unauthenticated and the stored token erased;
        nothing is raised.
        """
        token = self.token_store.load()
        if not token:
            return None

        self._state = SessionState(token=token)
        try:
            user = await profile_loader()
        except ShopClientError as exc:
            logger.info("auth.session.restore_failed", extra={"reason": type(exc).__name__})
            self.invalidate_token(token, reason="restore_failed")
            return None

        # a concurrent logout while the profile was loading wins
        if self._state is None or self._state.token != token:
            return None

        self._state = SessionState(token=token, user=user)
        logger.info("auth.session.restored", extra={"user_id": user.id})
        return user
