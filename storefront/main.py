from typing import Optional
import httpx
from storefront.api.pipeline import RequestPipeline
from storefront.api.transport import Transport
from storefront.auth.services import AuthService
from storefront.auth.session import SessionManager
from storefront.auth.token_store import FileTokenStore, TokenStore
from storefront.cart.services import CartService
from storefront.common.logging_setup import get_logger, setup_logging, shutdown_logging
from storefront.config.settings import Settings, config_settings
from storefront.middlewares.auth_middleware import AuthenticationMiddleware
from storefront.middlewares.request_id_middleware import RequestIdMiddleware
from storefront.orders.services import OrderService
from storefront.products.services import Catalog
from storefront.user.models import UserProfile
from storefront.user.services import UserService

logger = get_logger("storefront.client")


class ShopClient:
    """
    Wires transport, session, middlewares and services into one client.

        async with ShopClient() as client:
            await client.auth.login("a@b.com", "secret")
            await client.catalog.list_all()
            await client.cart.add_item(7, 3)
            order = await client.orders.checkout()
    """

    def __init__(self, settings: Settings = config_settings, token_store: Optional[TokenStore] = None,
                 http_client: Optional[httpx.AsyncClient] = None, configure_logging: bool = False):
        self.settings = settings
        self.configure_logging = configure_logging

        self.transport = Transport(settings, http_client=http_client)
        self.session = SessionManager(token_store if token_store is not None else FileTokenStore(
            settings.TOKEN_STORE_PATH, settings.TOKEN_STORAGE_KEY))

        self.pipeline = RequestPipeline(self.transport)
        self.pipeline.add_middleware(AuthenticationMiddleware, session=self.session)
        self.pipeline.add_middleware(RequestIdMiddleware)

        self.auth = AuthService(self.pipeline, self.session)
        self.users = UserService(self.pipeline, self.session)
        self.catalog = Catalog(self.pipeline)
        self.cart = CartService(self.pipeline, self.catalog, self.session,
                                max_item_quantity=settings.MAX_ITEM_QUANTITY)
        self.orders = OrderService(self.pipeline, self.cart, self.session)

    async def start(self) -> Optional[UserProfile]:
        if self.configure_logging:
            setup_logging()
        user = await self.session.restore(self.users.get_profile)
        logger.info("client.started", extra={"base_url": self.settings.API_BASE_URL,
                                             "restored": user is not None})
        return user

    async def aclose(self):
        await self.transport.aclose()
        if self.configure_logging:
            shutdown_logging()

    async def __aenter__(self) -> "ShopClient":
        await self.start()
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()
