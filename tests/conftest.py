import pytest
from asgi_lifespan import LifespanManager
from httpx import ASGITransport, AsyncClient
from storefront.auth.token_store import MemoryTokenStore
from storefront.config.settings import Settings
from storefront.main import ShopClient
from tests.fake_backend import create_fake_backend, url_prefix

BASE_URL = f"http://test{url_prefix}"

current_user_payload = {"email": "a@b.com", "password": "x", "first_name": "Ada", "last_name": "Byron"}


@pytest.fixture
def settings():
    return Settings(API_BASE_URL=BASE_URL, TOKEN_STORE_PATH="unused.json")


@pytest.fixture
def token_store():
    return MemoryTokenStore()


@pytest.fixture
async def backend():
    app = create_fake_backend()
    async with LifespanManager(app):
        yield app


@pytest.fixture
async def shop_client(backend, settings, token_store):
    http_client = AsyncClient(transport=ASGITransport(app=backend), base_url=BASE_URL)
    async with ShopClient(settings, token_store=token_store, http_client=http_client) as client:
        yield client


@pytest.fixture
async def logged_in_client(shop_client):
    await shop_client.auth.register(**current_user_payload)
    await shop_client.catalog.list_all()
    return shop_client


@pytest.fixture
def backend_state(backend):
    return backend.state.backend
