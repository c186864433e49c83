from typing import Any, Dict, List, Optional
from urllib.parse import quote
from pydantic import ValidationError
from storefront.api.pipeline import RequestPipeline
from storefront.common.custom_exceptions import TransportFailure
from storefront.common.utils import unwrap_page
from storefront.products.constants import INVENTORY_PATH, PRODUCT_SEARCH_PATH, PRODUCTS_PATH, logger
from storefront.products.models import Product, StockLevel


def parse_products(payload: Any) -> List[Product]:
    try:
        return [Product.model_validate(p) for p in unwrap_page(payload)]
    except ValidationError as exc:
        raise TransportFailure("malformed product listing", details=exc.errors()) from exc


class Catalog:
    """
    Read-only view of the product catalog.
    list_all() keeps the last listing as a local snapshot; the cart reads names and
    prices from it and an empty search is answered from it without a round trip.
    """

    def __init__(self, pipeline: RequestPipeline):
        self.pipeline = pipeline
        self._snapshot: List[Product] = []
        self._by_id: Dict[int, Product] = {}

    @property
    def snapshot(self) -> List[Product]:
        return list(self._snapshot)

    def _remember(self, products: List[Product]) -> None:
        self._snapshot = products
        self._by_id = {p.id: p for p in products}

    async def list_all(self) -> List[Product]:
        products = parse_products(await self.pipeline.get(PRODUCTS_PATH))
        self._remember(products)
        logger.debug("catalog.list.loaded", extra={"count": len(products)})
        return list(products)

    async def search(self, keyword: str) -> List[Product]:
        if not keyword:
            return self.snapshot

        return parse_products(await self.pipeline.get(PRODUCT_SEARCH_PATH, params={"keyword": keyword}))

    async def get_product(self, product_id: int) -> Product:
        data = await self.pipeline.get(f"{PRODUCTS_PATH}/{product_id}")
        try:
            return Product.model_validate(data)
        except ValidationError as exc:
            raise TransportFailure("malformed product", details=exc.errors()) from exc

    async def by_category(self, category: str) -> List[Product]:
        return parse_products(await self.pipeline.get(f"{PRODUCTS_PATH}/category/{quote(category, safe='')}"))

    async def check_stock(self, product_id: int) -> StockLevel:
        data = await self.pipeline.get(f"{INVENTORY_PATH}/{product_id}")
        try:
            return StockLevel.model_validate(data)
        except ValidationError as exc:
            raise TransportFailure("malformed stock level", details=exc.errors()) from exc

    def find_cached(self, product_id: int) -> Optional[Product]:
        return self._by_id.get(product_id)
