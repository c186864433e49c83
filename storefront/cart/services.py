from typing import Any, Optional
from pydantic import ValidationError
from storefront.api.pipeline import RequestPipeline
from storefront.auth.session import SessionManager
from storefront.cart.constants import CART_ITEMS_PATH, CART_PATH, MIN_ITEM_QUANTITY, logger
from storefront.cart.models import Cart, CartItemIn, QuantityIn
from storefront.common.custom_exceptions import NotFound, TransportFailure, ValidationFailure
from storefront.config.settings import config_settings
from storefront.products.services import Catalog


def parse_cart(payload: Any) -> Cart:
    if payload is None:
        return Cart()
    try:
        return Cart.model_validate(payload)
    except ValidationError as exc:
        raise TransportFailure("malformed cart", details=exc.errors()) from exc


class CartService:
    """
    Local mirror of the session's cart.

    Every mutation is a round trip and the cart in the response replaces the local one
    wholesale; nothing is merged client side. When two mutations are in flight at once,
    whichever response arrives last wins.
    Responses to requests sent before a session teardown are dropped.
    """

    def __init__(self, pipeline: RequestPipeline, catalog: Catalog, session: SessionManager,
                 max_item_quantity: int = config_settings.MAX_ITEM_QUANTITY):
        self.pipeline = pipeline
        self.catalog = catalog
        self.max_item_quantity = max_item_quantity
        self._cart: Optional[Cart] = None
        # bumped on every teardown
        self._generation = 0
        session.add_teardown_listener(self.reset)

    @property
    def cart(self) -> Optional[Cart]:
        return self._cart

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def item_count(self) -> int:
        return self._cart.item_count if self._cart else 0

    def _replace(self, cart: Cart, generation: int) -> Cart:
        if generation != self._generation:
            logger.debug("cart.response.stale", extra={"items": cart.item_count})
            return cart
        self._cart = cart
        return cart

    def _check_quantity(self, product_id: int, quantity: int) -> None:
        if isinstance(quantity, bool) or not isinstance(quantity, int) \
                or not MIN_ITEM_QUANTITY <= quantity <= self.max_item_quantity:
            logger.warning("cart.quantity.rejected", extra={"product_id": product_id, "quantity": quantity})
            raise ValidationFailure(
                f"quantity must be between {MIN_ITEM_QUANTITY} and {self.max_item_quantity}",
                details={"quantity": quantity},
            )

    async def load(self) -> Cart:
        generation = self._generation
        return self._replace(parse_cart(await self.pipeline.get(CART_PATH)), generation)

    async def add_item(self, product_id: int, quantity: int = 1) -> Cart:
        self._check_quantity(product_id, quantity)

        product = self.catalog.find_cached(product_id)
        if product is None:
            logger.warning("cart.add_item.unknown_product", extra={"product_id": product_id})
            raise NotFound(f"product {product_id} is not in the loaded catalog")

        payload = CartItemIn(product_id=product.id, product_name=product.name,
                             price=product.price, quantity=quantity)

        generation = self._generation
        cart = self._replace(parse_cart(await self.pipeline.post(CART_ITEMS_PATH, payload.to_api())), generation)
        logger.info("cart.add_item.success", extra={"product_id": product_id, "quantity": quantity,
                                                    "items": cart.item_count})
        return cart

    async def update_quantity(self, product_id: int, quantity: int) -> Cart:
        if quantity == 0 and not isinstance(quantity, bool):
            return await self.remove_item(product_id)
        self._check_quantity(product_id, quantity)

        payload = QuantityIn(quantity=quantity)
        generation = self._generation
        data = await self.pipeline.put(f"{CART_ITEMS_PATH}/{product_id}", payload.to_api())
        cart = self._replace(parse_cart(data), generation)
        logger.info("cart.update_quantity.success", extra={"product_id": product_id, "quantity": quantity})
        return cart

    async def remove_item(self, product_id: int) -> Cart:
        generation = self._generation
        try:
            data = await self.pipeline.delete(f"{CART_ITEMS_PATH}/{product_id}")
        except NotFound:
            # removing something that is not there is a no-op: hand back the cart as the server holds it
            logger.debug("cart.remove_item.absent", extra={"product_id": product_id})
            return await self.load()

        cart = self._replace(parse_cart(data), generation)
        logger.info("cart.remove_item.success", extra={"product_id": product_id, "items": cart.item_count})
        return cart

    async def clear(self) -> Cart:
        generation = self._generation
        await self.pipeline.delete(CART_PATH)
        logger.info("cart.cleared")
        return self._replace(Cart(), generation)

    def mark_consumed(self, generation: Optional[int] = None) -> None:
        """The cart became an order; the server empties it on its side too."""
        self._replace(Cart(), self._generation if generation is None else generation)

    def reset(self) -> None:
        self._generation += 1
        self._cart = None
