from typing import Any, Dict, List, Optional
from pydantic import ValidationError
from storefront.api.pipeline import RequestPipeline
from storefront.auth.session import SessionManager
from storefront.cart.services import CartService
from storefront.common.custom_exceptions import TransportFailure, ValidationFailure
from storefront.common.utils import unwrap_page
from storefront.orders.constants import ORDERS_PATH, logger
from storefront.orders.models import Order, OrderStatus
from storefront.orders.utils import is_cancellable, is_terminal


def parse_order(payload: Any) -> Order:
    try:
        return Order.model_validate(payload)
    except ValidationError as exc:
        raise TransportFailure("malformed order", details=exc.errors()) from exc


class OrderService:
    """
    Turns the current cart into an order and manages the orders placed so far.
    Orders seen through checkout/list/get are remembered so that cancelling an
    order already known to be past the cancellable stage is refused without a round trip.
    The record is dropped when the session ends.
    """

    def __init__(self, pipeline: RequestPipeline, cart_service: CartService, session: SessionManager):
        self.pipeline = pipeline
        self.cart_service = cart_service
        self._known: Dict[int, Order] = {}
        session.add_teardown_listener(self.reset)

    def reset(self) -> None:
        self._known.clear()

    def _remember(self, order: Order) -> Order:
        self._known[order.id] = order
        return order

    def known_order(self, order_id: int) -> Optional[Order]:
        return self._known.get(order_id)

    async def checkout(self) -> Order:
        cart = self.cart_service.cart
        if cart is None or cart.is_empty:
            logger.warning("orders.checkout.empty_cart")
            raise ValidationFailure("cart is empty")

        generation = self.cart_service.generation
        order = self._remember(parse_order(await self.pipeline.post(ORDERS_PATH)))
        self.cart_service.mark_consumed(generation)

        if order.items and order.total_amount != order.items_total:
            logger.warning("orders.checkout.total_mismatch", extra={
                "order_id": order.id,
                "total_amount": str(order.total_amount),
                "items_total": str(order.items_total),
            })

        logger.info("orders.checkout.success", extra={"order_id": order.id, "status": order.status.value,
                                                      "total_amount": str(order.total_amount)})
        return order

    async def list(self) -> List[Order]:
        payload = await self.pipeline.get(ORDERS_PATH)
        try:
            orders = [Order.model_validate(o) for o in unwrap_page(payload)]
        except ValidationError as exc:
            raise TransportFailure("malformed order listing", details=exc.errors()) from exc

        for order in orders:
            self._remember(order)
        return orders

    async def get(self, order_id: int) -> Order:
        return self._remember(parse_order(await self.pipeline.get(f"{ORDERS_PATH}/{order_id}")))

    async def cancel(self, order_id: int) -> Order:
        known = self._known.get(order_id)
        if known is not None and not is_cancellable(known.status):
            logger.warning("orders.cancel.rejected", extra={"order_id": order_id, "status": known.status.value,
                                                            "terminal": is_terminal(known.status)})
            raise ValidationFailure(f"order {order_id} is {known.status.value} and can no longer be cancelled",
                                    details={"status": known.status.value})

        order = self._remember(parse_order(await self.pipeline.post(f"{ORDERS_PATH}/{order_id}/cancel")))

        if order.status != OrderStatus.CANCELLED:
            logger.warning("orders.cancel.unexpected_status", extra={"order_id": order_id,
                                                                     "status": order.status.value})
        else:
            logger.info("orders.cancel.success", extra={"order_id": order_id})
        return order
