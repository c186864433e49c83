from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional
from pydantic import Field
from storefront.cart.models import CartItem
from storefront.common.models import ApiModel
from storefront.common.utils import sum_amounts


class OrderStatus(str, Enum):
    CREATED = "CREATED"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    # reported by the order backend while payment runs; never set by this client
    PENDING = "PENDING"
    PAYMENT_PROCESSING = "PAYMENT_PROCESSING"
    PAYMENT_FAILED = "PAYMENT_FAILED"
    COMPLETED = "COMPLETED"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            for member in cls:
                if member.value == value.upper():
                    return member
        return None


class OrderItem(CartItem):
    """Snapshot of a cart line at the moment the order was placed."""


class Order(ApiModel):
    id: int
    user_id: Optional[int] = None
    status: OrderStatus
    total_amount: Decimal
    items: List[OrderItem] = Field(default_factory=list)
    payment_id: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def items_total(self) -> Decimal:
        return sum_amounts(i.subtotal for i in self.items)
