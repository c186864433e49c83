from decimal import Decimal
from typing import List, Optional
from pydantic import Field, model_validator
from storefront.common.models import ApiModel
from storefront.common.utils import sum_amounts, to_money


class CartItemIn(ApiModel):
    product_id: int
    product_name: str
    price: Decimal = Field(..., ge=0)
    quantity: int = Field(..., ge=1)


class QuantityIn(ApiModel):
    quantity: int = Field(..., ge=1)


class CartItem(ApiModel):
    product_id: int
    product_name: Optional[str] = None
    price: Decimal
    quantity: int
    subtotal: Optional[Decimal] = None

    @model_validator(mode="after")
    def _fill_subtotal(self):
        # the server's subtotal is trusted verbatim; only fill it when absent
        if self.subtotal is None:
            self.subtotal = self.price * self.quantity
        return self


class Cart(ApiModel):
    user_id: Optional[int] = None
    items: List[CartItem] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def item_count(self) -> int:
        return len(self.items)

    @property
    def total_quantity(self) -> int:
        return sum(i.quantity for i in self.items)

    @property
    def derived_total(self) -> Decimal:
        """Sum of the item subtotals, unrounded."""
        return sum_amounts(i.subtotal for i in self.items)

    @property
    def display_total(self) -> Decimal:
        return to_money(self.derived_total)

    def find_item(self, product_id: int) -> Optional[CartItem]:
        for item in self.items:
            if item.product_id == product_id:
                return item
        return None
