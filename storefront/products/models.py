from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import Field
from storefront.common.models import ApiModel


class Product(ApiModel):
    id: int
    name: str = Field(..., max_length=255)
    price: Decimal = Field(..., ge=0)
    description: Optional[str] = None
    category: Optional[str] = None
    brand: Optional[str] = None
    image_url: Optional[str] = None
    active: Optional[bool] = None
    in_stock: Optional[bool] = None
    created_at: Optional[datetime] = None


class StockLevel(ApiModel):
    product_id: int
    available_quantity: int = 0
    reserved_quantity: int = 0
    total_quantity: int = 0
    in_stock: Optional[bool] = None

    @property
    def is_available(self) -> bool:
        if self.in_stock is not None:
            return self.in_stock
        return self.available_quantity > 0
