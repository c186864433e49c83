from storefront.common.logging_setup import get_logger

logger = get_logger("storefront.cart")

CART_PATH = "/cart"

CART_ITEMS_PATH = "/cart/items"

MIN_ITEM_QUANTITY = 1
