from storefront.common.logging_setup import get_logger

logger = get_logger("storefront.products")

PRODUCTS_PATH = "/products"

PRODUCT_SEARCH_PATH = "/products/search"

INVENTORY_PATH = "/inventory"
