from storefront.common.logging_setup import get_logger

logger = get_logger("storefront.auth")

REGISTER_PATH = "/auth/register"

LOGIN_PATH = "/auth/login"
