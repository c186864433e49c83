from pydantic_settings import BaseSettings


class Settings(BaseSettings):

    API_BASE_URL: str = "http://localhost:8080/api"
    REQUEST_TIMEOUT: float = 10.0
    TOKEN_STORE_PATH: str = ".storefront/session.json"
    TOKEN_STORAGE_KEY: str = "authToken"
    MAX_ITEM_QUANTITY: int = 10
    ENV: str = "dev"                # "dev" / "staging" / "prod"
    SERVICE_NAME: str = "storefront-client"

    class Config:
        env_file = ".env"
        extra="ignore"

config_settings = Settings()
