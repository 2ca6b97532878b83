from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    STOREFRONT_API_BASE: str = "http://localhost:5000/api"
    SERVICE_TIMEOUT_SECONDS: float = 10.0

    MONGO_URI: str | None = None
    MONGO_DB: str = "storefront"

    # shelf / search tuning
    SHELF_PAGE_SIZE: int = 8
    FUZZY_PREFIX_LENGTH: int = 3
    FUZZY_RESULT_LIMIT: int = 8

    TOKEN_PREFIX_LENGTH: int = 16
    CART_CACHE_NAMESPACE: str = "cart-recs"

    # idle expiry of in-process visitor state
    SESSION_IDLE_SECONDS: float = 30 * 60
    PROFILE_IDLE_SECONDS: float = 30 * 24 * 60 * 60
    MAX_TRACKED_SESSIONS: int = 10_000

    class Config:
        env_file = ".env"

settings = Settings()
