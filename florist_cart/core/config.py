from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Cart persistence
    CART_STORAGE_KEY: str = "florist_cart"
    CHECKOUT_STORAGE_KEY: str = "checkout_items"
    CART_EXPIRY_DAYS: int = 7
    CART_UPDATED_EVENT: str = "cartUpdated"

    # Display
    CURRENCY_SYMBOL: str = "Rp"
    DISPLAY_TIMEZONE: str = "Asia/Jakarta"

    # Checkout
    SHIPPING_FEE: int = 15000
    FREE_SHIPPING_THRESHOLD: int = 500000

    # Database (SQL storage backend)
    DATABASE_URL: str = "sqlite:///./florist_cart.db"

    # Storefront backend API
    API_BASE_URL: str = "http://localhost:5000/api"
    ASSET_BASE_URL: str = "http://localhost:5000"
    PLACEHOLDER_IMAGE: str = "/placeholder.jpg"

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
