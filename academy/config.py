from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "postgresql+asyncpg://localhost:5432/academy"
    admin_api_key: str | None = None
    log_level: str = "INFO"

    # Find Your Legacy dataset. None = packaged academy/data/find_your_legacy_players.json
    legacy_players_path: str | None = None

    # Razorpay. Both keys unset = test mode (orders created without a gateway order)
    razorpay_key_id: str | None = None
    razorpay_key_secret: str | None = None
    razorpay_base_url: str = "https://api.razorpay.com/v1"
    razorpay_timeout_seconds: float = 10.0

    shop_currency: str = "INR"
    shop_shipping_fee_paise: int = 5000  # flat rate, ₹50.00
    shop_order_prefix: str = "FCRB"

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
