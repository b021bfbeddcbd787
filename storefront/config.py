from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    ENV: str = "local"

    # storefront backend
    API_BASE_URL: str = "http://localhost:5000/api"
    API_TIMEOUT: int = 10

    # client side durable storage
    STORAGE_DATABASE_URL: str = "sqlite:///./storefront_storage.db"

    RAZORPAY_KEY_ID: str = ""
    STORE_NAME: str = "Storefront"
    CURRENCY: str = "INR"

    # checkout pricing rules
    DELIVERY_FEE: int = 40
    DISCOUNT_RATE: float = 0.10

    ALLOWED_ORIGINS: str = "http://localhost:3000,http://127.0.0.1:3000"

    @property
    def allowed_origins(self):
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "allow"


settings = Settings()
