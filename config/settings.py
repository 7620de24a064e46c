# config/settings.py
import os
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    APP_NAME: str = os.getenv("APP_NAME", "Product Listing API")
    API_VERSION: str = os.getenv("API_VERSION", "1.0.0")
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # --- MongoDB ---
    # MONGO_URI wins; otherwise an Atlas URI is assembled from the parts below.
    MONGO_URI: str | None = os.getenv("MONGO_URI")
    MONGO_USER: str | None = os.getenv("MONGO_USER")
    MONGO_PASSWORD: str | None = os.getenv("MONGO_PASSWORD")
    MONGO_CLUSTER_URL: str | None = os.getenv("MONGO_CLUSTER_URL")
    MONGO_DB_NAME: str = os.getenv("MONGO_DB_NAME", "product_listing")
    # Multi-document transactions need a replica set or sharded cluster.
    MONGO_TRANSACTIONS: bool = _env_bool("MONGO_TRANSACTIONS")

    # --- JWT ---
    JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", "change-me")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24 * 30)))
    JWT_ISSUER: str = os.getenv("JWT_ISSUER", "product-listing-api")
    JWT_AUDIENCE: str = os.getenv("JWT_AUDIENCE", "product-listing-client")

    FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:5173")

    # --- Auth rate limiting (fixed window per client address) ---
    AUTH_RATE_LIMIT_ATTEMPTS: int = int(os.getenv("AUTH_RATE_LIMIT_ATTEMPTS", "5"))
    AUTH_RATE_LIMIT_WINDOW_SECONDS: int = int(os.getenv("AUTH_RATE_LIMIT_WINDOW_SECONDS", str(15 * 60)))
    AUTH_RATE_LIMIT_MAX_KEYS: int = int(os.getenv("AUTH_RATE_LIMIT_MAX_KEYS", "10000"))

    # --- Catalog / orders ---
    LOW_STOCK_THRESHOLD: int = int(os.getenv("LOW_STOCK_THRESHOLD", "10"))
    PRODUCTS_PAGE_SIZE: int = int(os.getenv("PRODUCTS_PAGE_SIZE", "12"))
    ORDERS_PAGE_SIZE: int = int(os.getenv("ORDERS_PAGE_SIZE", "10"))

    # --- Seeding ---
    ADMIN_USERNAME: str = os.getenv("ADMIN_USERNAME", "admin")
    ADMIN_PASSWORD: str = os.getenv("ADMIN_PASSWORD", "Admin123")


settings = Settings()
