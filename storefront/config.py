"""Storefront client settings read from environment variables."""
import os
from dataclasses import dataclass
from decimal import Decimal

from storefront.services.money import to_decimal

DEFAULT_API_URL = "http://localhost:3000/api"
DEFAULT_STORAGE_PATH = "~/.storefront/storage.json"

STORAGE_BACKENDS = ("memory", "file", "redis")

_TRUTHY = {"1", "true", "yes", "on"}


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUTHY


@dataclass
class Settings:
    """Runtime configuration for the storefront client."""
    api_url: str = DEFAULT_API_URL
    http_timeout: float = 10.0
    storage_backend: str = "file"
    storage_path: str = DEFAULT_STORAGE_PATH
    storage_prefix: str = ""
    redis_url: str = ""
    redis_token: str = ""
    clear_cart_on_logout: bool = False
    shipping_fee: Decimal = Decimal("5.00")
    tax_rate: Decimal = Decimal("0.08")
    log_level: str = "INFO"
    environment: str = "development"

    def __post_init__(self):
        self.storage_backend = self.storage_backend.lower()
        if self.storage_backend not in STORAGE_BACKENDS:
            raise ValueError(
                f"Unknown storage backend '{self.storage_backend}'. "
                f"Expected one of: {', '.join(STORAGE_BACKENDS)}"
            )
        if self.storage_backend == "redis" and not (self.redis_url and self.redis_token):
            raise ValueError(
                "UPSTASH_REDIS_REST_URL and UPSTASH_REDIS_REST_TOKEN must be set for the redis backend"
            )
        self.api_url = self.api_url.rstrip("/")
        self.shipping_fee = to_decimal(self.shipping_fee)
        self.tax_rate = to_decimal(self.tax_rate)
        self.log_level = self.log_level.upper()

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from STOREFRONT_* and UPSTASH_* environment variables."""
        return cls(
            api_url=os.environ.get("STOREFRONT_API_URL", DEFAULT_API_URL),
            http_timeout=float(os.environ.get("STOREFRONT_HTTP_TIMEOUT", "10")),
            storage_backend=os.environ.get("STOREFRONT_STORAGE", "file"),
            storage_path=os.environ.get("STOREFRONT_STORAGE_PATH", DEFAULT_STORAGE_PATH),
            storage_prefix=os.environ.get("STOREFRONT_STORAGE_PREFIX", ""),
            redis_url=os.environ.get("UPSTASH_REDIS_REST_URL", ""),
            redis_token=os.environ.get("UPSTASH_REDIS_REST_TOKEN", ""),
            clear_cart_on_logout=_env_bool("STOREFRONT_CLEAR_CART_ON_LOGOUT"),
            shipping_fee=to_decimal(os.environ.get("STOREFRONT_SHIPPING_FEE", "5.00")),
            tax_rate=to_decimal(os.environ.get("STOREFRONT_TAX_RATE", "0.08")),
            log_level=os.environ.get("LOG_LEVEL", "INFO"),
            environment=os.environ.get("STOREFRONT_ENV", "development"),
        )
