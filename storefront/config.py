"""
Settings — environment driven configuration.

Values come from the process environment; a `.env` file in the working
directory is loaded first (existing variables win).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_API_URL = "http://localhost:8000"
DEFAULT_CART_KEY = "cart"
DEFAULT_TAX_RATE = Decimal("0.21")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigError(ValueError):
    """Raised when an environment variable holds an unusable value."""

    def __init__(self, variable: str, value: str, reason: str) -> None:
        super().__init__(f"{variable}={value!r}: {reason}")
        self.variable = variable
        self.value = value


def _get_env(key: str, default: str) -> str:
    v = os.getenv(key)
    if v is None or v.strip() == "":
        return default
    return v.strip()


def _get_float(key: str, default: float) -> float:
    v = _get_env(key, str(default))
    try:
        return float(v)
    except ValueError:
        raise ConfigError(key, v, "expected a number") from None


def _get_decimal(key: str, default: Decimal) -> Decimal:
    v = _get_env(key, str(default))
    try:
        rate = Decimal(v)
    except InvalidOperation:
        raise ConfigError(key, v, "expected a decimal number") from None
    if not rate.is_finite() or rate < 0:
        raise ConfigError(key, v, "expected a non-negative rate")
    return rate


def _get_bool(key: str, default: bool) -> bool:
    v = _get_env(key, "true" if default else "false").lower()
    if v in ("1", "true", "yes", "on"):
        return True
    if v in ("0", "false", "no", "off"):
        return False
    raise ConfigError(key, v, "expected true/false")


@dataclass(frozen=True, slots=True)
class Settings:
    api_url: str = DEFAULT_API_URL
    timeout: float = 10.0
    tax_rate: Decimal = DEFAULT_TAX_RATE
    cart_dir: Path = Path("~/.storefront").expanduser()
    cart_key: str = DEFAULT_CART_KEY
    refresh_stock: bool = True
    log_level: str = "INFO"


def load_settings(dotenv_path: str | Path | None = None) -> Settings:
    """
    Build Settings from the environment.

    Example:
        settings = load_settings()
        async with ShopApi.connect(settings) as api:
            ...
    """
    load_dotenv(dotenv_path=dotenv_path)

    timeout = _get_float("STOREFRONT_TIMEOUT", 10.0)
    if timeout <= 0:
        raise ConfigError("STOREFRONT_TIMEOUT", str(timeout), "must be positive")

    log_level = _get_env("STOREFRONT_LOG_LEVEL", "INFO").upper()
    if log_level not in LOG_LEVELS:
        raise ConfigError("STOREFRONT_LOG_LEVEL", log_level, "unknown level")

    return Settings(
        api_url=_get_env("STOREFRONT_API_URL", DEFAULT_API_URL).rstrip("/"),
        timeout=timeout,
        tax_rate=_get_decimal("STOREFRONT_TAX_RATE", DEFAULT_TAX_RATE),
        cart_dir=Path(_get_env("STOREFRONT_CART_DIR", "~/.storefront")).expanduser(),
        cart_key=_get_env("STOREFRONT_CART_KEY", DEFAULT_CART_KEY),
        refresh_stock=_get_bool("STOREFRONT_REFRESH_STOCK", True),
        log_level=log_level,
    )


__all__ = (
    "ConfigError",
    "Settings",
    "load_settings",
    "DEFAULT_API_URL",
    "DEFAULT_CART_KEY",
    "DEFAULT_TAX_RATE",
)
