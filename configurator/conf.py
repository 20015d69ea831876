"""
Configurator configuration.

Usage in settings.py:
    CONFIGURATOR = {
        "CATALOG_BACKEND": "configurator.adapters.catalog_backend.ModelCatalogBackend",
        "CURRENCY": "USD",
        "CURRENCY_DECIMAL_PLACES": 2,
        "BUNDLE_MAX_DEPTH": 5,
        "RECALC_DEBOUNCE_SECONDS": 0.15,
        "REMOTE_BASE_URL": None,  # e.g. "https://pricing.example.com/api"
    }
"""

import importlib
import threading
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from django.conf import settings


@dataclass
class ConfiguratorSettings:
    """Configurator settings."""

    CATALOG_BACKEND: str = "configurator.adapters.catalog_backend.ModelCatalogBackend"
    CURRENCY: str = "USD"
    CURRENCY_DECIMAL_PLACES: int = 2
    BUNDLE_MAX_DEPTH: int = 5
    RECALC_DEBOUNCE_SECONDS: float = 0.15
    REMOTE_BASE_URL: str | None = None
    REMOTE_TIMEOUT_SECONDS: float = 5.0
    REMOTE_MAX_ATTEMPTS: int = 2
    REMOTE_RETRY_WAIT_SECONDS: float = 0.2
    PRICE_CROSS_CHECK_TOLERANCE: Decimal = Decimal("0.01")
    SHARE_CODE_LENGTH: int = 8


def get_configurator_settings() -> ConfiguratorSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "CONFIGURATOR", {})
    return ConfiguratorSettings(**user_settings)


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_configurator_settings(), name)


configurator_settings = _LazySettings()


# CatalogBackend singleton
_catalog_backend_lock = threading.Lock()
_catalog_backend_instance = None


def get_catalog_backend():
    """
    Return the configured CatalogBackend instance.

    Loads from CONFIGURATOR["CATALOG_BACKEND"] (dotted path).
    If _catalog_backend_instance was set directly (e.g. in tests), returns it as-is.
    """
    global _catalog_backend_instance
    if _catalog_backend_instance is not None:
        return _catalog_backend_instance
    backend_path = configurator_settings.CATALOG_BACKEND
    with _catalog_backend_lock:
        if _catalog_backend_instance is None:
            module_path, cls_name = backend_path.rsplit(".", 1)
            module = importlib.import_module(module_path)
            cls = getattr(module, cls_name)
            _catalog_backend_instance = cls()
    return _catalog_backend_instance


def reset_catalog_backend():
    """Reset CatalogBackend singleton (for tests)."""
    global _catalog_backend_instance
    _catalog_backend_instance = None
