"""Configurator adapters."""

from configurator.adapters.catalog_backend import ModelCatalogBackend
from configurator.adapters.remote import RemoteCatalogBackend

__all__ = [
    "ModelCatalogBackend",
    "RemoteCatalogBackend",
]
