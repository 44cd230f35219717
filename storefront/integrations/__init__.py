"""Clients for the storefront backend endpoints."""

from .cart_gateway import RemoteCartGateway
from .catalog import HttpProductCatalog, ProductCatalog
from .discount_api import DiscountSettingsClient
from .locale_api import LocaleDetection, LocaleDetectionClient

__all__ = [
    "DiscountSettingsClient",
    "HttpProductCatalog",
    "LocaleDetection",
    "LocaleDetectionClient",
    "ProductCatalog",
    "RemoteCartGateway",
]
