"""Custom exceptions for the storefront state layer."""
from __future__ import annotations


class StorefrontException(Exception):
    """Base exception for all storefront errors."""

    def __init__(self, message: str, *args: object) -> None:
        super().__init__(message, *args)
        self.message = message


class StorageException(StorefrontException):
    """Persistent store read/write errors."""

    pass


class StorageQuotaExceeded(StorageException):
    """Value does not fit into the persistent store quota."""

    def __init__(self, key: str, size: int, quota: int) -> None:
        super().__init__(f"Storing {size} bytes under {key!r} exceeds quota of {quota} bytes")
        self.key = key
        self.size = size
        self.quota = quota


class GatewayException(StorefrontException):
    """Remote endpoint failed or answered with a non-success status."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class InvalidLocaleError(StorefrontException):
    """Language or currency outside the supported set."""

    def __init__(self, field: str, value: object) -> None:
        super().__init__(f"Unsupported {field}: {value!r}")
        self.field = field
        self.value = value


class ConfigurationException(StorefrontException):
    """Configuration errors."""

    pass
