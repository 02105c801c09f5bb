"""Custom exceptions for the settings_store package."""

from __future__ import annotations


class SettingsStoreError(Exception):
    """Base exception for all settings-store errors."""


class StoreError(SettingsStoreError):
    """Raised when the underlying storage area fails a write."""

    def __init__(self, operation: str, detail: str = "") -> None:
        self.operation = operation
        msg = f"Store error during '{operation}'"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class ImportValidationError(SettingsStoreError):
    """Raised when an import bundle violates one or more constraints.

    The message enumerates *every* violation so a bundle can be fixed in
    one pass.
    """

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__(f"Invalid import: {', '.join(self.errors)}")


class InvalidValueError(SettingsStoreError, ValueError):
    """Raised when an accessor receives an argument outside its declared domain."""


class ListFetchError(SettingsStoreError):
    """Raised when a subscribed list cannot be downloaded."""

    def __init__(self, url: str, detail: str) -> None:
        self.url = url
        super().__init__(f"Failed to fetch list from {url}: {detail}")
