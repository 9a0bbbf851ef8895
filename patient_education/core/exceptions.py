from __future__ import annotations

"""Catalog exception classes.

Only loading and export failures are raised; a mutation that targets a
missing id and a failed login are ordinary return values, never exceptions.
All exceptions here are meant to be caught by the application layer and
turned into a degraded but visible state.
"""

from typing import Optional

__all__ = [
    "CatalogError",
    "ContentFetchError",
    "CatalogLoadError",
    "DocumentExportError",
]


class CatalogError(Exception):
    """Base exception for all catalog-related errors."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.cause = cause


class ContentFetchError(CatalogError):
    """Raised when a single fragment cannot be fetched or decoded."""

    def __init__(self, message: str, path: Optional[str] = None,
                 cause: Optional[BaseException] = None) -> None:
        super().__init__(message, cause)
        self.path = path

    def __str__(self) -> str:
        if self.path:
            return f"[Content: {self.path}] {super().__str__()}"
        return super().__str__()


class CatalogLoadError(CatalogError):
    """Raised when the catalog cannot be assembled.

    Any fetch failure or malformed fragment aborts the whole load; callers
    must fall back to an empty catalog rather than a partial one.
    """
    pass


class DocumentExportError(CatalogError):
    """Raised when serializing or writing an exported document fails."""

    def __init__(self, message: str, filename: Optional[str] = None,
                 cause: Optional[BaseException] = None) -> None:
        super().__init__(message, cause)
        self.filename = filename

    def __str__(self) -> str:
        if self.filename:
            return f"[Export: {self.filename}] {super().__str__()}"
        return super().__str__()
