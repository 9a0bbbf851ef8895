from __future__ import annotations

"""High-level services (editing, export, rotation, authentication)."""

from .auth_service import AuthService  # noqa: F401
from .banner_rotation import BannerRotationController  # noqa: F401
from .catalog_editing_service import CatalogEditingService  # noqa: F401
from .export_service import DocumentExportService  # noqa: F401

__all__: list[str] = [
    "AuthService",
    "BannerRotationController",
    "CatalogEditingService",
    "DocumentExportService",
]
