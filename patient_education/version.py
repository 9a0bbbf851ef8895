# -*- coding: utf-8 -*-
"""Application version detection utilities.

Provides a single public function, ``get_app_version()``, used by the CLI.
"""

from __future__ import annotations

from importlib import metadata
from pathlib import Path
from typing import Optional

_CACHED_VERSION: Optional[str] = None
_DISTRIBUTION = "patient-education-toolkit"


def get_app_version() -> str:
    """Return the application version string (e.g., ``v1.2.3``).

    Installed: read the distribution metadata.
    Packaged builds: read version.txt placed alongside the package root.
    Development fallback: return "vdev".
    """
    global _CACHED_VERSION
    if _CACHED_VERSION:
        return _CACHED_VERSION

    try:
        _CACHED_VERSION = _normalise(metadata.version(_DISTRIBUTION))
        return _CACHED_VERSION
    except metadata.PackageNotFoundError:
        pass

    version_file = Path(__file__).resolve().parent.parent / "version.txt"
    if version_file.exists():
        text = version_file.read_text(encoding="ascii", errors="ignore").strip()
        if text:
            _CACHED_VERSION = _normalise(text)
            return _CACHED_VERSION

    _CACHED_VERSION = "vdev"
    return _CACHED_VERSION


def _normalise(text: str) -> str:
    return text if text.startswith("v") else f"v{text}"
