from __future__ import annotations

"""Simple reusable helper functions.

These helpers are side-effect-free and contain no GUI or disk I/O; they can be
used across all layers of the toolkit.
"""

import re
import time
from typing import Optional

from patient_education.core.models import FileType

__all__ = [
    "derive_entity_id",
    "timestamped_id",
    "classify_media_type",
    "classify_declared_type",
    "safe_filename",
]

_UNSAFE_FILENAME_CHARS = re.compile(r'[/\\?%*:|"<>]')


def derive_entity_id(name: str) -> str:
    """Return the id of a section or disease created from a display name.

    The name is lower-cased and every run of whitespace becomes a single
    ``-``.  No collision check is performed.

    Examples:
        >>> derive_entity_id("Heart  Disease")
        'heart-disease'
    """
    return re.sub(r"\s+", "-", name.lower())


def timestamped_id(content_name: str, now_ms: Optional[int] = None) -> str:
    """Return ``"<epoch-ms>-<content_name>"`` for files and banners."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"{now_ms}-{content_name}"


def classify_media_type(media_type: str) -> FileType:
    """Map a declared MIME type onto a :class:`FileType`."""
    if media_type.startswith("image/"):
        return FileType.IMAGE
    if media_type == "application/pdf":
        return FileType.PDF
    if media_type.startswith("audio/"):
        return FileType.AUDIO
    return FileType.UNKNOWN


def classify_declared_type(declared: Optional[str]) -> FileType:
    """Classify a manifest ``type`` field.

    Manifests either name the kind directly (``"PDF"``) or give a MIME type
    (``"application/pdf"``).
    """
    if not declared:
        return FileType.UNKNOWN
    upper = declared.strip().upper()
    if upper in FileType.__members__:
        return FileType[upper]
    return classify_media_type(declared.strip().lower())


def safe_filename(name: str, extension: str = ".docx") -> str:
    """Replace path-unsafe characters with ``-`` and append *extension*.

    Examples:
        >>> safe_filename("A/B:C")
        'A-B-C.docx'
    """
    return _UNSAFE_FILENAME_CHARS.sub("-", name) + extension
