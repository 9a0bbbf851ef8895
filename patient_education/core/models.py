from __future__ import annotations

"""Shared data structures used across the patient-education core.

This module is intentionally free of UI / I/O code so that the contained
objects can be reused in any context (unit-tests, CLI, GUI, etc.).

All entities are frozen; child collections are tuples.  Editing never
mutates a node, it builds a replacement with :func:`dataclasses.replace`
and reuses every untouched sibling by reference.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple

__all__ = [
    "FileType",
    "FileAttachment",
    "Disease",
    "Section",
    "Banner",
    "LocalContent",
]


class FileType(str, Enum):
    """Coarse attachment kind used to pick an icon and a viewer."""

    IMAGE = "IMAGE"
    PDF = "PDF"
    AUDIO = "AUDIO"
    UNKNOWN = "UNKNOWN"


@dataclass(frozen=True)
class FileAttachment:
    """Downloadable file attached to a disease.

    Attributes
    ----------
    id
        Unique within the owning disease.
    type
        Derived from the declared media type when the attachment is created.
    data_url
        Remote path on the content origin or a transient local reference.
    """

    id: str
    name: str
    description: str
    type: FileType
    data_url: str


@dataclass(frozen=True)
class Disease:
    id: str
    name: str
    description: str
    files: Tuple[FileAttachment, ...] = ()


@dataclass(frozen=True)
class Section:
    id: str
    name: str
    icon: str
    color_class: str
    diseases: Tuple[Disease, ...] = ()


@dataclass(frozen=True)
class Banner:
    id: str
    title: str
    description: str
    image_url: str


@dataclass(frozen=True)
class LocalContent:
    """Content supplied by an administrator (an uploaded file).

    ``name`` is the original file name, ``media_type`` the declared MIME type.
    """

    name: str
    media_type: str
    data: bytes = field(repr=False, default=b"")
