"""Content origin access and catalog assembly."""

from .assembler import CatalogAssembler
from .fetcher import ContentFetcher, HttpContentFetcher, LocalContentFetcher, create_fetcher

__all__ = [
    "CatalogAssembler",
    "ContentFetcher",
    "HttpContentFetcher",
    "LocalContentFetcher",
    "create_fetcher",
]
