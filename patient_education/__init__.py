"""Top-level package for the patient-education toolkit.

Front-ends (CLI, GUI, web) should only depend on the public API exposed here
rather than importing internal modules directly.
"""

from .core.context import AppContext
from .core.models import Banner, Disease, FileAttachment, FileType, LocalContent, Section
from .core.store import CatalogStore, OperationResult

__all__: list[str] = [
    "AppContext",
    "Banner",
    "CatalogStore",
    "Disease",
    "FileAttachment",
    "FileType",
    "LocalContent",
    "OperationResult",
    "Section",
]
