from __future__ import annotations

"""In-memory catalog store.

The store holds the current ``Section`` tree and ``Banner`` list and is the
only component allowed to replace them.  Each public operation computes the
next snapshot with :class:`CatalogEditingService`, swaps the reference in one
assignment and then releases transient content that the new snapshot no
longer references.  Consumers only ever receive frozen dataclasses and
tuples.

Operations that target a missing id return
``OperationResult(success=False, ...)``; they never raise.

Examples
--------
Basic usage:

    store = CatalogStore(storage)
    store.replace(sections, banners)
    result = store.add_disease("heart", "Angina", "**Chest pain** ...")
    if not result.success:
        print(result.message)

"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Set

from patient_education.core.models import (
    Banner,
    Disease,
    FileAttachment,
    LocalContent,
    Section,
)
from patient_education.core.services.catalog_editing_service import (
    Banners,
    CatalogEditingService,
    Sections,
)
from patient_education.core.session_storage import SessionStorage
from patient_education.core.utils import classify_media_type, timestamped_id

__all__ = ["OperationResult", "CatalogStore"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OperationResult:
    """Result of a store operation.

    Attributes
    ----------
    success
        False when the targeted node does not exist (the store is unchanged).
    message
        Human-readable summary suitable for logs or UI display.
    details
        Optional structured details, e.g. the id of a created node.
    """
    success: bool
    message: str
    details: Optional[Dict[str, Any]] = None


def _file_urls(sections: Iterable[Section]) -> Set[str]:
    return {f.data_url for s in sections for d in s.diseases for f in d.files}


def _banner_urls(banners: Iterable[Banner]) -> Set[str]:
    return {b.image_url for b in banners}


class CatalogStore:
    """Holds the live catalog and applies administrator edits.

    Parameters
    ----------
    storage : SessionStorage, optional
        Where locally attached content is kept.  A private session directory
        is created when omitted.
    editing_service : CatalogEditingService, optional
        Transition implementation, injectable for tests.
    """

    def __init__(self, storage: Optional[SessionStorage] = None,
                 editing_service: Optional[CatalogEditingService] = None) -> None:
        self._storage = storage or SessionStorage()
        self._editing = editing_service or CatalogEditingService()
        self._sections: Sections = ()
        self._banners: Banners = ()
        self._disposed = False
        self._banner_listeners: List[Callable[[Banners], None]] = []

    # -------------------------------------------------------------------------
    # Read access
    # -------------------------------------------------------------------------

    @property
    def sections(self) -> Sections:
        return self._sections

    @property
    def banners(self) -> Banners:
        return self._banners

    @property
    def disposed(self) -> bool:
        return self._disposed

    def find_section(self, section_id: str) -> Optional[Section]:
        return next((s for s in self._sections if s.id == section_id), None)

    def find_disease(self, section_id: str, disease_id: str) -> Optional[Disease]:
        section = self.find_section(section_id)
        if section is None:
            return None
        return next((d for d in section.diseases if d.id == disease_id), None)

    def add_banner_listener(self, callback: Callable[[Banners], None]) -> None:
        """Call *callback* with the new banner tuple whenever it changes."""
        self._banner_listeners.append(callback)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def replace(self, sections: Sections, banners: Banners) -> None:
        """Install a freshly loaded catalog."""
        if self._disposed:
            logger.warning("Store disposed: ignoring catalog replacement")
            return
        self._swap(tuple(sections), tuple(banners))
        logger.info("Store: catalog installed sections=%d banners=%d", len(self._sections), len(self._banners))

    def dispose(self) -> None:
        """Release all transient content and empty the store."""
        if self._disposed:
            return
        self._disposed = True
        self._sections = ()
        self._banners = ()
        self._banner_listeners.clear()
        self._storage.cleanup()
        logger.info("Store disposed")

    # -------------------------------------------------------------------------
    # Sections
    # -------------------------------------------------------------------------

    def add_section(self, name: str, icon: str, color_class: str) -> OperationResult:
        logger.info("Edit: add_section name=%s", name)
        if self._disposed:
            return self._rejected("add_section")
        new = self._editing.add_section(self._sections, name, icon, color_class)
        self._swap(new, self._banners)
        section_id = new[-1].id
        logger.info("Edit OK: add_section id=%s", section_id)
        return OperationResult(True, "Section added.", {"section_id": section_id})

    def update_section(self, section_id: str, name: str, icon: str, color_class: str) -> OperationResult:
        logger.info("Edit: update_section id=%s", section_id)
        return self._apply_sections(
            "update_section",
            self._editing.update_section(self._sections, section_id, name, icon, color_class),
            "Section updated.", "Section not found.", {"section_id": section_id},
        )

    def delete_section(self, section_id: str) -> OperationResult:
        logger.info("Edit: delete_section id=%s", section_id)
        return self._apply_sections(
            "delete_section",
            self._editing.delete_section(self._sections, section_id),
            "Section deleted.", "Section not found.", {"section_id": section_id},
        )

    # -------------------------------------------------------------------------
    # Diseases
    # -------------------------------------------------------------------------

    def add_disease(self, section_id: str, name: str, description: str) -> OperationResult:
        logger.info("Edit: add_disease section=%s name=%s", section_id, name)
        new = self._editing.add_disease(self._sections, section_id, name, description)
        details = {"section_id": section_id}
        if new is not self._sections:
            details["disease_id"] = self._last_disease_id(new, section_id)
        return self._apply_sections("add_disease", new, "Disease added.", "Section not found.", details)

    def update_disease(self, section_id: str, disease_id: str, name: str, description: str) -> OperationResult:
        logger.info("Edit: update_disease section=%s disease=%s", section_id, disease_id)
        return self._apply_sections(
            "update_disease",
            self._editing.update_disease(self._sections, section_id, disease_id, name, description),
            "Disease updated.", "Disease not found.",
            {"section_id": section_id, "disease_id": disease_id},
        )

    def delete_disease(self, section_id: str, disease_id: str) -> OperationResult:
        logger.info("Edit: delete_disease section=%s disease=%s", section_id, disease_id)
        return self._apply_sections(
            "delete_disease",
            self._editing.delete_disease(self._sections, section_id, disease_id),
            "Disease deleted.", "Disease not found.",
            {"section_id": section_id, "disease_id": disease_id},
        )

    # -------------------------------------------------------------------------
    # Files
    # -------------------------------------------------------------------------

    def add_file_to_disease(self, section_id: str, disease_id: str, content: LocalContent,
                            name: str, description: str) -> OperationResult:
        """Attach locally supplied *content* to a disease.

        The content is only stored once both targets are known to exist, so a
        no-op never leaves an orphaned transient reference behind.
        """
        logger.info("Edit: add_file section=%s disease=%s file=%s", section_id, disease_id, content.name)
        details = {"section_id": section_id, "disease_id": disease_id}
        if self._disposed:
            return self._rejected("add_file")
        if self.find_disease(section_id, disease_id) is None:
            logger.info("Edit noop: add_file target_not_found section=%s disease=%s", section_id, disease_id)
            return OperationResult(False, "Disease not found.", details)

        handle = self._storage.store(content)
        attachment = FileAttachment(
            id=timestamped_id(content.name),
            name=name,
            description=description,
            type=classify_media_type(content.media_type),
            data_url=handle.url,
        )
        details["file_id"] = attachment.id
        return self._apply_sections(
            "add_file",
            self._editing.add_file_to_disease(self._sections, section_id, disease_id, attachment),
            "File added.", "Disease not found.", details,
        )

    def delete_file_from_disease(self, section_id: str, disease_id: str, file_id: str) -> OperationResult:
        logger.info("Edit: delete_file section=%s disease=%s file=%s", section_id, disease_id, file_id)
        return self._apply_sections(
            "delete_file",
            self._editing.delete_file_from_disease(self._sections, section_id, disease_id, file_id),
            "File deleted.", "File not found.",
            {"section_id": section_id, "disease_id": disease_id, "file_id": file_id},
        )

    # -------------------------------------------------------------------------
    # Banners
    # -------------------------------------------------------------------------

    def add_banner(self, content: LocalContent, title: str, description: str) -> OperationResult:
        logger.info("Edit: add_banner title=%s", title)
        if self._disposed:
            return self._rejected("add_banner")
        handle = self._storage.store(content)
        banner = Banner(
            id=timestamped_id(content.name),
            title=title,
            description=description,
            image_url=handle.url,
        )
        self._swap(self._sections, self._editing.add_banner(self._banners, banner))
        logger.info("Edit OK: add_banner id=%s", banner.id)
        return OperationResult(True, "Banner added.", {"banner_id": banner.id})

    def update_banner(self, banner_id: str, title: str, description: str,
                      image: Optional[LocalContent] = None) -> OperationResult:
        """Update banner text and, when *image* is given, replace its picture."""
        logger.info("Edit: update_banner id=%s new_image=%s", banner_id, image is not None)
        details = {"banner_id": banner_id}
        if self._disposed:
            return self._rejected("update_banner")
        if not any(b.id == banner_id for b in self._banners):
            logger.info("Edit noop: update_banner not_found id=%s", banner_id)
            return OperationResult(False, "Banner not found.", details)

        image_url = self._storage.store(image).url if image is not None else None
        new = self._editing.update_banner(self._banners, banner_id, title, description, image_url)
        self._swap(self._sections, new)
        logger.info("Edit OK: update_banner id=%s", banner_id)
        return OperationResult(True, "Banner updated.", details)

    def delete_banner(self, banner_id: str) -> OperationResult:
        logger.info("Edit: delete_banner id=%s", banner_id)
        details = {"banner_id": banner_id}
        if self._disposed:
            return self._rejected("delete_banner")
        new = self._editing.delete_banner(self._banners, banner_id)
        if new is self._banners:
            logger.info("Edit noop: delete_banner not_found id=%s", banner_id)
            return OperationResult(False, "Banner not found.", details)
        self._swap(self._sections, new)
        logger.info("Edit OK: delete_banner id=%s", banner_id)
        return OperationResult(True, "Banner deleted.", details)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _apply_sections(self, op: str, new: Sections, ok_message: str,
                        noop_message: str, details: Dict[str, Any]) -> OperationResult:
        if self._disposed:
            return self._rejected(op)
        if new is self._sections:
            logger.info("Edit noop: %s target_not_found %s", op, details)
            return OperationResult(False, noop_message, details)
        self._swap(new, self._banners)
        logger.info("Edit OK: %s %s", op, details)
        return OperationResult(True, ok_message, details)

    def _swap(self, sections: Sections, banners: Banners) -> None:
        old_urls = _file_urls(self._sections) | _banner_urls(self._banners)
        banners_changed = banners is not self._banners
        self._sections, self._banners = sections, banners
        orphaned = old_urls - _file_urls(sections) - _banner_urls(banners)
        for url in orphaned:
            if self._storage.release(url):
                logger.debug("Released orphaned content %s", url)
        if banners_changed:
            for callback in list(self._banner_listeners):
                callback(banners)

    def _rejected(self, op: str) -> OperationResult:
        logger.warning("Edit FAIL: %s store_disposed", op)
        return OperationResult(False, "Store has been disposed.", {"operation": op})

    @staticmethod
    def _last_disease_id(sections: Sections, section_id: str) -> str:
        section = next(s for s in sections if s.id == section_id)
        return section.diseases[-1].id
