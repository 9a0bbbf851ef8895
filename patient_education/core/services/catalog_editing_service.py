from __future__ import annotations

"""Pure transitions on the catalog tree and the banner list.

Every method takes the current collection and returns the next one.  Nodes
are never modified: only the path from the root to the edited node is
rebuilt, every other section, disease and file is reused by reference.  When
the target id is absent the input tuple itself is returned, so callers can
detect a no-op with an identity check.

Examples
--------
Basic usage:

    service = CatalogEditingService()
    updated = service.update_disease(sections, "heart", "angina", "Angina", "...")
    if updated is sections:
        print("nothing to update")

"""

from dataclasses import replace
from typing import Callable, Optional, Tuple, TypeVar

from patient_education.core.models import Banner, Disease, FileAttachment, Section
from patient_education.core.utils import derive_entity_id

__all__ = ["CatalogEditingService", "Sections", "Banners"]


T = TypeVar("T")
Sections = Tuple[Section, ...]
Banners = Tuple[Banner, ...]


def _replace_where(items: Tuple[T, ...], item_id: str,
                   fn: Callable[[T], T]) -> Tuple[T, ...]:
    """Apply *fn* to every item with *item_id*; return *items* when none match."""
    changed = False
    out = []
    for item in items:
        if item.id == item_id:  # type: ignore[attr-defined]
            new_item = fn(item)
            changed = changed or new_item is not item
            out.append(new_item)
        else:
            out.append(item)
    return tuple(out) if changed else items


def _remove_where(items: Tuple[T, ...], item_id: str) -> Tuple[T, ...]:
    kept = tuple(item for item in items if item.id != item_id)  # type: ignore[attr-defined]
    return kept if len(kept) != len(items) else items


class CatalogEditingService:
    """Encapsulates the add/update/delete transitions of the catalog.

    Design principles:
    - No UI dependencies, no I/O, no exceptions for absent targets.
    - Duplicate ids are not guarded: update and delete act on every node
      carrying the id.
    """

    # -------------------------------------------------------------------------
    # Sections
    # -------------------------------------------------------------------------

    def add_section(self, sections: Sections, name: str, icon: str, color_class: str) -> Sections:
        section = Section(id=derive_entity_id(name), name=name, icon=icon, color_class=color_class)
        return sections + (section,)

    def update_section(self, sections: Sections, section_id: str,
                       name: str, icon: str, color_class: str) -> Sections:
        return _replace_where(
            sections, section_id,
            lambda s: replace(s, name=name, icon=icon, color_class=color_class),
        )

    def delete_section(self, sections: Sections, section_id: str) -> Sections:
        return _remove_where(sections, section_id)

    # -------------------------------------------------------------------------
    # Diseases
    # -------------------------------------------------------------------------

    def add_disease(self, sections: Sections, section_id: str, name: str, description: str) -> Sections:
        disease = Disease(id=derive_entity_id(name), name=name, description=description)
        return _replace_where(
            sections, section_id,
            lambda s: replace(s, diseases=s.diseases + (disease,)),
        )

    def update_disease(self, sections: Sections, section_id: str, disease_id: str,
                       name: str, description: str) -> Sections:
        return self._edit_diseases(
            sections, section_id,
            lambda diseases: _replace_where(
                diseases, disease_id,
                lambda d: replace(d, name=name, description=description),
            ),
        )

    def delete_disease(self, sections: Sections, section_id: str, disease_id: str) -> Sections:
        return self._edit_diseases(
            sections, section_id,
            lambda diseases: _remove_where(diseases, disease_id),
        )

    # -------------------------------------------------------------------------
    # Files
    # -------------------------------------------------------------------------

    def add_file_to_disease(self, sections: Sections, section_id: str, disease_id: str,
                            attachment: FileAttachment) -> Sections:
        return self._edit_files(
            sections, section_id, disease_id,
            lambda files: files + (attachment,),
        )

    def delete_file_from_disease(self, sections: Sections, section_id: str,
                                 disease_id: str, file_id: str) -> Sections:
        return self._edit_files(
            sections, section_id, disease_id,
            lambda files: _remove_where(files, file_id),
        )

    # -------------------------------------------------------------------------
    # Banners
    # -------------------------------------------------------------------------

    def add_banner(self, banners: Banners, banner: Banner) -> Banners:
        return banners + (banner,)

    def update_banner(self, banners: Banners, banner_id: str, title: str, description: str,
                      image_url: Optional[str] = None) -> Banners:
        def _update(b: Banner) -> Banner:
            if image_url is None:
                return replace(b, title=title, description=description)
            return replace(b, title=title, description=description, image_url=image_url)

        return _replace_where(banners, banner_id, _update)

    def delete_banner(self, banners: Banners, banner_id: str) -> Banners:
        return _remove_where(banners, banner_id)

    # -------------------------------------------------------------------------
    # Path copy helpers
    # -------------------------------------------------------------------------

    def _edit_diseases(self, sections: Sections, section_id: str,
                       fn: Callable[[Tuple[Disease, ...]], Tuple[Disease, ...]]) -> Sections:
        def _section(s: Section) -> Section:
            diseases = fn(s.diseases)
            return s if diseases is s.diseases else replace(s, diseases=diseases)

        return _replace_where(sections, section_id, _section)

    def _edit_files(self, sections: Sections, section_id: str, disease_id: str,
                    fn: Callable[[Tuple[FileAttachment, ...]], Tuple[FileAttachment, ...]]) -> Sections:
        def _disease(d: Disease) -> Disease:
            files = fn(d.files)
            return d if files is d.files else replace(d, files=files)

        return self._edit_diseases(
            sections, section_id,
            lambda diseases: _replace_where(diseases, disease_id, _disease),
        )
