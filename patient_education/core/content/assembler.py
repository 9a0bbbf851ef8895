from __future__ import annotations

"""Catalog assembly from separately hosted fragments.

The assembler builds the three-level catalog in one pass::

    sections.json
      └─ {section}/diseases.json                  (one per section, concurrent)
           ├─ {section}/{disease}/manifest.json   (one per disease, concurrent)
           └─ {section}/{disease}/description.txt

Each level fans out with ``asyncio.gather`` and a parent node is only built
once every child it depends on has resolved.  Any failure aborts the load
with :class:`CatalogLoadError`; a partial catalog is never returned.
"""

import asyncio
import logging
from typing import Any, Dict, List, Sequence, Tuple

from patient_education.core.content.fetcher import ContentFetcher
from patient_education.core.exceptions import CatalogLoadError, ContentFetchError
from patient_education.core.models import Banner, Disease, FileAttachment, Section
from patient_education.core.utils import classify_declared_type

__all__ = ["CatalogAssembler"]

logger = logging.getLogger(__name__)

SECTIONS_INDEX = "sections.json"
BANNERS_INDEX = "banners.json"


class _MalformedFragment(Exception):
    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path


def _require(mapping: Any, key: str, path: str) -> Any:
    if not isinstance(mapping, dict):
        raise _MalformedFragment(path, f"expected an object, got {type(mapping).__name__}")
    if key not in mapping:
        raise _MalformedFragment(path, f"missing key '{key}'")
    return mapping[key]


def _require_list(value: Any, path: str) -> List[Any]:
    if not isinstance(value, list):
        raise _MalformedFragment(path, f"expected an array, got {type(value).__name__}")
    return value


class CatalogAssembler:
    """Builds the immutable ``Section`` tree and the banner list.

    Parameters
    ----------
    fetcher : ContentFetcher
        Origin the fragments are read from.
    """

    def __init__(self, fetcher: ContentFetcher) -> None:
        self._fetcher = fetcher

    def close(self) -> None:
        self._fetcher.close()

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    async def load(self) -> Tuple[Section, ...]:
        """Fetch and assemble every section.

        Raises
        ------
        CatalogLoadError
            If any fragment fails to load or has an unexpected shape.
        """
        logger.info("Catalog load: starting")
        try:
            sections = await self._load_sections()
        except ContentFetchError as e:
            logger.error("Catalog load failed: %s", e)
            raise CatalogLoadError(f"Could not fetch catalog fragment: {e}", cause=e) from e
        except _MalformedFragment as e:
            logger.error("Catalog load failed: malformed fragment %s", e)
            raise CatalogLoadError(f"Malformed catalog fragment {e}", cause=e) from e

        disease_count = sum(len(s.diseases) for s in sections)
        logger.info("Catalog load OK: sections=%d diseases=%d", len(sections), disease_count)
        return sections

    async def load_banners(self) -> Tuple[Banner, ...]:
        """Fetch the banner list.

        Raises
        ------
        CatalogLoadError
            Same policy as :meth:`load`.
        """
        try:
            raw = _require_list(await self._fetcher.fetch_json(BANNERS_INDEX), BANNERS_INDEX)
            banners = tuple(
                Banner(
                    id=str(_require(entry, "id", BANNERS_INDEX)),
                    title=_require(entry, "title", BANNERS_INDEX),
                    description=entry.get("description", ""),
                    image_url=_require(entry, "imageUrl", BANNERS_INDEX),
                )
                for entry in raw
            )
        except ContentFetchError as e:
            logger.error("Banner load failed: %s", e)
            raise CatalogLoadError(f"Could not fetch banners: {e}", cause=e) from e
        except _MalformedFragment as e:
            logger.error("Banner load failed: malformed fragment %s", e)
            raise CatalogLoadError(f"Malformed banner fragment {e}", cause=e) from e

        logger.info("Banner load OK: banners=%d", len(banners))
        return banners

    # -------------------------------------------------------------------------
    # Levels
    # -------------------------------------------------------------------------

    async def _load_sections(self) -> Tuple[Section, ...]:
        index = _require_list(await self._fetcher.fetch_json(SECTIONS_INDEX), SECTIONS_INDEX)
        return tuple(await asyncio.gather(*(self._load_section(meta) for meta in index)))

    async def _load_section(self, meta: Dict[str, Any]) -> Section:
        section_id = str(_require(meta, "id", SECTIONS_INDEX))
        path = f"{section_id}/diseases.json"
        disease_ids = _require_list(await self._fetcher.fetch_json(path), path)

        diseases = await asyncio.gather(
            *(self._load_disease(section_id, str(disease_id)) for disease_id in disease_ids)
        )
        logger.debug("Section assembled: %s (%d diseases)", section_id, len(diseases))
        return Section(
            id=section_id,
            name=_require(meta, "name", SECTIONS_INDEX),
            icon=meta.get("icon", ""),
            color_class=meta.get("colorClass", ""),
            diseases=tuple(diseases),
        )

    async def _load_disease(self, section_id: str, disease_id: str) -> Disease:
        base = f"{section_id}/{disease_id}"
        manifest_path = f"{base}/manifest.json"
        manifest, description = await asyncio.gather(
            self._fetcher.fetch_json(manifest_path),
            self._fetcher.fetch_text(f"{base}/description.txt"),
        )
        name = _require(manifest, "name", manifest_path)
        entries = manifest.get("files") or []
        files = self._build_files(section_id, disease_id, _require_list(entries, manifest_path), manifest_path)
        return Disease(id=disease_id, name=name, description=description, files=files)

    def _build_files(self, section_id: str, disease_id: str,
                     entries: Sequence[Any], manifest_path: str) -> Tuple[FileAttachment, ...]:
        files = []
        for index, entry in enumerate(entries):
            rel_path = _require(entry, "path", manifest_path)
            declared = entry.get("type")
            if declared is not None and not isinstance(declared, str):
                raise _MalformedFragment(manifest_path, f"file {index}: type must be a string")
            files.append(FileAttachment(
                id=f"{disease_id}-{index}",
                name=_require(entry, "name", manifest_path),
                description=entry.get("description") or "",
                type=classify_declared_type(declared),
                data_url=self._fetcher.resolve(f"{section_id}/{disease_id}/{rel_path}"),
            ))
        return tuple(files)
