from __future__ import annotations

"""Application context for one browsing session.

The AppContext owns the catalog store and the services built around it and
is passed explicitly to front-ends; there is no module-level global.  Its
lifecycle is:

1. construct with a :class:`CatalogAssembler`
2. ``await load()`` once: sections and banners are fetched concurrently and
   installed in the store, or the catalog stays empty on failure
3. synchronous edits through :attr:`store`, exports through
   :meth:`export_disease`
4. ``dispose()`` at session end: rotation timers are cancelled, transient
   content released, and a load still in flight is discarded when it lands
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, List, Optional

from patient_education.config import ConfigManager
from patient_education.core.content.assembler import CatalogAssembler
from patient_education.core.exceptions import CatalogLoadError, DocumentExportError
from patient_education.core.services import (
    AuthService,
    BannerRotationController,
    DocumentExportService,
)
from patient_education.core.store import CatalogStore

logger = logging.getLogger(__name__)

__all__ = ["AppContext"]


class AppContext:
    """Top-level session object.

    Parameters
    ----------
    assembler : CatalogAssembler
        Builds the catalog from the content origin.
    store : CatalogStore, optional
    auth_service : AuthService, optional
    export_service : DocumentExportService, optional
    """

    def __init__(
        self,
        assembler: CatalogAssembler,
        store: Optional[CatalogStore] = None,
        auth_service: Optional[AuthService] = None,
        export_service: Optional[DocumentExportService] = None,
    ) -> None:
        self._assembler = assembler
        self.store = store or CatalogStore()
        self.auth = auth_service or AuthService()
        self.exporter = export_service or DocumentExportService()

        self._is_loading = False
        self._loaded = False
        self._load_error: Optional[CatalogLoadError] = None
        self._disposed = False
        self._rotations: List[BannerRotationController] = []

        self._logger = logging.getLogger(f"{__name__}.AppContext")

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def load_error(self) -> Optional[CatalogLoadError]:
        return self._load_error

    async def load(self) -> bool:
        """Populate the store from the content origin.

        Runs at most once per context.  Returns True when the catalog was
        installed; on a load failure the store stays empty, the error is
        kept in :attr:`load_error` and False is returned.
        """
        if self._loaded or self._is_loading:
            self._logger.warning("Catalog load already attempted; ignoring")
            return False
        if self._disposed:
            return False

        self._is_loading = True
        tasks = [
            asyncio.ensure_future(self._assembler.load()),
            asyncio.ensure_future(self._assembler.load_banners()),
        ]
        try:
            sections, banners = await asyncio.gather(*tasks)
        except CatalogLoadError as e:
            self._logger.error("Failed to load app data: %s", e)
            self._load_error = e
            for task in tasks:
                task.cancel()
            return False
        finally:
            self._is_loading = False
            self._loaded = True
            if self._disposed:
                # Fetches were in flight at dispose time
                self._assembler.close()

        if self._disposed:
            self._logger.info("Context disposed during load; discarding catalog")
            return False

        self.store.replace(sections, banners)
        return True

    # -------------------------------------------------------------------------
    # Authentication
    # -------------------------------------------------------------------------

    @property
    def is_admin(self) -> bool:
        return self.auth.is_admin

    def login(self, user: str, password: str) -> bool:
        return self.auth.login(user, password)

    def logout(self) -> None:
        self.auth.logout()

    # -------------------------------------------------------------------------
    # Export
    # -------------------------------------------------------------------------

    def export_disease(self, section_id: str, disease_id: str,
                       destination_dir: str | Path) -> Optional[Path]:
        """Export one disease of the current snapshot.

        Returns None when the disease does not exist.

        Raises
        ------
        DocumentExportError
            When writing the document fails.
        """
        disease = self.store.find_disease(section_id, disease_id)
        if disease is None:
            self._logger.warning("Export skipped: disease not found section=%s disease=%s",
                                 section_id, disease_id)
            return None
        try:
            return self.exporter.export(disease, destination_dir)
        except DocumentExportError:
            self._logger.error("Export of %s/%s failed", section_id, disease_id)
            raise

    # -------------------------------------------------------------------------
    # Banner rotation
    # -------------------------------------------------------------------------

    def create_banner_rotation(self, scheduler: Any, on_change=None,
                               interval: Optional[float] = None) -> BannerRotationController:
        """Create a rotation controller over the current banners.

        The controller follows the store: adding or deleting a banner
        re-arms it with the new count.  The context disposes the controller
        together with itself.
        """
        if interval is None:
            interval = float(ConfigManager().get_rotation_settings().get("interval_seconds", 5))
        controller = BannerRotationController(
            len(self.store.banners), scheduler, interval=interval, on_change=on_change,
        )
        self._rotations.append(controller)
        self.store.add_banner_listener(lambda banners: controller.set_banner_count(len(banners)))
        return controller

    # -------------------------------------------------------------------------
    # Teardown
    # -------------------------------------------------------------------------

    @property
    def disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        for controller in self._rotations:
            controller.dispose()
        self._rotations.clear()
        self.auth.logout()
        self.store.dispose()
        if not self._is_loading:
            self._assembler.close()
        self._logger.info("AppContext disposed")
