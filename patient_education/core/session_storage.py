from __future__ import annotations

"""Session-scoped storage for locally attached content.

Administrators attach files and banner images that never reach the content
origin.  Each one is written under a single per-session directory and
handed out as a :class:`TransientContent` handle whose ``url`` is stored on
the owning entity.  The handle must be released when that entity is deleted
or its reference replaced; :meth:`SessionStorage.cleanup` removes whatever
is left at the end of the session.

Public API:
- SessionStorage.store(content) -> TransientContent
- SessionStorage.owns(url) -> bool
- SessionStorage.release(url) -> bool
- SessionStorage.cleanup() -> None
"""

import logging
import os
import re
import shutil
import tempfile
import uuid
from pathlib import Path
from typing import Dict, Optional

from patient_education.core.models import LocalContent

__all__ = ["SessionStorage", "TransientContent"]

logger = logging.getLogger(__name__)


class TransientContent:
    """Handle on one locally stored content item.

    The handle is the only owner of the file behind ``url``.  ``release()``
    deletes it and is safe to call more than once.
    """

    def __init__(self, path: Path, media_type: str) -> None:
        self._path = path
        self.media_type = media_type
        self.url = path.as_uri()
        self._released = False

    @property
    def path(self) -> Path:
        return self._path

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        if self._released:
            return
        self._released = True
        try:
            self._path.unlink()
        except FileNotFoundError:
            pass

    def __repr__(self) -> str:
        state = "released" if self._released else "live"
        return f"TransientContent({self.url!r}, {state})"


class SessionStorage:
    """Session-scoped temp storage rooted in a unique base directory.

    The base directory is created under the OS temp folder with a unique
    name so multiple app instances do not collide.
    """

    def __init__(self, base_dir: Optional[Path] = None) -> None:
        if base_dir is None:
            root = Path(tempfile.gettempdir()) / "patient_education"
            uniq = f"session_{os.getpid()}_{uuid.uuid4().hex[:8]}"
            base_dir = root / uniq
        self._base_dir = Path(base_dir)
        self._handles: Dict[str, TransientContent] = {}

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def store(self, content: LocalContent) -> TransientContent:
        """Write *content* to the session directory and return its handle."""
        self._base_dir.mkdir(parents=True, exist_ok=True)
        safe = re.sub(r"[^\w.\-]", "_", content.name) or "content"
        path = self._base_dir / f"{uuid.uuid4().hex[:12]}_{safe}"
        path.write_bytes(content.data)
        handle = TransientContent(path, content.media_type)
        self._handles[handle.url] = handle
        logger.debug("Stored transient content %s (%d bytes)", handle.url, len(content.data))
        return handle

    def owns(self, url: str) -> bool:
        return url in self._handles

    def release(self, url: str) -> bool:
        """Release the handle behind *url*; return False for foreign URLs."""
        handle = self._handles.pop(url, None)
        if handle is None:
            return False
        handle.release()
        logger.debug("Released transient content %s", url)
        return True

    def live_count(self) -> int:
        return len(self._handles)

    def cleanup(self) -> None:
        """Release every handle and delete the session directory tree."""
        for url in list(self._handles):
            self.release(url)
        if self._base_dir.exists():
            shutil.rmtree(self._base_dir, ignore_errors=True)
