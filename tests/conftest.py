"""Test configuration and fixtures for the patient-education toolkit.

This module provides shared fixtures and fakes: an in-memory content origin,
a sample catalog tree and an isolated session storage.  All test files
should use the fixtures defined here for consistency.
"""

import asyncio
import copy
import json
import logging
import shutil
import sys
import tempfile
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from patient_education.config import ConfigManager
from patient_education.core.content.fetcher import ContentFetcher
from patient_education.core.exceptions import ContentFetchError
from patient_education.core.models import Banner, Disease, FileAttachment, FileType, Section
from patient_education.core.session_storage import SessionStorage

# Configure test logging
logging.basicConfig(
    level=logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


class FakeFetcher(ContentFetcher):
    """In-memory content origin.

    ``fragments`` maps origin-relative paths to JSON-compatible values or
    text.  Paths listed in ``failing`` raise ContentFetchError.  Every fetch
    yields to the event loop so concurrent fan-out is observable through
    ``max_in_flight``.
    """

    def __init__(self, fragments: Dict[str, Any], failing: Iterable[str] = (),
                 delay: float = 0.0) -> None:
        self.fragments = fragments
        self.failing = set(failing)
        self.delay = delay
        self.requested = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.closed = False

    def resolve(self, path: str) -> str:
        return f"./data/{path}"

    async def _get(self, path: str) -> Any:
        self.requested.append(path)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            if path in self.failing:
                raise ContentFetchError("HTTP 500", path=path)
            if path not in self.fragments:
                raise ContentFetchError("HTTP 404", path=path)
            return copy.deepcopy(self.fragments[path])
        finally:
            self.in_flight -= 1

    async def fetch_json(self, path: str) -> Any:
        return await self._get(path)

    async def fetch_text(self, path: str) -> str:
        return await self._get(path)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def origin_fragments() -> Dict[str, Any]:
    """A small origin: two sections, three diseases, banners."""
    return {
        "sections.json": [
            {"id": "heart", "name": "Heart", "icon": "heart-icon", "colorClass": "bg-rose-100"},
            {"id": "lungs", "name": "Lungs", "icon": "lung-icon", "colorClass": "bg-sky-100"},
        ],
        "heart/diseases.json": ["angina", "arrhythmia"],
        "lungs/diseases.json": ["asthma"],
        "heart/angina/manifest.json": {
            "name": "Angina",
            "files": [
                {"path": "diet.pdf", "name": "Diet", "description": "Diet sheet", "type": "PDF"},
                {"path": "chest.png", "name": "Chest", "description": "", "type": "IMAGE"},
            ],
        },
        "heart/angina/description.txt": "**Chest pain** on effort\nRest helps",
        "heart/arrhythmia/manifest.json": {"name": "Arrhythmia", "files": []},
        "heart/arrhythmia/description.txt": "Irregular beat",
        "lungs/asthma/manifest.json": {
            "name": "Asthma",
            "files": [
                {"path": "inhaler.mp3", "name": "Inhaler guide", "description": "Audio", "type": "audio/mpeg"},
            ],
        },
        "lungs/asthma/description.txt": "Use your inhaler",
        "banners.json": [
            {"id": "b1", "title": "Flu shots", "description": "Now available", "imageUrl": "./banners/flu.jpg"},
            {"id": "b2", "title": "Open day", "description": "", "imageUrl": "./banners/open.jpg"},
        ],
    }


@pytest.fixture
def fake_fetcher_factory(origin_fragments):
    def factory(failing: Iterable[str] = (), delay: float = 0.0,
                fragments: Optional[Dict[str, Any]] = None) -> FakeFetcher:
        return FakeFetcher(fragments if fragments is not None else origin_fragments, failing, delay)
    return factory


@pytest.fixture
def sample_sections():
    """Catalog tree built directly, without the assembler."""
    diet = FileAttachment("angina-0", "Diet", "Diet sheet", FileType.PDF, "./data/heart/angina/diet.pdf")
    angina = Disease("angina", "Angina", "**Chest pain**", (diet,))
    arrhythmia = Disease("arrhythmia", "Arrhythmia", "Irregular beat")
    asthma = Disease("asthma", "Asthma", "Use your inhaler")
    return (
        Section("heart", "Heart", "heart-icon", "bg-rose-100", (angina, arrhythmia)),
        Section("lungs", "Lungs", "lung-icon", "bg-sky-100", (asthma,)),
    )


@pytest.fixture
def sample_banners():
    return (
        Banner("b1", "Flu shots", "Now available", "./banners/flu.jpg"),
        Banner("b2", "Open day", "", "./banners/open.jpg"),
    )


@pytest.fixture
def temp_dir():
    """Creates a temporary directory for test operations."""
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def session_storage(temp_dir):
    storage = SessionStorage(temp_dir / "session")
    yield storage
    storage.cleanup()


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep user overrides out of tests and reset the config singleton."""
    monkeypatch.setenv("PATIENT_EDUCATION_CONFIG_DIR", str(tmp_path / "user_config"))
    ConfigManager.reset()
    yield
    ConfigManager.reset()


@pytest.fixture
def local_origin(temp_dir, origin_fragments):
    """Writes ``origin_fragments`` to disk and returns the content root."""
    root = temp_dir / "origin"
    for rel_path, value in origin_fragments.items():
        target = root / rel_path
        target.parent.mkdir(parents=True, exist_ok=True)
        if rel_path.endswith(".json"):
            target.write_text(json.dumps(value), encoding="utf-8")
        else:
            target.write_text(value, encoding="utf-8")
    return root
