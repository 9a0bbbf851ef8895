from __future__ import annotations

"""Disease description export to Word documents.

Three layers, usable on their own:

- :func:`to_document` turns a disease name and its description markup into a
  :class:`DocumentModel` (paragraphs of text runs).  Pure, never fails.
- :class:`DocxDocumentWriter` serializes a model with ``python-docx``.
- :class:`DocumentExportService` names the output file, writes it atomically
  and reports failures as :class:`DocumentExportError`.

Description markup
------------------
Each line of the description is one paragraph.  ``**text**`` marks bold
text; an unmatched ``**`` is kept as literal characters.
"""

import io
import logging
import os
import re
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from docx import Document
from docx.enum.style import WD_STYLE_TYPE
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.oxml.ns import qn
from docx.shared import Pt, RGBColor, Twips
from lxml import etree as ET

from patient_education.config import ConfigManager
from patient_education.core.exceptions import DocumentExportError
from patient_education.core.models import Disease
from patient_education.core.utils import safe_filename

__all__ = [
    "TextRun",
    "DocumentParagraph",
    "DocumentModel",
    "to_document",
    "parse_markup_line",
    "DocxDocumentWriter",
    "DocumentExportService",
]

logger = logging.getLogger(__name__)

_BOLD_PATTERN = re.compile(r"\*\*(.*?)\*\*")

ALIGN_CENTER = "center"
ALIGN_JUSTIFIED = "justified"
HEADER_STYLE_ID = "headerStyle"

_DEFAULT_SETTINGS: Dict[str, Any] = {
    "system_title": "Patient Education System",
    "creator": "Patient Education System",
    "description_template": "Educational material for {name}",
    "file_extension": ".docx",
    "margin_twips": 720,
    "header_style": {"name": "Header Style", "size_pt": 10, "color": "888888"},
}


@dataclass(frozen=True)
class TextRun:
    text: str
    bold: bool = False
    rtl: bool = False


@dataclass(frozen=True)
class DocumentParagraph:
    """One paragraph of the export.

    ``style`` names a paragraph style from the model (``headerStyle``);
    ``heading_level`` maps to the built-in "Heading N" styles.
    """
    runs: Tuple[TextRun, ...]
    alignment: Optional[str] = None
    style: Optional[str] = None
    heading_level: Optional[int] = None
    bidirectional: bool = False


@dataclass(frozen=True)
class DocumentModel:
    """Export model; ``header_style`` holds sorted ``(key, value)`` pairs."""
    title: str
    creator: str
    description: str
    paragraphs: Tuple[DocumentParagraph, ...]
    margin_twips: int = 720
    header_style: Tuple[Tuple[str, Any], ...] = ()

    @property
    def body(self) -> Tuple[DocumentParagraph, ...]:
        """Paragraphs generated from the description (after title, heading, spacer)."""
        return self.paragraphs[3:]


def parse_markup_line(line: str) -> Tuple[TextRun, ...]:
    """Split one description line into literal and bold runs.

    Examples:
        >>> [r.text for r in parse_markup_line("plain **bold** plain")]
        ['plain ', 'bold', ' plain']
    """
    runs: List[TextRun] = []
    last_index = 0
    for match in _BOLD_PATTERN.finditer(line):
        if match.start() > last_index:
            runs.append(TextRun(line[last_index:match.start()], rtl=True))
        runs.append(TextRun(match.group(1), bold=True, rtl=True))
        last_index = match.end()

    if last_index < len(line):
        runs.append(TextRun(line[last_index:], rtl=True))

    if not runs:
        # Empty line: keep the paragraph
        runs.append(TextRun("", rtl=True))
    return tuple(runs)


def to_document(disease_name: str, description: str,
                settings: Optional[Dict[str, Any]] = None) -> DocumentModel:
    """Build the export model for one disease.

    Order is fixed: title, heading, spacer, then one justified paragraph per
    description line.
    """
    cfg = dict(_DEFAULT_SETTINGS)
    cfg.update(settings or {})

    body = tuple(
        DocumentParagraph(parse_markup_line(line.rstrip("\r")), alignment=ALIGN_JUSTIFIED)
        for line in description.split("\n")
    )
    header = (
        DocumentParagraph((TextRun(cfg["system_title"]),), alignment=ALIGN_CENTER, style=HEADER_STYLE_ID),
        DocumentParagraph((TextRun(disease_name),), alignment=ALIGN_CENTER, heading_level=1, bidirectional=True),
        DocumentParagraph((TextRun(""),)),
    )
    return DocumentModel(
        title=disease_name,
        creator=cfg["creator"],
        description=cfg["description_template"].format(name=disease_name),
        paragraphs=header + body,
        margin_twips=int(cfg["margin_twips"]),
        header_style=tuple(sorted(cfg["header_style"].items())),
    )


class DocxDocumentWriter:
    """Serializes a :class:`DocumentModel` with python-docx."""

    _ALIGNMENTS = {
        ALIGN_CENTER: WD_ALIGN_PARAGRAPH.CENTER,
        ALIGN_JUSTIFIED: WD_ALIGN_PARAGRAPH.JUSTIFY,
    }

    def build(self, model: DocumentModel):
        """Return a populated ``docx.Document``."""
        doc = Document()
        props = doc.core_properties
        props.author = model.creator
        props.title = model.title
        props.comments = model.description

        margin = Twips(model.margin_twips)
        for section in doc.sections:
            section.top_margin = section.bottom_margin = margin
            section.left_margin = section.right_margin = margin

        header_style_name = self._add_header_style(doc, dict(model.header_style))

        for para in model.paragraphs:
            if para.heading_level is not None:
                p = doc.add_paragraph(style=f"Heading {para.heading_level}")
            elif para.style == HEADER_STYLE_ID:
                p = doc.add_paragraph(style=header_style_name)
            else:
                p = doc.add_paragraph()

            if para.bidirectional:
                # w:bidi precedes w:jc in CT_PPr, so add it before alignment
                p_pr = p._p.get_or_add_pPr()
                ET.SubElement(p_pr, qn("w:bidi"))
            if para.alignment is not None:
                p.alignment = self._ALIGNMENTS[para.alignment]

            for run in para.runs:
                r = p.add_run(run.text)
                if run.bold:
                    r.bold = True
                if run.rtl:
                    r.font.rtl = True
        return doc

    def write(self, model: DocumentModel, target: Path) -> None:
        self.build(model).save(str(target))

    def to_bytes(self, model: DocumentModel) -> bytes:
        buf = io.BytesIO()
        self.build(model).save(buf)
        return buf.getvalue()

    @staticmethod
    def _add_header_style(doc, spec: Dict[str, Any]) -> str:
        name = spec.get("name", "Header Style")
        style = doc.styles.add_style(name, WD_STYLE_TYPE.PARAGRAPH)
        style.base_style = doc.styles["Normal"]
        style.next_paragraph_style = doc.styles["Normal"]
        style.font.size = Pt(float(spec.get("size_pt", 10)))
        style.font.color.rgb = RGBColor.from_string(str(spec.get("color", "888888")).upper())
        return name


class DocumentExportService:
    """Exports disease descriptions as ``.docx`` files.

    Parameters
    ----------
    settings : dict, optional
        Export settings; defaults to ``ConfigManager().get_export_settings()``.
    writer : DocxDocumentWriter, optional
        Serializer, injectable for tests.
    """

    def __init__(self, settings: Optional[Dict[str, Any]] = None,
                 writer: Optional[DocxDocumentWriter] = None) -> None:
        if settings is None:
            settings = ConfigManager().get_export_settings()
        self._settings = dict(_DEFAULT_SETTINGS)
        self._settings.update(settings)
        self._writer = writer or DocxDocumentWriter()

    def filename_for(self, disease: Disease) -> str:
        return safe_filename(disease.name, self._settings["file_extension"])

    def build_model(self, disease: Disease) -> DocumentModel:
        return to_document(disease.name, disease.description, self._settings)

    def render_bytes(self, disease: Disease) -> bytes:
        """Return the serialized document; raises DocumentExportError."""
        filename = self.filename_for(disease)
        try:
            return self._writer.to_bytes(self.build_model(disease))
        except Exception as e:
            logger.error("Export failed for %s: %s", filename, e)
            raise DocumentExportError(f"Could not generate document: {e}", filename=filename, cause=e) from e

    def export(self, disease: Disease, destination_dir: str | Path) -> Path:
        """Write the document for *disease* into *destination_dir*.

        The file is written to a temporary name and moved into place, so a
        failure never leaves a partial document behind.  No retry.

        Raises
        ------
        DocumentExportError
            If serialization or writing fails.
        """
        destination = Path(destination_dir)
        filename = self.filename_for(disease)
        target = destination / filename
        logger.info("Export: disease=%s target=%s", disease.id, target)

        tmp_path: Optional[Path] = None
        try:
            model = self.build_model(disease)
            destination.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=".export_", suffix=".tmp", dir=str(destination))
            os.close(fd)
            tmp_path = Path(tmp_name)
            self._writer.write(model, tmp_path)
            os.replace(tmp_path, target)
            tmp_path = None
        except Exception as e:
            logger.error("Export failed for %s: %s", filename, e)
            raise DocumentExportError(f"Could not write document: {e}", filename=filename, cause=e) from e
        finally:
            if tmp_path is not None and tmp_path.exists():
                tmp_path.unlink()

        logger.info("Export OK: %s", target)
        return target
