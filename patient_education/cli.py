# -*- coding: utf-8 -*-
"""Command-line front-end.

Lists the catalog of a content root or exports one disease to a Word file.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from patient_education.config import ConfigManager
from patient_education.core.content import CatalogAssembler, create_fetcher
from patient_education.core.context import AppContext
from patient_education.core.exceptions import DocumentExportError
from patient_education.logging_config import setup_logging
from patient_education.version import get_app_version

logger = logging.getLogger(__name__)

__all__ = ["main", "build_parser"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="patient-education",
        description="Browse and export the patient-education catalog",
    )
    parser.add_argument("--version", action="version", version=get_app_version())
    parser.add_argument(
        "--content-root",
        default=None,
        help="Content origin: http(s) base URL or directory (default: from config)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="Print the sections, diseases and attachments")

    export = sub.add_parser("export", help="Export a disease description to .docx")
    export.add_argument("section_id")
    export.add_argument("disease_id")
    export.add_argument("--output", "-o", default=".", help="Destination directory (default: .)")
    return parser


def _make_context(content_root: Optional[str]) -> AppContext:
    settings = ConfigManager().get_content_settings()
    fetcher = create_fetcher(
        content_root or settings.get("content_root", "./data"),
        timeout=float(settings.get("timeout_seconds", 10)),
        user_agent=settings.get("user_agent", "PatientEducation-Catalog/1.0"),
    )
    return AppContext(CatalogAssembler(fetcher))


def _print_catalog(context: AppContext) -> None:
    for section in context.store.sections:
        print(f"{section.id}  {section.name}")
        for disease in section.diseases:
            print(f"  {disease.id}  {disease.name}")
            for f in disease.files:
                print(f"    [{f.type.value}] {f.name}  {f.data_url}")
    for banner in context.store.banners:
        print(f"banner {banner.id}  {banner.title}")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging()

    context = _make_context(args.content_root)
    try:
        if not asyncio.run(context.load()):
            print(f"Could not load catalog: {context.load_error}", file=sys.stderr)
            return 1

        if args.command == "list":
            _print_catalog(context)
            return 0

        try:
            path = context.export_disease(args.section_id, args.disease_id, args.output)
        except DocumentExportError as e:
            print(f"Export failed: {e}", file=sys.stderr)
            return 1
        if path is None:
            print(f"Unknown disease {args.section_id}/{args.disease_id}", file=sys.stderr)
            return 1
        print(path)
        return 0
    finally:
        context.dispose()


if __name__ == "__main__":
    sys.exit(main())
