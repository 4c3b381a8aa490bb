"""Legajos - Case ZIP bundles
Packages a case dossier, its spreadsheet row and every stored file into a ZIP,
and nests several case bundles into one master archive.
"""

import io
import zipfile
from datetime import datetime
from typing import Iterable

from loguru import logger

from core.database.models import Case, CaseMedia
from core.formatting import case_file_base_name, full_name
from core.reports import generate_case_pdf
from core.security import guess_extension, sanitize_archive_name
from core.spreadsheet import build_cases_workbook
from core.storage import MediaStorage, get_storage


class EntryNames:
    """Hands out unique archive entry names, suffixing '_1', '_2'... on collision."""

    def __init__(self):
        self._used: set[str] = set()

    def reserve(self, entry_path: str) -> str:
        directory, _, file_name = entry_path.rpartition("/")
        dot = file_name.rfind(".")
        base, ext = (file_name[:dot], file_name[dot:]) if dot > 0 else (file_name, "")

        candidate = entry_path
        suffix = 1
        while candidate in self._used:
            next_name = f"{base}_{suffix}{ext}"
            candidate = f"{directory}/{next_name}" if directory else next_name
            suffix += 1

        self._used.add(candidate)
        return candidate


class CaseArchiveBuilder:
    """Builds the ZIP bundle for one case."""

    def __init__(self, storage: MediaStorage | None = None):
        self.storage = storage or get_storage()

    def media_entry_name(self, media: CaseMedia, folder: str, counter: int) -> str:
        extension = guess_extension(media.original_name, media.mime_type)
        original = sanitize_archive_name(media.original_name) if media.original_name else ""
        return original or f"{folder.lower()}_{counter:03d}{extension}"

    def build(self, case: Case) -> tuple[bytes, str]:
        """Returns (zip bytes, file name)."""
        name = full_name(case.person)
        root = case_file_base_name(name)
        names = EntryNames()

        pdf_content, pdf_name = generate_case_pdf(case, self.storage)
        excel_content = build_cases_workbook([case])

        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
            zf.writestr(names.reserve(f"{root}/{pdf_name}"), pdf_content)
            zf.writestr(names.reserve(f"{root}/{root}.xlsx"), excel_content)

            for folder, items in (("FOTOS", case.photos), ("DOCUMENTOS", case.documents)):
                counter = 1
                for media in items:
                    content = self.storage.read(media.file_path)
                    if content is None:
                        continue
                    entry = self.media_entry_name(media, folder, counter)
                    zf.writestr(names.reserve(f"{root}/{folder}/{entry}"), content)
                    counter += 1

        return buffer.getvalue(), f"{root}.zip"


def build_case_zip(case: Case, storage: MediaStorage | None = None) -> tuple[bytes, str]:
    content, file_name = CaseArchiveBuilder(storage).build(case)
    logger.info(f"Generated ZIP bundle {file_name} for case {case.id} ({len(content)} bytes)")
    return content, file_name


def bundle_file_name(estado: str | None, now: datetime | None = None) -> str:
    timestamp = (now or datetime.utcnow()).strftime("%Y-%m-%dT%H-%M-%S")
    return f"CASOS_{estado or 'TODOS'}_{timestamp}.zip"


def build_cases_bundle(
    cases: Iterable[Case],
    estado: str | None = None,
    storage: MediaStorage | None = None,
) -> tuple[bytes, str]:
    """Nest one ZIP per case inside a master archive.

    A case whose bundle fails is logged and left out.
    """
    builder = CaseArchiveBuilder(storage)
    names = EntryNames()
    included = 0

    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
        for case in cases:
            try:
                content, file_name = builder.build(case)
            except Exception as e:
                logger.error(f"Skipping case {case.id} in bundle: {e}")
                continue
            zf.writestr(names.reserve(file_name), content)
            included += 1

    file_name = bundle_file_name(estado)
    logger.info(f"Generated bundle {file_name} with {included} cases")
    return buffer.getvalue(), file_name
