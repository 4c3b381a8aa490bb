"""Legajos - Case dossier PDF
Renders a single case, its person and primary photo into an A4 dossier.
"""

import io
from typing import Any
from xml.sax.saxutils import escape

from loguru import logger
from PIL import Image as PILImage, UnidentifiedImageError
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import (
    HRFlowable,
    Image,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from core.database.models import Case
from core.formatting import (
    EMPTY,
    additional_info_lines,
    case_file_base_name,
    compute_age,
    enum_value,
    estado_label,
    format_date,
    format_datetime,
    format_enum,
    full_name,
    person_emails,
    person_networks,
    person_phones,
    reward_summary,
    summarize_addresses,
)
from core.storage import MediaStorage, get_storage

MARGIN = 50
PHOTO_MAX_WIDTH = 200
PHOTO_MAX_HEIGHT = 250
WATERMARK_TEXT = "CONFIDENCIAL"


def draw_watermark(canvas, doc):
    """Diagonal translucent mark centred on every page."""
    width, height = doc.pagesize
    canvas.saveState()
    canvas.setFillColor(colors.HexColor("#ef4444"))
    canvas.setFillAlpha(0.08)
    canvas.setFont("Helvetica-Bold", 110)
    canvas.translate(width / 2, height / 2)
    canvas.rotate(45)
    canvas.drawCentredString(0, -40, WATERMARK_TEXT)
    canvas.restoreState()


def fit_image(content: bytes, max_width: float, max_height: float) -> Image | None:
    """Flowable scaled to fit the box, or None when the bytes cannot be decoded."""
    try:
        with PILImage.open(io.BytesIO(content)) as img:
            # open() only parses the header; decode fully to catch truncated data
            img.load()
            img_width, img_height = img.size
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        logger.warning(f"Skipping unreadable photo: {e}")
        return None
    if not img_width or not img_height:
        return None
    scale = min(max_width / img_width, max_height / img_height, 1.0)
    return Image(io.BytesIO(content), width=img_width * scale, height=img_height * scale)


class CaseReportGenerator:
    """Builds the dossier for one case."""

    def __init__(self, storage: MediaStorage | None = None):
        self.storage = storage or get_storage()
        styles = getSampleStyleSheet()
        self.styles = {
            "title": ParagraphStyle(
                "DossierTitle", parent=styles["Title"], fontSize=22, alignment=0, spaceAfter=6
            ),
            "subtitle": ParagraphStyle(
                "DossierSubtitle",
                parent=styles["Normal"],
                fontSize=16,
                leading=20,
                textColor=colors.HexColor("#2563eb"),
                spaceAfter=10,
            ),
            "section": ParagraphStyle(
                "DossierSection",
                parent=styles["Heading2"],
                fontSize=13,
                textColor=colors.HexColor("#1f2937"),
                spaceBefore=10,
                spaceAfter=4,
            ),
            "body": ParagraphStyle("DossierBody", parent=styles["Normal"], fontSize=11, leading=14),
            "label": ParagraphStyle(
                "DossierLabel", parent=styles["Normal"], fontName="Helvetica-Bold", fontSize=11, leading=14
            ),
            "caption": ParagraphStyle(
                "DossierCaption",
                parent=styles["Normal"],
                fontSize=10,
                alignment=1,
                textColor=colors.HexColor("#6b7280"),
            ),
            "muted": ParagraphStyle(
                "DossierMuted", parent=styles["Normal"], fontSize=10, textColor=colors.HexColor("#6b7280")
            ),
        }

    def _para(self, text: Any, style: str = "body") -> Paragraph:
        return Paragraph(escape(str(text)), self.styles[style])

    def _section(self, title: str, entries: list[tuple[str, Any]]) -> list:
        rows = [
            [self._para(f"{label}:", "label"), self._para(value)]
            for label, value in entries
            if value is not None and str(value).strip()
        ]
        if not rows:
            return []
        table = Table(rows, colWidths=[1.7 * inch, 4.9 * inch])
        table.setStyle(
            TableStyle(
                [
                    ("VALIGN", (0, 0), (-1, -1), "TOP"),
                    ("LEFTPADDING", (0, 0), (-1, -1), 0),
                    ("BOTTOMPADDING", (0, 0), (-1, -1), 2),
                ]
            )
        )
        return [self._para(title.upper(), "section"), table]

    def _list_section(self, title: str, lines: list[str]) -> list:
        valid = [line for line in lines if line and line.strip()]
        if not valid:
            return []
        return [self._para(title.upper(), "section")] + [self._para(f"- {line}") for line in valid]

    def _photo(self, case: Case) -> list:
        photos = case.photos
        photo = next((p for p in photos if p.is_primary), photos[0] if photos else None)
        if photo is None:
            return []
        content = self.storage.read(photo.file_path)
        if content is None:
            return []
        image = fit_image(content, PHOTO_MAX_WIDTH, PHOTO_MAX_HEIGHT)
        if image is None:
            return []
        image.hAlign = "CENTER"
        story = [image, Spacer(1, 6)]
        if photo.description:
            story.append(self._para(photo.description, "caption"))
        return story

    def build_story(self, case: Case) -> list:
        person = case.person
        name = full_name(person)

        story = [
            self._para("Legajo del caso", "title"),
            self._para(name or "Sin persona asociada", "subtitle"),
        ]
        story.extend(self._photo(case))
        story.append(HRFlowable(width="100%", thickness=0.6, color=colors.HexColor("#d1d5db")))

        story.extend(
            self._section(
                "Resumen del caso",
                [
                    ("Estado", estado_label(case.estado_requerimiento)),
                    ("Fuerza asignada", enum_value(case.fuerza_asignada) or "S/D"),
                    ("Expediente", case.numero_causa or EMPTY),
                    ("Jurisdicción", format_enum(case.jurisdiccion)),
                ],
            )
        )

        if person is not None:
            phones = " · ".join(person_phones(person))
            emails = " · ".join(person_emails(person))
            age = compute_age(person.birthdate)
            story.extend(
                self._section(
                    "Datos personales",
                    [
                        ("Documento", person.identity_number),
                        ("Sexo", enum_value(person.sex)),
                        ("Fecha de nacimiento", format_date(person.birthdate)),
                        ("Edad", f"{age} años" if age else None),
                        ("Domicilio", summarize_addresses(person)),
                        ("Teléfonos", phones),
                        ("Emails", emails),
                        ("Notas", person.notes),
                    ],
                )
            )
            contact_lines = []
            if phones:
                contact_lines.append(f"Teléfonos: {phones}")
            if emails:
                contact_lines.append(f"Emails: {emails}")
            networks = " · ".join(person_networks(person))
            if networks:
                contact_lines.append(f"Redes: {networks}")
            story.extend(self._list_section("Contactos", contact_lines))

        story.extend(
            self._section(
                "Información del caso",
                [
                    ("Carátula", case.caratula),
                    ("Delito", case.delito),
                    ("Juzgado", case.juzgado_interventor),
                    ("Fiscalía", case.fiscalia),
                    ("Secretaría", case.secretaria),
                    ("Recompensa", reward_summary(case)),
                ],
            )
        )
        story.extend(self._list_section("Información complementaria", additional_info_lines(case)))

        story.append(Spacer(1, 12))
        story.append(self._para(f"Creado: {format_datetime(case.creado_en)}", "muted"))
        story.append(self._para(f"Actualizado: {format_datetime(case.actualizado_en)}", "muted"))
        return story

    def render(self, case: Case) -> bytes:
        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            leftMargin=MARGIN,
            rightMargin=MARGIN,
            topMargin=MARGIN,
            bottomMargin=MARGIN,
            title="Legajo del caso",
        )
        doc.build(self.build_story(case), onFirstPage=draw_watermark, onLaterPages=draw_watermark)
        return buffer.getvalue()


def case_pdf_file_name(case: Case) -> str:
    return f"{case_file_base_name(full_name(case.person))}.pdf"


def generate_case_pdf(case: Case, storage: MediaStorage | None = None) -> tuple[bytes, str]:
    """Render the dossier. Returns (pdf bytes, file name)."""
    content = CaseReportGenerator(storage).render(case)
    file_name = case_pdf_file_name(case)
    logger.info(f"Generated PDF dossier {file_name} for case {case.id} ({len(content)} bytes)")
    return content, file_name
