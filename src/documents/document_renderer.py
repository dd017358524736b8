"""PDF receipt / service report rendering for vehicle records"""

import logging
import re
from dataclasses import dataclass
from datetime import date
from enum import Enum
from io import BytesIO
from pathlib import Path
from typing import List, Optional, Tuple

from reportlab.pdfgen import canvas
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.colors import Color, black, white
from reportlab.lib.utils import simpleSplit

from src.config import settings
from src.errors import NoRecordLoadedError
from src.models.decimal_wire import format_currency
from src.models.line_items import LineItemSet
from src.models.vehicle_record import VehicleRecord

logger = logging.getLogger(__name__)

HEADER_BLUE = Color(37 / 255, 99 / 255, 235 / 255)
TABLE_HEADER_FILL = Color(0.9, 0.92, 0.95)
RULE_GREY = Color(0.8, 0.8, 0.8)
FOOTER_GREY = Color(100 / 255, 100 / 255, 100 / 255)

PAGE_WIDTH, PAGE_HEIGHT = A4
LEFT = 20 * mm
RIGHT = PAGE_WIDTH - 20 * mm
VALUE_X = 70 * mm
PRICE_COLUMN_X = RIGHT - 40 * mm
CELL_PADDING = 2 * mm
BOTTOM_LIMIT = 30 * mm
FOOTER_Y = 17 * mm

FIELD_LINE_HEIGHT = 8 * mm
TABLE_LINE_HEIGHT = 5 * mm
HEADER_ROW_HEIGHT = 7 * mm

FONT = "Helvetica"
FONT_BOLD = "Helvetica-Bold"
BODY_SIZE = 10

FALLBACK_PLATE = "Vehiculo"


class DocumentKind(str, Enum):
    """Which document is being produced"""
    INTAKE_RECEIPT = "intake_receipt"
    SERVICE_REPORT = "service_report"


SUBTITLES = {
    DocumentKind.INTAKE_RECEIPT: "Comprobante de Ingreso",
    DocumentKind.SERVICE_REPORT: "Reporte de Servicio",
}

FOOTERS = {
    DocumentKind.INTAKE_RECEIPT: "Este documento es un comprobante de recepción del vehículo.",
    DocumentKind.SERVICE_REPORT: "Este documento detalla los trabajos y repuestos del servicio realizado.",
}

TABLE_TITLES = (
    ("work_items", "Trabajos"),
    ("part_items", "Repuestos"),
)


@dataclass
class RenderedDocument:
    filename: str
    content: bytes
    page_count: int


class DocumentRenderer:
    """Renders a VehicleRecord as a paginated A4 PDF"""

    def __init__(
        self,
        shop_name: Optional[str] = None,
        receipt_prefix: Optional[str] = None,
        report_prefix: Optional[str] = None,
    ):
        self.shop_name = shop_name or settings.SHOP_NAME
        self.prefixes = {
            DocumentKind.INTAKE_RECEIPT: receipt_prefix or settings.RECEIPT_PREFIX,
            DocumentKind.SERVICE_REPORT: report_prefix or settings.REPORT_PREFIX,
        }

    def filename_for(self, record: VehicleRecord, kind: DocumentKind) -> str:
        """``<prefix>_<plate>.pdf``, with a fixed name when the plate is blank"""
        plate = re.sub(r'[\\/:*?"<>|\s]+', "-", (record.plate or "").strip()).strip("-")
        return f"{self.prefixes[DocumentKind(kind)]}_{plate or FALLBACK_PLATE}.pdf"

    def render(
        self,
        record: Optional[VehicleRecord],
        kind: DocumentKind = DocumentKind.INTAKE_RECEIPT,
        today: Optional[date] = None,
    ) -> RenderedDocument:
        """
        Render the document for a record

        Args:
            record: Record to render
            kind: Intake receipt or service report
            today: Date printed in the title block (defaults to today)

        Returns:
            RenderedDocument with file name and PDF bytes

        Raises:
            NoRecordLoadedError: record is None
        """
        if record is None:
            raise NoRecordLoadedError("No record loaded to render")

        kind = DocumentKind(kind)
        buffer = BytesIO()
        page = _Page(canvas.Canvas(buffer, pagesize=A4), FOOTERS[kind])

        y = self._render_title_block(page, kind, today or date.today())
        y = self._render_fields(page, record, y)
        for attr, title in TABLE_TITLES:
            items: LineItemSet = getattr(record, attr)
            if not items.is_blank():
                y = self._render_items_table(page, title, items, y)
        self._render_total(page, record, y)

        page_count = page.finish()
        filename = self.filename_for(record, kind)
        logger.info(f"Rendered {filename} ({page_count} page(s))")
        return RenderedDocument(filename=filename, content=buffer.getvalue(), page_count=page_count)

    def export(
        self,
        record: Optional[VehicleRecord],
        kind: DocumentKind = DocumentKind.INTAKE_RECEIPT,
        directory: Path = Path("."),
    ) -> Path:
        """Render and write the document into ``directory``"""
        document = self.render(record, kind)
        path = Path(directory) / document.filename
        path.write_bytes(document.content)
        return path

    def _render_title_block(self, page: "_Page", kind: DocumentKind, today: date) -> float:
        c = page.canvas
        band_height = 40 * mm
        c.setFillColor(HEADER_BLUE)
        c.rect(0, PAGE_HEIGHT - band_height, PAGE_WIDTH, band_height, stroke=0, fill=1)

        c.setFillColor(white)
        c.setFont(FONT_BOLD, 22)
        c.drawCentredString(PAGE_WIDTH / 2, PAGE_HEIGHT - 20 * mm, self.shop_name)
        c.setFont(FONT, 12)
        c.drawCentredString(PAGE_WIDTH / 2, PAGE_HEIGHT - 30 * mm, SUBTITLES[kind])

        c.setFillColor(black)
        c.setFont(FONT_BOLD, 12)
        y = PAGE_HEIGHT - 55 * mm
        c.drawString(LEFT, y, f"Fecha: {today.strftime('%d/%m/%Y')}")
        return y - FIELD_LINE_HEIGHT * 1.5

    def _field_rows(self, record: VehicleRecord) -> List[Tuple[str, str]]:
        rows = []
        if (record.external_code or "").strip():
            rows.append(("Código", record.external_code))
        rows += [
            ("Cliente", record.client_name),
            ("Contacto", record.contact),
            ("Vehículo", record.model),
            ("Placa", record.plate),
        ]
        if (record.mileage or "").strip():
            rows.append(("Kilometraje", f"{record.mileage} km"))
        rows.append(("Estado", record.status.value))
        return rows

    def _render_fields(self, page: "_Page", record: VehicleRecord, y: float) -> float:
        c = page.canvas
        value_width = RIGHT - VALUE_X
        for label, value in self._field_rows(record):
            lines = simpleSplit(value or "", FONT, 12, value_width) or [""]
            height = FIELD_LINE_HEIGHT + (len(lines) - 1) * TABLE_LINE_HEIGHT
            y = page.ensure_space(y, height)

            c.setFont(FONT_BOLD, 12)
            c.drawString(LEFT, y, f"{label}:")
            c.setFont(FONT, 12)
            for i, line in enumerate(lines):
                c.drawString(VALUE_X, y - i * TABLE_LINE_HEIGHT, line)
            y -= height
        return y - FIELD_LINE_HEIGHT * 0.5

    def _render_table_header(self, page: "_Page", y: float) -> float:
        c = page.canvas
        c.setFillColor(TABLE_HEADER_FILL)
        c.rect(LEFT, y - HEADER_ROW_HEIGHT + 2 * mm, RIGHT - LEFT, HEADER_ROW_HEIGHT, stroke=0, fill=1)
        c.setFillColor(black)
        c.setFont(FONT_BOLD, BODY_SIZE)
        text_y = y - HEADER_ROW_HEIGHT / 2 + 0.5 * mm
        c.drawString(LEFT + CELL_PADDING, text_y, "Descripción")
        c.drawRightString(RIGHT - CELL_PADDING, text_y, "Precio")
        return y - HEADER_ROW_HEIGHT - 2 * mm

    def _render_items_table(self, page: "_Page", title: str, items: LineItemSet, y: float) -> float:
        c = page.canvas
        description_width = PRICE_COLUMN_X - LEFT - 2 * CELL_PADDING

        y = page.ensure_space(y, FIELD_LINE_HEIGHT + HEADER_ROW_HEIGHT + TABLE_LINE_HEIGHT * 2)
        c.setFont(FONT_BOLD, 12)
        c.drawString(LEFT, y, f"{title}:")
        y = self._render_table_header(page, y - 4 * mm)

        for item in items.filled_items():
            lines = simpleSplit(item.description, FONT, BODY_SIZE, description_width) or [""]
            row_height = len(lines) * TABLE_LINE_HEIGHT + 2 * mm
            if y - row_height < BOTTOM_LIMIT:
                y = self._render_table_header(page, page.new_page())

            c.setFont(FONT, BODY_SIZE)
            for i, line in enumerate(lines):
                c.drawString(LEFT + CELL_PADDING, y - i * TABLE_LINE_HEIGHT, line)
            c.drawRightString(RIGHT - CELL_PADDING, y, format_currency(item.amount))

            y -= row_height
            c.setStrokeColor(RULE_GREY)
            c.line(LEFT, y + TABLE_LINE_HEIGHT - 1 * mm, RIGHT, y + TABLE_LINE_HEIGHT - 1 * mm)
            c.setStrokeColor(black)

        c.setFont(FONT_BOLD, BODY_SIZE)
        c.drawRightString(RIGHT - CELL_PADDING, y, f"Subtotal: {format_currency(items.total())}")
        return y - FIELD_LINE_HEIGHT * 1.5

    def _render_total(self, page: "_Page", record: VehicleRecord, y: float) -> float:
        c = page.canvas
        y = page.ensure_space(y, FIELD_LINE_HEIGHT)
        c.setFont(FONT_BOLD, 14)
        c.drawString(LEFT, y, f"TOTAL: {format_currency(record.cost)}")
        return y - FIELD_LINE_HEIGHT


class _Page:
    """Canvas wrapper that draws the footer on every page it closes"""

    def __init__(self, canvas_obj: canvas.Canvas, footer: str):
        self.canvas = canvas_obj
        self.footer = footer
        self.pages = 1

    def _draw_footer(self):
        c = self.canvas
        c.setFont(FONT, BODY_SIZE)
        c.setFillColor(FOOTER_GREY)
        c.drawCentredString(PAGE_WIDTH / 2, FOOTER_Y, self.footer)
        c.setFillColor(black)

    def new_page(self) -> float:
        """Close the current page and return the top y of the next one"""
        self._draw_footer()
        self.canvas.showPage()
        self.pages += 1
        return PAGE_HEIGHT - 20 * mm

    def ensure_space(self, y: float, height: float) -> float:
        if y - height < BOTTOM_LIMIT:
            return self.new_page()
        return y

    def finish(self) -> int:
        self._draw_footer()
        self.canvas.showPage()
        self.canvas.save()
        return self.pages
