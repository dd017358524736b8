"""Unit tests for the PDF document renderer"""

import pytest
from datetime import date
from decimal import Decimal
from io import BytesIO
from PyPDF2 import PdfReader

from src.documents.document_renderer import DocumentKind, DocumentRenderer
from src.errors import NoRecordLoadedError
from src.models.line_items import LineItemSet
from src.models.vehicle_record import VehicleRecord


def _pdf_text(content: bytes) -> str:
    reader = PdfReader(BytesIO(content))
    return "\n".join(page.extract_text() or "" for page in reader.pages)


@pytest.fixture
def renderer():
    return DocumentRenderer(
        shop_name="TALLER JYM",
        receipt_prefix="Recibo_JYM",
        report_prefix="Reporte_JYM",
    )


@pytest.mark.unit
class TestDocumentRenderer:
    """Test DocumentRenderer"""

    def test_render_produces_valid_pdf(self, renderer, sample_record):
        document = renderer.render(sample_record, DocumentKind.INTAKE_RECEIPT, today=date(2024, 3, 5))

        assert document.content.startswith(b"%PDF")
        assert document.filename == "Recibo_JYM_ABC-123.pdf"
        assert document.page_count == 1

        reader = PdfReader(BytesIO(document.content))
        assert len(reader.pages) == 1

    def test_render_contains_record_data(self, renderer, sample_record):
        document = renderer.render(sample_record, today=date(2024, 3, 5))
        text = _pdf_text(document.content)

        assert "TALLER JYM" in text
        assert "05/03/2024" in text
        assert "ABC-123" in text
        assert "Jane Doe" in text
        assert "Brake pad" in text
        assert "Pads" in text
        assert "$40.00" in text
        assert "$25.00" in text
        assert "65.00" in text
        assert "Precio" in text
        assert "50000 km" in text

    def test_total_uses_record_cost(self, renderer, sample_record):
        sample_record.set_cost("99")
        text = _pdf_text(renderer.render(sample_record).content)
        assert "TOTAL: $99.00" in text

    def test_blank_parts_table_is_omitted(self, renderer):
        record = VehicleRecord(
            plate="XYZ",
            client_name="Ana",
            work_items=LineItemSet.of(("Alignment", "30")),
        )
        text = _pdf_text(renderer.render(record).content)
        assert "Trabajos" in text
        assert "Repuestos" not in text

    def test_optional_fields_skipped_when_blank(self, renderer):
        record = VehicleRecord(plate="XYZ", client_name="Ana")
        text = _pdf_text(renderer.render(record).content)
        assert "Kilometraje" not in text
        assert "Cliente" in text

    def test_service_report_kind(self, renderer, sample_record):
        document = renderer.render(sample_record, DocumentKind.SERVICE_REPORT)
        assert document.filename == "Reporte_JYM_ABC-123.pdf"
        assert "Reporte de Servicio" in _pdf_text(document.content)

    def test_kind_accepts_wire_value(self, renderer, sample_record):
        document = renderer.render(sample_record, "service_report")
        assert document.filename.startswith("Reporte_JYM_")

    def test_filename_fallback_without_plate(self, renderer):
        record = VehicleRecord(client_name="Ana")
        assert renderer.filename_for(record, DocumentKind.INTAKE_RECEIPT) == "Recibo_JYM_Vehiculo.pdf"

    def test_filename_sanitizes_plate(self, renderer):
        record = VehicleRecord(plate="AB/12 34")
        assert renderer.filename_for(record, DocumentKind.INTAKE_RECEIPT) == "Recibo_JYM_AB-12-34.pdf"

    def test_render_without_record_raises(self, renderer):
        with pytest.raises(NoRecordLoadedError):
            renderer.render(None)

    def test_many_items_paginate(self, renderer):
        rows = [(f"Item number {i}", str(i)) for i in range(1, 81)]
        record = VehicleRecord(plate="LONG-1", client_name="Ana", work_items=LineItemSet.of(*rows))

        document = renderer.render(record)
        reader = PdfReader(BytesIO(document.content))

        assert document.page_count > 1
        assert len(reader.pages) == document.page_count
        text = _pdf_text(document.content)
        assert "Item number 1" in text
        assert "Item number 80" in text
        assert "TOTAL: $3,240.00" in text
        assert record.cost == Decimal("3240")

    def test_long_description_wraps(self, renderer):
        long_text = "Replace " + "very " * 60 + "long part"
        record = VehicleRecord(plate="W-1", client_name="Ana", work_items=LineItemSet.of((long_text, "10")))
        document = renderer.render(record)
        text = _pdf_text(document.content)
        assert document.page_count == 1
        assert "Replace" in text
        assert "$10.00" in text

    def test_out_of_range_price_renders(self, renderer):
        record = VehicleRecord(plate="X", client_name="Y", work_items=LineItemSet.of(("Engine", "1e30")))
        document = renderer.render(record)
        assert document.content.startswith(b"%PDF")
        assert "TOTAL: $0.00" in _pdf_text(document.content)

    def test_export_writes_file(self, renderer, sample_record, tmp_path):
        path = renderer.export(sample_record, DocumentKind.INTAKE_RECEIPT, tmp_path)
        assert path == tmp_path / "Recibo_JYM_ABC-123.pdf"
        assert path.read_bytes().startswith(b"%PDF")
