"""Unit tests for the record save flow"""

import json
import pytest
from decimal import Decimal

from src.errors import ImageCompressionError, RecordNotFoundError, RecordValidationError, RemoteError
from src.ingestion.image_compressor import ImageCompressor
from src.models.line_items import LineItemSet
from src.models.vehicle_record import RecordStatus, VehicleRecord
from src.services.record_service import PhotoUpload, RecordService


@pytest.fixture
def service(fake_store):
    return RecordService(fake_store, compressor=ImageCompressor(max_size_mb=0.2, max_dimension=1920))


@pytest.mark.unit
class TestSave:

    @pytest.mark.asyncio
    async def test_missing_fields_write_nothing(self, service, fake_store):
        record = VehicleRecord(plate="", client_name="Jane")

        with pytest.raises(RecordValidationError) as exc_info:
            await service.save(record, PhotoUpload(content=b"irrelevant"))

        assert exc_info.value.missing_fields == ["plate"]
        assert fake_store.calls == []
        assert record.is_new

    @pytest.mark.asyncio
    async def test_new_record_is_inserted(self, service, fake_store, sample_record):
        saved = await service.save(sample_record)

        assert saved is sample_record
        assert not saved.is_new
        assert fake_store.calls == ["insert"]
        row = fake_store.rows[saved.id]
        assert row["placa"] == "ABC-123"
        assert row["costo"] == Decimal("65")
        assert row["foto_url"] is None
        assert json.loads(row["trabajo"])[0]["description"] == "Brake pad"

    @pytest.mark.asyncio
    async def test_record_built_with_items_saves_item_total(self, service, fake_store):
        record = VehicleRecord(
            plate="ABC-123",
            client_name="Jane Doe",
            work_items=LineItemSet.of(("Brake pad", "40")),
            part_items=LineItemSet.of(("Pads", "25")),
        )

        await service.save(record)

        row = fake_store.rows[record.id]
        assert row["costo"] == Decimal("65")
        assert row["estado"] == "En proceso"

    @pytest.mark.asyncio
    async def test_existing_record_is_updated(self, service, fake_store, sample_record):
        await service.save(sample_record)
        first_id = sample_record.id

        sample_record.set_cost("120")
        sample_record.status = RecordStatus.DONE
        await service.save(sample_record)

        assert sample_record.id == first_id
        assert fake_store.calls == ["insert", "update"]
        assert len(fake_store.rows) == 1
        assert fake_store.rows[first_id]["costo"] == Decimal("120")
        assert fake_store.rows[first_id]["estado"] == "Terminado"

    @pytest.mark.asyncio
    async def test_photo_is_compressed_and_uploaded_before_write(
        self, service, fake_store, sample_record, sample_photo
    ):
        await service.save(sample_record, PhotoUpload(content=sample_photo, file_name="car.png"))

        assert fake_store.calls == ["upload_binary", "insert"]
        (name, content), = fake_store.uploads.items()
        assert name.endswith(".jpg")
        assert name.split(".")[0].isdigit()
        assert len(content) <= 0.2 * 1024 * 1024
        assert sample_record.photo_url == f"https://storage.test/images/{name}"
        assert fake_store.rows[sample_record.id]["foto_url"] == sample_record.photo_url

    @pytest.mark.asyncio
    async def test_existing_photo_kept_without_new_upload(self, service, fake_store, sample_record):
        sample_record.photo_url = "https://storage.test/images/old.jpg"
        await service.save(sample_record)
        assert fake_store.rows[sample_record.id]["foto_url"] == "https://storage.test/images/old.jpg"

    @pytest.mark.asyncio
    async def test_upload_failure_aborts_save(self, service, fake_store, sample_record, sample_photo):
        fake_store.fail_on = "upload_binary"

        with pytest.raises(RemoteError, match="upload_binary rejected"):
            await service.save(sample_record, PhotoUpload(content=sample_photo))

        assert "insert" not in fake_store.calls
        assert fake_store.rows == {}
        assert sample_record.is_new

    @pytest.mark.asyncio
    async def test_bad_photo_aborts_save(self, service, fake_store, sample_record):
        with pytest.raises(ImageCompressionError):
            await service.save(sample_record, PhotoUpload(content=b"not an image"))
        assert fake_store.calls == []

    @pytest.mark.asyncio
    async def test_write_failure_propagates(self, service, fake_store, sample_record):
        fake_store.fail_on = "insert"
        with pytest.raises(RemoteError):
            await service.save(sample_record)
        assert sample_record.is_new


@pytest.mark.unit
class TestLoad:

    @pytest.mark.asyncio
    async def test_load_round_trip(self, service, sample_record):
        await service.save(sample_record)

        loaded = await service.load(sample_record.id)

        assert loaded.id == sample_record.id
        assert loaded.plate == "ABC-123"
        assert loaded.cost == Decimal("65")
        assert loaded.work_items == sample_record.work_items
        assert loaded.created_at is not None

    @pytest.mark.asyncio
    async def test_load_missing_raises(self, service):
        with pytest.raises(RecordNotFoundError):
            await service.load("missing")
