"""Tests for asset materialization."""

import base64
import re
from pathlib import Path
from typing import Iterator
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from app.models.asset import AssetCategory, AssetRepresentation, UploadTarget
from app.services.materializer import (
    AssetMaterializer,
    AssetReadError,
    format_size,
    to_data_uri,
)
from app.services.storage import InMemoryObjectStorage, StorageError


def fixed_clock(*times: float):
    """Clock returning the given timestamps in order."""
    values: Iterator[float] = iter(times)
    return lambda: next(values)


@pytest.fixture
def storage() -> InMemoryObjectStorage:
    return InMemoryObjectStorage(public_base_url="https://cdn.example.com")


@pytest.fixture
def materializer(storage: InMemoryObjectStorage) -> AssetMaterializer:
    return AssetMaterializer(storage, clock=lambda: 1717171717.5)


class TestFormatSize:
    """Tests for file size labels."""

    @pytest.mark.parametrize(
        "size,expected",
        [
            (0, "0 bytes"),
            (1023, "1023 bytes"),
            (1024, "1.0 KB"),
            (1536, "1.5 KB"),
            (1280, "1.3 KB"),
            (2304, "2.3 KB"),
            (1048575, "1024.0 KB"),
            (1048576, "1.0 MB"),
            (1310720, "1.3 MB"),
            (5 * 1024 * 1024 + 300 * 1024, "5.3 MB"),
        ],
    )
    def test_format_size(self, size: int, expected: str) -> None:
        assert format_size(size) == expected


class TestDataUri:
    def test_to_data_uri(self) -> None:
        assert to_data_uri(b"hello", "text/plain") == "data:text/plain;base64,aGVsbG8="


class TestStorageKey:
    """Tests for timestamped storage keys."""

    def test_key_uses_millis_and_name(self, materializer: AssetMaterializer) -> None:
        assert materializer.storage_key("activity-sheet.pdf") == "1717171717500-activity-sheet.pdf"

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("docs/guide.pdf", "guide.pdf"),
            ("C:\\Users\\me\\guide.pdf", "guide.pdf"),
            ("", "file"),
        ],
    )
    def test_key_uses_base_name(self, name: str, expected: str) -> None:
        materializer = AssetMaterializer(InMemoryObjectStorage(), clock=lambda: 1.0)
        assert materializer.storage_key(name) == f"1000-{expected}"


class TestImages:
    """Tests for inline image materialization."""

    @pytest.mark.asyncio
    async def test_image_becomes_data_uri(
        self, materializer: AssetMaterializer, storage: InMemoryObjectStorage
    ) -> None:
        data = b"\x89PNG\r\n\x1a\nfake"
        target = UploadTarget.from_bytes("cover.png", data, mime_type="image/png")

        asset = await materializer.materialize(target)

        assert asset.representation == AssetRepresentation.INLINE
        assert asset.file_url == "data:image/png;base64," + base64.b64encode(data).decode()
        assert asset.file_size_label == "12 bytes"
        assert asset.storage_key is None
        assert asset.degraded is False
        assert storage.objects == {}

    @pytest.mark.asyncio
    async def test_image_never_touches_storage(self) -> None:
        """Test images are inlined even when storage would fail."""
        storage = MagicMock()
        storage.upload = AsyncMock(side_effect=StorageError("down"))
        materializer = AssetMaterializer(storage)
        target = UploadTarget.from_bytes(
            "photo.jpg", b"jpeg", mime_type="image/jpeg", category=AssetCategory.OTHER
        )

        asset = await materializer.materialize(target)

        assert asset.file_url.startswith("data:image/jpeg;base64,")
        storage.upload.assert_not_called()
        storage.get_public_url.assert_not_called()

    @pytest.mark.asyncio
    async def test_image_category_does_not_override_mime(
        self, materializer: AssetMaterializer, storage: InMemoryObjectStorage
    ) -> None:
        """Test a non-image declared as image category still goes to storage."""
        target = UploadTarget.from_bytes(
            "notes.pdf", b"%PDF", mime_type="application/pdf", category=AssetCategory.IMAGE
        )

        asset = await materializer.materialize(target)

        assert asset.representation == AssetRepresentation.OBJECT

    @pytest.mark.asyncio
    async def test_image_read_failure_raises(self, materializer: AssetMaterializer) -> None:
        reader = AsyncMock(side_effect=OSError("disk gone"))
        target = UploadTarget(name="cover.png", mime_type="image/png", size_bytes=10, reader=reader)

        with pytest.raises(AssetReadError, match="cover.png"):
            await materializer.materialize(target)


class TestObjects:
    """Tests for object storage materialization."""

    @pytest.mark.asyncio
    async def test_non_image_uploaded(
        self, materializer: AssetMaterializer, storage: InMemoryObjectStorage
    ) -> None:
        data = b"x" * 2048
        target = UploadTarget.from_bytes(
            "activity-sheet.pdf", data, mime_type="application/pdf", destination_hint="materials"
        )

        asset = await materializer.materialize(target)

        assert asset.representation == AssetRepresentation.OBJECT
        assert asset.storage_key == "1717171717500-activity-sheet.pdf"
        assert asset.file_url == "https://cdn.example.com/materials/1717171717500-activity-sheet.pdf"
        assert asset.file_size_label == "2.0 KB"
        assert asset.degraded is False
        assert storage.objects[("materials", "1717171717500-activity-sheet.pdf")] == data

    @pytest.mark.asyncio
    async def test_destination_hint_used_as_bucket(
        self, materializer: AssetMaterializer, storage: InMemoryObjectStorage
    ) -> None:
        target = UploadTarget.from_bytes("a.zip", b"zip", destination_hint="worksheets")

        await materializer.materialize(target)

        assert ("worksheets", "1717171717500-a.zip") in storage.objects

    @pytest.mark.asyncio
    async def test_distinct_millis_give_distinct_keys(self, storage: InMemoryObjectStorage) -> None:
        materializer = AssetMaterializer(storage, clock=fixed_clock(100.25, 100.5))
        target = UploadTarget.from_bytes("notes.pdf", b"%PDF", mime_type="application/pdf")

        first = await materializer.materialize(target)
        second = await materializer.materialize(target)

        assert first.storage_key != second.storage_key
        assert first.file_url != second.file_url
        assert len(storage.objects) == 2


class TestDegradedUploads:
    """Tests for the upload failure fallback."""

    @pytest.mark.asyncio
    async def test_upload_failure_degrades(self) -> None:
        storage = MagicMock()
        storage.upload = AsyncMock(side_effect=StorageError("bucket missing"))
        materializer = AssetMaterializer(storage, clock=lambda: 1717171717.5)
        target = UploadTarget.from_bytes("notes.pdf", b"%PDF", mime_type="application/pdf")

        asset = await materializer.materialize(target)

        assert asset.representation == AssetRepresentation.DEGRADED
        assert asset.degraded is True
        assert asset.file_url == "/downloads/1717171717500-notes.pdf"
        assert re.fullmatch(r"/downloads/\d+-notes\.pdf", asset.file_url)
        assert asset.degraded_reason == "bucket missing"
        assert asset.file_size_label == "4 bytes"
        storage.get_public_url.assert_not_called()

    @pytest.mark.asyncio
    async def test_read_failure_for_upload_degrades(self, materializer: AssetMaterializer) -> None:
        reader = AsyncMock(side_effect=OSError("stream closed"))
        target = UploadTarget(
            name="notes.pdf", mime_type="application/pdf", size_bytes=4, reader=reader
        )

        asset = await materializer.materialize(target)

        assert asset.degraded is True
        assert asset.file_url == "/downloads/1717171717500-notes.pdf"

    @pytest.mark.asyncio
    async def test_public_url_failure_degrades(self) -> None:
        storage = MagicMock()
        storage.upload = AsyncMock()
        storage.get_public_url = MagicMock(side_effect=RuntimeError())
        materializer = AssetMaterializer(storage, clock=lambda: 2.0)
        target = UploadTarget.from_bytes("a.txt", b"a", mime_type="text/plain")

        asset = await materializer.materialize(target)

        assert asset.degraded is True
        assert asset.degraded_reason == "RuntimeError"

    @pytest.mark.asyncio
    @patch("app.services.materializer.MetricsCollector")
    async def test_degraded_counted_in_metrics(self, mock_metrics: MagicMock) -> None:
        storage = MagicMock()
        storage.upload = AsyncMock(side_effect=StorageError("down"))
        materializer = AssetMaterializer(storage)
        target = UploadTarget.from_bytes("a.txt", b"abc", mime_type="text/plain")

        await materializer.materialize(target)

        mock_metrics.record_materialization.assert_called_once_with("degraded", 3)


class TestUploadTarget:
    """Tests for UploadTarget construction."""

    def test_mime_type_guessed_from_name(self) -> None:
        target = UploadTarget.from_bytes("photo.png", b"x")
        assert target.mime_type == "image/png"
        assert target.is_image is True

    @pytest.mark.asyncio
    async def test_from_path(self, tmp_path: Path) -> None:
        path = tmp_path / "guide.pdf"
        path.write_bytes(b"%PDF-1.7")

        target = UploadTarget.from_path(path)

        assert target.name == "guide.pdf"
        assert target.size_bytes == 8
        assert target.mime_type == "application/pdf"
        assert await target.read() == b"%PDF-1.7"
