"""Unit tests for local photo storage"""

import pytest


@pytest.mark.unit
class TestFileHandler:

    def test_upload_returns_public_url(self, file_handler):
        url = file_handler.upload_file(b"jpeg-bytes", "1700000000000.jpg")

        assert url == "http://testserver/media/images/1700000000000.jpg"
        assert (file_handler.images_path / "1700000000000.jpg").read_bytes() == b"jpeg-bytes"
        assert file_handler.download_file("1700000000000.jpg") == b"jpeg-bytes"

    def test_existing_name_is_not_overwritten(self, file_handler):
        file_handler.upload_file(b"first", "photo.jpg")
        with pytest.raises(FileExistsError):
            file_handler.upload_file(b"second", "photo.jpg")
        assert file_handler.download_file("photo.jpg") == b"first"

    @pytest.mark.parametrize("name", ["", "../escape.jpg", "dir/photo.jpg", ".hidden"])
    def test_invalid_names_rejected(self, file_handler, name):
        with pytest.raises(ValueError):
            file_handler.upload_file(b"x", name)
