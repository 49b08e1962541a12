"""
Photo decoding, file naming and the bucket upload path.
"""

import re
from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from conftest import PNG_BYTES, PNG_DATA_URI

from geocity.core.settings import settings
from geocity.services import storage_service
from geocity.services.storage_service import (
    generate_unique_filename,
    get_file_extension,
    parse_data_uri,
    upload_report_photo,
)


class TestDataUri:

    def test_parse(self):
        assert parse_data_uri(PNG_DATA_URI) == ("image/png", PNG_BYTES)

    @pytest.mark.parametrize("value", [
        "",
        "not a data uri",
        "data:text/plain;base64,aGVsbG8=",
        "data:image/png;base64,***",
        "data:image/png;base64,",
    ])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            parse_data_uri(value)


class TestFilenames:

    def test_extension_lookup(self):
        assert get_file_extension("image/webp") == "webp"
        assert get_file_extension("IMAGE/PNG") == "png"
        assert get_file_extension("application/octet-stream") == "jpg"

    def test_unique_filename_shape(self):
        name = generate_unique_filename("My Photo (1).jpeg", "image/jpeg")
        assert re.fullmatch(r"My_Photo__1__jpeg_\d{13}_[a-z0-9]{13}\.jpg", name)

    def test_clean_name_capped(self):
        name = generate_unique_filename("x" * 80 + ".png", "image/png")
        assert name.startswith("x" * 50 + "_")

    def test_filenames_differ(self):
        assert generate_unique_filename("a.png", "image/png") != generate_unique_filename("a.png", "image/png")


class TestBucketUpload:

    def test_uploads_privately_and_signs_url(self, monkeypatch):
        blob = MagicMock()
        blob.generate_signed_url.return_value = "https://storage.example/signed"
        bucket = MagicMock()
        bucket.blob.return_value = blob
        monkeypatch.setattr(settings, "USE_MOCK_DB", False)
        monkeypatch.setattr(storage_service, "get_bucket", lambda: bucket)

        url = upload_report_photo(PNG_DATA_URI, "photo.png", "image/png")

        assert url == "https://storage.example/signed"
        bucket.blob.assert_called_once_with("photo.png")
        assert blob.cache_control == storage_service.CACHE_CONTROL
        blob.upload_from_string.assert_called_once_with(PNG_BYTES, content_type="image/png", predefined_acl="private")
        blob.generate_signed_url.assert_called_once_with(expiration=timedelta(hours=24), method="GET", version="v4")

    def test_permission_error_is_runtime_error(self, monkeypatch):
        bucket = MagicMock()
        bucket.blob.return_value.upload_from_string.side_effect = Exception("403 Forbidden")
        monkeypatch.setattr(settings, "USE_MOCK_DB", False)
        monkeypatch.setattr(storage_service, "get_bucket", lambda: bucket)

        with pytest.raises(RuntimeError, match="Permission error"):
            upload_report_photo(PNG_DATA_URI, "photo.png", "image/png")

    def test_bad_photo_never_reaches_bucket(self, monkeypatch):
        get_bucket = MagicMock()
        monkeypatch.setattr(settings, "USE_MOCK_DB", False)
        monkeypatch.setattr(storage_service, "get_bucket", get_bucket)

        with pytest.raises(ValueError):
            upload_report_photo("data:image/png;base64,###", "photo.png", "image/png")
        get_bucket.assert_not_called()
