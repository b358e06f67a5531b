from io import BytesIO

import pytest

from workboard.core import storage
from workboard.core.settings import settings as storage_settings
from workboard.core.storage_keys import request_image_key
from workboard.schemas.commands import ImageUpload
from workboard.services.gateway import RecordStoreGateway


@pytest.fixture
def upload_root(tmp_path, monkeypatch):
    root = tmp_path / "uploads"
    monkeypatch.setattr(storage_settings, "LOCAL_UPLOAD_ROOT", str(root))
    return root


def test_key_drops_directory_components():
    assert request_image_key(filename="/../../uploads2/evil.png", now_ms=5) == "5_evil.png"
    assert request_image_key(filename="..\\..\\evil one.png", now_ms=5) == "5_evil_one.png"
    assert request_image_key(filename="scans/", now_ms=5) == "5_image.png"
    assert request_image_key(filename="My Scan.png", now_ms=5) == "5_My_Scan.png"


def test_local_path_rejects_sibling_directory_with_same_prefix(upload_root):
    assert storage.local_path_for_key("1_a.png") == (upload_root / "1_a.png").resolve()
    with pytest.raises(ValueError):
        storage.local_path_for_key("../uploads2/evil.png")
    with pytest.raises(ValueError):
        storage.local_path_for_key("../../etc/passwd")


def test_local_upload_stays_inside_upload_root(session_factory, upload_root):
    gateway = RecordStoreGateway(session_factory)
    image = ImageUpload(filename="/../../uploads2/evil.png", content_type="image/png", fileobj=BytesIO(b"\x89PNG"))

    url = gateway.upload_image(image, now_ms=7)

    assert url == "/uploads/7_evil.png"
    assert (upload_root / "7_evil.png").read_bytes() == b"\x89PNG"
    assert not (upload_root.parent / "uploads2").exists()


def test_discard_image_removes_local_file(session_factory, upload_root):
    gateway = RecordStoreGateway(session_factory)
    image = ImageUpload(filename="a.png", content_type="image/png", fileobj=BytesIO(b"x"))
    url = gateway.upload_image(image, now_ms=8)

    gateway.discard_image(url)

    assert not (upload_root / "8_a.png").exists()
