import cloudinary
import cloudinary.exceptions
import cloudinary.uploader
import pytest

from classroom_api.core.errors import UpstreamFailure, ValidationFailed
from classroom_api.services.storage import (
    CloudinaryStorage,
    LocalStorage,
    make_object_name,
    validate_upload,
)


@pytest.mark.parametrize("filename", ["a.pdf", "b.DOCX", "c.txt", "d.jpeg", "e.PNG", "f.zip", "g.doc", "h.jpg"])
def test_allowed_extensions(filename):
    validate_upload(filename, 10)


@pytest.mark.parametrize(
    "filename, size, message",
    [
        ("a.exe", 10, "File type .exe is not allowed"),
        ("a.pdf", 0, "File is required"),
        ("", 10, "File is required"),
        ("a.pdf", 10 * 1024 * 1024 + 1, "File size cannot exceed 10MB"),
    ],
)
def test_rejected_uploads(filename, size, message):
    with pytest.raises(ValidationFailed) as exc:
        validate_upload(filename, size)
    assert exc.value.detail == message


def test_exactly_ten_megabytes_is_accepted():
    validate_upload("a.pdf", 10 * 1024 * 1024)


def test_object_name_is_unique_and_safe():
    first = make_object_name("../../My Essay (final).PDF")
    second = make_object_name("../../My Essay (final).PDF")

    assert first != second
    assert first.endswith("_My-Essay-final.pdf")
    assert "/" not in first


def test_local_storage_round_trip(tmp_path):
    gateway = LocalStorage(tmp_path, "http://localhost:8000/")

    url = gateway.upload(b"hello", "notes.txt")
    assert url.startswith("http://localhost:8000/uploads/")
    stored = list(tmp_path.iterdir())
    assert len(stored) == 1
    assert stored[0].read_bytes() == b"hello"

    assert gateway.delete(url) is True
    assert list(tmp_path.iterdir()) == []
    assert gateway.delete(url) is False


@pytest.fixture
def cloudinary_calls(monkeypatch):
    calls = {"upload": [], "destroy": []}

    def fake_upload(file, **options):
        calls["upload"].append((file.read(), options))
        return {
            "public_id": f"{options['folder']}/{options['public_id']}",
            "secure_url": f"https://res.cloudinary.com/demo/raw/upload/v1/{options['folder']}/{options['public_id']}",
        }

    def fake_destroy(public_id, **options):
        calls["destroy"].append((public_id, options))
        return {"result": "ok"}

    monkeypatch.setattr(cloudinary.uploader, "upload", fake_upload)
    monkeypatch.setattr(cloudinary.uploader, "destroy", fake_destroy)
    return calls


def _gateway():
    return CloudinaryStorage("demo", "key-1", "secret-1")


def test_cloudinary_uploads_raw_file_into_folder(cloudinary_calls):
    url = _gateway().upload(b"%PDF", "essay.pdf")

    assert url.startswith("https://res.cloudinary.com/demo/raw/upload/v1/assignment-submissions/")
    assert url.endswith("_essay.pdf")
    [(data, options)] = cloudinary_calls["upload"]
    assert data == b"%PDF"
    assert options["resource_type"] == "raw"
    assert options["folder"] == "assignment-submissions"
    assert options["public_id"].endswith("_essay.pdf")


def test_cloudinary_is_configured_with_account_credentials(cloudinary_calls):
    _gateway()

    settings = cloudinary.config()
    assert settings.cloud_name == "demo"
    assert settings.api_key == "key-1"
    assert settings.api_secret == "secret-1"


def test_cloudinary_upload_error_is_upstream_failure(monkeypatch):
    def failing_upload(file, **options):
        raise cloudinary.exceptions.Error("Invalid Signature")

    monkeypatch.setattr(cloudinary.uploader, "upload", failing_upload)

    with pytest.raises(UpstreamFailure) as exc:
        _gateway().upload(b"%PDF", "essay.pdf")
    assert exc.value.status_code == 502
    assert "Invalid Signature" in exc.value.detail


def test_cloudinary_rejects_invalid_file_before_calling_out(cloudinary_calls):
    with pytest.raises(ValidationFailed):
        _gateway().upload(b"MZ", "tool.exe")

    assert cloudinary_calls["upload"] == []


def test_cloudinary_delete_by_url(cloudinary_calls):
    ok = _gateway().delete("https://res.cloudinary.com/demo/raw/upload/v1712/assignment-submissions/abc_essay.pdf")

    assert ok is True
    assert cloudinary_calls["destroy"] == [("assignment-submissions/abc_essay.pdf", {"resource_type": "raw"})]


def test_cloudinary_delete_by_public_id(cloudinary_calls):
    assert _gateway().delete("assignment-submissions/abc_essay.pdf") is True
    assert cloudinary_calls["destroy"][0][0] == "assignment-submissions/abc_essay.pdf"


def test_cloudinary_delete_failure_returns_false(monkeypatch):
    def failing_destroy(public_id, **options):
        raise cloudinary.exceptions.Error("timed out")

    monkeypatch.setattr(cloudinary.uploader, "destroy", failing_destroy)

    assert _gateway().delete("assignment-submissions/abc_essay.pdf") is False


def test_cloudinary_missing_file_is_not_deleted(monkeypatch):
    monkeypatch.setattr(cloudinary.uploader, "destroy", lambda public_id, **options: {"result": "not found"})

    assert _gateway().delete("assignment-submissions/gone.pdf") is False
