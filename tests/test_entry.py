from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from clipstack.models.entry import (
    ClipboardEntry,
    FileGroupPayload,
    FilePayload,
    ImagePayload,
    TextPayload,
)


def test_new_entries_get_unique_prefixed_ids():
    a = ClipboardEntry.from_text("a")
    b = ClipboardEntry.from_text("a")
    assert a.id.startswith("i_")
    assert a.id != b.id
    assert a.is_pinned is False


def test_duplicate_ignores_id_pin_and_time():
    a = ClipboardEntry.from_text("hello", captured_at=datetime(2020, 1, 1, tzinfo=timezone.utc))
    b = ClipboardEntry.from_text("hello", is_pinned=True)
    assert a.is_duplicate(b)
    assert b.is_duplicate(a)


def test_duplicate_requires_same_kind():
    text = ClipboardEntry.from_text("/tmp/report.pdf")
    file = ClipboardEntry.from_file("/tmp/report.pdf")
    group = ClipboardEntry.from_file_group(["/tmp/report.pdf"])
    assert not text.is_duplicate(file)
    assert not file.is_duplicate(group)


def test_file_group_order_matters():
    a = ClipboardEntry.from_file_group(["/a", "/b"])
    b = ClipboardEntry.from_file_group(["/a", "/b"])
    c = ClipboardEntry.from_file_group(["/b", "/a"])
    assert a.is_duplicate(b)
    assert not a.is_duplicate(c)


def test_image_duplicates_compare_bytes():
    assert ClipboardEntry.from_image(b"\x89PNG1").is_duplicate(ClipboardEntry.from_image(b"\x89PNG1"))
    assert not ClipboardEntry.from_image(b"\x89PNG1").is_duplicate(ClipboardEntry.from_image(b"\x89PNG2"))


def test_payload_and_identity_are_frozen():
    entry = ClipboardEntry.from_text("x")
    with pytest.raises(ValidationError):
        entry.payload = TextPayload(text="y")
    with pytest.raises(ValidationError):
        entry.id = "i_other"
    with pytest.raises(ValidationError):
        entry.captured_at = datetime.now(timezone.utc)
    with pytest.raises(ValidationError):
        entry.payload.text = "y"


def test_pin_flag_is_mutable():
    entry = ClipboardEntry.from_text("x")
    entry.is_pinned = True
    assert entry.is_pinned


@pytest.mark.parametrize("payload", [
    {"kind": "video", "data": "AAAA"},
    {"kind": "file", "path": ""},
    {"kind": "fileGroup", "paths": []},
    {"text": "no kind"},
])
def test_malformed_payload_rejected(payload):
    with pytest.raises(ValidationError):
        ClipboardEntry(payload=payload)


def test_naive_capture_time_is_taken_as_utc():
    entry = ClipboardEntry.from_text("x", captured_at=datetime(2025, 4, 12, 12, 0))
    assert entry.captured_at.tzinfo is not None
    assert entry.captured_at == datetime(2025, 4, 12, 12, 0, tzinfo=timezone.utc)


def test_to_dict_uses_camel_case_and_base64_images():
    entry = ClipboardEntry.from_image(b"\x00\x01\xff", is_pinned=True)
    data = entry.to_dict()
    assert data["isPinned"] is True
    assert data["payload"] == {"kind": "image", "data": "AAH/"}

    restored = ClipboardEntry.from_dict(data)
    assert restored == entry
    assert isinstance(restored.payload, ImagePayload)
    assert restored.payload.data == b"\x00\x01\xff"


def test_from_dict_builds_the_right_variant():
    entry = ClipboardEntry.from_dict({
        "id": "i_1",
        "payload": {"kind": "fileGroup", "paths": ["/a", "/b"]},
        "isPinned": False,
        "capturedAt": "2025-04-12T12:00:00Z",
    })
    assert isinstance(entry.payload, FileGroupPayload)
    assert entry.payload.paths == ("/a", "/b")
    assert entry.kind == "fileGroup"


def test_previews():
    assert ClipboardEntry.from_text("  first line\nsecond").preview() == "first line"
    assert ClipboardEntry.from_text("x" * 100).preview(10) == "x" * 10 + "…"
    assert ClipboardEntry.from_image(b"\0" * 4096).preview() == "[Image 4KB]"
    assert ClipboardEntry(payload=FilePayload(path="/home/me/notes.txt")).preview() == "file: notes.txt"
    assert ClipboardEntry.from_file_group(["/a/x.png", "/a/y.png"]).preview() == "2 files: x.png, y.png"
