"""
Clipboard entry model.

An entry is an immutable payload plus a mutable pin flag. The payload is a
closed union discriminated by ``kind``; each variant knows how to describe
its own content for duplicate matching and for display.
"""

import base64
import os
from abc import abstractmethod
from datetime import datetime, timezone
from typing import Annotated, Any, Literal, Sequence, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel
from ulid import ULID

PREVIEW_LENGTH = 80


def new_entry_id() -> str:
    return f"i_{ULID()}"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BasePayload(BaseModel):
    model_config = ConfigDict(frozen=True)

    @abstractmethod
    def content_key(self) -> Tuple[Any, ...]:
        """Kind-tagged content used for duplicate matching."""

    @abstractmethod
    def preview(self, max_len: int = PREVIEW_LENGTH) -> str:
        """Short human-readable description."""


class TextPayload(BasePayload):
    kind: Literal["text"] = "text"
    text: str

    def content_key(self) -> Tuple[Any, ...]:
        return ("text", self.text)

    def preview(self, max_len: int = PREVIEW_LENGTH) -> str:
        line = self.text.strip().split("\n")[0].strip()
        return line[:max_len] + ("…" if len(line) > max_len else "")


class ImagePayload(BasePayload):
    kind: Literal["image"] = "image"
    data: bytes

    @field_validator("data", mode="before")
    @classmethod
    def _decode_base64(cls, value: Any) -> Any:
        # JSON documents carry the blob as base64
        if isinstance(value, str):
            return base64.b64decode(value, validate=True)
        return value

    @field_serializer("data", when_used="json")
    def _encode_base64(self, value: bytes) -> str:
        return base64.b64encode(value).decode("ascii")

    def content_key(self) -> Tuple[Any, ...]:
        return ("image", self.data)

    def preview(self, max_len: int = PREVIEW_LENGTH) -> str:
        return f"[Image {len(self.data) // 1024}KB]"


class FilePayload(BasePayload):
    kind: Literal["file"] = "file"
    path: str = Field(..., min_length=1)

    def content_key(self) -> Tuple[Any, ...]:
        return ("file", self.path)

    def preview(self, max_len: int = PREVIEW_LENGTH) -> str:
        return f"file: {os.path.basename(self.path) or self.path}"[:max_len]


class FileGroupPayload(BasePayload):
    kind: Literal["fileGroup"] = "fileGroup"
    paths: Tuple[Annotated[str, Field(min_length=1)], ...] = Field(..., min_length=1)

    def content_key(self) -> Tuple[Any, ...]:
        return ("fileGroup", self.paths)

    def preview(self, max_len: int = PREVIEW_LENGTH) -> str:
        names = ", ".join(os.path.basename(p) or p for p in self.paths)
        text = f"{len(self.paths)} files: {names}"
        return text[:max_len] + ("…" if len(text) > max_len else "")


PayloadUnion = Union[TextPayload, ImagePayload, FilePayload, FileGroupPayload]
Payload = Annotated[PayloadUnion, Field(discriminator="kind")]


class ClipboardEntry(BaseModel):
    """One captured clipboard item.

    ``id``, ``payload`` and ``captured_at`` are fixed at construction; only
    ``is_pinned`` may be reassigned, and the history store is the only code
    that does so.
    """

    id: str = Field(default_factory=new_entry_id, min_length=1, frozen=True)
    payload: PayloadUnion = Field(..., discriminator="kind", frozen=True)
    is_pinned: bool = False
    captured_at: datetime = Field(default_factory=utcnow, frozen=True)

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
        json_schema_extra={
            "examples": [
                {
                    "id": "i_01J9ZQ4W7E8X3M5K2N6P0R1S2T",
                    "payload": {"kind": "text", "text": "Sample clipboard text"},
                    "isPinned": False,
                    "capturedAt": "2025-04-12T12:00:00Z",
                }
            ]
        },
    )

    @field_validator("captured_at")
    @classmethod
    def _ensure_aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @classmethod
    def from_text(cls, text: str, **kwargs: Any) -> "ClipboardEntry":
        return cls(payload=TextPayload(text=text), **kwargs)

    @classmethod
    def from_image(cls, data: bytes, **kwargs: Any) -> "ClipboardEntry":
        return cls(payload=ImagePayload(data=data), **kwargs)

    @classmethod
    def from_file(cls, path: str, **kwargs: Any) -> "ClipboardEntry":
        return cls(payload=FilePayload(path=path), **kwargs)

    @classmethod
    def from_file_group(cls, paths: Sequence[str], **kwargs: Any) -> "ClipboardEntry":
        return cls(payload=FileGroupPayload(paths=tuple(paths)), **kwargs)

    @property
    def kind(self) -> str:
        return self.payload.kind

    def is_duplicate(self, other: "ClipboardEntry") -> bool:
        """Same payload kind and equal content; id, pin and time are ignored."""
        return self.payload.content_key() == other.payload.content_key()

    def preview(self, max_len: int = PREVIEW_LENGTH) -> str:
        return self.payload.preview(max_len)

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_dict(cls, data: dict) -> "ClipboardEntry":
        return cls.model_validate(data)


def entry_id_of(entry_or_id: Union["ClipboardEntry", str]) -> str:
    if isinstance(entry_or_id, ClipboardEntry):
        return entry_or_id.id
    return entry_or_id


__all__ = [
    "ClipboardEntry",
    "TextPayload",
    "ImagePayload",
    "FilePayload",
    "FileGroupPayload",
    "Payload",
    "PayloadUnion",
    "new_entry_id",
    "entry_id_of",
    "utcnow",
]
