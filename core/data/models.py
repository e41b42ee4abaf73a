"""
Data models for the Tracked Attachments Console.

This module defines data structures used throughout the application:
- Tracked attachment entity as exchanged with the API
- Editor draft and editor mode
- Encoded file representation
- MIME type icon lookup
"""

from dataclasses import dataclass, replace
from typing import Dict, Any, Optional
from datetime import datetime
from enum import Enum

from core.utils.helpers import parse_timestamp

DATA_URI_PREFIX = "data:"
DATA_URI_BASE64_MARKER = ";base64,"
COPY_NAME_PREFIX = "Copy of "

DEFAULT_ICON = "fa-file-o"

ICONS_BY_TYPE: Dict[str, str] = {
    "application/vnd.ms-excel": "fa-file-excel-o",
    "text/plain": "fa-file-text-o",
    "image/gif": "fa-file-image-o",
    "image/png": "fa-file-image-o",
    "application/pdf": "fa-file-pdf-o",
    "application/x-zip-compressed": "fa-file-archive-o",
    "application/x-gzip": "fa-file-archive-o",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation": "fa-file-powerpoint-o",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": "fa-file-word-o",
    "application/octet-stream": DEFAULT_ICON,
    "application/x-msdownload": DEFAULT_ICON,
}


def icon_for_type(mime_type: Optional[str]) -> str:
    """Icon class for a MIME type, the generic file icon when unmapped."""
    return ICONS_BY_TYPE.get(mime_type or "", DEFAULT_ICON)


def build_data_uri(mime_type: str, base64_content: str) -> str:
    """Compose 'data:<mime>;base64,<payload>'."""
    return f"{DATA_URI_PREFIX}{mime_type}{DATA_URI_BASE64_MARKER}{base64_content}"


@dataclass(frozen=True)
class EncodedFile:
    """Result of reading a file: its MIME type and base64 payload."""

    mime_type: str
    base64: str
    filename: str = ""

    @property
    def data_uri(self) -> str:
        return build_data_uri(self.mime_type, self.base64)


@dataclass
class TrackedAttachment:
    """Tracked attachment entity."""

    name: str
    filename: str = ""
    type: str = ""
    content: str = ""
    id: Optional[int] = None
    modified_date: Optional[datetime] = None

    @property
    def is_persisted(self) -> bool:
        return self.id is not None

    @property
    def icon(self) -> str:
        return icon_for_type(self.type)

    @property
    def data_uri(self) -> str:
        return build_data_uri(self.type, self.content)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to the API request body.

        The id is only included once assigned; modified_date is server-owned
        and never sent.
        """
        data: Dict[str, Any] = {
            'name': self.name,
            'filename': self.filename,
            'type': self.type,
            'content': self.content,
        }
        if self.id is not None:
            data['id'] = self.id
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TrackedAttachment':
        """Create from an API response object."""
        raw_id = data.get('id')
        return cls(
            id=int(raw_id) if raw_id not in (None, 0, "") else None,
            name=data.get('name') or "",
            filename=data.get('filename') or "",
            type=data.get('type') or "",
            content=data.get('content') or "",
            modified_date=parse_timestamp(data.get('modified_date')),
        )


class ModeKind(Enum):
    """Editor mode tag."""
    CREATE = "create"
    EDIT = "edit"
    COPY = "copy"


@dataclass(frozen=True)
class EditorMode:
    """
    Tagged editor mode: Create, Edit(index) or Copy(index).

    Edit and Copy carry the index of the backing attachment in the current
    snapshot; Create carries none.
    """

    kind: ModeKind
    index: Optional[int] = None

    def __post_init__(self):
        if self.kind is ModeKind.CREATE:
            if self.index is not None:
                raise ValueError("Create mode takes no backing index")
        elif self.index is None or self.index < 0:
            raise ValueError(f"{self.kind.value} mode requires a backing index, got {self.index!r}")

    @classmethod
    def create(cls) -> 'EditorMode':
        return cls(ModeKind.CREATE)

    @classmethod
    def edit(cls, index: int) -> 'EditorMode':
        return cls(ModeKind.EDIT, index)

    @classmethod
    def copy(cls, index: int) -> 'EditorMode':
        return cls(ModeKind.COPY, index)

    @property
    def submits_update(self) -> bool:
        """Edit submits an update; Create and Copy submit a create."""
        return self.kind is ModeKind.EDIT

    def __str__(self) -> str:
        if self.index is None:
            return self.kind.value
        return f"{self.kind.value}({self.index})"


@dataclass
class AttachmentDraft:
    """Working copy of an attachment's fields held by an open editor."""

    name: str = ""
    filename: str = ""
    type: str = ""
    content: str = ""
    id: Optional[int] = None

    @classmethod
    def blank(cls) -> 'AttachmentDraft':
        return cls()

    @classmethod
    def from_attachment(cls, attachment: TrackedAttachment, as_copy: bool = False) -> 'AttachmentDraft':
        """
        Seed a draft from a persisted attachment.

        A copy gets the name prefix and never the source id.
        """
        if as_copy:
            return cls(
                name=COPY_NAME_PREFIX + attachment.name,
                filename=attachment.filename,
                type=attachment.type,
                content=attachment.content,
            )
        return cls(
            name=attachment.name,
            filename=attachment.filename,
            type=attachment.type,
            content=attachment.content,
            id=attachment.id,
        )

    @property
    def has_file(self) -> bool:
        return bool(self.content and self.type)

    @property
    def icon(self) -> str:
        return icon_for_type(self.type)

    @property
    def data_uri(self) -> str:
        """Preview URI, empty when no file has been selected."""
        if not self.has_file:
            return ""
        return build_data_uri(self.type, self.content)

    @property
    def is_empty(self) -> bool:
        return not (self.name or self.filename or self.type or self.content) and self.id is None

    def with_file(self, encoded: EncodedFile) -> 'AttachmentDraft':
        """Copy of the draft with filename, type and content from one file read."""
        return replace(self, filename=encoded.filename, type=encoded.mime_type, content=encoded.base64)

    def to_attachment(self) -> TrackedAttachment:
        """Promote the draft to an entity for submission."""
        return TrackedAttachment(
            id=self.id,
            name=self.name,
            filename=self.filename,
            type=self.type,
            content=self.content,
        )
