"""
Document snapshot schemas.

Snapshots arrive with the client's camelCase keys; models accept those aliases and
expose snake_case attributes. Unknown keys are ignored, missing optional values become
None (or [] for list fields, as clients write null lists).
"""

import json
from datetime import UTC, datetime
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from artmarket.constants.statuses import ArtworkStatus, ExhibitionStatus, MessageType
from artmarket.core.errors import InvalidDocumentError

DocumentT = TypeVar("DocumentT", bound=BaseModel)


def _timestamp(value: Any) -> Any:
    """Accept {"_seconds": .., "_nanoseconds": ..} store timestamps besides ISO strings."""
    if isinstance(value, dict):
        seconds = value.get("_seconds", value.get("seconds"))
        if seconds is None:
            return value
        nanos = value.get("_nanoseconds", value.get("nanoseconds")) or 0
        return datetime.fromtimestamp(seconds + nanos / 1e9, tz=UTC)
    return value


def _ids(value: Any) -> Any:
    """Artwork lists hold either ids or artwork snapshots; keep the ids."""
    if value is None:
        return []
    if isinstance(value, list):
        return [item.get("id") if isinstance(item, dict) else item for item in value]
    return value


class DocumentModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class Dimensions(DocumentModel):
    height: float | None = None
    width: float | None = None
    thickness: float | None = None


class ArtworkDocument(DocumentModel):
    id: str | None = None
    key: str | None = None
    category: str | None = None
    title: str | None = None
    user_name: str | None = Field(None, alias="userName")
    user_id: str | None = Field(None, alias="userId")
    description: str | None = None
    dimensions: Dimensions | None = None
    edition: str | None = None
    images: list[Any] = []
    orientation: str | None = None
    status: ArtworkStatus = ArtworkStatus.AVAILABLE
    keywords: list[str] = []
    materials: list[str] = []
    styles: list[Any] = []
    year: str | None = None
    price: float | None = None
    frame: bool = False
    commerce: dict[str, Any] | None = None
    venue: dict[str, Any] | None = None

    @field_validator("images", "keywords", "materials", "styles", mode="before")
    @classmethod
    def null_list_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("year", "edition", mode="before")
    @classmethod
    def number_as_text(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int | float) else value

    @field_validator("frame", mode="before")
    @classmethod
    def null_frame_as_false(cls, value: Any) -> Any:
        return False if value is None else value

    @property
    def is_complete(self) -> bool:
        return bool(self.title and self.category)


class ExhibitionDocument(DocumentModel):
    id: str | None = None
    title: str | None = None
    status: ExhibitionStatus
    creator_id: str | None = Field(None, alias="creatorId")
    members: list[str] = []
    created_at: datetime | None = Field(None, alias="createdAt")
    last_edited_at: datetime | None = Field(None, alias="lastEditedAt")
    edited_by: str | None = Field(None, alias="editedBy")
    start_date: datetime | None = Field(None, alias="startDate")
    end_date: datetime | None = Field(None, alias="endDate")
    venue: dict[str, Any] | None = None
    artist: dict[str, Any] | None = None
    chat_room_id: str | None = Field(None, alias="chatRoomId")
    artworks: list[str] = []

    @field_validator("created_at", "last_edited_at", "start_date", "end_date", mode="before")
    @classmethod
    def parse_timestamps(cls, value: Any) -> Any:
        return _timestamp(value)

    @field_validator("artworks", mode="before")
    @classmethod
    def artwork_ids(cls, value: Any) -> Any:
        return _ids(value)

    @field_validator("members", mode="before")
    @classmethod
    def null_members_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @property
    def is_complete(self) -> bool:
        return bool(self.creator_id) and len(self.members) == 2

    def counterpart_of(self, user_id: str | None) -> str | None:
        """The other member, or None if user_id is not a member."""
        if user_id not in self.members:
            return None
        return next((m for m in self.members if m != user_id), None)


class MessageDocument(DocumentModel):
    id: str | None = None
    type: MessageType = MessageType.MESSAGE
    sender_id: str | None = Field(None, alias="senderId")
    created_at: datetime | None = Field(None, alias="createdAt")
    read: bool = False
    text: str | None = None
    payload: dict[str, Any] | None = None

    @field_validator("created_at", mode="before")
    @classmethod
    def parse_timestamps(cls, value: Any) -> Any:
        return _timestamp(value)


class OrderDocument(DocumentModel):
    id: str | None = None
    artworks: list[str] = []
    status: str | None = None
    total: float | None = None
    buyer_name: str | None = Field(None, alias="buyerName")

    @field_validator("artworks", mode="before")
    @classmethod
    def artwork_ids(cls, value: Any) -> Any:
        return _ids(value)


def parse_document(model: type[DocumentT], data: dict | None, **overrides: Any) -> DocumentT:
    """
    Validate a snapshot against its schema.

    Args:
        model: Document schema
        data: Raw snapshot (camelCase keys)
        overrides: Values that win over the snapshot (e.g. id from the document path)

    Raises:
        InvalidDocumentError: If the snapshot is missing or does not match the schema
    """
    if data is None:
        raise InvalidDocumentError(f"Missing {model.__name__} snapshot")
    try:
        return model.model_validate({**data, **overrides})
    except ValidationError as e:
        raise InvalidDocumentError(f"Invalid {model.__name__}", errors=json.loads(e.json())) from e
