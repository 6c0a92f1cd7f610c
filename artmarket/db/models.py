from datetime import datetime
from typing import Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from artmarket.constants.statuses import ArtworkStatus
from artmarket.db.base import Base


class User(Base):
    """Read-only here: profile lookups for notification delivery."""
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    display_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    avatar_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # Push delivery
    push_token: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    notify_exhibitions: Mapped[bool] = mapped_column(Boolean, default=True)
    notify_messages: Mapped[bool] = mapped_column(Boolean, default=True)
    notify_purchases: Mapped[bool] = mapped_column(Boolean, default=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class Artwork(Base):
    __tablename__ = "artworks"

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    key: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Creator identity
    user_id: Mapped[str] = mapped_column(String(128), index=True)
    user_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    dimensions: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)  # height, width, thickness
    edition: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    images: Mapped[list] = mapped_column(JSON, default=list)
    orientation: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    status: Mapped[str] = mapped_column(String(32), default=ArtworkStatus.AVAILABLE.value)
    keywords: Mapped[list] = mapped_column(JSON, default=list)
    materials: Mapped[list] = mapped_column(JSON, default=list)
    styles: Mapped[list] = mapped_column(JSON, default=list)
    year: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    price: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    frame: Mapped[bool] = mapped_column(Boolean, default=False)

    # External commerce linkage (product id / url in the shop integration)
    commerce: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    # Venue snapshot, attached when an exhibition opens
    venue: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class Exhibition(Base):
    __tablename__ = "exhibitions"

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)  # Set with details
    status: Mapped[str] = mapped_column(String(32), index=True)

    creator_id: Mapped[str] = mapped_column(String(128), index=True)
    members: Mapped[list] = mapped_column(JSON, default=list)  # [creator, counterpart]

    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    last_edited_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    edited_by: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)

    start_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    end_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Denormalized snapshots
    venue: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    artist: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)

    chat_room_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    artworks: Mapped[list] = mapped_column(JSON, default=list)  # Artwork ids


class ChatRoom(Base):
    __tablename__ = "chat_rooms"

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    # Back-reference, one chat room per exhibition
    exhibition_id: Mapped[Optional[str]] = mapped_column(String(128), unique=True, nullable=True)
    members: Mapped[list] = mapped_column(JSON, default=list)
    creator_id: Mapped[str] = mapped_column(String(128))
    seen: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    messages: Mapped[list["ChatMessage"]] = relationship("ChatMessage", back_populates="chat_room", cascade="all, delete-orphan")


class ChatMessage(Base):
    __tablename__ = "chat_messages"

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    chat_room_id: Mapped[str] = mapped_column(String(128), ForeignKey("chat_rooms.id"), index=True)
    type: Mapped[str] = mapped_column(String(20))  # message, action
    sender_id: Mapped[str] = mapped_column(String(128))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    read: Mapped[bool] = mapped_column(Boolean, default=False)
    text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # {senderStatus, receiverStatus, exhibition}; patched as the exhibition progresses
    payload: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    # Mirrors of payload statuses so they can be filtered without JSON operators
    sender_status: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    receiver_status: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)

    chat_room: Mapped["ChatRoom"] = relationship("ChatRoom", back_populates="messages")


class Notification(Base):
    __tablename__ = "notifications"

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(128), index=True)  # Recipient
    sender_name: Mapped[str] = mapped_column(String(255), default="")
    type: Mapped[str] = mapped_column(String(32))  # Purchase, RequestExhibition, Message
    status: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    image: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    reference_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)  # Exhibition/chat/order id
    seen: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class UserArtworks(Base):
    """Per-user aggregate of the user's artworks (search facets and price range)."""
    __tablename__ = "users_artworks"

    user_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    user_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    artwork_count: Mapped[int] = mapped_column(Integer, default=0)
    min_price: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    max_price: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    has_frame: Mapped[bool] = mapped_column(Boolean, default=False)
    filters: Mapped[dict] = mapped_column(JSON, default=dict)
    keywords: Mapped[list] = mapped_column(JSON, default=list)
    artwork_ids: Mapped[list] = mapped_column(JSON, default=list)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class Order(Base):
    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(128), index=True)  # Buyer
    artwork_ids: Mapped[list] = mapped_column(JSON, default=list)
    status: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    total: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class ProcessedEvent(Base):
    """Idempotency table - stores handled trigger event ids so redeliveries are skipped."""
    __tablename__ = "processed_events"
    __table_args__ = (UniqueConstraint("trigger", "event_id", name="uq_processed_events_trigger_event_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    trigger: Mapped[str] = mapped_column(String(64))
    event_id: Mapped[str] = mapped_column(String(255), index=True)
    processed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class SystemEvent(Base):
    """Structured log of failures and skips worth auditing."""
    __tablename__ = "system_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), index=True)
    level: Mapped[str] = mapped_column(String(10))  # INFO, WARN, ERROR
    event_type: Mapped[str] = mapped_column(String(100), index=True)
    reference_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True, index=True)
    payload: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
