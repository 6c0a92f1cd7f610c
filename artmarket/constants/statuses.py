"""
Status and type constants - centralized to avoid circular imports.

Every stored status/type field is one of these enums. Values are the exact strings
written to documents, so clients and the search index see the same literals.
"""

from enum import Enum


class ExhibitionStatus(str, Enum):
    """Exhibition request lifecycle."""

    REQUESTED = "REQUESTED"  # Initial state, set by the request action
    ACCEPTED = "ACCEPTED"
    REVIEW = "REVIEW"
    DETAILS_ACCEPTED = "DETAILS_ACCEPTED"
    DETAILS_CHANGED = "DETAILS_CHANGED"
    OPEN = "OPEN"
    CLOSED = "CLOSED"
    DECLINED = "DECLINED"
    CANCELED = "CANCELED"


class ArtworkStatus(str, Enum):
    AVAILABLE = "Available"
    SOLD = "Sold"
    EXHIBITED = "Exhibited"


class MessageType(str, Enum):
    MESSAGE = "message"  # Free text written by a member
    ACTION = "action"  # Workflow-generated, carries a payload


class NotificationType(str, Enum):
    PURCHASE = "Purchase"
    REQUEST_EXHIBITION = "RequestExhibition"
    MESSAGE = "Message"


class NotificationCategory(str, Enum):
    """Per-user opt-in categories for push delivery."""

    EXHIBITIONS = "exhibitions"
    MESSAGES = "messages"
    PURCHASES = "purchases"


# Order status written into Purchase notifications when the order carries none
ORDER_STATUS_PAID = "PAID"
