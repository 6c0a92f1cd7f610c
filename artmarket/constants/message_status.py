"""
Message payload status - the (senderStatus, receiverStatus) pair carried by action messages.

PayloadStatus is a closed type: only the pairs in ALLOWED_PAYLOAD_STATUSES can be built,
so a typo in a workflow table entry fails at import time instead of reaching clients.
"""

from dataclasses import dataclass
from enum import Enum


class MessageStatus(str, Enum):
    REQUESTED = "requested"
    REQUEST_WAITING_APPROVE = "request_waiting_approve"
    REQUEST_ACCEPTED = "request_accepted"
    REQUEST_CANCELED = "request_canceled"
    REQUEST_DECLINED = "request_declined"
    WAITING_DETAILS = "waiting_details"
    WAITING_REVIEW = "waiting_review"
    CHECK_DETAILS = "check_details"
    DETAILS_ACCEPTED = "details_accepted"
    DETAILS_CHANGED = "details_changed"
    WAITING_OPENING = "waiting_opening"
    OPEN = "open"
    VIEW_EXHIBITION = "view_exhibition"
    # Canonical terminal value; "close" is never written
    CLOSED = "closed"


@dataclass(frozen=True)
class PayloadStatus:
    sender: MessageStatus
    receiver: MessageStatus

    def __post_init__(self) -> None:
        if (self.sender, self.receiver) not in _ALLOWED_PAIRS:
            raise ValueError(
                f"Invalid payload status pair: ({self.sender.value}, {self.receiver.value})"
            )

    @classmethod
    def both(cls, status: MessageStatus) -> "PayloadStatus":
        """Pair where sender and receiver see the same status."""
        return cls(status, status)

    def as_payload(self) -> dict[str, str]:
        return {"senderStatus": self.sender.value, "receiverStatus": self.receiver.value}


_ALLOWED_PAIRS = frozenset(
    {
        (MessageStatus.REQUESTED, MessageStatus.REQUEST_WAITING_APPROVE),
        (MessageStatus.REQUEST_ACCEPTED, MessageStatus.REQUEST_ACCEPTED),
        (MessageStatus.REQUEST_CANCELED, MessageStatus.REQUEST_CANCELED),
        (MessageStatus.REQUEST_DECLINED, MessageStatus.REQUEST_DECLINED),
        (MessageStatus.WAITING_DETAILS, MessageStatus.WAITING_DETAILS),
        (MessageStatus.WAITING_REVIEW, MessageStatus.CHECK_DETAILS),
        (MessageStatus.DETAILS_ACCEPTED, MessageStatus.DETAILS_ACCEPTED),
        (MessageStatus.DETAILS_CHANGED, MessageStatus.DETAILS_CHANGED),
        (MessageStatus.WAITING_OPENING, MessageStatus.WAITING_OPENING),
        (MessageStatus.OPEN, MessageStatus.OPEN),
        (MessageStatus.VIEW_EXHIBITION, MessageStatus.VIEW_EXHIBITION),
        (MessageStatus.CLOSED, MessageStatus.CLOSED),
    }
)

ALLOWED_PAYLOAD_STATUSES = frozenset(PayloadStatus(s, r) for s, r in _ALLOWED_PAIRS)

# Named pairs used by the workflow table
REQUEST_PENDING = PayloadStatus(MessageStatus.REQUESTED, MessageStatus.REQUEST_WAITING_APPROVE)
REVIEW_PENDING = PayloadStatus(MessageStatus.WAITING_REVIEW, MessageStatus.CHECK_DETAILS)
