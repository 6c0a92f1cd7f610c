"""
Push notification texts and client routes.

Texts are formatted with the sender display name ({sender}) and exhibition title ({title}).
"""

from artmarket.constants.statuses import ExhibitionStatus

ROUTE_CHAT = "/chat"
ROUTE_EXHIBITIONS = "/exhibitions"
ROUTE_ORDERS = "/orders"

EXHIBITION_PUSH_TEXTS: dict[ExhibitionStatus, tuple[str, str]] = {
    ExhibitionStatus.REQUESTED: (
        "New exhibition request",
        "{sender} would like to exhibit with you",
    ),
    ExhibitionStatus.ACCEPTED: (
        "Exhibition request accepted",
        "{sender} accepted the exhibition request",
    ),
    ExhibitionStatus.CANCELED: (
        "Exhibition request canceled",
        "{sender} canceled the exhibition request",
    ),
    ExhibitionStatus.DECLINED: (
        "Exhibition request declined",
        "{sender} declined the exhibition request",
    ),
    ExhibitionStatus.REVIEW: (
        "Exhibition details ready",
        "{sender} sent the details of {title} for review",
    ),
    ExhibitionStatus.DETAILS_ACCEPTED: (
        "Details accepted",
        "{sender} accepted the details of {title}",
    ),
    ExhibitionStatus.DETAILS_CHANGED: (
        "Details changed",
        "{sender} changed the details of {title}",
    ),
    ExhibitionStatus.OPEN: (
        "Exhibition open",
        "{title} is now open",
    ),
    ExhibitionStatus.CLOSED: (
        "Exhibition closed",
        "{title} has closed",
    ),
}

PURCHASE_PUSH_TEXT = ("Artwork sold", "{sender} bought {title}")
CHAT_MESSAGE_PUSH_TITLE = "New message from {sender}"

# Chat message bodies are cut to this length in push and notification records
CHAT_MESSAGE_PREVIEW_LENGTH = 120
