"""
Event type constants for SystemEvent and ProcessedEvent.

Use these instead of string literals to ensure consistency.
"""

# ---- Trigger names (ProcessedEvent.trigger) ----
TRIGGER_ARTWORK_CREATED = "artworks.created"
TRIGGER_ARTWORK_UPDATED = "artworks.updated"
TRIGGER_ARTWORK_DELETED = "artworks.deleted"
TRIGGER_EXHIBITION_CREATED = "exhibitions.created"
TRIGGER_EXHIBITION_UPDATED = "exhibitions.updated"
TRIGGER_CHAT_MESSAGE_CREATED = "chat_messages.created"
TRIGGER_ORDER_CREATED = "orders.created"

# ---- Skipped input ----
EVENT_DOCUMENT_INCOMPLETE = "document.incomplete"

# ---- Push ----
EVENT_PUSH_DELIVERY_FAILURE = "push.delivery_failure"

# ---- Workflow ----
EVENT_WORKFLOW_EDITOR_MISSING = "exhibition.editor_missing"
EVENT_WORKFLOW_CHAT_ROOM_MISSING = "exhibition.chat_room_missing"

# ---- Search ----
EVENT_SEARCH_SYNC_FAILURE = "search.sync_failure"
