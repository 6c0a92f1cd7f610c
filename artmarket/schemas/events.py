"""
Trigger event envelope delivered by the document-store event dispatcher.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class DocumentEvent(BaseModel):
    """
    One create/update/delete of a stored document.

    before is None for creates, after is None for deletes. Document ids come from the
    endpoint path; other envelope keys the dispatcher adds are ignored.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    event_id: str | None = Field(None, alias="eventId", max_length=255)
    before: dict[str, Any] | None = None
    after: dict[str, Any] | None = None


class TriggerResponse(BaseModel):
    processed: bool
    duplicate: bool = False
    reason: str | None = None
