"""Interaction request schemas and the queued event envelope.

Stream entries are flat string maps:
{
    "event_id": "<uuid4>",
    "user_id": "42",
    "content_node_id": "<uuid>",
    "interaction_type": "VIDEO_COMPLETED",
    "data": "{...json object...}",
    "timestamp": "2026-01-01T12:00:00.123456+00:00"
}

``timestamp`` is the acceptance time and never changes on redelivery.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from microlearn.db.models import InteractionType


class InvalidEventEntry(ValueError):
    """A stream entry that cannot be decoded into an InteractionEvent."""


class InteractionRequest(BaseModel):
    """Client-submitted interaction. ``data`` is schema-free beyond being an object."""

    content_node_id: UUID
    interaction_type: InteractionType
    data: dict[str, Any] = Field(default_factory=dict)


class InteractionAccepted(BaseModel):
    status: str = "accepted"
    event_id: str
    accepted_at: datetime


class InteractionEvent(BaseModel):
    """Envelope carried through the stream from acceptance to storage."""

    event_id: str
    user_id: int
    content_node_id: str
    interaction_type: InteractionType
    data: dict[str, Any]
    timestamp: datetime

    def to_fields(self) -> dict[str, str]:
        """Encode as the flat string map stored in the stream."""
        return {
            "event_id": self.event_id,
            "user_id": str(self.user_id),
            "content_node_id": self.content_node_id,
            "interaction_type": self.interaction_type.value,
            "data": json.dumps(self.data, separators=(",", ":"), default=str),
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_fields(cls, fields: dict[str, str] | None) -> InteractionEvent:
        """Decode a stream entry. Raises InvalidEventEntry on anything malformed."""
        if not fields:
            raise InvalidEventEntry("empty stream entry")
        try:
            data = json.loads(fields.get("data") or "{}")
        except json.JSONDecodeError as e:
            raise InvalidEventEntry(f"data is not JSON: {e}") from e
        if not isinstance(data, dict):
            raise InvalidEventEntry("data is not a JSON object")
        try:
            return cls(
                event_id=fields.get("event_id", ""),
                user_id=fields.get("user_id", ""),
                content_node_id=fields.get("content_node_id", ""),
                interaction_type=fields.get("interaction_type", ""),
                data=data,
                timestamp=fields.get("timestamp", ""),
            )
        except PydanticValidationError as e:
            raise InvalidEventEntry(str(e)) from e
