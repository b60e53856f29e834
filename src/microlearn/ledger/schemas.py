"""Request/response schemas for hint endpoints."""

from __future__ import annotations

from typing import Any
from uuid import UUID

from pydantic import BaseModel


class UseHintRequest(BaseModel):
    content_node_id: UUID


class UseHintResponse(BaseModel):
    hint: Any
    remaining_credits: int
