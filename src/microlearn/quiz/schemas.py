"""Request/response schemas for quiz endpoints."""

from __future__ import annotations

from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


class GenerateQuizRequest(BaseModel):
    content_node_id: UUID


class GenerateQuizResponse(BaseModel):
    attempt_id: str
    questions: list[Any]


class SubmitQuizRequest(BaseModel):
    attempt_id: str = Field(min_length=1, max_length=64)
    user_answers: list[Any] | dict[str, Any]

    @field_validator("user_answers")
    @classmethod
    def _not_empty(cls, value: list[Any] | dict[str, Any]) -> list[Any] | dict[str, Any]:
        if not value:
            raise ValueError("user_answers must not be empty")
        return value


class SubmitQuizResponse(BaseModel):
    attempt_id: str
    score: float
    status: str
    results: list[Any]


class AttemptResponse(BaseModel):
    attempt_id: str
    content_node_id: str
    state: str
    status: str | None
    score: float | None
    questions: list[Any]
    results: list[Any] | None
