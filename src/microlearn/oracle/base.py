"""
Capability interfaces for the external collaborators.

The core treats every oracle as opaque: trusted for availability, not for
correctness. Implementations raise ``OracleUnavailable`` for any transport
failure, timeout, error status or malformed reply, and never retry
internally; the caller decides whether to retry.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from microlearn.errors import ExternalDependencyFailure


class OracleUnavailable(ExternalDependencyFailure):
    """An external collaborator failed or answered something unusable."""


@dataclass(frozen=True)
class QuizEvaluation:
    score: float
    results: list[Any] = field(default_factory=list)


@dataclass(frozen=True)
class VideoLinks:
    download: str | None
    view: str | None


class Oracle(ABC):
    """Recommendation, quiz and report-generation service."""

    @abstractmethod
    async def recommend(self, user_id: int) -> str | None:
        """Return the next content node id for a user, or None."""
        ...

    @abstractmethod
    async def generate_quiz(self, source_text: str) -> list[Any]:
        """Produce a question set from source material."""
        ...

    @abstractmethod
    async def evaluate_quiz(self, questions: list[Any], user_answers: Any) -> QuizEvaluation:
        """Score answers against questions. ``score`` is in [0, 1]."""
        ...

    @abstractmethod
    async def request_report(self, user_id: int) -> None:
        """Ask the generator to build a new learner report."""
        ...


class LinkResolver(ABC):
    """Turns a stored file reference into view/download URLs."""

    @abstractmethod
    async def resolve(self, file_reference: str) -> VideoLinks:
        ...
