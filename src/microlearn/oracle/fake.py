"""Deterministic in-process oracle and link resolver for tests and local runs."""

from __future__ import annotations

import re
from typing import Any

from microlearn.oracle.base import LinkResolver, Oracle, OracleUnavailable, QuizEvaluation, VideoLinks


class FakeOracle(Oracle):
    """Scriptable oracle.

    - ``generate_quiz`` turns each sentence of the source text into one
      question whose expected answer is the sentence's last word (capped at
      ``question_count``).
    - ``evaluate_quiz`` compares answers positionally against those expected
      answers, unless ``fixed_score`` forces the score.
    - ``unavailable=True`` makes every call raise ``OracleUnavailable``.
    """

    def __init__(
        self,
        *,
        recommendation: str | None = None,
        fixed_score: float | None = None,
        question_count: int = 5,
        unavailable: bool = False,
    ) -> None:
        self.recommendation = recommendation
        self.fixed_score = fixed_score
        self.question_count = question_count
        self.unavailable = unavailable
        self.calls: list[tuple[str, Any]] = []

    def _check(self, name: str, arg: Any) -> None:
        self.calls.append((name, arg))
        if self.unavailable:
            raise OracleUnavailable()

    async def recommend(self, user_id: int) -> str | None:
        self._check("recommend", user_id)
        return self.recommendation

    async def generate_quiz(self, source_text: str) -> list[Any]:
        self._check("generate_quiz", source_text)
        sentences = [s.strip() for s in re.split(r"[.!?]+", source_text) if s.strip()]
        questions = []
        for i in range(self.question_count):
            sentence = sentences[i % len(sentences)] if sentences else f"Question {i + 1}"
            words = sentence.split()
            questions.append({
                "id": i + 1,
                "question": f"Complete the statement: {' '.join(words[:-1])} ___",
                "answer": words[-1].lower() if words else "",
            })
        return questions

    async def evaluate_quiz(self, questions: list[Any], user_answers: Any) -> QuizEvaluation:
        self._check("evaluate_quiz", user_answers)
        answers = list(user_answers) if isinstance(user_answers, (list, tuple)) else []
        results = []
        for i, question in enumerate(questions):
            given = answers[i] if i < len(answers) else None
            expected = question.get("answer") if isinstance(question, dict) else None
            correct = isinstance(given, str) and given.strip().lower() == expected
            results.append({"questionId": question.get("id", i + 1), "correct": correct})
        if self.fixed_score is not None:
            score = self.fixed_score
        else:
            score = sum(r["correct"] for r in results) / len(results) if results else 0.0
        return QuizEvaluation(score=score, results=results)

    async def request_report(self, user_id: int) -> None:
        self._check("request_report", user_id)


class FakeLinkResolver(LinkResolver):
    """Returns predictable Drive-style links, or fails when ``unavailable``."""

    def __init__(self, *, unavailable: bool = False) -> None:
        self.unavailable = unavailable
        self.calls: list[str] = []

    async def resolve(self, file_reference: str) -> VideoLinks:
        self.calls.append(file_reference)
        if self.unavailable:
            raise OracleUnavailable("Video link could not be resolved.")
        return VideoLinks(
            download=f"https://drive.example/uc?id={file_reference}&export=download",
            view=f"https://drive.example/file/d/{file_reference}/view",
        )
