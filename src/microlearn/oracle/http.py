"""HTTP clients for the oracle service and the storage link resolver."""

from __future__ import annotations

import logging
import math
from typing import Any

import httpx

from microlearn.oracle.base import LinkResolver, Oracle, OracleUnavailable, QuizEvaluation, VideoLinks

logger = logging.getLogger(__name__)


class HttpOracle(Oracle):
    """Talks to the personalization engine over HTTP.

    Requests carry the static internal credential in ``X-Internal-API-Key``
    and are bounded by ``timeout`` seconds.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers={"X-Internal-API-Key": api_key},
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _post(self, path: str, payload: dict[str, Any]) -> Any:
        try:
            response = await self._client.post(path, json=payload)
            response.raise_for_status()
            return response.json()
        except httpx.TimeoutException as e:
            logger.warning("Oracle %s timed out", path)
            raise OracleUnavailable("The learning engine timed out. Please retry.") from e
        except httpx.HTTPError as e:
            logger.warning("Oracle %s failed: %s", path, e)
            raise OracleUnavailable() from e
        except ValueError as e:
            logger.warning("Oracle %s returned non-JSON body", path)
            raise OracleUnavailable() from e

    async def recommend(self, user_id: int) -> str | None:
        data = await self._post("/recommend", {"userId": user_id})
        node_id = data.get("contentNodeId") if isinstance(data, dict) else None
        return node_id if isinstance(node_id, str) and node_id else None

    async def generate_quiz(self, source_text: str) -> list[Any]:
        data = await self._post("/quiz/generate", {"source_text": source_text})
        questions = data.get("questions") if isinstance(data, dict) else None
        if not isinstance(questions, list) or not questions:
            raise OracleUnavailable("The learning engine returned no questions.")
        return questions

    async def evaluate_quiz(self, questions: list[Any], user_answers: Any) -> QuizEvaluation:
        data = await self._post("/quiz/evaluate", {"questions": questions, "userAnswers": user_answers})
        if not isinstance(data, dict):
            raise OracleUnavailable("The learning engine returned an unusable score.")
        score = data.get("score")
        if isinstance(score, bool) or not isinstance(score, (int, float)) or not math.isfinite(score):
            raise OracleUnavailable("The learning engine returned an unusable score.")
        if not 0.0 <= score <= 1.0:
            raise OracleUnavailable("The learning engine returned an out-of-range score.")
        results = data.get("results")
        return QuizEvaluation(score=float(score), results=results if isinstance(results, list) else [])

    async def request_report(self, user_id: int) -> None:
        await self._post("/reports/generate", {"userId": user_id})


class DriveLinkResolver(LinkResolver):
    """Resolves Google Drive file ids via the Drive v3 files endpoint."""

    def __init__(
        self,
        base_url: str,
        access_token: str,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = {"Authorization": f"Bearer {access_token}"} if access_token else {}
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers=headers,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def resolve(self, file_reference: str) -> VideoLinks:
        try:
            response = await self._client.get(
                f"/files/{file_reference}",
                params={"fields": "webContentLink,webViewLink"},
            )
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise OracleUnavailable("Video link could not be resolved.") from e
        return VideoLinks(download=data.get("webContentLink"), view=data.get("webViewLink"))
