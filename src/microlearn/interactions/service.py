"""Interaction ingestion: validate, timestamp, durably enqueue.

Persistence is queued: an event is "accepted" once XADD has returned, and
``InteractionConsumer`` drains the stream into the store. The acceptance
timestamp is assigned here, not at persistence time.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from microlearn.errors import ExternalDependencyFailure
from microlearn.interactions.schemas import InteractionAccepted, InteractionEvent, InteractionRequest

logger = logging.getLogger(__name__)


class InteractionIngestionService:
    """Accepts interaction events onto the Redis stream."""

    def __init__(self, redis_client: aioredis.Redis, stream: str) -> None:
        self.redis = redis_client
        self.stream = stream

    async def submit(self, user_id: int, request: InteractionRequest) -> InteractionAccepted:
        """Enqueue one event. Raises ExternalDependencyFailure if the queue is unavailable."""
        event = InteractionEvent(
            event_id=str(uuid.uuid4()),
            user_id=user_id,
            content_node_id=str(request.content_node_id),
            interaction_type=request.interaction_type,
            data=request.data,
            timestamp=datetime.now(timezone.utc),
        )
        try:
            entry_id = await self.redis.xadd(self.stream, event.to_fields())
        except (RedisError, OSError) as e:
            logger.error("Failed to enqueue interaction for user %s: %s", user_id, e)
            raise ExternalDependencyFailure("Interaction queue unavailable. Please retry.") from e

        logger.debug("Enqueued interaction %s as %s", event.event_id, entry_id)
        return InteractionAccepted(event_id=event.event_id, accepted_at=event.timestamp)
