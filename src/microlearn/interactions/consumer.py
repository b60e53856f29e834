"""Redis Stream consumer that drains accepted interactions into the store.

Delivery is at-least-once: an entry is XACKed only after its row is
committed, so a crash between commit and ack causes redelivery. Duplicates
are discarded by ``event_id`` (checked before insert and enforced by the
unique constraint), so each accepted event produces at most one row.

On start the consumer first re-reads its own pending entries (id "0"),
then switches to new entries (id ">"). Any failed read, store or ack sends
it back to the pending entries. The stream is trimmed only up to the oldest
entry still pending for the group.
"""

from __future__ import annotations

import asyncio
import logging
import time

import redis.asyncio as aioredis
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from microlearn.db.models import UserInteraction
from microlearn.interactions.schemas import InteractionEvent, InvalidEventEntry

logger = logging.getLogger(__name__)

StreamMessage = tuple[str, dict[str, str] | None]


class InteractionConsumer:
    """Persists interaction events from a Redis Stream consumer group."""

    def __init__(
        self,
        redis_client: aioredis.Redis,
        session_factory: async_sessionmaker[AsyncSession],
        stream: str,
        group: str,
        consumer_name: str,
    ) -> None:
        self.redis = redis_client
        self.session_factory = session_factory
        self.stream = stream
        self.group = group
        self.consumer_name = consumer_name
        self._running = False
        self._recovering = True
        self._stored = 0
        self._duplicates = 0
        self._poison = 0

    async def setup_group(self) -> None:
        """Create the consumer group (idempotent)."""
        try:
            await self.redis.xgroup_create(self.stream, self.group, id="0", mkstream=True)
            logger.info("Created consumer group %s on %s", self.group, self.stream)
        except aioredis.ResponseError as e:
            if "BUSYGROUP" not in str(e):
                raise

    async def consume(self, count: int = 100, block_ms: int = 5000) -> int:
        """Read one batch and persist it. Returns the number of new rows stored."""
        try:
            if self._recovering:
                events = await self.redis.xreadgroup(
                    groupname=self.group,
                    consumername=self.consumer_name,
                    streams={self.stream: "0"},
                    count=count,
                )
            else:
                events = await self.redis.xreadgroup(
                    groupname=self.group,
                    consumername=self.consumer_name,
                    streams={self.stream: ">"},
                    count=count,
                    block=block_ms,
                )
        except Exception:
            # A read may have delivered entries we never saw; re-read pending next.
            self._recovering = True
            raise

        messages: list[StreamMessage] = []
        for _stream_name, stream_messages in events or []:
            messages.extend(stream_messages)

        if self._recovering and not messages:
            self._recovering = False
            logger.info("Pending interaction entries drained, reading new entries")
            return 0

        if not messages:
            return 0
        return await self.process_messages(messages)

    async def process_messages(self, messages: list[StreamMessage]) -> int:
        """Persist a batch of stream messages, then acknowledge them.

        Malformed entries are acknowledged without storing anything. If the
        store fails, nothing is acknowledged and the batch is redelivered.
        """
        events: list[InteractionEvent] = []
        ack_ids: list[str] = []
        for msg_id, fields in messages:
            try:
                events.append(InteractionEvent.from_fields(fields))
            except InvalidEventEntry as e:
                self._poison += 1
                logger.warning("Dropping malformed interaction entry %s: %s", msg_id, e)
            ack_ids.append(msg_id)

        try:
            stored = await self.persist(events)
            if ack_ids:
                await self.redis.xack(self.stream, self.group, *ack_ids)
        except Exception:
            # Unacked entries stay in our pending list; re-read them next.
            self._recovering = True
            raise
        return stored

    async def persist(self, events: list[InteractionEvent]) -> int:
        """Insert events whose ``event_id`` is not stored yet. Returns rows inserted."""
        unique: dict[str, InteractionEvent] = {}
        for event in events:
            unique.setdefault(event.event_id, event)
        self._duplicates += len(events) - len(unique)
        if not unique:
            return 0

        async with self.session_factory() as session:
            try:
                fresh = await self._filter_stored(session, list(unique.values()))
                session.add_all(_to_row(event) for event in fresh)
                await session.commit()
            except IntegrityError:
                # Another consumer stored one of these concurrently.
                await session.rollback()
                fresh = await self._persist_one_by_one(session, list(unique.values()))
            except SQLAlchemyError:
                await session.rollback()
                logger.exception("Failed to persist %d interaction events", len(unique))
                raise

        self._stored += len(fresh)
        self._duplicates += len(unique) - len(fresh)
        if fresh:
            logger.debug("Stored %d interaction events", len(fresh))
        return len(fresh)

    async def _filter_stored(
        self, session: AsyncSession, events: list[InteractionEvent]
    ) -> list[InteractionEvent]:
        result = await session.execute(
            select(UserInteraction.event_id).where(
                UserInteraction.event_id.in_([e.event_id for e in events])
            )
        )
        stored = set(result.scalars().all())
        return [e for e in events if e.event_id not in stored]

    async def _persist_one_by_one(
        self, session: AsyncSession, events: list[InteractionEvent]
    ) -> list[InteractionEvent]:
        inserted: list[InteractionEvent] = []
        for event in await self._filter_stored(session, events):
            session.add(_to_row(event))
            try:
                await session.commit()
                inserted.append(event)
            except IntegrityError:
                await session.rollback()
                logger.warning("Skipping interaction event %s: rejected by the store", event.event_id)
        return inserted

    async def trim_acknowledged(self) -> int:
        """Drop stream entries every reader of this group has acknowledged.

        Trimming stops at the oldest pending entry, or at the group's last
        delivered id when nothing is pending, so unacknowledged entries are
        never removed. Returns the number of entries trimmed.
        """
        pending = await self.redis.xpending(self.stream, self.group)
        if pending and pending.get("pending"):
            min_id = pending["min"]
        else:
            min_id = None
            for info in await self.redis.xinfo_groups(self.stream):
                if info.get("name") == self.group:
                    min_id = info.get("last-delivered-id")
                    break
        if not min_id or min_id == "0-0":
            return 0

        trimmed = await self.redis.xtrim(self.stream, minid=min_id, approximate=True)
        if trimmed:
            logger.info("Trimmed %d acknowledged interaction entries before %s", trimmed, min_id)
        return trimmed

    async def run(
        self, count: int = 100, block_ms: int = 5000, trim_interval_seconds: float = 60.0
    ) -> None:
        """Main consumer loop, runs until ``stop()``."""
        await self.setup_group()
        self._running = True
        logger.info("Interaction consumer started (consumer=%s)", self.consumer_name)

        next_trim = time.monotonic() + trim_interval_seconds
        while self._running:
            try:
                await self.consume(count=count, block_ms=block_ms)
                if time.monotonic() >= next_trim:
                    next_trim = time.monotonic() + trim_interval_seconds
                    await self.trim_acknowledged()
            except Exception:
                logger.exception("Interaction consumer loop error")
                await asyncio.sleep(1)

    def stop(self) -> None:
        """Signal the consumer to stop."""
        self._running = False

    @property
    def stats(self) -> dict[str, int]:
        return {
            "stored": self._stored,
            "duplicates": self._duplicates,
            "poison": self._poison,
        }


def _to_row(event: InteractionEvent) -> UserInteraction:
    return UserInteraction(
        event_id=event.event_id,
        user_id=event.user_id,
        content_node_id=event.content_node_id,
        interaction_type=event.interaction_type.value,
        data=event.data,
        timestamp=event.timestamp,
    )
