"""Standalone runner for the interaction stream consumer.

Usage: python -m microlearn.workers.interaction_consumer_runner
"""

from __future__ import annotations

import asyncio
import logging
import signal

from microlearn.config import get_settings
from microlearn.database import close_db, get_session_factory, init_db
from microlearn.interactions.consumer import InteractionConsumer
from microlearn.middleware.logging import setup_logging
from microlearn.redis_client import close_redis, get_redis, init_redis

logger = logging.getLogger(__name__)


async def main() -> None:
    """Drain the interaction stream into the store until SIGINT/SIGTERM."""
    settings = get_settings()
    setup_logging(settings)

    await init_db(settings.database_url)
    # Blocking XREADGROUP must outlive the socket read timeout.
    await init_redis(
        settings.redis_url,
        socket_timeout=settings.interaction_block_ms / 1000 + 5,
        max_connections=10,
    )

    consumer = InteractionConsumer(
        redis_client=get_redis(),
        session_factory=get_session_factory(),
        stream=settings.interaction_stream,
        group=settings.interaction_consumer_group,
        consumer_name=settings.interaction_consumer_name,
    )

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, consumer.stop)

    logger.info("Starting interaction consumer (consumer=%s)", settings.interaction_consumer_name)
    try:
        await consumer.run(
            count=settings.interaction_batch_size,
            block_ms=settings.interaction_block_ms,
            trim_interval_seconds=settings.interaction_trim_interval_seconds,
        )
    finally:
        await close_redis()
        await close_db()
        logger.info("Interaction consumer stopped: %s", consumer.stats)


if __name__ == "__main__":
    asyncio.run(main())
