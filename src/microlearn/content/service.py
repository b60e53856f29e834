"""Content delivery with graceful degradation around external collaborators."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from microlearn.db.models import ContentNode, NodeType
from microlearn.errors import ExternalDependencyFailure, NotFound
from microlearn.oracle.base import LinkResolver, Oracle

logger = logging.getLogger(__name__)


class ContentService:
    """Read-only access to the content catalog."""

    def __init__(
        self,
        db: AsyncSession,
        link_resolver: LinkResolver,
        strict_link_resolution: bool = False,
    ) -> None:
        self.db = db
        self.link_resolver = link_resolver
        self.strict_link_resolution = strict_link_resolution

    async def get_content(self, node_id: str) -> dict[str, Any]:
        """Return a content node, with ``video_links`` for resolvable VIDEO nodes.

        A link-resolver failure drops ``video_links`` and keeps the rest of
        the node, unless strict link resolution is configured.
        """
        node = await self.db.get(ContentNode, node_id)
        if node is None:
            raise NotFound("Content not found.")

        data = _serialize(node)
        if node.node_type == NodeType.VIDEO.value and node.file_reference:
            try:
                links = await self.link_resolver.resolve(node.file_reference)
                data["video_links"] = {"download": links.download, "view": links.view}
            except ExternalDependencyFailure:
                if self.strict_link_resolution:
                    raise
                logger.warning("Video link resolution failed for node %s, omitting links", node_id)
        return data

    async def next_content(self, user_id: int, oracle: Oracle) -> dict[str, Any]:
        """Serve the oracle's recommendation. Any oracle failure means "no recommendation"."""
        try:
            node_id = await oracle.recommend(user_id)
        except ExternalDependencyFailure:
            logger.warning("Recommendation oracle unavailable for user %s", user_id)
            node_id = None

        if not node_id:
            raise NotFound("No recommendation available.")

        try:
            return await self.get_content(node_id)
        except NotFound:
            logger.warning("Recommended node %s does not exist (user=%s)", node_id, user_id)
            raise NotFound("Recommended content not found.") from None


def _serialize(node: ContentNode) -> dict[str, Any]:
    return {
        "id": node.id,
        "title": node.title,
        "node_type": node.node_type,
        "content_json": node.content_json,
        "file_reference": node.file_reference,
        "created_at": node.created_at.isoformat() if node.created_at else None,
    }
