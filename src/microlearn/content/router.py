"""Content endpoints."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from microlearn.auth.dependencies import get_current_user
from microlearn.config import get_settings
from microlearn.content.service import ContentService
from microlearn.database import get_session
from microlearn.db.models import User
from microlearn.dependencies import get_link_resolver, get_oracle
from microlearn.oracle.base import LinkResolver, Oracle

router = APIRouter(prefix="/api/v1/content", tags=["Content"])


@router.get("/next")
async def next_content(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    oracle: Oracle = Depends(get_oracle),
    resolver: LinkResolver = Depends(get_link_resolver),
) -> dict:
    """Recommended next activity. 404 when no recommendation is available."""
    svc = ContentService(db, resolver, get_settings().strict_link_resolution)
    return await svc.next_content(user.id, oracle)


@router.get("/{node_id}")
async def get_content(
    node_id: UUID,
    _user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    resolver: LinkResolver = Depends(get_link_resolver),
) -> dict:
    svc = ContentService(db, resolver, get_settings().strict_link_resolution)
    return await svc.get_content(str(node_id))
