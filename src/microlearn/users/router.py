"""Current-user endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from microlearn.auth.dependencies import get_current_user
from microlearn.database import get_session
from microlearn.db.models import User
from microlearn.users.schemas import DashboardResponse, LearnerProfileResponse
from microlearn.users.service import get_dashboard, get_learner_profile

router = APIRouter(prefix="/api/v1/users", tags=["Users"])


@router.get("/me", response_model=DashboardResponse)
async def me(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> DashboardResponse:
    """Dashboard for the authenticated learner."""
    data = await get_dashboard(db, user.id)
    return DashboardResponse(**data)


@router.get("/me/profile", response_model=LearnerProfileResponse)
async def my_profile(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> LearnerProfileResponse:
    data = await get_learner_profile(db, user.id)
    return LearnerProfileResponse(**data)
