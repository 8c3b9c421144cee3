# backend/tourify/routes/v1/meta.py
"""
Meta routes - API v1

Dashboard statistics whose shape depends on the caller's role.
"""

import asyncio
import logging

from fastapi import APIRouter, Depends

from ...api.dependencies import get_current_active_user, get_meta_service
from ...models.user import User
from ...schemas.meta import DashboardResponse
from ...services.meta_service import MetaService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["meta-v1"])


@router.get("/dashboard", response_model=DashboardResponse)
async def dashboard(
    current_user: User = Depends(get_current_active_user),
    meta_service: MetaService = Depends(get_meta_service),
) -> DashboardResponse:
    return await asyncio.to_thread(meta_service.dashboard, current_user)
