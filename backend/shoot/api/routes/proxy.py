"""
Request Proxy API.
Server-side relay for the API playground.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from shoot.api.envelope import success_envelope
from shoot.core.database import get_db
from shoot.schemas.proxy import ProxyRequest
from shoot.services.proxy_service import proxy_service

router = APIRouter(prefix="/proxy", tags=["Proxy"])


@router.post("")
async def proxy_request(payload: ProxyRequest, db: AsyncSession = Depends(get_db)):
    response = await proxy_service.proxy_request(db, payload)
    return success_envelope(response.model_dump(mode="json"))
