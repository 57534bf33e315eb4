"""
API Keys API.
Per-spec credentials for the request proxy. Values are only ever returned masked.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from shoot.api.envelope import success_envelope
from shoot.core.database import get_db
from shoot.repositories.api_key_repository import api_key_repository
from shoot.schemas.apps import ApiKeyCreateRequest

router = APIRouter(prefix="/api-keys", tags=["API Keys"])


@router.get("")
async def list_keys(spec_id: int = Query(...), db: AsyncSession = Depends(get_db)):
    keys = await api_key_repository.list_keys(db, spec_id)
    return success_envelope([key.model_dump(mode="json") for key in keys])


@router.post("", status_code=status.HTTP_201_CREATED)
async def add_key(payload: ApiKeyCreateRequest, db: AsyncSession = Depends(get_db)):
    key = await api_key_repository.add_key(
        db,
        spec_id=payload.spec_id,
        key_name=payload.key_name,
        key_value=payload.key_value,
        description=payload.description,
    )
    await db.commit()
    return success_envelope(key.model_dump(mode="json"), status_code=status.HTTP_201_CREATED)


@router.delete("/{key_id}")
async def delete_key(key_id: int, db: AsyncSession = Depends(get_db)):
    await api_key_repository.delete_key(db, key_id)
    await db.commit()
    return success_envelope({"id": key_id, "deleted": True})
