"""
Generated Apps API.
Template/AI generation and CRUD over generated client apps.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from shoot.api.envelope import error_envelope, success_envelope
from shoot.core.database import get_db
from shoot.models import GeneratedApp
from shoot.repositories.app_repository import app_repository
from shoot.schemas.apps import AppCodeUpdate, AppCreateRequest, GenerateAppRequest, GeneratedAppResponse
from shoot.services.generation_service import generation_service

router = APIRouter(prefix="/apps", tags=["Generated Apps"])


def _app_to_dict(app: GeneratedApp) -> dict:
    return GeneratedAppResponse.model_validate(app).model_dump(mode="json")


@router.get("")
async def list_apps(
    spec_id: int | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
):
    apps = await app_repository.list_apps(db, spec_id=spec_id)
    return success_envelope([_app_to_dict(app) for app in apps])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_app(payload: AppCreateRequest, db: AsyncSession = Depends(get_db)):
    app = await app_repository.create_app(
        db,
        spec_id=payload.spec_id,
        name=payload.name,
        description=payload.description,
        framework=payload.framework,
        code=payload.code,
        metadata=payload.metadata,
    )
    await db.commit()
    return success_envelope(_app_to_dict(app), status_code=status.HTTP_201_CREATED)


@router.post("/generate", status_code=status.HTTP_201_CREATED)
async def generate_app(payload: GenerateAppRequest, db: AsyncSession = Depends(get_db)):
    result = await generation_service.generate_app_code(
        db,
        spec_id=payload.spec_id,
        framework=payload.framework,
        use_ai=payload.use_ai,
    )
    if not result["success"]:
        return error_envelope(code="generation_failed", message=result["error"], status_code=404)
    await db.commit()
    return success_envelope(result, status_code=status.HTTP_201_CREATED)


@router.get("/{app_id}")
async def get_app(app_id: int, db: AsyncSession = Depends(get_db)):
    app = await app_repository.require_app(db, app_id)
    return success_envelope(_app_to_dict(app))


@router.put("/{app_id}/code")
async def update_code(app_id: int, payload: AppCodeUpdate, db: AsyncSession = Depends(get_db)):
    app = await app_repository.update_code(db, app_id, payload.code)
    await db.commit()
    await db.refresh(app)
    return success_envelope(_app_to_dict(app))


@router.delete("/{app_id}")
async def delete_app(app_id: int, db: AsyncSession = Depends(get_db)):
    await app_repository.delete_app(db, app_id)
    await db.commit()
    return success_envelope({"id": app_id, "deleted": True})
