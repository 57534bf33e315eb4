"""
Spec Store API.
Upload, parse, browse and delete API specifications.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from shoot.api.envelope import error_envelope, success_envelope
from shoot.core.database import get_db
from shoot.models import ApiSpec
from shoot.repositories.spec_repository import spec_repository
from shoot.schemas.specs import (
    EndpointResponse,
    SpecDetailResponse,
    SpecParseRequest,
    SpecSettingsUpdate,
    SpecSummaryResponse,
    SpecUploadRequest,
)
from shoot.services.spec_ingest_service import spec_ingest_service

router = APIRouter(prefix="/specs", tags=["Specs"])


def _summary(spec: ApiSpec, endpoint_count: int) -> dict:
    return SpecSummaryResponse(
        id=spec.id,
        name=spec.name,
        description=spec.description,
        version=spec.version,
        spec_type=getattr(spec.spec_type, "value", spec.spec_type),
        endpoint_count=endpoint_count,
        created_at=spec.created_at,
    ).model_dump(mode="json")


@router.get("")
async def list_specs(db: AsyncSession = Depends(get_db)):
    rows = await spec_repository.list_specs(db)
    return success_envelope([_summary(spec, count) for spec, count in rows])


@router.post("", status_code=status.HTTP_201_CREATED)
async def upload_spec(payload: SpecUploadRequest, db: AsyncSession = Depends(get_db)):
    spec = await spec_repository.create_spec(
        db,
        name=payload.name,
        description=payload.description,
        version=payload.version,
        spec_type=payload.spec_type,
        content=payload.content,
        endpoints=[endpoint.model_dump() for endpoint in payload.endpoints],
    )
    await db.commit()
    return success_envelope(
        {"id": spec.id, "name": spec.name, "endpoint_count": len(payload.endpoints)},
        status_code=status.HTTP_201_CREATED,
    )


@router.post("/parse", status_code=status.HTTP_201_CREATED)
async def parse_spec(payload: SpecParseRequest, db: AsyncSession = Depends(get_db)):
    result = await spec_ingest_service.parse_spec(
        db,
        content=payload.content,
        spec_url=payload.spec_url,
        name=payload.name,
    )
    if not result["success"]:
        return error_envelope(code="spec_parse_error", message=result["error"], status_code=422)
    await db.commit()
    return success_envelope(result, status_code=status.HTTP_201_CREATED)


@router.get("/{spec_id}")
async def get_spec(spec_id: int, db: AsyncSession = Depends(get_db)):
    spec = await spec_repository.require_spec(db, spec_id)
    return success_envelope(SpecDetailResponse.model_validate(spec).model_dump(mode="json"))


@router.get("/{spec_id}/endpoints")
async def get_endpoints(spec_id: int, db: AsyncSession = Depends(get_db)):
    await spec_repository.ensure_exists(db, spec_id)
    endpoints = await spec_repository.list_endpoints(db, spec_id)
    return success_envelope([EndpointResponse.model_validate(e).model_dump(mode="json") for e in endpoints])


@router.patch("/{spec_id}/settings")
async def update_settings(spec_id: int, payload: SpecSettingsUpdate, db: AsyncSession = Depends(get_db)):
    spec = await spec_repository.update_settings(db, spec_id, override_base_url=payload.override_base_url)
    await db.commit()
    return success_envelope({"id": spec.id, "override_base_url": spec.override_base_url})


@router.delete("/{spec_id}")
async def delete_spec(spec_id: int, db: AsyncSession = Depends(get_db)):
    removed = await spec_repository.delete_spec(db, spec_id)
    await db.commit()
    return success_envelope({"id": spec_id, "deleted": True, "removed": removed})
