"""
Insights API.
Stored capability analyses, workflows and remixes per spec.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from shoot.api.envelope import success_envelope
from shoot.core.database import get_db
from shoot.core.errors import NotFoundError
from shoot.repositories.insight_repository import insight_repository
from shoot.schemas.insights import (
    InsightResponse,
    InsightSaveRequest,
    RemixResponse,
    RemixSaveRequest,
    WorkflowResponse,
    WorkflowSaveRequest,
)

router = APIRouter(prefix="/insights", tags=["Insights"])


@router.get("/specs/{spec_id}")
async def get_insights(spec_id: int, db: AsyncSession = Depends(get_db)):
    insight = await insight_repository.get_insights(db, spec_id)
    if insight is None:
        return success_envelope(None)
    return success_envelope(InsightResponse.model_validate(insight).model_dump(mode="json"))


@router.post("", status_code=status.HTTP_201_CREATED)
async def save_insights(payload: InsightSaveRequest, db: AsyncSession = Depends(get_db)):
    insight = await insight_repository.save_insights(
        db,
        spec_id=payload.spec_id,
        capabilities=payload.capabilities,
        workflows=payload.workflows,
    )
    await db.commit()
    return success_envelope(
        InsightResponse.model_validate(insight).model_dump(mode="json"),
        status_code=status.HTTP_201_CREATED,
    )


@router.get("/specs/{spec_id}/workflows")
async def list_workflows(spec_id: int, db: AsyncSession = Depends(get_db)):
    workflows = await insight_repository.list_workflows(db, spec_id)
    return success_envelope([WorkflowResponse.model_validate(w).model_dump(mode="json") for w in workflows])


@router.get("/workflows/{workflow_id}")
async def get_workflow(workflow_id: int, db: AsyncSession = Depends(get_db)):
    workflow = await insight_repository.get_workflow(db, workflow_id)
    if workflow is None:
        raise NotFoundError("Workflow", workflow_id)
    return success_envelope(WorkflowResponse.model_validate(workflow).model_dump(mode="json"))


@router.post("/workflows", status_code=status.HTTP_201_CREATED)
async def save_workflow(payload: WorkflowSaveRequest, db: AsyncSession = Depends(get_db)):
    workflow = await insight_repository.save_workflow(
        db,
        spec_id=payload.spec_id,
        name=payload.name,
        description=payload.description,
        steps=payload.steps,
        complexity=payload.complexity,
        code=payload.code,
    )
    await db.commit()
    return success_envelope(
        WorkflowResponse.model_validate(workflow).model_dump(mode="json"),
        status_code=status.HTTP_201_CREATED,
    )


@router.get("/specs/{spec_id}/remixes")
async def list_remixes(spec_id: int, db: AsyncSession = Depends(get_db)):
    remixes = await insight_repository.list_remixes(db, spec_id)
    return success_envelope([RemixResponse.model_validate(r).model_dump(mode="json") for r in remixes])


@router.post("/remixes", status_code=status.HTTP_201_CREATED)
async def save_remix(payload: RemixSaveRequest, db: AsyncSession = Depends(get_db)):
    remix = await insight_repository.save_remix(
        db,
        spec_id=payload.spec_id,
        name=payload.name,
        description=payload.description,
        innovation=payload.innovation,
        endpoints_used=payload.endpoints_used,
        implementation=payload.implementation,
    )
    await db.commit()
    return success_envelope(
        RemixResponse.model_validate(remix).model_dump(mode="json"),
        status_code=status.HTTP_201_CREATED,
    )
