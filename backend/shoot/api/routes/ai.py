"""
AI Features API.
LLM-backed generation, design and suggestion operations.

Every operation answers 200 with its own `{success, ...}` result, including
the fixed fallbacks used when no LLM key is configured.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from shoot.api.envelope import success_envelope
from shoot.core.database import get_db
from shoot.schemas import AIStatusResponse
from shoot.schemas.ai import (
    AddFeatureRequest,
    BuildFromIntentRequest,
    ComponentDesignRequest,
    CustomerAppRequest,
    GenerateComponentRequest,
    ModifyComponentRequest,
    RefineAppRequest,
    RefineUiRequest,
    RemixRequest,
    SimulateWorkflowRequest,
    WorkflowGoalRequest,
)
from shoot.services.design_service import design_service
from shoot.services.generation_service import generation_service
from shoot.services.llm_gateway import llm_gateway
from shoot.services.suggestion_service import suggestion_service

router = APIRouter(prefix="/ai", tags=["AI Features"])


async def _finish(db: AsyncSession, result: dict[str, Any]):
    # Failed operations may have flushed partial rows.
    if result.get("success", True):
        await db.commit()
    else:
        await db.rollback()
    return success_envelope(result)


@router.get("/status")
async def ai_status():
    return success_envelope(
        AIStatusResponse(
            is_configured=llm_gateway.configured,
            model=llm_gateway.model,
            checked_at=datetime.utcnow(),
        ).model_dump(mode="json")
    )


@router.post("/build-from-intent")
async def build_from_intent(payload: BuildFromIntentRequest, db: AsyncSession = Depends(get_db)):
    result = await generation_service.build_app_from_intent(
        db,
        spec_id=payload.spec_id,
        intent=payload.intent,
        conversation_id=payload.conversation_id,
    )
    return await _finish(db, result)


@router.post("/refine-app")
async def refine_app(payload: RefineAppRequest, db: AsyncSession = Depends(get_db)):
    result = await generation_service.refine_app(db, app_id=payload.app_id, refinement=payload.refinement)
    return await _finish(db, result)


@router.post("/simulate-workflow")
async def simulate_workflow(payload: SimulateWorkflowRequest, db: AsyncSession = Depends(get_db)):
    result = await generation_service.simulate_workflow(db, workflow_id=payload.workflow_id, test_data=payload.test_data)
    return success_envelope(result)


@router.post("/customer-app")
async def build_customer_app(payload: CustomerAppRequest, db: AsyncSession = Depends(get_db)):
    result = await design_service.build_customer_facing_app(db, spec_id=payload.spec_id, description=payload.description)
    return await _finish(db, result)


@router.post("/refine-ui")
async def refine_ui(payload: RefineUiRequest, db: AsyncSession = Depends(get_db)):
    result = await design_service.refine_ui(db, app_id=payload.app_id, request=payload.request)
    return await _finish(db, result)


@router.post("/design-component")
async def design_component(payload: ComponentDesignRequest, db: AsyncSession = Depends(get_db)):
    result = await design_service.create_beautiful_component(
        db,
        spec_id=payload.spec_id,
        description=payload.description,
        style=payload.style,
    )
    return success_envelope(result)


@router.post("/add-feature")
async def add_feature(payload: AddFeatureRequest, db: AsyncSession = Depends(get_db)):
    result = await design_service.add_feature(db, app_id=payload.app_id, feature=payload.feature)
    return await _finish(db, result)


@router.get("/specs/{spec_id}/flows")
async def suggest_flows(spec_id: int, db: AsyncSession = Depends(get_db)):
    return success_envelope(await suggestion_service.suggest_flows(db, spec_id=spec_id))


@router.post("/modify-component")
async def modify_component(payload: ModifyComponentRequest, db: AsyncSession = Depends(get_db)):
    result = await suggestion_service.modify_component(
        db,
        app_id=payload.app_id,
        file_name=payload.file_name,
        instruction=payload.instruction,
    )
    return await _finish(db, result)


@router.post("/generate-component")
async def generate_component(payload: GenerateComponentRequest, db: AsyncSession = Depends(get_db)):
    result = await suggestion_service.generate_component(
        db,
        spec_id=payload.spec_id,
        description=payload.description,
        framework=payload.framework,
    )
    return success_envelope(result)


@router.get("/apps/{app_id}/review")
async def analyze_app(app_id: int, db: AsyncSession = Depends(get_db)):
    return success_envelope(await suggestion_service.analyze_app(db, app_id=app_id))


@router.post("/specs/{spec_id}/capabilities")
async def analyze_capabilities(spec_id: int, db: AsyncSession = Depends(get_db)):
    result = await suggestion_service.analyze_api_capabilities(db, spec_id=spec_id)
    return await _finish(db, result)


@router.post("/workflows")
async def generate_workflow(payload: WorkflowGoalRequest, db: AsyncSession = Depends(get_db)):
    result = await suggestion_service.generate_workflow(db, spec_id=payload.spec_id, goal=payload.goal)
    return await _finish(db, result)


@router.get("/specs/{spec_id}/extensions")
async def suggest_extensions(spec_id: int, db: AsyncSession = Depends(get_db)):
    return success_envelope(await suggestion_service.suggest_api_extensions(db, spec_id=spec_id))


@router.post("/remixes")
async def generate_remix(payload: RemixRequest, db: AsyncSession = Depends(get_db)):
    result = await suggestion_service.generate_remix(db, spec_id=payload.spec_id, theme=payload.theme)
    return await _finish(db, result)
