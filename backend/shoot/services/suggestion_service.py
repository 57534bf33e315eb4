"""
Shoot - Suggestion Service
==========================
LLM-backed ideas and analysis for specs and generated apps.
Every operation has a fixed offline answer when no LLM key is configured.
"""

from __future__ import annotations

import re
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from shoot.core.errors import LLMError, ShootError
from shoot.core.json_utils import ParsedJson, extract_json
from shoot.core.logging import get_logger
from shoot.repositories.app_repository import app_repository, decode_code
from shoot.repositories.insight_repository import insight_repository
from shoot.repositories.spec_repository import spec_repository
from shoot.services import prompt_builder
from shoot.services.generation_service import require_object
from shoot.services.llm_gateway import llm_gateway
from shoot.services.spec_ingest_service import endpoint_views

logger = get_logger("suggestion_service")

KEY_REQUIRED = "OpenAI API key required"
KEY_NOT_CONFIGURED = "OpenAI API key not configured"
_CODE_BLOCK_RE = re.compile(r"```(?:\w+)?\n([\s\S]*?)\n```")

DEFAULT_FLOWS = [
    {
        "name": "CRUD Dashboard",
        "description": "A full dashboard with create, read, update, delete operations",
        "framework": "react",
        "reason": "Basic pattern for data management",
    },
    {
        "name": "API Client Library",
        "description": "A reusable client library for this API",
        "framework": "node",
        "reason": "Useful for integration",
    },
]
DEFAULT_APP_REVIEW = ["Add error handling", "Improve loading states", "Add unit tests"]


def basic_suggestions() -> dict[str, Any]:
    return {
        "capabilities": ["API interaction", "Data management"],
        "useCases": [
            {
                "title": "Basic CRUD Operations",
                "description": "Create, read, update, and delete operations",
                "complexity": "simple",
            }
        ],
        "workflows": [
            {
                "name": "Simple Data Flow",
                "description": "Fetch and display data",
                "steps": ["Get data", "Process", "Display"],
            }
        ],
    }


def _array_or_none(text: str) -> list | None:
    result = extract_json(text, "array")
    return result.value if isinstance(result, ParsedJson) else None


class SuggestionService:
    async def suggest_flows(self, db: AsyncSession, *, spec_id: int) -> dict[str, Any]:
        if not llm_gateway.configured:
            return {"suggestions": [dict(item) for item in DEFAULT_FLOWS]}

        try:
            spec = await spec_repository.require_spec(db, spec_id)
            text = await llm_gateway.complete(
                system=prompt_builder.STRATEGIST_SYSTEM,
                user=prompt_builder.flow_suggestions(spec.name, endpoint_views(spec)),
                temperature=0.8,
                max_tokens=2000,
            )
        except ShootError as exc:
            logger.error("flow_suggestions_failed", spec_id=spec_id, error=exc.message)
            return {
                "suggestions": [
                    {
                        "name": "Custom Application",
                        "description": "Build a custom app for this API",
                        "framework": "react",
                        "reason": "Tailored to your needs",
                    }
                ]
            }

        result = _array_or_none(text)
        if result is not None:
            return {"suggestions": result}
        return {
            "suggestions": [
                {
                    "name": "AI-Suggested Application",
                    "description": text[:200],
                    "framework": "react",
                    "reason": "Based on AI analysis",
                }
            ]
        }

    async def modify_component(
        self,
        db: AsyncSession,
        *,
        app_id: int,
        file_name: str,
        instruction: str,
    ) -> dict[str, Any]:
        if not llm_gateway.configured:
            return {"success": False, "error": KEY_NOT_CONFIGURED}

        try:
            app = await app_repository.require_app(db, app_id)
            code = decode_code(app)
            reply = await llm_gateway.complete(
                system=prompt_builder.CODE_GENERATOR_SYSTEM,
                user=prompt_builder.component_modification(file_name, code.get(file_name, ""), instruction),
                temperature=0.3,
                max_tokens=3000,
            )
            match = _CODE_BLOCK_RE.search(reply)
            modified = match.group(1) if match else reply
            await app_repository.merge_code(db, app_id, {file_name: modified})
        except ShootError as exc:
            logger.error("component_modify_failed", app_id=app_id, file_name=file_name, error=exc.message)
            return {"success": False, "error": exc.message or "Failed to modify component"}

        return {"success": True, "modified_code": modified, "explanation": "Code modified successfully"}

    async def generate_component(
        self,
        db: AsyncSession,
        *,
        spec_id: int,
        description: str,
        framework: str = "react",
    ) -> dict[str, Any]:
        if not llm_gateway.configured:
            return {"success": False, "error": KEY_NOT_CONFIGURED}

        try:
            spec = await spec_repository.require_spec(db, spec_id)
            code = await llm_gateway.complete(
                system=prompt_builder.CODE_GENERATOR_SYSTEM,
                user=prompt_builder.component_generation(description, framework, endpoint_views(spec)),
                temperature=0.7,
                max_tokens=3000,
            )
        except ShootError as exc:
            logger.error("component_generate_failed", spec_id=spec_id, error=exc.message)
            return {"success": False, "error": exc.message or "Failed to generate component"}

        return {"success": True, "code": code, "component_name": "".join(description.split()[:3])}

    async def analyze_app(self, db: AsyncSession, *, app_id: int) -> dict[str, Any]:
        if not llm_gateway.configured:
            return {"suggestions": list(DEFAULT_APP_REVIEW)}

        try:
            app = await app_repository.require_app(db, app_id)
            text = await llm_gateway.complete(
                system=prompt_builder.REVIEWER_SYSTEM,
                user=prompt_builder.app_review(app.name, app.framework, decode_code(app)),
                temperature=0.7,
                max_tokens=1500,
            )
        except ShootError as exc:
            logger.error("app_analysis_failed", app_id=app_id, error=exc.message)
            return {
                "suggestions": [
                    {
                        "title": "Review Code",
                        "description": "Consider adding more error handling and tests",
                        "priority": "medium",
                    }
                ]
            }

        result = _array_or_none(text)
        if result is not None:
            return {"suggestions": result}
        return {
            "suggestions": [
                {"title": "General Improvements", "description": text[:200], "priority": "medium"}
            ]
        }

    async def analyze_api_capabilities(self, db: AsyncSession, *, spec_id: int) -> dict[str, Any]:
        """Ask for capabilities and use cases, and store them as the spec's insight."""
        if not llm_gateway.configured:
            return {"success": False, "error": KEY_REQUIRED, "basic_suggestions": basic_suggestions()}

        try:
            spec = await spec_repository.require_spec(db, spec_id)
            analysis = require_object(
                await llm_gateway.complete_json(
                    system=prompt_builder.STRATEGIST_SYSTEM,
                    user=prompt_builder.capability_analysis(spec.name, endpoint_views(spec)),
                    temperature=0.9,
                    max_tokens=4000,
                ),
                "AI response",
            )
            await insight_repository.save_insights(
                db,
                spec_id=spec_id,
                capabilities=analysis,
                workflows=analysis.get("workflows") or [],
            )
        except ShootError as exc:
            logger.error("capability_analysis_failed", spec_id=spec_id, error=exc.message)
            return {"success": False, "error": exc.message, "basic_suggestions": basic_suggestions()}

        return {"success": True, **analysis}

    async def generate_workflow(self, db: AsyncSession, *, spec_id: int, goal: str) -> dict[str, Any]:
        if not llm_gateway.configured:
            return {"success": False, "error": KEY_REQUIRED}

        try:
            spec = await spec_repository.require_spec(db, spec_id)
            workflow = require_object(
                await llm_gateway.complete_json(
                    system=prompt_builder.ARCHITECT_SYSTEM,
                    user=prompt_builder.workflow_design(goal, spec.name, endpoint_views(spec)),
                    temperature=0.7,
                    max_tokens=3000,
                ),
                "workflow",
            )
            steps = workflow.get("steps") if isinstance(workflow.get("steps"), list) else []
            complexity = workflow.get("complexity")
            if complexity not in {"simple", "medium", "complex"}:
                complexity = "complex" if len(steps) > 3 else "medium"
            saved = await insight_repository.save_workflow(
                db,
                spec_id=spec_id,
                name=workflow.get("name") or goal[:120] or "Workflow",
                description=workflow.get("description"),
                steps=steps,
                complexity=complexity,
            )
        except ShootError as exc:
            logger.error("workflow_generation_failed", spec_id=spec_id, error=exc.message)
            return {"success": False, "error": exc.message}

        return {"success": True, "workflow_id": saved.id, "workflow": workflow}

    async def suggest_api_extensions(self, db: AsyncSession, *, spec_id: int) -> dict[str, Any]:
        if not llm_gateway.configured:
            return {"success": False, "error": KEY_REQUIRED}

        try:
            spec = await spec_repository.require_spec(db, spec_id)
            result = await llm_gateway.complete_json(
                system=prompt_builder.STRATEGIST_SYSTEM,
                user=prompt_builder.api_extensions(spec.name, endpoint_views(spec)),
                shape="array",
                temperature=0.8,
                max_tokens=2000,
            )
            if not isinstance(result, ParsedJson):
                raise LLMError("Failed to parse suggestions")
        except ShootError as exc:
            logger.error("api_extensions_failed", spec_id=spec_id, error=exc.message)
            return {"success": False, "error": exc.message}

        return {"success": True, "suggestions": result.value}

    async def generate_remix(self, db: AsyncSession, *, spec_id: int, theme: str | None = None) -> dict[str, Any]:
        if not llm_gateway.configured:
            return {"success": False, "error": KEY_REQUIRED}

        theme = theme or "innovative use"
        try:
            spec = await spec_repository.require_spec(db, spec_id)
            remix = require_object(
                await llm_gateway.complete_json(
                    system=prompt_builder.CREATIVE_SYSTEM,
                    user=prompt_builder.remix(theme, spec.name, endpoint_views(spec)),
                    temperature=1.0,
                    max_tokens=2500,
                ),
                "remix",
            )
            implementation = remix.get("implementation") if isinstance(remix.get("implementation"), dict) else {}
            endpoints_used = remix.get("endpointsUsed") if isinstance(remix.get("endpointsUsed"), list) else []
            saved = await insight_repository.save_remix(
                db,
                spec_id=spec_id,
                name=remix.get("remixName") or f"{spec.name} remix",
                description=remix.get("description"),
                innovation=remix.get("innovation"),
                endpoints_used=endpoints_used,
                implementation=implementation,
            )
        except ShootError as exc:
            logger.error("remix_generation_failed", spec_id=spec_id, error=exc.message)
            return {"success": False, "error": exc.message}

        return {"success": True, "remix_id": saved.id, "remix": remix}


suggestion_service = SuggestionService()
