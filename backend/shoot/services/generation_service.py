"""
Shoot - App Generation Service
==============================
Template and LLM-backed generation of client apps from a stored spec,
intent-driven builds, refinement, and simulated workflow runs.
"""

from __future__ import annotations

import time
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from shoot.core.errors import LLMError, ShootError
from shoot.core.json_utils import ExtractResult, UnparseableJson, loads_text
from shoot.core.logging import get_logger
from shoot.repositories.app_repository import app_repository, decode_code
from shoot.repositories.insight_repository import insight_repository
from shoot.repositories.spec_repository import spec_repository
from shoot.services import prompt_builder
from shoot.services.app_templates import basic_app_outline, parse_generated_code, render_template
from shoot.services.llm_gateway import llm_gateway
from shoot.services.spec_ingest_service import endpoint_views

logger = get_logger("generation_service")


def require_object(result: ExtractResult, what: str) -> dict[str, Any]:
    if isinstance(result, UnparseableJson):
        raise LLMError(f"Failed to parse {what}")
    return result.value


def string_files(value: Any) -> dict[str, str]:
    """Keep only str -> str entries of an LLM-provided file map."""
    if not isinstance(value, dict):
        return {}
    return {str(name): source for name, source in value.items() if isinstance(source, str)}


def _bullets(items: Any, marker: str = "-") -> str:
    return "\n".join(f"{marker} {item}" for item in (items or []) if item)


class GenerationService:
    async def generate_app_code(
        self,
        db: AsyncSession,
        *,
        spec_id: int,
        framework: str = "react",
        use_ai: bool = True,
    ) -> dict[str, Any]:
        try:
            spec = await spec_repository.require_spec(db, spec_id)
        except ShootError as exc:
            return {"success": False, "error": exc.message}

        endpoints = endpoint_views(spec)
        ai_used = False
        if use_ai and llm_gateway.configured:
            try:
                reply = await llm_gateway.complete(
                    system=prompt_builder.CODE_GENERATOR_SYSTEM,
                    user=prompt_builder.app_generation(framework, spec.name, endpoints),
                    temperature=0.7,
                    max_tokens=4000,
                )
                files = parse_generated_code(reply)
                ai_used = True
            except LLMError as exc:
                logger.warning("ai_generation_fallback_to_template", spec_id=spec_id, error=exc.message)
                files = render_template(framework, spec.name, endpoints)
        else:
            files = render_template(framework, spec.name, endpoints)

        app = await app_repository.create_app(
            db,
            spec_id=spec_id,
            name=f"{spec.name} {framework} App",
            description=f"Generated {framework} application",
            framework=framework,
            code=files,
            metadata={"useAI": use_ai, "aiUsed": ai_used, "fileCount": len(files)},
        )
        logger.info("app_generated", app_id=app.id, spec_id=spec_id, framework=framework, ai_used=ai_used)
        return {"success": True, "id": app.id, "name": app.name, "file_count": len(files)}

    async def build_app_from_intent(
        self,
        db: AsyncSession,
        *,
        spec_id: int,
        intent: str,
        conversation_id: str | None = None,
    ) -> dict[str, Any]:
        """Analyze intent, then generate code, then persist the app and its workflow."""
        try:
            spec = await spec_repository.require_spec(db, spec_id)
        except ShootError as exc:
            return {"success": False, "error": exc.message}
        endpoints = endpoint_views(spec)

        if not llm_gateway.configured:
            return {
                "success": False,
                "error": "OpenAI API key required for intelligent app building",
                "fallback": basic_app_outline(intent, endpoints),
            }

        try:
            analysis = require_object(
                await llm_gateway.complete_json(
                    system=prompt_builder.ARCHITECT_SYSTEM,
                    user=prompt_builder.intent_analysis(intent, spec.name, endpoints),
                    temperature=0.7,
                    max_tokens=2000,
                ),
                "AI analysis",
            )
            generated = require_object(
                await llm_gateway.complete_json(
                    system=prompt_builder.CODE_GENERATOR_SYSTEM,
                    user=prompt_builder.intent_code(intent, spec.name, analysis),
                    temperature=0.3,
                    max_tokens=4000,
                ),
                "generated code",
            )
            files = string_files(generated.get("files"))
            if not files:
                raise LLMError("Generated code contained no files")

            selected = [e for e in analysis.get("selectedEndpoints") or [] if isinstance(e, dict)]
            workflow = analysis.get("workflow") if isinstance(analysis.get("workflow"), dict) else {}
            steps = workflow.get("steps") if isinstance(workflow.get("steps"), list) else []
            workflow_name = workflow.get("name") or "Custom workflow"
            understanding = analysis.get("understanding") or f"Build functionality for: {intent}"

            app = await app_repository.create_app(
                db,
                spec_id=spec_id,
                name=f"{workflow_name} - {spec.name}",
                description=(
                    f"{understanding}\n\nEndpoints used: "
                    + ", ".join(str(e.get("endpoint")) for e in selected)
                ),
                framework="react",
                code=files,
                metadata={
                    "intent": intent,
                    "selectedEndpoints": selected,
                    "workflow": workflow,
                    "conversationId": conversation_id,
                    "useAI": True,
                    "intelligent": True,
                },
            )
            await insight_repository.save_workflow(
                db,
                spec_id=spec_id,
                name=workflow_name,
                description=workflow.get("description"),
                steps=steps,
                complexity="complex" if len(steps) > 3 else "medium",
                code=files,
            )
        except ShootError as exc:
            logger.error("intent_build_failed", spec_id=spec_id, error=exc.message)
            return {"success": False, "error": exc.message}

        endpoint_lines = _bullets(f"{e.get('endpoint')} ({e.get('purpose', '')})" for e in selected)
        return {
            "success": True,
            "app_id": app.id,
            "app_name": app.name,
            "understanding": understanding,
            "selected_endpoints": selected,
            "workflow": workflow,
            "message": (
                f"Built **{app.name}**.\n\n**What I understood:** {understanding}\n\n"
                f"**Endpoints selected:**\n{endpoint_lines}\n\n"
                f"**Workflow:** {len(steps)} steps\n\n"
                "You can view the code, test the workflow, download it, or ask me to refine it."
            ),
        }

    async def refine_app(self, db: AsyncSession, *, app_id: int, refinement: str) -> dict[str, Any]:
        """Merge the LLM's changed files into the app. Untouched files are kept."""
        app = await app_repository.get_app(db, app_id)
        if app is None:
            return {"success": False, "error": "App not found"}
        if not llm_gateway.configured:
            return {"success": False, "error": "OpenAI API key required"}

        try:
            refined = require_object(
                await llm_gateway.complete_json(
                    system=prompt_builder.CODE_GENERATOR_SYSTEM,
                    user=prompt_builder.app_refinement(app.name, decode_code(app), refinement),
                    temperature=0.3,
                    max_tokens=4000,
                ),
                "refined code",
            )
            files = string_files(refined.get("files"))
            await app_repository.merge_code(db, app_id, files)
        except ShootError as exc:
            logger.error("app_refine_failed", app_id=app_id, error=exc.message)
            return {"success": False, "error": exc.message}

        changes = refined.get("changes") if isinstance(refined.get("changes"), list) else []
        explanation = refined.get("explanation") or ""
        return {
            "success": True,
            "changes": changes,
            "explanation": explanation,
            "files_changed": sorted(files),
            "message": f"Refined successfully.\n\n**Changes made:**\n{_bullets(changes)}\n\n**Explanation:** {explanation}",
        }

    async def simulate_workflow(
        self,
        db: AsyncSession,
        *,
        workflow_id: int,
        test_data: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Walk the stored steps without calling the target API."""
        workflow = await insight_repository.get_workflow(db, workflow_id)
        if workflow is None:
            return {"success": False, "error": "Workflow not found"}

        test_data = test_data or {}
        results: list[dict[str, Any]] = []
        previous_output: Any = None
        for index, step in enumerate(loads_text(workflow.steps, default=[]) or [], start=1):
            step = step if isinstance(step, dict) else {"action": str(step)}
            number = step.get("stepNumber", index)
            started = time.perf_counter()
            step_input = test_data.get(f"step{number}") if step.get("inputFrom") == "user" else previous_output
            output = {
                "simulated": True,
                "message": f"Step {number} would call {step.get('endpoint') or 'no endpoint'}",
                "input": step_input,
            }
            results.append(
                {
                    "step": number,
                    "action": step.get("action"),
                    "endpoint": step.get("endpoint"),
                    "status": "success",
                    "output": output,
                    "error": None,
                    "time": int((time.perf_counter() - started) * 1000),
                }
            )
            previous_output = output

        return {
            "success": True,
            "results": results,
            "summary": {
                "total": len(results),
                "succeeded": sum(1 for r in results if r["status"] == "success"),
                "failed": sum(1 for r in results if r["status"] == "error"),
                "total_time": sum(r["time"] for r in results),
            },
        }


generation_service = GenerationService()
