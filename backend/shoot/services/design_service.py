"""
Shoot - Design Service
======================
Customer-facing app builds and UI iteration on generated apps.
"""

from __future__ import annotations

import json
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from shoot.core.errors import LLMError, ShootError
from shoot.core.logging import get_logger
from shoot.repositories.app_repository import app_repository, decode_code
from shoot.repositories.spec_repository import spec_repository
from shoot.services import prompt_builder
from shoot.services.generation_service import require_object, string_files
from shoot.services.llm_gateway import llm_gateway
from shoot.services.spec_ingest_service import endpoint_views

logger = get_logger("design_service")

KEY_REQUIRED = "OpenAI API key required"


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _checks(items: list) -> str:
    return "\n".join(f"- [x] {item}" for item in items if item)


class DesignService:
    async def build_customer_facing_app(
        self,
        db: AsyncSession,
        *,
        spec_id: int,
        description: str,
    ) -> dict[str, Any]:
        if not llm_gateway.configured:
            return {"success": False, "error": f"{KEY_REQUIRED} for beautiful component generation"}

        try:
            spec = await spec_repository.require_spec(db, spec_id)
            generated = require_object(
                await llm_gateway.complete_json(
                    system=prompt_builder.DESIGNER_SYSTEM,
                    user=prompt_builder.customer_app(description, spec.name, endpoint_views(spec)),
                    temperature=0.8,
                    max_tokens=4000,
                ),
                "AI response",
            )
            files = string_files(generated.get("files"))
            if not files:
                raise LLMError("Design reply contained no files")

            design = generated.get("design") if isinstance(generated.get("design"), dict) else {}
            selected = [e for e in _as_list(generated.get("selectedEndpoints")) if isinstance(e, dict)]
            features = _as_list(generated.get("features"))
            understanding = generated.get("understanding") or description
            app_name = " ".join(description.split()[:5]) + " - Customer App"

            app = await app_repository.create_app(
                db,
                spec_id=spec_id,
                name=app_name,
                description=understanding,
                framework="react",
                code=files,
                metadata={
                    "userDescription": description,
                    "design": design,
                    "selectedEndpoints": selected,
                    "features": features,
                    "deploymentReady": True,
                    "customerFacing": True,
                },
            )
        except ShootError as exc:
            logger.error("customer_app_build_failed", spec_id=spec_id, error=exc.message)
            return {"success": False, "error": exc.message}

        logger.info("customer_app_built", app_id=app.id, spec_id=spec_id, file_count=len(files))
        endpoint_lines = "\n".join(f"- {e.get('endpoint')} -> {e.get('uiElement', '')}" for e in selected)
        return {
            "success": True,
            "app_id": app.id,
            "app_name": app_name,
            "understanding": understanding,
            "design": design,
            "selected_endpoints": selected,
            "features": features,
            "file_count": len(files),
            "message": (
                f"Created a customer-facing app: **{app_name}**\n\n{understanding}\n\n"
                f"**Design:**\n- Colors: {json.dumps(design.get('colorPalette', {}))}\n"
                f"- {design.get('typography', '')}\n- {design.get('layout', '')}\n\n"
                f"**Features:**\n{_checks(features)}\n\n"
                f"**Using {len(selected)} endpoints:**\n{endpoint_lines}\n\n"
                "You can view the code, run it locally, deploy it, or ask me to refine it."
            ),
        }

    async def refine_ui(self, db: AsyncSession, *, app_id: int, request: str) -> dict[str, Any]:
        if not llm_gateway.configured:
            return {"success": False, "error": KEY_REQUIRED}

        try:
            app = await app_repository.require_app(db, app_id)
            refined = require_object(
                await llm_gateway.complete_json(
                    system=prompt_builder.DESIGNER_SYSTEM,
                    user=prompt_builder.ui_refinement(app.name, decode_code(app), request),
                    temperature=0.7,
                    max_tokens=4000,
                ),
                "UI refinement",
            )
            await app_repository.merge_code(db, app_id, string_files(refined.get("files")))
        except ShootError as exc:
            logger.error("ui_refine_failed", app_id=app_id, error=exc.message)
            return {"success": False, "error": exc.message}

        changes = _as_list(refined.get("changes"))
        return {
            "success": True,
            "changes": changes,
            "explanation": refined.get("explanation") or "",
            "visual_diff": refined.get("visualDiff") or "",
            "design_changes": refined.get("designChanges") or {},
            "message": (
                f"UI refined.\n\n**Changes:**\n{_checks(changes)}\n\n"
                f"**Visual impact:**\n{refined.get('visualDiff') or 'n/a'}\n\n"
                f"**Explanation:**\n{refined.get('explanation') or 'n/a'}"
            ),
        }

    async def create_beautiful_component(
        self,
        db: AsyncSession,
        *,
        spec_id: int,
        description: str,
        style: str | None = None,
    ) -> dict[str, Any]:
        if not llm_gateway.configured:
            return {"success": False, "error": KEY_REQUIRED}

        try:
            spec = await spec_repository.require_spec(db, spec_id)
            component = require_object(
                await llm_gateway.complete_json(
                    system=prompt_builder.DESIGNER_SYSTEM,
                    user=prompt_builder.component_design(description, endpoint_views(spec), style),
                    temperature=0.7,
                    max_tokens=3000,
                ),
                "component",
            )
        except ShootError as exc:
            logger.error("component_design_failed", spec_id=spec_id, error=exc.message)
            return {"success": False, "error": exc.message}

        files = string_files(component.get("files"))
        name = component.get("componentName") or "Component"
        return {
            "success": True,
            "component": {**component, "files": files},
            "message": (
                f"Created component **{name}**\n\n{component.get('preview', '')}\n\n"
                f"**Usage:**\n```tsx\n{component.get('usage', f'<{name} />')}\n```\n\n"
                f"**Files generated:** {', '.join(files) or 'none'}"
            ),
        }

    async def add_feature(self, db: AsyncSession, *, app_id: int, feature: str) -> dict[str, Any]:
        if not llm_gateway.configured:
            return {"success": False, "error": KEY_REQUIRED}

        try:
            app = await app_repository.require_app(db, app_id)
            spec = await spec_repository.require_spec(db, app.spec_id)
            result = require_object(
                await llm_gateway.complete_json(
                    system=prompt_builder.DESIGNER_SYSTEM,
                    user=prompt_builder.feature_addition(app.name, decode_code(app), feature, endpoint_views(spec)),
                    temperature=0.7,
                    max_tokens=4000,
                ),
                "feature addition",
            )
            new_files = string_files(result.get("newFiles"))
            updated_files = string_files(result.get("updatedFiles"))
            await app_repository.merge_code(db, app_id, {**new_files, **updated_files})
        except ShootError as exc:
            logger.error("feature_add_failed", app_id=app_id, error=exc.message)
            return {"success": False, "error": exc.message}

        features = _as_list(result.get("features"))
        return {
            "success": True,
            "features": features,
            "explanation": result.get("explanation") or "",
            "user_instructions": result.get("userInstructions") or "",
            "files_added": len(new_files),
            "files_updated": len(updated_files),
            "message": (
                f"Feature added.\n\n**New capabilities:**\n{_checks(features)}\n\n"
                f"**How it works:**\n{result.get('explanation') or 'n/a'}\n\n"
                f"**Files changed:** {len(new_files)} added, {len(updated_files)} updated"
            ),
        }


design_service = DesignService()
