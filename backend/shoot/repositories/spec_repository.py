from __future__ import annotations

from sqlalchemy import delete, desc, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from shoot.core.errors import NotFoundError
from shoot.core.logging import get_logger
from shoot.models import (
    ApiEndpoint,
    ApiKey,
    ApiSpec,
    Conversation,
    GeneratedApp,
    Insight,
    Remix,
    SpecType,
    Workflow,
)

logger = get_logger("spec_repository")


def _coerce_spec_type(value: SpecType | str | None) -> SpecType:
    if isinstance(value, SpecType):
        return value
    try:
        return SpecType((value or "other").strip().lower())
    except ValueError:
        return SpecType.other


class SpecRepository:
    async def create_spec(
        self,
        db: AsyncSession,
        *,
        name: str,
        content: str,
        endpoints: list[dict],
        description: str | None = None,
        version: str | None = None,
        spec_type: SpecType | str | None = SpecType.openapi,
    ) -> ApiSpec:
        spec = ApiSpec(
            name=name,
            description=description,
            version=version,
            spec_type=_coerce_spec_type(spec_type),
            content=content,
        )
        db.add(spec)
        await db.flush()

        for item in endpoints:
            db.add(
                ApiEndpoint(
                    spec_id=spec.id,
                    path=item["path"],
                    method=str(item["method"]).upper(),
                    summary=item.get("summary"),
                    description=item.get("description"),
                    parameters=item.get("parameters"),
                    request_body=item.get("request_body"),
                    responses=item.get("responses"),
                )
            )
        await db.flush()
        logger.info("spec_created", spec_id=spec.id, endpoint_count=len(endpoints))
        return spec

    async def get_spec(self, db: AsyncSession, spec_id: int) -> ApiSpec | None:
        row = await db.execute(
            select(ApiSpec)
            .options(selectinload(ApiSpec.endpoints))
            .where(ApiSpec.id == spec_id)
            .execution_options(populate_existing=True)
        )
        return row.scalar_one_or_none()

    async def require_spec(self, db: AsyncSession, spec_id: int) -> ApiSpec:
        spec = await self.get_spec(db, spec_id)
        if spec is None:
            raise NotFoundError("Spec", spec_id)
        return spec

    async def exists(self, db: AsyncSession, spec_id: int | None) -> bool:
        if spec_id is None:
            return False
        row = await db.execute(select(ApiSpec.id).where(ApiSpec.id == spec_id))
        return row.scalar_one_or_none() is not None

    async def ensure_exists(self, db: AsyncSession, spec_id: int) -> None:
        if not await self.exists(db, spec_id):
            raise NotFoundError("Spec", spec_id)

    async def list_specs(self, db: AsyncSession) -> list[tuple[ApiSpec, int]]:
        """Specs newest first, each paired with its endpoint count."""
        counts = (
            select(ApiEndpoint.spec_id, func.count(ApiEndpoint.id).label("endpoint_count"))
            .group_by(ApiEndpoint.spec_id)
            .subquery()
        )
        rows = await db.execute(
            select(ApiSpec, func.coalesce(counts.c.endpoint_count, 0))
            .outerjoin(counts, counts.c.spec_id == ApiSpec.id)
            .order_by(desc(ApiSpec.created_at), desc(ApiSpec.id))
        )
        return [(spec, int(count or 0)) for spec, count in rows.all()]

    async def list_endpoints(self, db: AsyncSession, spec_id: int) -> list[ApiEndpoint]:
        rows = await db.execute(
            select(ApiEndpoint).where(ApiEndpoint.spec_id == spec_id).order_by(ApiEndpoint.id)
        )
        return list(rows.scalars().all())

    async def update_settings(self, db: AsyncSession, spec_id: int, *, override_base_url: str | None) -> ApiSpec:
        spec = await self.require_spec(db, spec_id)
        spec.override_base_url = (override_base_url or "").strip() or None
        await db.flush()
        return spec

    async def delete_spec(self, db: AsyncSession, spec_id: int) -> dict[str, int]:
        """
        Remove a spec and every row scoped to it, children first.
        Runs inside the caller's transaction, so a failed step rolls the whole delete back.
        """
        await self.ensure_exists(db, spec_id)

        removed: dict[str, int] = {}
        for label, model in (
            ("endpoints", ApiEndpoint),
            ("apps", GeneratedApp),
            ("api_keys", ApiKey),
            ("insights", Insight),
            ("workflows", Workflow),
            ("remixes", Remix),
        ):
            result = await db.execute(delete(model).where(model.spec_id == spec_id))
            removed[label] = result.rowcount or 0

        await db.execute(
            update(Conversation)
            .where(Conversation.current_spec_id == spec_id)
            .values(current_spec_id=None, current_app_id=None)
        )
        await db.execute(delete(ApiSpec).where(ApiSpec.id == spec_id))
        logger.info("spec_deleted", spec_id=spec_id, **removed)
        return removed


spec_repository = SpecRepository()
