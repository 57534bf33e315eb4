from __future__ import annotations

import json
from typing import Any

from sqlalchemy import delete, desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from shoot.core.json_utils import dumps_text
from shoot.models import Insight, Remix, Workflow
from shoot.repositories.spec_repository import spec_repository


def _dumps(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)


class InsightRepository:
    async def save_insights(
        self,
        db: AsyncSession,
        *,
        spec_id: int,
        capabilities: Any,
        workflows: Any,
    ) -> Insight:
        """One insight per spec: the previous row is replaced."""
        await spec_repository.ensure_exists(db, spec_id)
        await db.execute(delete(Insight).where(Insight.spec_id == spec_id))
        insight = Insight(spec_id=spec_id, capabilities=_dumps(capabilities), workflows=_dumps(workflows))
        db.add(insight)
        await db.flush()
        await db.refresh(insight)
        return insight

    async def get_insights(self, db: AsyncSession, spec_id: int) -> Insight | None:
        row = await db.execute(select(Insight).where(Insight.spec_id == spec_id))
        return row.scalar_one_or_none()

    async def save_workflow(
        self,
        db: AsyncSession,
        *,
        spec_id: int,
        name: str,
        steps: list,
        complexity: str = "medium",
        description: str | None = None,
        code: dict | None = None,
    ) -> Workflow:
        await spec_repository.ensure_exists(db, spec_id)
        workflow = Workflow(
            spec_id=spec_id,
            name=name,
            description=description,
            steps=_dumps(steps),
            complexity=complexity,
            code=dumps_text(code),
        )
        db.add(workflow)
        await db.flush()
        await db.refresh(workflow)
        return workflow

    async def get_workflow(self, db: AsyncSession, workflow_id: int) -> Workflow | None:
        row = await db.execute(select(Workflow).where(Workflow.id == workflow_id))
        return row.scalar_one_or_none()

    async def list_workflows(self, db: AsyncSession, spec_id: int) -> list[Workflow]:
        rows = await db.execute(
            select(Workflow).where(Workflow.spec_id == spec_id).order_by(desc(Workflow.created_at), desc(Workflow.id))
        )
        return list(rows.scalars().all())

    async def save_remix(
        self,
        db: AsyncSession,
        *,
        spec_id: int,
        name: str,
        endpoints_used: list,
        implementation: dict,
        description: str | None = None,
        innovation: str | None = None,
    ) -> Remix:
        await spec_repository.ensure_exists(db, spec_id)
        remix = Remix(
            spec_id=spec_id,
            name=name,
            description=description,
            innovation=innovation,
            endpoints_used=_dumps(endpoints_used),
            implementation=_dumps(implementation),
        )
        db.add(remix)
        await db.flush()
        await db.refresh(remix)
        return remix

    async def list_remixes(self, db: AsyncSession, spec_id: int) -> list[Remix]:
        rows = await db.execute(
            select(Remix).where(Remix.spec_id == spec_id).order_by(desc(Remix.created_at), desc(Remix.id))
        )
        return list(rows.scalars().all())


insight_repository = InsightRepository()
