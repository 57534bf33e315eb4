from __future__ import annotations

import json
from typing import Any

from sqlalchemy import delete, desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from shoot.core.errors import NotFoundError, ValidationFailed
from shoot.core.json_utils import dumps_text, loads_text
from shoot.models import GeneratedApp
from shoot.repositories.spec_repository import spec_repository


def validate_code_map(code: Any) -> dict[str, str]:
    """Generated code is always a flat {relative_path: source} mapping."""
    if not isinstance(code, dict):
        raise ValidationFailed("App code must be a mapping of file path to source text")
    bad = [key for key, value in code.items() if not isinstance(key, str) or not isinstance(value, str)]
    if bad:
        raise ValidationFailed("App code entries must map strings to strings", details={"files": bad[:20]})
    return dict(code)


def decode_code(app: GeneratedApp) -> dict[str, str]:
    code = loads_text(app.code, default={})
    return code if isinstance(code, dict) else {}


class AppRepository:
    async def create_app(
        self,
        db: AsyncSession,
        *,
        spec_id: int,
        name: str,
        framework: str,
        code: dict[str, str],
        description: str | None = None,
        metadata: dict | None = None,
    ) -> GeneratedApp:
        await spec_repository.ensure_exists(db, spec_id)
        app = GeneratedApp(
            spec_id=spec_id,
            name=name,
            description=description,
            framework=framework,
            code=json.dumps(validate_code_map(code), ensure_ascii=False),
            app_metadata=dumps_text(metadata),
        )
        db.add(app)
        await db.flush()
        await db.refresh(app)
        return app

    async def get_app(self, db: AsyncSession, app_id: int) -> GeneratedApp | None:
        row = await db.execute(select(GeneratedApp).where(GeneratedApp.id == app_id))
        return row.scalar_one_or_none()

    async def require_app(self, db: AsyncSession, app_id: int) -> GeneratedApp:
        app = await self.get_app(db, app_id)
        if app is None:
            raise NotFoundError("App", app_id)
        return app

    async def list_apps(self, db: AsyncSession, *, spec_id: int | None = None) -> list[GeneratedApp]:
        stmt = select(GeneratedApp)
        if spec_id is not None:
            stmt = stmt.where(GeneratedApp.spec_id == spec_id)
        rows = await db.execute(stmt.order_by(desc(GeneratedApp.created_at), desc(GeneratedApp.id)))
        return list(rows.scalars().all())

    async def update_code(self, db: AsyncSession, app_id: int, code: dict[str, str]) -> GeneratedApp:
        app = await self.require_app(db, app_id)
        app.code = json.dumps(validate_code_map(code), ensure_ascii=False)
        await db.flush()
        return app

    async def merge_code(
        self,
        db: AsyncSession,
        app_id: int,
        files: dict[str, str] | None,
        *,
        metadata: dict | None = None,
    ) -> GeneratedApp:
        """Shallow-overwrite changed files into the stored map. An empty change set writes nothing."""
        app = await self.require_app(db, app_id)
        changes = validate_code_map(files or {})
        if not changes and metadata is None:
            return app

        if changes:
            merged = decode_code(app)
            merged.update(changes)
            app.code = json.dumps(merged, ensure_ascii=False)
        if metadata is not None:
            current = loads_text(app.app_metadata, default={})
            if not isinstance(current, dict):
                current = {}
            current.update(metadata)
            app.app_metadata = dumps_text(current)
        await db.flush()
        return app

    async def delete_app(self, db: AsyncSession, app_id: int) -> None:
        await self.require_app(db, app_id)
        await db.execute(delete(GeneratedApp).where(GeneratedApp.id == app_id))


app_repository = AppRepository()
