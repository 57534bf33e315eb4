from __future__ import annotations

from sqlalchemy import delete, desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from shoot.core.errors import NotFoundError, ValidationFailed
from shoot.core.security import mask_key
from shoot.models import ApiKey
from shoot.repositories.spec_repository import spec_repository
from shoot.schemas.apps import ApiKeyResponse


def _public_view(key: ApiKey) -> ApiKeyResponse:
    return ApiKeyResponse(
        id=key.id,
        spec_id=key.spec_id,
        key_name=key.key_name,
        masked_value=mask_key(key.key_value),
        description=key.description,
        created_at=key.created_at,
    )


class ApiKeyRepository:
    async def add_key(
        self,
        db: AsyncSession,
        *,
        spec_id: int,
        key_name: str,
        key_value: str,
        description: str | None = None,
    ) -> ApiKeyResponse:
        await spec_repository.ensure_exists(db, spec_id)
        key = ApiKey(spec_id=spec_id, key_name=key_name, key_value=key_value, description=description)
        db.add(key)
        await db.flush()
        await db.refresh(key)
        return _public_view(key)

    async def list_keys(self, db: AsyncSession, spec_id: int) -> list[ApiKeyResponse]:
        rows = await db.execute(
            select(ApiKey).where(ApiKey.spec_id == spec_id).order_by(desc(ApiKey.created_at), desc(ApiKey.id))
        )
        return [_public_view(key) for key in rows.scalars().all()]

    async def delete_key(self, db: AsyncSession, key_id: int) -> None:
        result = await db.execute(delete(ApiKey).where(ApiKey.id == key_id))
        if not result.rowcount:
            raise NotFoundError("API key", key_id)

    async def get_key_value(self, db: AsyncSession, key_id: int, *, spec_id: int) -> str:
        """Raw secret for outbound proxy calls. Only released for a key stored under `spec_id`."""
        row = await db.execute(select(ApiKey.key_value).where(ApiKey.id == key_id, ApiKey.spec_id == spec_id))
        key_value = row.scalar_one_or_none()
        if key_value is None:
            raise ValidationFailed(
                "API key does not belong to this spec",
                details={"api_key_id": key_id, "spec_id": spec_id},
            )
        return key_value


api_key_repository = ApiKeyRepository()
