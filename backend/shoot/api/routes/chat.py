"""
Chat API.
Conversational entry point plus conversation and message history management.
"""

from __future__ import annotations

from uuid import uuid4

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from shoot.api.envelope import success_envelope
from shoot.core.database import get_db
from shoot.core.errors import NotFoundError
from shoot.repositories.conversation_repository import conversation_repository
from shoot.schemas.chat import (
    ConversationCreateRequest,
    ConversationResponse,
    ConversationUpdateRequest,
    MessageResponse,
    SendMessageRequest,
)
from shoot.services.chat_service import chat_service

router = APIRouter(prefix="/chat", tags=["Chat"])


@router.post("/messages")
async def send_message(payload: SendMessageRequest, db: AsyncSession = Depends(get_db)):
    result = await chat_service.send_message(
        db,
        message=payload.message,
        conversation_id=payload.conversation_id,
        spec_id=payload.spec_id,
        app_id=payload.app_id,
    )
    await db.commit()
    return success_envelope(result)


@router.post("/conversations", status_code=status.HTTP_201_CREATED)
async def create_conversation(payload: ConversationCreateRequest, db: AsyncSession = Depends(get_db)):
    conversation = await conversation_repository.create_conversation(
        db,
        conversation_id=payload.conversation_id or str(uuid4()),
        current_spec_id=payload.spec_id,
        current_app_id=payload.app_id,
    )
    await db.commit()
    return success_envelope(
        ConversationResponse.model_validate(conversation).model_dump(mode="json"),
        status_code=status.HTTP_201_CREATED,
    )


@router.get("/conversations/{conversation_id}")
async def get_conversation(conversation_id: str, db: AsyncSession = Depends(get_db)):
    conversation = await conversation_repository.get_conversation(db, conversation_id)
    if conversation is None:
        raise NotFoundError("Conversation", conversation_id)
    return success_envelope(ConversationResponse.model_validate(conversation).model_dump(mode="json"))


@router.patch("/conversations/{conversation_id}")
async def update_conversation(
    conversation_id: str,
    payload: ConversationUpdateRequest,
    db: AsyncSession = Depends(get_db),
):
    conversation = await conversation_repository.get_conversation(db, conversation_id)
    if conversation is None:
        raise NotFoundError("Conversation", conversation_id)
    await conversation_repository.update_conversation(db, conversation, **payload.model_dump(exclude_unset=True))
    await db.commit()
    await db.refresh(conversation)
    return success_envelope(ConversationResponse.model_validate(conversation).model_dump(mode="json"))


@router.get("/conversations/{conversation_id}/messages")
async def get_messages(
    conversation_id: str,
    limit: int | None = Query(default=None, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
):
    messages = await chat_service.get_messages(db, conversation_id, limit=limit)
    return success_envelope([MessageResponse.model_validate(m).model_dump(mode="json") for m in messages])


@router.delete("/conversations/{conversation_id}")
async def clear_conversation(conversation_id: str, db: AsyncSession = Depends(get_db)):
    deleted = await chat_service.clear_conversation(db, conversation_id)
    await db.commit()
    return success_envelope({"conversation_id": conversation_id, "messages_deleted": deleted})
