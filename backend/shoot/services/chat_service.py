"""
Shoot - Chat Service
====================
One chat turn: resolve the conversation, record both sides of the exchange,
and let the intent router produce the reply.
"""

from __future__ import annotations

from typing import Any
from uuid import uuid4

from sqlalchemy.ext.asyncio import AsyncSession

from shoot.core.config import get_settings
from shoot.core.logging import get_logger
from shoot.models import Conversation, Message, MessageRole
from shoot.repositories.conversation_repository import conversation_repository
from shoot.repositories.spec_repository import spec_repository
from shoot.services.intent_router import ChatContext, intent_router

logger = get_logger("chat_service")
settings = get_settings()


class ChatService:
    async def get_or_create_conversation(
        self,
        db: AsyncSession,
        conversation_id: str | None,
        *,
        spec_id: int | None = None,
        app_id: int | None = None,
    ) -> Conversation:
        """Unknown or missing ids start a new conversation. Supplied context ids overwrite the stored ones."""
        conversation = None
        if conversation_id:
            conversation = await conversation_repository.get_conversation(db, conversation_id)
        if conversation is None:
            conversation = await conversation_repository.create_conversation(
                db,
                conversation_id=conversation_id or str(uuid4()),
                current_spec_id=spec_id,
                current_app_id=app_id,
            )
            logger.info("conversation_created", conversation_id=conversation.conversation_id)
            return conversation

        changes: dict[str, Any] = {}
        if spec_id is not None:
            changes["current_spec_id"] = spec_id
        if app_id is not None:
            changes["current_app_id"] = app_id
        if changes:
            await conversation_repository.update_conversation(db, conversation, **changes)
        return conversation

    async def send_message(
        self,
        db: AsyncSession,
        *,
        message: str,
        conversation_id: str | None = None,
        spec_id: int | None = None,
        app_id: int | None = None,
    ) -> dict[str, Any]:
        conversation = await self.get_or_create_conversation(db, conversation_id, spec_id=spec_id, app_id=app_id)
        await conversation_repository.save_message(
            db,
            conversation_id=conversation.conversation_id,
            role=MessageRole.user,
            content=message,
        )

        spec = None
        if conversation.current_spec_id is not None:
            spec = await spec_repository.get_spec(db, conversation.current_spec_id)
            if spec is None:
                logger.warning(
                    "conversation_spec_missing",
                    conversation_id=conversation.conversation_id,
                    spec_id=conversation.current_spec_id,
                )

        reply = await intent_router.route(
            ChatContext(
                db=db,
                conversation=conversation,
                message=message,
                spec=spec,
                app_id=conversation.current_app_id,
            )
        )

        await conversation_repository.save_message(
            db,
            conversation_id=conversation.conversation_id,
            role=MessageRole.assistant,
            content=reply.message,
        )
        if reply.action:
            await conversation_repository.update_conversation(db, conversation, last_action=reply.action)

        return {"conversation_id": conversation.conversation_id, **reply.as_payload()}

    async def get_messages(self, db: AsyncSession, conversation_id: str, *, limit: int | None = None) -> list[Message]:
        return await conversation_repository.get_messages(
            db,
            conversation_id,
            limit=limit or settings.chat_history_limit,
        )

    async def clear_conversation(self, db: AsyncSession, conversation_id: str) -> int:
        deleted = await conversation_repository.clear_conversation(db, conversation_id)
        logger.info("conversation_cleared", conversation_id=conversation_id, messages_deleted=deleted)
        return deleted


chat_service = ChatService()
