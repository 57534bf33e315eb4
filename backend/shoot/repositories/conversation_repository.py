from __future__ import annotations

from sqlalchemy import delete, desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from shoot.models import Conversation, Message, MessageRole

_UNSET = object()


class ConversationRepository:
    async def get_conversation(self, db: AsyncSession, conversation_id: str) -> Conversation | None:
        row = await db.execute(select(Conversation).where(Conversation.conversation_id == conversation_id))
        return row.scalar_one_or_none()

    async def create_conversation(
        self,
        db: AsyncSession,
        *,
        conversation_id: str,
        current_spec_id: int | None = None,
        current_app_id: int | None = None,
    ) -> Conversation:
        conversation = Conversation(
            conversation_id=conversation_id,
            current_spec_id=current_spec_id,
            current_app_id=current_app_id,
        )
        db.add(conversation)
        await db.flush()
        await db.refresh(conversation)
        return conversation

    async def update_conversation(
        self,
        db: AsyncSession,
        conversation: Conversation,
        *,
        current_spec_id=_UNSET,
        current_app_id=_UNSET,
        last_action=_UNSET,
    ) -> Conversation:
        """Patch only the fields that were passed."""
        if current_spec_id is not _UNSET:
            conversation.current_spec_id = current_spec_id
        if current_app_id is not _UNSET:
            conversation.current_app_id = current_app_id
        if last_action is not _UNSET:
            conversation.last_action = last_action
        await db.flush()
        return conversation

    async def save_message(
        self,
        db: AsyncSession,
        *,
        conversation_id: str,
        role: MessageRole | str,
        content: str,
    ) -> Message:
        message = Message(conversation_id=conversation_id, role=MessageRole(role), content=content)
        db.add(message)
        await db.flush()
        return message

    async def get_messages(self, db: AsyncSession, conversation_id: str, *, limit: int | None = None) -> list[Message]:
        """Messages in chronological order; with `limit`, only the most recent ones."""
        stmt = select(Message).where(Message.conversation_id == conversation_id)
        if limit:
            rows = await db.execute(stmt.order_by(desc(Message.created_at), desc(Message.id)).limit(limit))
            return list(reversed(rows.scalars().all()))
        rows = await db.execute(stmt.order_by(Message.created_at, Message.id))
        return list(rows.scalars().all())

    async def clear_conversation(self, db: AsyncSession, conversation_id: str) -> int:
        result = await db.execute(delete(Message).where(Message.conversation_id == conversation_id))
        await db.execute(delete(Conversation).where(Conversation.conversation_id == conversation_id))
        return result.rowcount or 0


conversation_repository = ConversationRepository()
