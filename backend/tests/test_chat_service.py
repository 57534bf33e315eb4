import json
import uuid

import pytest

from shoot.models import MessageRole
from shoot.repositories.conversation_repository import conversation_repository
from shoot.repositories.spec_repository import spec_repository
from shoot.services.chat_service import chat_service

TINY_SPEC = json.dumps(
    {
        "openapi": "3.0.0",
        "info": {"title": "Tiny", "version": "1"},
        "paths": {"/a": {"get": {"summary": "A"}}},
    }
)


@pytest.mark.asyncio
async def test_send_message_starts_conversation_and_records_both_sides(db, no_llm) -> None:
    reply = await chat_service.send_message(db, message="help")

    conversation_id = reply["conversation_id"]
    uuid.UUID(conversation_id)
    assert reply["message"].startswith("# Welcome to Shoot!")

    messages = await chat_service.get_messages(db, conversation_id)
    assert [(m.role, m.content) for m in messages] == [
        (MessageRole.user, "help"),
        (MessageRole.assistant, reply["message"]),
    ]


@pytest.mark.asyncio
async def test_pasted_spec_becomes_active_context(db, no_llm) -> None:
    reply = await chat_service.send_message(db, message=f"paste this: {TINY_SPEC}")

    assert reply["action"] == "spec_uploaded"
    spec_id = reply["data"]["new_spec_id"]
    assert (await spec_repository.require_spec(db, spec_id)).name == "Tiny"

    conversation = await conversation_repository.get_conversation(db, reply["conversation_id"])
    assert conversation.current_spec_id == spec_id
    assert conversation.current_app_id is None
    assert conversation.last_action == "spec_uploaded"


@pytest.mark.asyncio
async def test_follow_up_uses_stored_spec(db, no_llm) -> None:
    spec = await spec_repository.create_spec(
        db,
        name="Pets",
        content="{}",
        endpoints=[{"method": "GET", "path": "/pets"}, {"method": "POST", "path": "/pets"}],
    )
    first = await chat_service.send_message(db, message="hello there", spec_id=spec.id)
    assert "action" not in first

    reply = await chat_service.send_message(
        db,
        message="generate a react app",
        conversation_id=first["conversation_id"],
    )
    assert reply["action"] == "generate_app"
    assert reply["data"] == {"spec_id": spec.id, "framework": "react", "endpoint_count": 2}


@pytest.mark.asyncio
async def test_supplied_conversation_id_is_kept(db, no_llm) -> None:
    reply = await chat_service.send_message(db, message="help", conversation_id="my-chat")
    assert reply["conversation_id"] == "my-chat"

    conversation = await chat_service.get_or_create_conversation(db, "my-chat", app_id=5)
    assert conversation.current_app_id == 5


@pytest.mark.asyncio
async def test_clear_conversation(db, no_llm) -> None:
    reply = await chat_service.send_message(db, message="help")
    conversation_id = reply["conversation_id"]

    assert await chat_service.clear_conversation(db, conversation_id) == 2
    assert await chat_service.get_messages(db, conversation_id) == []
    assert await conversation_repository.get_conversation(db, conversation_id) is None
