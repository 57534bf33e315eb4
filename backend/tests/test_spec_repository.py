import pytest

from shoot.core.errors import NotFoundError, ValidationFailed
from shoot.models import SpecType
from shoot.repositories.api_key_repository import api_key_repository
from shoot.repositories.app_repository import app_repository, decode_code
from shoot.repositories.conversation_repository import conversation_repository
from shoot.repositories.insight_repository import insight_repository
from shoot.repositories.spec_repository import spec_repository


async def _spec(db, name: str = "Petstore"):
    return await spec_repository.create_spec(
        db,
        name=name,
        content='{"openapi": "3.0.0"}',
        spec_type="swagger",
        endpoints=[
            {"method": "GET", "path": "/pets"},
            {"method": "post", "path": "/pets", "parameters": '[{"name": "limit", "in": "query"}]'},
        ],
    )


@pytest.mark.asyncio
async def test_endpoint_round_trip(db) -> None:
    created = await _spec(db)
    spec = await spec_repository.require_spec(db, created.id)
    assert spec.spec_type is SpecType.swagger
    assert [(e.method, e.path) for e in spec.endpoints] == [("GET", "/pets"), ("POST", "/pets")]

    endpoints = await spec_repository.list_endpoints(db, created.id)
    assert len(endpoints) == 2


@pytest.mark.asyncio
async def test_list_specs_counts_endpoints_newest_first(db) -> None:
    first = await _spec(db, "First")
    second = await spec_repository.create_spec(db, name="Second", content="{}", endpoints=[])
    rows = await spec_repository.list_specs(db)
    assert [(spec.id, count) for spec, count in rows] == [(second.id, 0), (first.id, 2)]


@pytest.mark.asyncio
async def test_missing_spec_raises_not_found(db) -> None:
    with pytest.raises(NotFoundError) as exc_info:
        await spec_repository.require_spec(db, 999)
    assert exc_info.value.status_code == 404
    with pytest.raises(NotFoundError):
        await app_repository.create_app(db, spec_id=999, name="x", framework="react", code={})


@pytest.mark.asyncio
async def test_update_settings_strips_blank_override(db) -> None:
    spec = await _spec(db)
    updated = await spec_repository.update_settings(db, spec.id, override_base_url="  https://api.example.com ")
    assert updated.override_base_url == "https://api.example.com"
    updated = await spec_repository.update_settings(db, spec.id, override_base_url="   ")
    assert updated.override_base_url is None


@pytest.mark.asyncio
async def test_delete_spec_cascades_to_every_child(db) -> None:
    spec = await _spec(db)
    other = await _spec(db, "Other")
    app = await app_repository.create_app(db, spec_id=spec.id, name="App", framework="react", code={"a.ts": "x"})
    await api_key_repository.add_key(db, spec_id=spec.id, key_name="prod", key_value="secret-value-123")
    await insight_repository.save_insights(db, spec_id=spec.id, capabilities={"capabilities": []}, workflows=[])
    await insight_repository.save_workflow(db, spec_id=spec.id, name="Flow", steps=[])
    await insight_repository.save_remix(db, spec_id=spec.id, name="Remix", endpoints_used=[], implementation={})
    conversation = await conversation_repository.create_conversation(
        db,
        conversation_id="conv-del",
        current_spec_id=spec.id,
        current_app_id=app.id,
    )

    removed = await spec_repository.delete_spec(db, spec.id)
    assert removed == {"endpoints": 2, "apps": 1, "api_keys": 1, "insights": 1, "workflows": 1, "remixes": 1}

    assert await spec_repository.get_spec(db, spec.id) is None
    assert await spec_repository.list_endpoints(db, spec.id) == []
    assert await app_repository.list_apps(db, spec_id=spec.id) == []
    assert await api_key_repository.list_keys(db, spec.id) == []
    assert await insight_repository.get_insights(db, spec.id) is None
    assert await insight_repository.list_workflows(db, spec.id) == []
    assert await insight_repository.list_remixes(db, spec.id) == []
    assert len(await spec_repository.list_endpoints(db, other.id)) == 2

    await db.refresh(conversation)
    assert conversation.current_spec_id is None
    assert conversation.current_app_id is None


@pytest.mark.asyncio
async def test_api_keys_are_masked_on_read(db) -> None:
    spec = await _spec(db)
    added = await api_key_repository.add_key(db, spec_id=spec.id, key_name="prod", key_value="sk-live-abcdefghijkl")
    assert added.masked_value == "sk-l...ijkl"
    listed = await api_key_repository.list_keys(db, spec.id)
    assert [k.masked_value for k in listed] == ["sk-l...ijkl"]
    assert not hasattr(listed[0], "key_value")
    assert await api_key_repository.get_key_value(db, added.id, spec_id=spec.id) == "sk-live-abcdefghijkl"

    other = await spec_repository.create_spec(db, name="Other", content="{}", endpoints=[])
    with pytest.raises(ValidationFailed):
        await api_key_repository.get_key_value(db, added.id, spec_id=other.id)

    await api_key_repository.delete_key(db, added.id)
    with pytest.raises(NotFoundError):
        await api_key_repository.delete_key(db, added.id)


@pytest.mark.asyncio
async def test_merge_code_overwrites_changed_files_only(db) -> None:
    spec = await _spec(db)
    app = await app_repository.create_app(
        db,
        spec_id=spec.id,
        name="App",
        framework="react",
        code={"src/App.tsx": "old", "README.md": "readme"},
    )
    await app_repository.merge_code(db, app.id, {"src/App.tsx": "new", "src/Search.tsx": "search"})
    assert decode_code(await app_repository.require_app(db, app.id)) == {
        "src/App.tsx": "new",
        "README.md": "readme",
        "src/Search.tsx": "search",
    }

    with pytest.raises(ValidationFailed):
        await app_repository.update_code(db, app.id, {"a.ts": 1})


@pytest.mark.asyncio
async def test_messages_come_back_in_order_and_clear(db) -> None:
    await conversation_repository.create_conversation(db, conversation_id="c1")
    for index in range(5):
        await conversation_repository.save_message(db, conversation_id="c1", role="user", content=f"m{index}")

    messages = await conversation_repository.get_messages(db, "c1")
    assert [m.content for m in messages] == ["m0", "m1", "m2", "m3", "m4"]
    recent = await conversation_repository.get_messages(db, "c1", limit=2)
    assert [m.content for m in recent] == ["m3", "m4"]

    assert await conversation_repository.clear_conversation(db, "c1") == 5
    assert await conversation_repository.get_conversation(db, "c1") is None


@pytest.mark.asyncio
async def test_save_insights_replaces_previous_row(db) -> None:
    spec = await _spec(db)
    await insight_repository.save_insights(db, spec_id=spec.id, capabilities={"v": 1}, workflows=[])
    await insight_repository.save_insights(db, spec_id=spec.id, capabilities={"v": 2}, workflows=[{"name": "w"}])
    insight = await insight_repository.get_insights(db, spec.id)
    assert insight.capabilities == '{"v": 2}'
