import json

import pytest

from shoot.core.json_utils import loads_text
from shoot.repositories.app_repository import app_repository, decode_code
from shoot.repositories.insight_repository import insight_repository
from shoot.repositories.spec_repository import spec_repository
from shoot.services.suggestion_service import (
    DEFAULT_APP_REVIEW,
    DEFAULT_FLOWS,
    basic_suggestions,
    suggestion_service,
)


async def _spec(db):
    return await spec_repository.create_spec(
        db,
        name="Weather",
        content="{}",
        endpoints=[{"method": "GET", "path": "/forecast", "summary": "Forecast"}],
    )


@pytest.mark.asyncio
async def test_no_key_fallbacks_are_static(db, no_llm) -> None:
    spec = await _spec(db)
    app = await app_repository.create_app(db, spec_id=spec.id, name="A", framework="react", code={"a.ts": "x"})

    assert await suggestion_service.suggest_flows(db, spec_id=spec.id) == {"suggestions": DEFAULT_FLOWS}
    assert await suggestion_service.analyze_app(db, app_id=app.id) == {"suggestions": DEFAULT_APP_REVIEW}
    assert len(DEFAULT_FLOWS) == 2
    assert len(DEFAULT_APP_REVIEW) == 3

    capabilities = await suggestion_service.analyze_api_capabilities(db, spec_id=spec.id)
    assert capabilities["success"] is False
    assert capabilities["basic_suggestions"] == basic_suggestions()

    for result in (
        await suggestion_service.modify_component(db, app_id=app.id, file_name="a.ts", instruction="x"),
        await suggestion_service.generate_component(db, spec_id=spec.id, description="widget"),
    ):
        assert result == {"success": False, "error": "OpenAI API key not configured"}

    for result in (
        await suggestion_service.generate_workflow(db, spec_id=spec.id, goal="alerts"),
        await suggestion_service.suggest_api_extensions(db, spec_id=spec.id),
        await suggestion_service.generate_remix(db, spec_id=spec.id),
    ):
        assert result == {"success": False, "error": "OpenAI API key required"}


@pytest.mark.asyncio
async def test_suggest_flows_parses_array_or_wraps_text(db, fake_llm) -> None:
    spec = await _spec(db)
    fake_llm.replies.append('Ideas:\n[{"name": "Rain alerts", "framework": "react"}]')
    fake_llm.replies.append("Build a dashboard.")

    assert await suggestion_service.suggest_flows(db, spec_id=spec.id) == {
        "suggestions": [{"name": "Rain alerts", "framework": "react"}]
    }
    wrapped = await suggestion_service.suggest_flows(db, spec_id=spec.id)
    assert wrapped["suggestions"][0]["description"] == "Build a dashboard."


@pytest.mark.asyncio
async def test_analyze_capabilities_stores_insight(db, fake_llm) -> None:
    spec = await _spec(db)
    fake_llm.replies.append(json.dumps({"capabilities": ["forecasts"], "workflows": [{"name": "Daily brief"}]}))

    result = await suggestion_service.analyze_api_capabilities(db, spec_id=spec.id)

    assert result["success"] is True
    insight = await insight_repository.get_insights(db, spec.id)
    assert loads_text(insight.workflows) == [{"name": "Daily brief"}]


@pytest.mark.asyncio
async def test_generate_workflow_and_remix_persist(db, fake_llm) -> None:
    spec = await _spec(db)
    fake_llm.replies.append(json.dumps({"name": "Storm watch", "steps": [{"stepNumber": 1}], "complexity": "simple"}))
    fake_llm.replies.append(
        json.dumps({"remixName": "Weather DJ", "endpointsUsed": ["GET /forecast"], "implementation": {"ui": "player"}})
    )

    workflow = await suggestion_service.generate_workflow(db, spec_id=spec.id, goal="warn about storms")
    remix = await suggestion_service.generate_remix(db, spec_id=spec.id, theme="music")

    assert workflow["success"] is True and remix["success"] is True
    assert [(w.name, w.complexity) for w in await insight_repository.list_workflows(db, spec.id)] == [
        ("Storm watch", "simple")
    ]
    remixes = await insight_repository.list_remixes(db, spec.id)
    assert remixes[0].name == "Weather DJ"
    assert fake_llm.calls[1]["temperature"] == 1.0


@pytest.mark.asyncio
async def test_modify_component_replaces_single_file(db, fake_llm) -> None:
    spec = await _spec(db)
    app = await app_repository.create_app(
        db,
        spec_id=spec.id,
        name="A",
        framework="react",
        code={"src/Button.tsx": "old", "src/App.tsx": "app"},
    )
    fake_llm.replies.append("Here:\n```tsx\nexport const Button = () => null;\n```")

    result = await suggestion_service.modify_component(
        db,
        app_id=app.id,
        file_name="src/Button.tsx",
        instruction="render nothing",
    )

    assert result["modified_code"] == "export const Button = () => null;"
    assert decode_code(await app_repository.require_app(db, app.id)) == {
        "src/Button.tsx": "export const Button = () => null;",
        "src/App.tsx": "app",
    }
