import json

import pytest

from shoot.core.json_utils import loads_text
from shoot.repositories.app_repository import app_repository, decode_code
from shoot.repositories.spec_repository import spec_repository
from shoot.services.design_service import design_service


async def _app(db):
    spec = await spec_repository.create_spec(
        db,
        name="Shop",
        content="{}",
        endpoints=[{"method": "GET", "path": "/products", "summary": "List products"}],
    )
    app = await app_repository.create_app(
        db,
        spec_id=spec.id,
        name="Shop App",
        framework="react",
        code={"src/App.tsx": "original", "src/index.css": "body {}"},
    )
    return spec, app


@pytest.mark.asyncio
async def test_every_operation_has_no_key_fallback(db, no_llm) -> None:
    spec, app = await _app(db)
    results = [
        await design_service.build_customer_facing_app(db, spec_id=spec.id, description="storefront"),
        await design_service.refine_ui(db, app_id=app.id, request="bigger buttons"),
        await design_service.create_beautiful_component(db, spec_id=spec.id, description="product card"),
        await design_service.add_feature(db, app_id=app.id, feature="add a cart"),
    ]
    assert [r["success"] for r in results] == [False] * 4
    assert results[0]["error"] == "OpenAI API key required for beautiful component generation"
    assert {r["error"] for r in results[1:]} == {"OpenAI API key required"}
    assert decode_code(await app_repository.require_app(db, app.id))["src/App.tsx"] == "original"


@pytest.mark.asyncio
async def test_build_customer_facing_app(db, fake_llm) -> None:
    spec, _ = await _app(db)
    fake_llm.replies.append(
        json.dumps(
            {
                "understanding": "A storefront for browsing products",
                "design": {"colorPalette": {"primary": "#123456"}, "typography": "Inter", "layout": "grid"},
                "selectedEndpoints": [{"endpoint": "GET /products", "uiElement": "Product grid"}],
                "features": ["Search", "Responsive layout"],
                "files": {"src/App.tsx": "store", "src/App.css": "css"},
            }
        )
    )

    result = await design_service.build_customer_facing_app(
        db,
        spec_id=spec.id,
        description="a clean storefront where people browse our products",
    )

    assert result["success"] is True
    assert result["app_name"] == "a clean storefront where people - Customer App"
    assert result["file_count"] == 2
    assert "GET /products -> Product grid" in result["message"]
    assert fake_llm.calls[0]["temperature"] == 0.8

    app = await app_repository.require_app(db, result["app_id"])
    metadata = loads_text(app.app_metadata)
    assert metadata["customerFacing"] is True
    assert metadata["design"]["layout"] == "grid"


@pytest.mark.asyncio
async def test_refine_ui_with_no_file_changes_leaves_code_untouched(db, fake_llm) -> None:
    _, app = await _app(db)
    before = app.code
    fake_llm.replies.append(json.dumps({"files": {}, "changes": [], "explanation": "Nothing to change"}))

    result = await design_service.refine_ui(db, app_id=app.id, request="looks fine")

    assert result["success"] is True
    assert (await app_repository.require_app(db, app.id)).code == before


@pytest.mark.asyncio
async def test_add_feature_merges_new_and_updated_files(db, fake_llm) -> None:
    _, app = await _app(db)
    fake_llm.replies.append(
        json.dumps(
            {
                "newFiles": {"src/Cart.tsx": "cart"},
                "updatedFiles": {"src/App.tsx": "with cart"},
                "features": ["Cart"],
                "explanation": "Adds a cart",
            }
        )
    )

    result = await design_service.add_feature(db, app_id=app.id, feature="shopping cart")

    assert result["success"] is True
    assert (result["files_added"], result["files_updated"]) == (1, 1)
    assert decode_code(await app_repository.require_app(db, app.id)) == {
        "src/App.tsx": "with cart",
        "src/index.css": "body {}",
        "src/Cart.tsx": "cart",
    }


@pytest.mark.asyncio
async def test_create_component_reports_unparseable_reply(db, fake_llm) -> None:
    spec, _ = await _app(db)
    fake_llm.replies.append("I made you a lovely component but forgot the JSON")
    result = await design_service.create_beautiful_component(db, spec_id=spec.id, description="card")
    assert result == {"success": False, "error": "Failed to parse component"}
