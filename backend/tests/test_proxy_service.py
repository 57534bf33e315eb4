import json

import httpx
import pytest

from shoot.core.errors import ProxyRequestError, ValidationFailed
from shoot.repositories.api_key_repository import api_key_repository
from shoot.repositories.spec_repository import spec_repository
from shoot.schemas.proxy import ProxyAuth, ProxyRequest, SecurityScheme
from shoot.services.proxy_service import ProxyService, apply_credential, non_empty_query, substitute_path

SPEC_DOCUMENT = {
    "openapi": "3.0.0",
    "servers": [{"url": "https://api.example.com/v2/"}],
    "components": {"securitySchemes": {"token": {"type": "apiKey", "name": "api_key", "in": "query"}}},
    "security": [{"token": []}],
}


def test_substitute_path_encodes_and_keeps_unknown() -> None:
    assert substitute_path("/pets/{petId}/toys/{toyId}", {"petId": "a b/c"}) == "/pets/a%20b%2Fc/toys/{toyId}"
    assert substitute_path("/users/{id}", {"id": "x(1)!"}) == "/users/x(1)!"


def test_non_empty_query_drops_blank_values() -> None:
    assert non_empty_query({"limit": "10", "q": "", "tag": " "}) == {"limit": "10", "tag": " "}


def test_apply_credential_by_scheme() -> None:
    headers: dict[str, str] = {}
    query: dict[str, str] = {}
    apply_credential(SecurityScheme(type="apiKey", name="X-Key", location="header"), "k1", headers, query)
    apply_credential(SecurityScheme.model_validate({"type": "apiKey", "name": "key", "in": "query"}), "k2", headers, query)
    assert headers == {"X-Key": "k1"}
    assert query == {"key": "k2"}

    headers, query = {}, {}
    apply_credential(SecurityScheme(type="http", scheme="bearer"), "tok", headers, query)
    assert headers == {"Authorization": "Bearer tok"}

    headers, query = {}, {}
    apply_credential(SecurityScheme(type="oauth2"), "tok", headers, query)
    apply_credential(SecurityScheme(type="http", scheme="basic"), "tok", headers, query)
    apply_credential(None, "tok", headers, query)
    assert headers == {} and query == {}


@pytest.mark.asyncio
async def test_proxy_request_builds_url_and_parses_json(db) -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["request"] = request
        return httpx.Response(201, json={"id": 7}, headers={"x-trace": "abc"})

    service = ProxyService(transport=httpx.MockTransport(handler))
    response = await service.proxy_request(
        db,
        ProxyRequest(
            endpoint_path="/pets/{petId}",
            method="post",
            path_params={"petId": "42"},
            query_params={"verbose": "1", "empty": ""},
            headers={"X-Client": "playground"},
            body='{"name": "Rex"}',
            base_url="https://pets.example.com/",
        ),
    )

    request = seen["request"]
    assert request.method == "POST"
    assert str(request.url) == "https://pets.example.com/pets/42?verbose=1"
    assert request.headers["content-type"] == "application/json"
    assert request.headers["x-client"] == "playground"
    assert json.loads(request.content) == {"name": "Rex"}

    assert response.status == 201
    assert response.status_text == "Created"
    assert response.data == {"id": 7}
    assert response.headers["x-trace"] == "abc"
    assert response.url == "https://pets.example.com/pets/42?verbose=1"
    assert response.time >= 0


@pytest.mark.asyncio
async def test_proxy_request_resolves_spec_base_url_and_credential(db) -> None:
    spec = await spec_repository.create_spec(db, name="Pets", content=json.dumps(SPEC_DOCUMENT), endpoints=[])
    key = await api_key_repository.add_key(db, spec_id=spec.id, key_name="prod", key_value="secret-key-value")
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        return httpx.Response(200, text="plain body", headers={"content-type": "text/plain"})

    service = ProxyService(transport=httpx.MockTransport(handler))
    response = await service.proxy_request(
        db,
        ProxyRequest(spec_id=spec.id, endpoint_path="/pets", auth=ProxyAuth(api_key_id=key.id)),
    )

    assert seen["url"] == "https://api.example.com/v2/pets?api_key=secret-key-value"
    assert response.data == "plain body"
    assert response.url == "https://api.example.com/v2/pets"
    assert "secret-key-value" not in response.model_dump_json()


@pytest.mark.asyncio
async def test_proxy_request_rejects_malformed_body_before_sending(db) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("request should not be sent")

    service = ProxyService(transport=httpx.MockTransport(handler))
    with pytest.raises(ValidationFailed):
        await service.proxy_request(
            db,
            ProxyRequest(endpoint_path="/pets", method="POST", body="{not json", base_url="https://x.io"),
        )


@pytest.mark.asyncio
async def test_proxy_request_network_failure(db) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("name resolution failed", request=request)

    service = ProxyService(transport=httpx.MockTransport(handler))
    with pytest.raises(ProxyRequestError) as exc_info:
        await service.proxy_request(db, ProxyRequest(endpoint_path="/pets", base_url="https://down.example.com"))
    assert exc_info.value.status_code == 502


@pytest.mark.asyncio
async def test_stored_key_only_goes_to_its_own_spec_server(db) -> None:
    spec = await spec_repository.create_spec(db, name="Pets", content=json.dumps(SPEC_DOCUMENT), endpoints=[])
    key = await api_key_repository.add_key(db, spec_id=spec.id, key_name="prod", key_value="secret-key-value")
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["headers"] = request.headers
        return httpx.Response(204)

    service = ProxyService(transport=httpx.MockTransport(handler))
    response = await service.proxy_request(
        db,
        ProxyRequest(
            spec_id=spec.id,
            endpoint_path="/pets",
            base_url="https://elsewhere.example",
            query_params={"limit": "5"},
            auth=ProxyAuth(
                api_key_id=key.id,
                scheme=SecurityScheme.model_validate({"type": "apiKey", "name": "X-Token", "in": "header"}),
            ),
        ),
    )

    assert seen["url"] == "https://api.example.com/v2/pets?limit=5"
    assert seen["headers"]["x-token"] == "secret-key-value"
    assert response.url == "https://api.example.com/v2/pets?limit=5"


@pytest.mark.asyncio
async def test_stored_key_rejected_outside_its_spec(db) -> None:
    owner = await spec_repository.create_spec(db, name="Pets", content=json.dumps(SPEC_DOCUMENT), endpoints=[])
    other = await spec_repository.create_spec(db, name="Other", content=json.dumps(SPEC_DOCUMENT), endpoints=[])
    key = await api_key_repository.add_key(db, spec_id=owner.id, key_name="prod", key_value="secret-key-value")

    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("request should not be sent")

    service = ProxyService(transport=httpx.MockTransport(handler))
    header_scheme = SecurityScheme.model_validate({"type": "apiKey", "name": "X-Token", "in": "header"})
    for spec_id in (None, other.id):
        with pytest.raises(ValidationFailed):
            await service.proxy_request(
                db,
                ProxyRequest(
                    spec_id=spec_id,
                    endpoint_path="/steal",
                    base_url="https://elsewhere.example",
                    auth=ProxyAuth(api_key_id=key.id, scheme=header_scheme),
                ),
            )


@pytest.mark.asyncio
async def test_unresolved_placeholder_reported_as_written(db) -> None:
    service = ProxyService(transport=httpx.MockTransport(lambda request: httpx.Response(404)))
    response = await service.proxy_request(
        db,
        ProxyRequest(endpoint_path="/pets/{id}/toys/{toyId}", path_params={"toyId": "7"}, base_url="https://x.io"),
    )
    assert response.url == "https://x.io/pets/{id}/toys/7"
    assert response.status == 404
