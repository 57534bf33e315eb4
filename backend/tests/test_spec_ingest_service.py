import json
from types import SimpleNamespace

import pytest

from shoot.core.errors import SpecParseError
from shoot.models import SpecType
from shoot.repositories.spec_repository import spec_repository
from shoot.services.spec_ingest_service import (
    decode_document,
    detect_spec_type,
    extract_endpoints,
    extract_metadata,
    resolve_base_url,
    resolve_security_schemes,
    spec_ingest_service,
)

SWAGGER_YAML = """
swagger: "2.0"
info:
  title: Legacy Pets
  version: 1.4
host: pets.example.com
basePath: /v1
schemes: [http]
securityDefinitions:
  api_key:
    type: apiKey
    name: X-API-Key
    in: header
security:
  - api_key: []
paths:
  /pets:
    get:
      summary: List pets
      parameters:
        - name: limit
          in: query
    trace:
      summary: ignored
"""


def test_decode_document_json_then_yaml() -> None:
    assert decode_document('{"openapi": "3.1.0"}') == {"openapi": "3.1.0"}
    assert decode_document(SWAGGER_YAML)["swagger"] == "2.0"


def test_decode_document_rejects_non_mapping() -> None:
    with pytest.raises(SpecParseError):
        decode_document("- just\n- a list\n")
    with pytest.raises(SpecParseError):
        decode_document("key: [unclosed")


def test_extract_metadata_defaults() -> None:
    assert extract_metadata({}) == {"title": "Untitled API", "version": "1.0.0", "description": None}
    assert extract_metadata({}, "Fallback")["title"] == "Fallback"
    assert extract_metadata(decode_document(SWAGGER_YAML))["version"] == "1.4"


def test_detect_spec_type() -> None:
    assert detect_spec_type({"openapi": "3.0.0"}) is SpecType.openapi
    assert detect_spec_type({"swagger": "2.0"}) is SpecType.swagger
    assert detect_spec_type({"info": {}}) is SpecType.other


def test_extract_endpoints_walks_standard_methods_only() -> None:
    document = {
        "paths": {
            "/pets": {
                "get": {"summary": "List"},
                "post": {"requestBody": {"content": {}}, "responses": {"201": {"description": "ok"}}},
                "parameters": [{"name": "shared"}],
                "trace": {"summary": "nope"},
            }
        }
    }
    endpoints = extract_endpoints(document)
    assert [(e["method"], e["path"]) for e in endpoints] == [("GET", "/pets"), ("POST", "/pets")]
    assert endpoints[0]["parameters"] == "[]"
    assert endpoints[0]["request_body"] is None
    assert endpoints[0]["responses"] == "{}"
    assert json.loads(endpoints[1]["request_body"]) == {"content": {}}


def test_resolve_base_url_precedence() -> None:
    swagger = decode_document(SWAGGER_YAML)
    spec = SimpleNamespace(override_base_url=None, content=json.dumps(swagger))
    assert resolve_base_url(spec) == "http://pets.example.com/v1"

    openapi = {"servers": [{"url": "https://api.example.com/"}], "host": "ignored"}
    assert resolve_base_url(SimpleNamespace(override_base_url=None, content=json.dumps(openapi))) == "https://api.example.com"

    spec = SimpleNamespace(override_base_url="https://staging.example.com/", content=json.dumps(openapi))
    assert resolve_base_url(spec) == "https://staging.example.com"

    assert resolve_base_url(SimpleNamespace(override_base_url=None, content="{}")) == ""
    assert resolve_base_url(SimpleNamespace(override_base_url=None, content=json.dumps({"host": "h.io"}))) == "https://h.io"


def test_resolve_security_schemes_follows_first_requirement() -> None:
    schemes = resolve_security_schemes(decode_document(SWAGGER_YAML))
    assert schemes == [{"type": "apiKey", "name": "X-API-Key", "in": "header", "key_name": "api_key"}]

    openapi = {
        "components": {"securitySchemes": {"bearer": {"type": "http", "scheme": "bearer"}}},
        "security": [{"bearer": []}],
    }
    assert resolve_security_schemes(openapi)[0]["scheme"] == "bearer"
    assert resolve_security_schemes({"components": {"securitySchemes": {}}}) == []


@pytest.mark.asyncio
async def test_parse_spec_from_yaml_content(db) -> None:
    result = await spec_ingest_service.parse_spec(db, content=SWAGGER_YAML)
    assert result["success"] is True
    assert result["name"] == "Legacy Pets"
    assert result["endpoint_count"] == 1

    spec = await spec_repository.require_spec(db, result["id"])
    assert spec.spec_type is SpecType.swagger
    assert json.loads(spec.content)["host"] == "pets.example.com"
    assert spec.endpoints[0].method == "GET"


@pytest.mark.asyncio
async def test_parse_spec_reports_errors_instead_of_raising(db, monkeypatch) -> None:
    result = await spec_ingest_service.parse_spec(db)
    assert result == {"success": False, "error": "Either content or spec_url is required"}

    async def _failing_fetch(url: str) -> str:
        raise SpecParseError("Failed to fetch spec: HTTP 404")

    monkeypatch.setattr(spec_ingest_service, "fetch_document", _failing_fetch)
    result = await spec_ingest_service.parse_spec(db, spec_url="https://example.com/missing.json")
    assert result == {"success": False, "error": "Failed to fetch spec: HTTP 404"}
    assert await spec_repository.list_specs(db) == []
