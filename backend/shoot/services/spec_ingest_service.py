"""
Shoot - Spec Ingestion
======================
Fetches or decodes OpenAPI/Swagger documents, extracts their endpoints,
and stores both through the spec repository.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any

import aiohttp
import yaml
from sqlalchemy.ext.asyncio import AsyncSession

from shoot.core.config import get_settings
from shoot.core.errors import SpecParseError
from shoot.core.json_utils import loads_text
from shoot.core.logging import get_logger
from shoot.models import ApiSpec, SpecType
from shoot.repositories.spec_repository import spec_repository

logger = get_logger("spec_ingest_service")
settings = get_settings()

HTTP_METHODS = ("get", "post", "put", "delete", "patch", "options", "head")


def decode_document(text: str) -> dict[str, Any]:
    """JSON first, YAML second. The document root must be a mapping."""
    try:
        document = json.loads(text)
    except json.JSONDecodeError:
        try:
            document = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise SpecParseError(f"Failed to parse content as JSON or YAML: {exc}") from exc
    if not isinstance(document, dict):
        raise SpecParseError("Spec content did not parse to an object")
    return document


def detect_spec_type(document: dict[str, Any]) -> SpecType:
    if document.get("openapi"):
        return SpecType.openapi
    if document.get("swagger"):
        return SpecType.swagger
    return SpecType.other


def extract_metadata(document: dict[str, Any], fallback_name: str | None = None) -> dict[str, Any]:
    info = document.get("info") if isinstance(document.get("info"), dict) else {}
    return {
        "title": info.get("title") or fallback_name or "Untitled API",
        "version": str(info.get("version") or "1.0.0"),
        "description": info.get("description"),
    }


def extract_endpoints(document: dict[str, Any]) -> list[dict[str, Any]]:
    paths = document.get("paths")
    if not isinstance(paths, dict):
        return []

    endpoints: list[dict[str, Any]] = []
    for path, path_item in paths.items():
        if not isinstance(path_item, dict):
            continue
        for method in HTTP_METHODS:
            operation = path_item.get(method)
            if not isinstance(operation, dict):
                continue
            request_body = operation.get("requestBody")
            endpoints.append(
                {
                    "path": str(path),
                    "method": method.upper(),
                    "summary": operation.get("summary"),
                    "description": operation.get("description"),
                    "parameters": json.dumps(operation.get("parameters") or [], ensure_ascii=False, default=str),
                    "request_body": json.dumps(request_body, ensure_ascii=False, default=str) if request_body else None,
                    "responses": json.dumps(operation.get("responses") or {}, ensure_ascii=False, default=str),
                }
            )
    return endpoints


def endpoint_views(spec: ApiSpec) -> list[dict[str, Any]]:
    """Plain dicts for prompts and chat replies, JSON columns decoded."""
    return [
        {
            "id": endpoint.id,
            "method": endpoint.method,
            "path": endpoint.path,
            "summary": endpoint.summary,
            "description": endpoint.description,
            "parameters": loads_text(endpoint.parameters, default=[]),
            "request_body": loads_text(endpoint.request_body),
            "responses": loads_text(endpoint.responses, default={}),
        }
        for endpoint in spec.endpoints or []
    ]


def resolve_base_url(spec: ApiSpec, document: dict[str, Any] | None = None) -> str:
    """Override, then OpenAPI `servers[0]`, then Swagger `scheme://host+basePath`."""
    if spec.override_base_url:
        return spec.override_base_url.rstrip("/")

    document = document if document is not None else loads_text(spec.content, default={})
    if not isinstance(document, dict):
        return ""
    servers = document.get("servers")
    if isinstance(servers, list) and servers and isinstance(servers[0], dict) and servers[0].get("url"):
        return str(servers[0]["url"]).rstrip("/")
    host = document.get("host")
    if host:
        schemes = document.get("schemes") or ["https"]
        return f"{schemes[0]}://{host}{document.get('basePath') or ''}".rstrip("/")
    return ""


def resolve_security_schemes(document: dict[str, Any]) -> list[dict[str, Any]]:
    """Schemes named by the first global security requirement, annotated with `key_name`."""
    components = document.get("components") if isinstance(document.get("components"), dict) else {}
    definitions = components.get("securitySchemes") or document.get("securityDefinitions") or {}
    if not isinstance(definitions, dict):
        return []

    requirements = document.get("security")
    if not isinstance(requirements, list) or not requirements or not isinstance(requirements[0], dict):
        return []

    schemes = []
    for key_name in requirements[0]:
        scheme = definitions.get(key_name)
        if isinstance(scheme, dict):
            schemes.append({**scheme, "key_name": key_name})
    return schemes


class SpecIngestService:
    async def fetch_document(self, url: str) -> str:
        timeout = aiohttp.ClientTimeout(total=settings.spec_fetch_timeout)
        try:
            async with aiohttp.ClientSession(headers={"User-Agent": "Shoot/1.0"}) as session:
                async with session.get(url, timeout=timeout, allow_redirects=True) as resp:
                    if resp.status != 200:
                        logger.warning("spec_fetch_http_error", url=url, status=resp.status)
                        raise SpecParseError(f"Failed to fetch spec: HTTP {resp.status}")
                    return await resp.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.error("spec_fetch_failed", url=url, error=str(exc))
            raise SpecParseError(f"Failed to fetch spec: {exc}") from exc

    async def parse_spec(
        self,
        db: AsyncSession,
        *,
        content: str | None = None,
        spec_url: str | None = None,
        name: str | None = None,
    ) -> dict[str, Any]:
        """Ingest a spec and report `{success, ...}`. Parse and fetch failures are returned, not raised."""
        try:
            if spec_url:
                document = decode_document(await self.fetch_document(spec_url))
            elif content:
                document = decode_document(content)
            else:
                raise SpecParseError("Either content or spec_url is required")
        except SpecParseError as exc:
            logger.warning("spec_parse_failed", url=spec_url, error=exc.message)
            return {"success": False, "error": exc.message}

        metadata = extract_metadata(document, name)
        endpoints = extract_endpoints(document)
        spec = await spec_repository.create_spec(
            db,
            name=metadata["title"],
            description=metadata["description"],
            version=metadata["version"],
            spec_type=detect_spec_type(document),
            content=json.dumps(document, ensure_ascii=False, default=str),
            endpoints=endpoints,
        )
        logger.info("spec_ingested", spec_id=spec.id, name=spec.name, endpoint_count=len(endpoints))
        return {
            "success": True,
            "id": spec.id,
            "name": spec.name,
            "endpoint_count": len(endpoints),
            "metadata": metadata,
        }


spec_ingest_service = SpecIngestService()
