"""
Shoot - Request Proxy
=====================
Replays playground calls against a third-party API, filling path and query
parameters and placing the stored credential where the spec's security
scheme says it goes.
"""

from __future__ import annotations

import json
import re
import time
from typing import Any
from urllib.parse import quote, urlencode

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from shoot.core.config import get_settings
from shoot.core.errors import ProxyRequestError, ValidationFailed
from shoot.core.json_utils import loads_text
from shoot.core.logging import get_logger
from shoot.models import ApiSpec
from shoot.repositories.api_key_repository import api_key_repository
from shoot.repositories.spec_repository import spec_repository
from shoot.schemas.proxy import ProxyRequest, ProxyResponse, SecurityScheme
from shoot.services.spec_ingest_service import resolve_base_url, resolve_security_schemes

logger = get_logger("proxy_service")
settings = get_settings()

_PLACEHOLDER_RE = re.compile(r"\{([^}]+)\}")
_URI_COMPONENT_SAFE = "-_.!~*'()"


def substitute_path(path: str, path_params: dict[str, str]) -> str:
    """Replace `{name}` with the URL-encoded value. Unknown placeholders stay as they are."""

    def _replace(match: re.Match) -> str:
        name = match.group(1)
        if name not in path_params:
            return match.group(0)
        return quote(str(path_params[name]), safe=_URI_COMPONENT_SAFE)

    return _PLACEHOLDER_RE.sub(_replace, path)


def non_empty_query(query_params: dict[str, str]) -> dict[str, str]:
    return {key: value for key, value in query_params.items() if value != ""}


def apply_credential(
    scheme: SecurityScheme | None,
    key_value: str | None,
    headers: dict[str, str],
    query: dict[str, str],
) -> None:
    """Place the key per scheme: apiKey in header or query, http bearer as Authorization. Others are left alone."""
    if scheme is None or not key_value:
        return
    scheme_type = scheme.type.lower()
    if scheme_type == "apikey" and scheme.name:
        if (scheme.location or "").lower() == "query":
            query[scheme.name] = key_value
        elif (scheme.location or "").lower() == "header":
            headers[scheme.name] = key_value
    elif scheme_type == "http" and (scheme.scheme or "").lower() == "bearer":
        headers["Authorization"] = f"Bearer {key_value}"


def _decode_body(response: httpx.Response) -> Any:
    if "json" in response.headers.get("content-type", "").lower():
        try:
            return response.json()
        except ValueError:
            return response.text
    return response.text


class ProxyService:
    def __init__(self, transport: httpx.AsyncBaseTransport | None = None):
        self._transport = transport

    async def _load_spec(self, db: AsyncSession, spec_id: int) -> tuple[ApiSpec, dict[str, Any]]:
        spec = await spec_repository.require_spec(db, spec_id)
        document = loads_text(spec.content, default={})
        return spec, document if isinstance(document, dict) else {}

    async def proxy_request(self, db: AsyncSession, payload: ProxyRequest) -> ProxyResponse:
        body = payload.body if payload.body and payload.body.strip() else None
        if body is not None:
            try:
                json.loads(body)
            except json.JSONDecodeError as exc:
                raise ValidationFailed("Request body is not valid JSON", details={"error": str(exc)}) from exc

        base_url = payload.base_url
        scheme = payload.auth.scheme if payload.auth else None
        key_id = payload.auth.api_key_id if payload.auth else None
        key_value = None
        if key_id is not None:
            # A stored key only travels to its own spec's server.
            if payload.spec_id is None:
                raise ValidationFailed("A spec is required to send a stored API key")
            key_value = await api_key_repository.get_key_value(db, key_id, spec_id=payload.spec_id)
            spec, document = await self._load_spec(db, payload.spec_id)
            base_url = resolve_base_url(spec, document)
            if scheme is None:
                schemes = resolve_security_schemes(document)
                scheme = SecurityScheme.model_validate(schemes[0]) if schemes else None
        elif not base_url and payload.spec_id is not None:
            spec, document = await self._load_spec(db, payload.spec_id)
            base_url = resolve_base_url(spec, document)
        if not base_url:
            raise ValidationFailed("No base URL available for this request")

        url = base_url.rstrip("/") + substitute_path(payload.endpoint_path, payload.path_params)
        headers = dict(payload.headers)
        query = non_empty_query(payload.query_params)
        reported_url = f"{url}?{urlencode(query)}" if query else url
        apply_credential(scheme, key_value, headers, query)
        if body is not None and not any(name.lower() == "content-type" for name in headers):
            headers["Content-Type"] = "application/json"
        method = payload.method.upper()

        start = time.perf_counter()
        try:
            async with httpx.AsyncClient(
                timeout=settings.proxy_timeout_seconds,
                transport=self._transport,
                follow_redirects=True,
            ) as client:
                response = await client.request(method, url, params=query or None, headers=headers, content=body)
        except httpx.HTTPError as exc:
            logger.warning("proxy_request_failed", method=method, url=reported_url, error=str(exc))
            raise ProxyRequestError(f"Request failed: {exc}", details={"url": reported_url}) from exc

        elapsed_ms = round((time.perf_counter() - start) * 1000, 2)
        logger.info("proxy_request", method=method, url=reported_url, status=response.status_code, elapsed_ms=elapsed_ms)
        return ProxyResponse(
            status=response.status_code,
            status_text=response.reason_phrase,
            headers=dict(response.headers),
            data=_decode_body(response),
            time=elapsed_ms,
            url=reported_url,
        )


proxy_service = ProxyService()
