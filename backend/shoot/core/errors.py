"""Domain exceptions translated to error envelopes by the API layer."""

from __future__ import annotations

from typing import Any


class ShootError(Exception):
    code = "shoot_error"
    status_code = 400

    def __init__(self, message: str, *, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details


class NotFoundError(ShootError):
    code = "not_found"
    status_code = 404

    def __init__(self, entity: str, identifier: Any):
        super().__init__(f"{entity} not found", details={"id": identifier})
        self.entity = entity
        self.identifier = identifier


class ValidationFailed(ShootError):
    code = "validation_failed"
    status_code = 400


class SpecParseError(ShootError):
    code = "spec_parse_error"
    status_code = 422


class LLMError(ShootError):
    """The completion call failed or returned an unusable reply."""

    code = "llm_error"
    status_code = 502


class ProxyRequestError(ShootError):
    """The proxied call never produced an HTTP response."""

    code = "proxy_request_failed"
    status_code = 502
