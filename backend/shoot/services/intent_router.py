"""
Shoot - Chat Intent Router
==========================
First-match-wins keyword classification of chat messages, and the handlers
that answer each intent with a ChatResponse.

Order matters: a message matching several patterns goes to the earliest one.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import Awaitable, Callable

from sqlalchemy.ext.asyncio import AsyncSession

from shoot.core.errors import LLMError, SpecParseError
from shoot.core.logging import get_logger
from shoot.models import ApiSpec, Conversation
from shoot.repositories.app_repository import app_repository
from shoot.repositories.conversation_repository import conversation_repository
from shoot.repositories.spec_repository import spec_repository
from shoot.schemas.chat import ChatResponse
from shoot.services import prompt_builder
from shoot.services.design_service import design_service
from shoot.services.llm_gateway import llm_gateway
from shoot.services.spec_ingest_service import decode_document, endpoint_views, spec_ingest_service

logger = get_logger("intent_router")


class Intent(str, enum.Enum):
    upload = "upload"
    build_customer_app = "build_customer_app"
    add_feature = "add_feature"
    refine_ui = "refine_ui"
    generate = "generate"
    analyze = "analyze"
    list = "list"
    help = "help"
    general = "general"


_UPLOAD_RE = re.compile(r"upload|add|paste|spec|openapi|swagger|https?://")
_BUILD_RE = re.compile(r"build.*dashboard|build.*for customers|build.*beautiful|create.*ui|make.*frontend")
_ADD_FEATURE_RE = re.compile(r"add.*feature|add.*search|add.*filter|add.*cart|add.*auth")
_REFINE_RE = re.compile(r"make.*more|add.*to|change.*color|refine|improve|update|modify")
_GENERATE_RE = re.compile(r"generate|create|build|make.*app|code")
_ANALYZE_RE = re.compile(r"analyze|examine|check|review|inspect")
_LIST_RE = re.compile(r"list|show.*all|what.*have|display|endpoints")
_HELP_RE = re.compile(r"help|what.*can.*do|how.*work|guide")

_URL_RE = re.compile(r"https?://[^\s]+")
_NODE_RE = re.compile(r"node|express|backend|server")
_ENDPOINT_WORDS_RE = re.compile(r"endpoint|api|route")
_YAML_DOC_RE = re.compile(r"^(openapi|swagger)\s*:", re.MULTILINE)


def is_upload(text: str, has_active_spec: bool) -> bool:
    return bool(_UPLOAD_RE.search(text))


def is_build_customer_app(text: str, has_active_spec: bool) -> bool:
    return has_active_spec and bool(_BUILD_RE.search(text))


def is_add_feature(text: str, has_active_spec: bool) -> bool:
    return bool(_ADD_FEATURE_RE.search(text))


def is_refine_ui(text: str, has_active_spec: bool) -> bool:
    return bool(_REFINE_RE.search(text))


def is_generate(text: str, has_active_spec: bool) -> bool:
    return bool(_GENERATE_RE.search(text))


def is_analyze(text: str, has_active_spec: bool) -> bool:
    return bool(_ANALYZE_RE.search(text))


def is_list(text: str, has_active_spec: bool) -> bool:
    return bool(_LIST_RE.search(text))


def is_help(text: str, has_active_spec: bool) -> bool:
    return bool(_HELP_RE.search(text))


INTENT_PREDICATES: tuple[tuple[Intent, Callable[[str, bool], bool]], ...] = (
    (Intent.upload, is_upload),
    (Intent.build_customer_app, is_build_customer_app),
    (Intent.add_feature, is_add_feature),
    (Intent.refine_ui, is_refine_ui),
    (Intent.generate, is_generate),
    (Intent.analyze, is_analyze),
    (Intent.list, is_list),
    (Intent.help, is_help),
)


def classify_intent(lowered: str, has_active_spec: bool) -> Intent:
    """Return the first intent whose predicate matches the lower-cased message."""
    for intent, predicate in INTENT_PREDICATES:
        if predicate(lowered, has_active_spec):
            return intent
    return Intent.general


@dataclass
class ChatContext:
    db: AsyncSession
    conversation: Conversation
    message: str
    spec: ApiSpec | None = None
    app_id: int | None = None

    @property
    def lowered(self) -> str:
        return self.message.lower()


HELP_MESSAGE = """# Welcome to Shoot!

I turn API specifications into working apps. Here's what I can do:

## Upload & parse
- Load OpenAPI or Swagger specs from a URL or pasted JSON/YAML
- Extract every endpoint

## Analyze
- Summarize endpoints, methods and structure
- Suggest what to build

## Generate apps
- React apps with TypeScript
- Node.js/Express services
- Optional AI-enhanced generation

**Try saying:**
- "Upload https://petstore.swagger.io/v2/swagger.json"
- "Generate a React app"
- "Show me my specs"
- "Analyze this API"

What would you like to do?"""

_NEED_SPEC_SUGGESTIONS = ["Upload a spec", "Show me an example"]


def _pasted_document(message: str) -> str | None:
    """Return the part of a chat message that looks like a pasted spec document."""
    brace = message.find("{")
    if brace >= 0 and message.rfind("}") > brace:
        return message[brace : message.rfind("}") + 1]
    match = _YAML_DOC_RE.search(message)
    if match:
        return message[match.start():]
    return None


def _spec_line(index: int, name: str, count: int, version: str | None = None) -> str:
    suffix = f" ({version})" if version else ""
    return f"{index}. **{name}**{suffix} - {count} endpoints"


class IntentRouter:
    async def route(self, ctx: ChatContext) -> ChatResponse:
        intent = classify_intent(ctx.lowered, ctx.spec is not None)
        logger.info("chat_intent_classified", intent=intent.value, conversation_id=ctx.conversation.conversation_id)
        handler: Callable[[ChatContext], Awaitable[ChatResponse]] = getattr(self, f"handle_{intent.value}")
        return await handler(ctx)

    async def handle_upload(self, ctx: ChatContext) -> ChatResponse:
        url_match = _URL_RE.search(ctx.message)
        if url_match:
            result = await spec_ingest_service.parse_spec(ctx.db, spec_url=url_match.group(0))
            if not result["success"]:
                return ChatResponse(
                    message=(
                        "I had trouble loading that spec.\n\n"
                        f"**Error:** {result['error']}\n\n"
                        "Check the URL or paste the spec content directly."
                    ),
                    suggestions=["Let me paste the content", "Help me with uploads"],
                )
            return await self._spec_loaded(ctx, result)

        pasted = _pasted_document(ctx.message)
        if pasted:
            try:
                decode_document(pasted)
            except SpecParseError:
                pasted = None
        if pasted:
            result = await spec_ingest_service.parse_spec(ctx.db, content=pasted)
            if result["success"]:
                return await self._spec_loaded(ctx, result)

        return ChatResponse(
            message=(
                "I can help you upload an API spec. You can:\n\n"
                "1. **Paste a URL** to your OpenAPI/Swagger spec\n"
                "2. **Paste the spec content** directly (JSON or YAML)\n\n"
                "Send either one and I'll process it."
            ),
            suggestions=[
                "https://petstore.swagger.io/v2/swagger.json",
                "Let me paste the content",
                "Show me an example",
            ],
        )

    async def _spec_loaded(self, ctx: ChatContext, result: dict) -> ChatResponse:
        await conversation_repository.update_conversation(
            ctx.db,
            ctx.conversation,
            current_spec_id=result["id"],
            current_app_id=None,
        )
        return ChatResponse(
            message=(
                f"Loaded the API spec **\"{result['name']}\"** with {result['endpoint_count']} endpoints.\n\n"
                "It's now the active context. What would you like to do next?"
            ),
            suggestions=["Analyze this API", "Generate a React app", "Show me the endpoints"],
            action="spec_uploaded",
            data={"new_spec_id": result["id"]},
        )

    async def handle_build_customer_app(self, ctx: ChatContext) -> ChatResponse:
        if ctx.spec is None:
            return ChatResponse(
                message="I can build a customer-facing app once there's an API spec to work with. Let's upload one.",
                suggestions=list(_NEED_SPEC_SUGGESTIONS),
            )
        return ChatResponse(
            message=(
                f"I'll build a customer-ready app for **\"{ctx.spec.name}\"**: a polished UI, "
                "the right endpoints, and a responsive, deployable layout.\n\n**Building now...**"
            ),
            action="building_customer_app",
            data={"spec_id": ctx.spec.id, "description": ctx.message},
        )

    async def handle_add_feature(self, ctx: ChatContext) -> ChatResponse:
        if ctx.app_id is None or await app_repository.get_app(ctx.db, ctx.app_id) is None:
            return ChatResponse(
                message=(
                    "I can add that feature. Which app should I update?\n\n"
                    "- Say \"Add it to my latest app\"\n"
                    "- Or pick an app from the Generated Apps tab"
                ),
                suggestions=["Add to latest app", "Show my apps"],
            )

        result = await design_service.add_feature(ctx.db, app_id=ctx.app_id, feature=ctx.message)
        if not result["success"]:
            return ChatResponse(
                message=f"I couldn't add that feature.\n\n**Error:** {result['error']}",
                suggestions=["Try again", "Show my apps"],
            )
        return ChatResponse(
            message=result["message"],
            suggestions=["Add another feature", "Refine the UI", "View the code"],
            action="feature_added",
            data={"app_id": ctx.app_id},
        )

    async def handle_refine_ui(self, ctx: ChatContext) -> ChatResponse:
        if ctx.app_id is None or await app_repository.get_app(ctx.db, ctx.app_id) is None:
            return ChatResponse(
                message=(
                    "I can refine the UI. Which app should I update?\n\n"
                    "- Pick an app from the Generated Apps tab\n"
                    "- Say \"refine my latest app\""
                ),
                suggestions=["Refine latest app", "Show my apps"],
            )

        result = await design_service.refine_ui(ctx.db, app_id=ctx.app_id, request=ctx.message)
        if not result["success"]:
            return ChatResponse(
                message=f"I couldn't refine the UI.\n\n**Error:** {result['error']}",
                suggestions=["Try again", "Show my apps"],
            )
        return ChatResponse(
            message=result["message"],
            suggestions=["Refine further", "Add a feature", "View the code"],
            action="ui_refined",
            data={"app_id": ctx.app_id},
        )

    async def handle_generate(self, ctx: ChatContext) -> ChatResponse:
        if ctx.spec is None:
            specs = await spec_repository.list_specs(ctx.db)
            if not specs:
                return ChatResponse(
                    message=(
                        "I'd love to generate an app, but first I need an API spec.\n\n"
                        "1. Paste a URL to your spec\n2. Send me the spec content"
                    ),
                    suggestions=["Upload https://petstore.swagger.io/v2/swagger.json", "Show me an example"],
                )
            top = specs[:5]
            lines = "\n".join(_spec_line(i, spec.name, count) for i, (spec, count) in enumerate(top, start=1))
            return ChatResponse(
                message=f"I can generate an app. You have {len(specs)} spec(s):\n\n{lines}\n\nWhich one should I use?",
                suggestions=[f"Use {spec.name}" for spec, _ in specs[:3]],
                data={"specs": [{"id": spec.id, "name": spec.name, "endpoint_count": count} for spec, count in top]},
            )

        framework = "node" if _NODE_RE.search(ctx.lowered) else "react"
        endpoint_count = len(ctx.spec.endpoints or [])
        return ChatResponse(
            message=(
                f"I'll generate a **{framework.upper()}** app for \"{ctx.spec.name}\".\n\n"
                f"It will include an API client covering all {endpoint_count} endpoints, TypeScript types, "
                "and error and loading states.\n\nShould I use AI to enhance the generated code?"
            ),
            suggestions=["Yes, use AI enhancement", "No, use standard templates", "Tell me more about AI features"],
            action="generate_app",
            data={"spec_id": ctx.spec.id, "framework": framework, "endpoint_count": endpoint_count},
        )

    async def handle_analyze(self, ctx: ChatContext) -> ChatResponse:
        if ctx.spec is None:
            specs = await spec_repository.list_specs(ctx.db)
            if not specs:
                return ChatResponse(
                    message="I don't have any specs to analyze yet. Paste a URL or the spec content to upload one.",
                    suggestions=["Upload a spec", "https://petstore.swagger.io/v2/swagger.json"],
                )
            lines = "\n".join(_spec_line(i, spec.name, count) for i, (spec, count) in enumerate(specs, start=1))
            return ChatResponse(
                message=f"Here are your specs:\n\n{lines}\n\nWhich one should I analyze?",
                suggestions=[f"Analyze {spec.name}" for spec, _ in specs[:3]],
                data={"specs": [{"id": spec.id, "name": spec.name, "endpoint_count": count} for spec, count in specs]},
            )

        spec = ctx.spec
        endpoints = spec.endpoints or []
        methods = list(dict.fromkeys(e.method for e in endpoints))
        paths = [e.path for e in endpoints]
        spec_type = getattr(spec.spec_type, "value", spec.spec_type) or "other"

        parts = [
            f"Here's my analysis of **\"{spec.name}\"**:\n",
            "**Overview**",
            f"- Endpoints: {len(endpoints)}",
            f"- Spec type: {spec_type.upper()}",
            f"- Version: {spec.version or 'N/A'}\n",
            "**HTTP methods**",
            *(f"- {method}" for method in methods),
            "",
            "**Sample endpoints**",
            *(f"- `{path}`" for path in paths[:5]),
        ]
        if len(paths) > 5:
            parts.append(f"- ... and {len(paths) - 5} more")
        parts.append("\n**What would you like to do next?**")
        return ChatResponse(
            message="\n".join(parts),
            suggestions=["Generate an app", "Show me all endpoints", "Analyze another spec"],
            data={"spec_id": spec.id, "endpoint_count": len(endpoints)},
        )

    async def handle_list(self, ctx: ChatContext) -> ChatResponse:
        if ctx.spec is not None and _ENDPOINT_WORDS_RE.search(ctx.lowered):
            endpoints = endpoint_views(ctx.spec)
            lines = [f"Here are all **{len(endpoints)}** endpoints for **\"{ctx.spec.name}\"**:\n"]
            for index, endpoint in enumerate(endpoints[:15], start=1):
                summary = f" - {endpoint['summary']}" if endpoint["summary"] else ""
                lines.append(f"{index}. **{endpoint['method']}** `{endpoint['path']}`{summary}")
            if len(endpoints) > 15:
                lines.append(f"\n... and {len(endpoints) - 15} more")
            return ChatResponse(
                message="\n".join(lines),
                suggestions=["Generate an app", "Analyze this API", "Show more details"],
                data={"endpoints": endpoints[:20]},
            )

        specs = await spec_repository.list_specs(ctx.db)
        if not specs:
            return ChatResponse(
                message="You don't have any API specs yet. Paste a URL or the spec content to upload one.",
                suggestions=["Upload a spec URL", "Paste spec content", "Show me an example"],
            )
        lines = "\n".join(
            _spec_line(i, spec.name, count, spec.version or "v1") for i, (spec, count) in enumerate(specs, start=1)
        )
        return ChatResponse(
            message=f"Here are your **{len(specs)}** API spec(s):\n\n{lines}",
            suggestions=["Analyze a spec", "Generate an app", "Upload another spec"],
            data={"specs": [{"id": spec.id, "name": spec.name, "endpoint_count": count} for spec, count in specs]},
        )

    async def handle_help(self, ctx: ChatContext) -> ChatResponse:
        return ChatResponse(
            message=HELP_MESSAGE,
            suggestions=["Upload an API spec", "Show me an example", "Generate a demo app"],
        )

    async def handle_general(self, ctx: ChatContext) -> ChatResponse:
        if not llm_gateway.configured:
            return ChatResponse(
                message=(
                    "I'm here to help you build apps from API specs.\n\n"
                    "I can upload specs, generate apps, analyze APIs and list your specs.\n\n"
                    "What would you like to do?"
                ),
                suggestions=["Upload a spec", "Generate an app", "Analyze an API", "Help"],
            )

        spec_name = ctx.spec.name if ctx.spec is not None else None
        endpoint_count = len(ctx.spec.endpoints or []) if ctx.spec is not None else 0
        try:
            reply = await llm_gateway.complete(
                system=prompt_builder.general_chat_system(spec_name, endpoint_count),
                user=ctx.message,
                temperature=0.7,
                max_tokens=500,
            )
        except LLMError as exc:
            logger.warning("general_chat_fallback", error=exc.message)
            return ChatResponse(
                message=(
                    "Sorry, I couldn't reach the assistant just now. I can still help you:\n\n"
                    "- Upload an API spec\n- Generate an app\n- Analyze an API\n- List your specs"
                ),
                suggestions=["Upload a spec", "Generate an app", "Help"],
            )
        return ChatResponse(message=reply, suggestions=["Upload a spec", "Generate an app", "Analyze my API"])


intent_router = IntentRouter()
