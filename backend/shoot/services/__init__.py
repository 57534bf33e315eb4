"""Lazy service exports so importing one service does not pull in every client library."""

__all__ = [
    "llm_gateway",
    "spec_ingest_service",
    "generation_service",
    "design_service",
    "suggestion_service",
    "intent_router",
    "chat_service",
    "proxy_service",
]


def __getattr__(name: str):
    if name == "llm_gateway":
        from shoot.services.llm_gateway import llm_gateway

        return llm_gateway
    if name == "spec_ingest_service":
        from shoot.services.spec_ingest_service import spec_ingest_service

        return spec_ingest_service
    if name == "generation_service":
        from shoot.services.generation_service import generation_service

        return generation_service
    if name == "design_service":
        from shoot.services.design_service import design_service

        return design_service
    if name == "suggestion_service":
        from shoot.services.suggestion_service import suggestion_service

        return suggestion_service
    if name == "intent_router":
        from shoot.services.intent_router import intent_router

        return intent_router
    if name == "chat_service":
        from shoot.services.chat_service import chat_service

        return chat_service
    if name == "proxy_service":
        from shoot.services.proxy_service import proxy_service

        return proxy_service
    raise AttributeError(name)
