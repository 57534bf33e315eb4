"""Models package."""
from shoot.models.spec import ApiSpec, ApiEndpoint, SpecType
from shoot.models.generated_app import GeneratedApp
from shoot.models.api_key import ApiKey
from shoot.models.conversation import Conversation, Message, MessageRole
from shoot.models.insight import Insight, Workflow, Remix

__all__ = [
    "ApiSpec",
    "ApiEndpoint",
    "SpecType",
    "GeneratedApp",
    "ApiKey",
    "Conversation",
    "Message",
    "MessageRole",
    "Insight",
    "Workflow",
    "Remix",
]
