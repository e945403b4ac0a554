from coach.config import CoachConfig, ConfigError
from coach.conversation import Conversation
from coach.errors import (
    ChatDeliveryFailed,
    CoachError,
    HttpError,
    InvalidFormat,
    NetworkError,
    RateLimited,
    user_facing_message,
)
from coach.models import ChatMessage
from coach.pipeline import ChatPipeline, send_chat_message
from coach.session import SessionResolver, StaticSessionProvider

__all__ = [
    "ChatDeliveryFailed",
    "ChatMessage",
    "ChatPipeline",
    "CoachConfig",
    "CoachError",
    "ConfigError",
    "Conversation",
    "HttpError",
    "InvalidFormat",
    "NetworkError",
    "RateLimited",
    "SessionResolver",
    "StaticSessionProvider",
    "send_chat_message",
    "user_facing_message",
]
