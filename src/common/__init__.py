from common.events import (
    AssistantMessageEvent,
    ErrorEvent,
    Event,
    EventCallback,
    EventEmitter,
    PipelineStateEvent,
    RetryScheduledEvent,
)

__all__ = [
    "AssistantMessageEvent",
    "ErrorEvent",
    "Event",
    "EventCallback",
    "EventEmitter",
    "PipelineStateEvent",
    "RetryScheduledEvent",
]
