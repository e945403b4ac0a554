from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, TypeAlias


@dataclass(frozen=True, slots=True)
class PipelineStateEvent:
    state: str
    identity_kind: str | None = None


@dataclass(frozen=True, slots=True)
class RetryScheduledEvent:
    attempt: int
    max_attempts: int
    delay_seconds: float
    error: str = ""


@dataclass(frozen=True, slots=True)
class AssistantMessageEvent:
    content: str


@dataclass(frozen=True, slots=True)
class ErrorEvent:
    message: str
    source: str | None = None


Event: TypeAlias = (
    PipelineStateEvent | RetryScheduledEvent | AssistantMessageEvent | ErrorEvent
)
EventCallback: TypeAlias = Callable[[Event], None] | None


class EventEmitter:
    def __init__(self, callback: EventCallback = None):
        self._callback = callback

    def emit(self, event: Event) -> None:
        if self._callback is not None:
            self._callback(event)
