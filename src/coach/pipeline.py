import logging
from enum import Enum

import httpx

from common.events import (
    AssistantMessageEvent,
    ErrorEvent,
    EventCallback,
    EventEmitter,
    PipelineStateEvent,
    RetryScheduledEvent,
)
from coach.config import CoachConfig
from coach.demo import DemoResponder
from coach.dispatcher import RequestDispatcher
from coach.errors import ChatDeliveryFailed, CoachError, InvalidFormat, error_kind
from coach.history import (
    HistoryPersister,
    HistoryStore,
    NullHistoryStore,
    RestHistoryStore,
    SQLiteHistoryStore,
)
from coach.models import ChatMessage, DemoIdentity, Identity
from coach.session import SessionProvider, SessionResolver
from coach.validator import validate_body

logger = logging.getLogger(__name__)


class PipelineState(str, Enum):
    IDLE = "idle"
    RESOLVING = "resolving"
    SIMULATING = "simulating"
    DISPATCHING = "dispatching"
    VALIDATING = "validating"
    PERSISTING = "persisting"
    DONE = "done"
    FAILED = "failed"


def build_history_store(config: CoachConfig) -> HistoryStore:
    backend = config.history.backend
    if backend == "sqlite":
        return SQLiteHistoryStore(config.history.db_path)
    if backend == "rest":
        return RestHistoryStore(
            config.backend.url,
            config.backend.anon_key,
            table=config.history.table,
            timeout=config.backend.timeout_seconds,
        )
    return NullHistoryStore()


class ChatPipeline:
    def __init__(
        self,
        resolver: SessionResolver,
        demo: DemoResponder,
        dispatcher: RequestDispatcher,
        persister: HistoryPersister,
        *,
        on_event: EventCallback = None,
    ):
        self.resolver = resolver
        self.demo = demo
        self.dispatcher = dispatcher
        self.persister = persister
        self.emitter = EventEmitter(on_event)

    @classmethod
    def from_config(
        cls,
        config: CoachConfig,
        provider: SessionProvider,
        *,
        client: httpx.Client | None = None,
        store: HistoryStore | None = None,
        on_event: EventCallback = None,
    ) -> "ChatPipeline":
        return cls(
            resolver=SessionResolver(provider, demo_user_id=config.demo.user_id),
            demo=DemoResponder(delay=config.demo.delay_seconds),
            dispatcher=RequestDispatcher(config.backend, config.retry, client=client),
            persister=HistoryPersister(
                store if store is not None else build_history_store(config),
                max_workers=config.history.max_workers,
            ),
            on_event=on_event,
        )

    def send_chat_message(
        self,
        message: str,
        session: SessionProvider | None = None,
        context: dict | None = None,
    ) -> ChatMessage:
        if not message or not message.strip():
            raise ValueError("message is required")

        self._transition(PipelineState.RESOLVING)
        resolver = self.resolver
        if session is not None:
            resolver = SessionResolver(session, demo_user_id=self.resolver.demo_user_id)
        identity = resolver.resolve()

        if isinstance(identity, DemoIdentity):
            self._transition(PipelineState.SIMULATING, identity)
            content = self.demo.simulate(message)
        else:
            content = self._deliver(message, identity, context)

        self._transition(PipelineState.PERSISTING, identity)
        self.persister.persist(identity, message, content)

        reply = ChatMessage(role="assistant", content=content)
        self._transition(PipelineState.DONE, identity)
        self.emitter.emit(AssistantMessageEvent(content=content))
        return reply

    def _deliver(self, message: str, identity: Identity, context: dict | None) -> str:
        self._transition(PipelineState.DISPATCHING, identity)
        try:
            raw = self.dispatcher.dispatch(
                message, identity, context, on_retry=self._on_retry
            )
        except CoachError as e:
            self._fail(e, identity)
            raise ChatDeliveryFailed(e) from e

        self._transition(PipelineState.VALIDATING, identity)
        try:
            return validate_body(raw)
        except InvalidFormat as e:
            self._fail(e, identity)
            raise

    def _on_retry(self, attempt: int, delay: float, error: Exception) -> None:
        self.emitter.emit(
            RetryScheduledEvent(
                attempt=attempt,
                max_attempts=self.dispatcher.retry.max_attempts,
                delay_seconds=delay,
                error=str(error),
            )
        )

    def _fail(self, error: Exception, identity: Identity) -> None:
        logger.error(f"Error in chat message ({error_kind(error)}): {error}")
        self._transition(PipelineState.FAILED, identity)
        self.emitter.emit(ErrorEvent(message=str(error), source="pipeline"))

    def _transition(self, state: PipelineState, identity: Identity | None = None) -> None:
        logger.debug(f"Pipeline state -> {state.value}")
        self.emitter.emit(
            PipelineStateEvent(
                state=state.value,
                identity_kind=identity.kind if identity is not None else None,
            )
        )

    def close(self, wait: bool = True) -> None:
        self.persister.close(wait=wait)
        self.dispatcher.close()


def send_chat_message(
    message: str,
    pipeline: ChatPipeline,
    session: SessionProvider | None = None,
    context: dict | None = None,
) -> ChatMessage:
    return pipeline.send_chat_message(message, session=session, context=context)
