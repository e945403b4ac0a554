import random
import threading

import httpx
import pytest

from coach.config import BackendConfig, RetryConfig
from coach.demo import DemoResponder
from coach.dispatcher import RequestDispatcher
from coach.history import HistoryPersister
from coach.models import HistoryRecord
from coach.pipeline import ChatPipeline
from coach.session import SessionResolver, StaticSessionProvider


def ok_body(content: str = "Hello from the coach") -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


class RecordingSleep:
    def __init__(self):
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)

    @property
    def total(self) -> float:
        return sum(self.calls)


class ScriptedBackend:
    """Plays back a list of steps; the last step repeats once the script runs out.

    A step is ``(status, body)`` or an exception instance to raise.
    """

    def __init__(self, steps: list):
        self.steps = list(steps)
        self.requests: list[httpx.Request] = []

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        index = min(len(self.requests) - 1, len(self.steps) - 1)
        step = self.steps[index]
        if isinstance(step, Exception):
            raise step
        status, body = step
        if isinstance(body, (dict, list)):
            return httpx.Response(status, json=body)
        return httpx.Response(status, text=body or "")

    @property
    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handle))


class RecordingStore:
    def __init__(self):
        self.records: list[HistoryRecord] = []
        self.tokens: list[str | None] = []
        self.closed = False
        self._lock = threading.Lock()

    def append(self, record: HistoryRecord, access_token: str | None = None) -> None:
        with self._lock:
            self.records.append(record)
            self.tokens.append(access_token)

    def close(self) -> None:
        self.closed = True


class FailingStore:
    def __init__(self, error: Exception | None = None):
        self.error = error or RuntimeError("history database unavailable")
        self.calls = 0

    def append(self, record: HistoryRecord, access_token: str | None = None) -> None:
        self.calls += 1
        raise self.error

    def close(self) -> None:
        pass


@pytest.fixture
def backend_config() -> BackendConfig:
    return BackendConfig(
        url="https://example.supabase.co",
        anon_key="anon-key",
        function_name="chat-assistant",
        timeout_seconds=5.0,
    )


@pytest.fixture
def retry_config() -> RetryConfig:
    return RetryConfig(max_attempts=3, base_delay=1.0)


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def store() -> RecordingStore:
    return RecordingStore()


@pytest.fixture
def signed_in() -> StaticSessionProvider:
    return StaticSessionProvider(access_token="session-token", user_id="user-123")


@pytest.fixture
def build_pipeline(backend_config, retry_config, sleep):
    created: list[ChatPipeline] = []

    def factory(
        backend: ScriptedBackend,
        provider: StaticSessionProvider,
        store=None,
        on_event=None,
    ) -> ChatPipeline:
        pipeline = ChatPipeline(
            resolver=SessionResolver(provider),
            demo=DemoResponder(delay=1.0, rng=random.Random(7), sleep=sleep),
            dispatcher=RequestDispatcher(
                backend_config, retry_config, client=backend.client, sleep=sleep
            ),
            persister=HistoryPersister(store if store is not None else RecordingStore()),
            on_event=on_event,
        )
        created.append(pipeline)
        return pipeline

    yield factory

    for pipeline in created:
        pipeline.close()
