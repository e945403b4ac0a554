import json

import httpx
import pytest

from coach.config import RetryConfig
from coach.dispatcher import RequestDispatcher, RetryState
from coach.errors import HttpError, NetworkError, RateLimited
from coach.models import AnonymousIdentity, AuthenticatedIdentity, DemoIdentity

from conftest import ScriptedBackend, ok_body


@pytest.fixture
def authenticated():
    return AuthenticatedIdentity(session_token="session-token", user_id="user-123")


def make_dispatcher(backend_config, retry_config, backend, sleep):
    return RequestDispatcher(backend_config, retry_config, client=backend.client, sleep=sleep)


class TestRequestConstruction:
    def test_endpoint(self, backend_config):
        assert backend_config.endpoint == (
            "https://example.supabase.co/functions/v1/chat-assistant"
        )

    def test_authenticated_headers(self, backend_config, authenticated):
        dispatcher = RequestDispatcher(backend_config)
        headers = dispatcher.build_headers(authenticated)
        assert headers["Authorization"] == "Bearer session-token"
        assert headers["apikey"] == "anon-key"
        assert headers["Content-Type"] == "application/json"

    def test_anonymous_headers_use_public_key_only(self, backend_config):
        dispatcher = RequestDispatcher(backend_config)
        headers = dispatcher.build_headers(AnonymousIdentity())
        assert "Authorization" not in headers
        assert headers["apikey"] == "anon-key"

    def test_payload(self, backend_config, authenticated):
        dispatcher = RequestDispatcher(backend_config)
        payload = dispatcher.build_payload("hi coach", authenticated)
        assert payload == {
            "messages": [{"role": "user", "content": "hi coach"}],
            "userId": "user-123",
        }

    def test_payload_with_context(self, backend_config):
        dispatcher = RequestDispatcher(backend_config)
        payload = dispatcher.build_payload(
            "hi", AnonymousIdentity(), context={"steps": 8432}
        )
        assert payload["userId"] is None
        assert payload["context"] == {"steps": 8432}

    def test_demo_identity_is_rejected(self, backend_config, retry_config, sleep):
        backend = ScriptedBackend([(200, ok_body())])
        dispatcher = make_dispatcher(backend_config, retry_config, backend, sleep)
        with pytest.raises(ValueError):
            dispatcher.dispatch("hi", DemoIdentity())
        assert backend.requests == []


class TestDispatch:
    def test_success_sends_one_request(
        self, backend_config, retry_config, sleep, authenticated
    ):
        backend = ScriptedBackend([(200, ok_body("hello"))])
        dispatcher = make_dispatcher(backend_config, retry_config, backend, sleep)

        body = dispatcher.dispatch("hi", authenticated)

        assert json.loads(body) == ok_body("hello")
        assert len(backend.requests) == 1
        assert sleep.calls == []

        request = backend.requests[0]
        assert request.method == "POST"
        assert str(request.url) == backend_config.endpoint
        assert request.headers["Authorization"] == "Bearer session-token"
        assert json.loads(request.content)["userId"] == "user-123"

    def test_rate_limited_twice_then_success(
        self, backend_config, retry_config, sleep, authenticated
    ):
        backend = ScriptedBackend(
            [(429, {"error": "slow down"}), (429, {"error": "slow down"}), (200, ok_body())]
        )
        dispatcher = make_dispatcher(backend_config, retry_config, backend, sleep)

        dispatcher.dispatch("hi", authenticated)

        assert len(backend.requests) == 3
        assert sleep.calls == [2.0, 4.0]
        assert sleep.total >= 6.0

    def test_server_error_exhausts_attempts(
        self, backend_config, retry_config, sleep, authenticated
    ):
        backend = ScriptedBackend([(500, {"error": "model overloaded"})])
        dispatcher = make_dispatcher(backend_config, retry_config, backend, sleep)

        with pytest.raises(HttpError) as exc_info:
            dispatcher.dispatch("hi", authenticated)

        assert exc_info.value.status == 500
        assert exc_info.value.message == "model overloaded"
        assert len(backend.requests) == 3
        assert sleep.calls == [2.0, 4.0]

    def test_rate_limit_shares_attempt_counter(
        self, backend_config, retry_config, sleep, authenticated
    ):
        backend = ScriptedBackend([(429, {"error": "slow down"})])
        dispatcher = make_dispatcher(backend_config, retry_config, backend, sleep)

        with pytest.raises(RateLimited):
            dispatcher.dispatch("hi", authenticated)

        assert len(backend.requests) == 3
        # The third 429 still schedules a wait before the loop notices the budget is spent.
        assert sleep.calls == [2.0, 4.0, 8.0]

    def test_rate_limit_then_server_error_stops_at_budget(
        self, backend_config, retry_config, sleep, authenticated
    ):
        backend = ScriptedBackend([(429, {}), (429, {}), (503, {})])
        dispatcher = make_dispatcher(backend_config, retry_config, backend, sleep)

        with pytest.raises(HttpError) as exc_info:
            dispatcher.dispatch("hi", authenticated)

        assert exc_info.value.status == 503
        assert len(backend.requests) == 3
        assert sleep.calls == [2.0, 4.0]

    def test_network_error_is_retried(
        self, backend_config, retry_config, sleep, authenticated
    ):
        backend = ScriptedBackend(
            [httpx.ConnectError("connection refused"), (200, ok_body())]
        )
        dispatcher = make_dispatcher(backend_config, retry_config, backend, sleep)

        dispatcher.dispatch("hi", authenticated)

        assert len(backend.requests) == 2
        assert sleep.calls == [2.0]

    def test_network_error_exhausted(
        self, backend_config, retry_config, sleep, authenticated
    ):
        backend = ScriptedBackend([httpx.ReadTimeout("timed out")])
        dispatcher = make_dispatcher(backend_config, retry_config, backend, sleep)

        with pytest.raises(NetworkError):
            dispatcher.dispatch("hi", authenticated)
        assert len(backend.requests) == 3

    def test_error_message_fallback(
        self, backend_config, retry_config, sleep, authenticated
    ):
        backend = ScriptedBackend([(404, "not found")])
        dispatcher = make_dispatcher(
            backend_config, RetryConfig(max_attempts=1, base_delay=1.0), backend, sleep
        )

        with pytest.raises(HttpError) as exc_info:
            dispatcher.dispatch("hi", authenticated)

        assert exc_info.value.message == "Request failed with status 404"
        assert sleep.calls == []

    def test_nested_error_message(
        self, backend_config, retry_config, sleep, authenticated
    ):
        backend = ScriptedBackend([(401, {"error": {"message": "JWT expired"}})])
        dispatcher = make_dispatcher(
            backend_config, RetryConfig(max_attempts=1, base_delay=1.0), backend, sleep
        )

        with pytest.raises(HttpError) as exc_info:
            dispatcher.dispatch("hi", authenticated)
        assert exc_info.value.message == "JWT expired"

    def test_success_body_is_returned_unparsed(
        self, backend_config, retry_config, sleep, authenticated
    ):
        backend = ScriptedBackend([(200, "not json at all")])
        dispatcher = make_dispatcher(backend_config, retry_config, backend, sleep)

        assert dispatcher.dispatch("hi", authenticated) == "not json at all"
        assert len(backend.requests) == 1

    def test_on_retry_callback(
        self, backend_config, retry_config, sleep, authenticated
    ):
        seen = []
        backend = ScriptedBackend([(502, {}), (200, ok_body())])
        dispatcher = make_dispatcher(backend_config, retry_config, backend, sleep)

        dispatcher.dispatch(
            "hi",
            authenticated,
            on_retry=lambda attempt, delay, error: seen.append((attempt, delay, error)),
        )

        assert len(seen) == 1
        attempt, delay, error = seen[0]
        assert attempt == 1
        assert delay == 2.0
        assert isinstance(error, HttpError)
        assert error.status == 502


class TestRetryConfig:
    def test_backoff_is_exponential(self):
        config = RetryConfig(max_attempts=3, base_delay=1.0)
        assert [config.backoff(n) for n in (1, 2, 3)] == [2.0, 4.0, 8.0]

    def test_retry_state_defaults(self):
        state = RetryState()
        assert state.attempt == 0
        assert state.last_error is None
