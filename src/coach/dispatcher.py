import logging
import time
from dataclasses import dataclass
from typing import Any, Callable

import httpx

from coach.config import BackendConfig, RetryConfig
from coach.errors import HttpError, NetworkError, RateLimited
from coach.models import AuthenticatedIdentity, ChatMessage, DemoIdentity, Identity

logger = logging.getLogger(__name__)

RetryCallback = Callable[[int, float, Exception], None]


@dataclass
class RetryState:
    attempt: int = 0
    last_error: Exception | None = None


def _error_message(response: httpx.Response) -> str | None:
    try:
        data = response.json()
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    error = data.get("error")
    if isinstance(error, dict):
        error = error.get("message")
    if isinstance(error, str) and error:
        return error
    message = data.get("message")
    if isinstance(message, str) and message:
        return message
    return None


class RequestDispatcher:
    def __init__(
        self,
        backend: BackendConfig,
        retry: RetryConfig | None = None,
        *,
        client: httpx.Client | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.backend = backend
        self.retry = retry or RetryConfig()
        self._client = client
        self._sleep = sleep

    @property
    def client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(timeout=self.backend.timeout_seconds)
        return self._client

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def build_headers(self, identity: Identity) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "apikey": self.backend.anon_key,
        }
        if isinstance(identity, AuthenticatedIdentity):
            headers["Authorization"] = f"Bearer {identity.session_token}"
        return headers

    def build_payload(
        self, message: str, identity: Identity, context: dict | None = None
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "messages": [ChatMessage(role="user", content=message).to_wire()],
            "userId": identity.user_id,
        }
        if context:
            payload["context"] = context
        return payload

    def dispatch(
        self,
        message: str,
        identity: Identity,
        context: dict | None = None,
        *,
        on_retry: RetryCallback | None = None,
    ) -> str:
        if isinstance(identity, DemoIdentity):
            raise ValueError("demo identity cannot be dispatched to the chat backend")

        headers = self.build_headers(identity)
        payload = self.build_payload(message, identity, context)
        max_attempts = self.retry.max_attempts
        state = RetryState()

        while state.attempt < max_attempts:
            try:
                body = self._send(headers, payload)
                if state.attempt:
                    logger.info(f"Chat request succeeded after {state.attempt + 1} attempts")
                return body
            except RateLimited as e:
                # 429 shares the attempt counter but skips the budget check.
                state.last_error = e
                state.attempt += 1
                self._backoff(state, on_retry)
            except (NetworkError, HttpError) as e:
                state.last_error = e
                if state.attempt >= max_attempts - 1:
                    break
                state.attempt += 1
                self._backoff(state, on_retry)

        if state.last_error is None:
            raise NetworkError("no attempts were made")
        logger.error(
            f"Chat request failed after {max_attempts} attempts: {state.last_error}"
        )
        raise state.last_error

    def _backoff(self, state: RetryState, on_retry: RetryCallback | None) -> None:
        delay = self.retry.backoff(state.attempt)
        logger.warning(
            f"Retry {state.attempt}/{self.retry.max_attempts} after {delay:.1f}s: {state.last_error}"
        )
        if on_retry is not None:
            on_retry(state.attempt, delay, state.last_error)
        self._sleep(delay)

    def _send(self, headers: dict[str, str], payload: dict[str, Any]) -> str:
        try:
            response = self.client.post(
                self.backend.endpoint, headers=headers, json=payload
            )
        except httpx.RequestError as e:
            raise NetworkError(f"Unable to reach chat service: {e}") from e

        status = response.status_code
        if status == 429:
            raise RateLimited(_error_message(response))
        if not response.is_success:
            raise HttpError(status, _error_message(response))
        return response.text
