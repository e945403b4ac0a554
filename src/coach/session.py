import logging
import os
import threading
from typing import Protocol, runtime_checkable

from coach.config import DEMO_USER_ID
from coach.models import (
    AnonymousIdentity,
    AuthenticatedIdentity,
    DemoIdentity,
    Identity,
)

logger = logging.getLogger(__name__)

_TRUTHY = {"1", "true", "yes", "on"}


@runtime_checkable
class SessionProvider(Protocol):
    def is_demo(self) -> bool: ...

    def access_token(self) -> str | None: ...

    def user_id(self) -> str | None: ...


class StaticSessionProvider:
    """In-memory auth state. Writers are the sign-in/out helpers; the pipeline only reads."""

    def __init__(
        self,
        access_token: str | None = None,
        user_id: str | None = None,
        demo: bool = False,
    ):
        self._lock = threading.Lock()
        self._access_token = access_token
        self._user_id = user_id
        self._demo = demo

    @classmethod
    def from_env(cls) -> "StaticSessionProvider":
        return cls(
            access_token=os.environ.get("COACH_ACCESS_TOKEN") or None,
            user_id=os.environ.get("COACH_USER_ID") or None,
            demo=os.environ.get("COACH_DEMO", "").strip().lower() in _TRUTHY,
        )

    def is_demo(self) -> bool:
        with self._lock:
            return self._demo

    def access_token(self) -> str | None:
        with self._lock:
            return self._access_token

    def user_id(self) -> str | None:
        with self._lock:
            return self._user_id

    def sign_in(self, access_token: str, user_id: str | None = None) -> None:
        with self._lock:
            self._access_token = access_token
            self._user_id = user_id
            self._demo = False

    def sign_out(self) -> None:
        with self._lock:
            self._access_token = None
            self._user_id = None
            self._demo = False

    def start_demo(self) -> None:
        with self._lock:
            self._demo = True

    def end_demo(self) -> None:
        with self._lock:
            self._demo = False


class SessionResolver:
    def __init__(self, provider: SessionProvider, demo_user_id: str = DEMO_USER_ID):
        self.provider = provider
        self.demo_user_id = demo_user_id

    def resolve(self) -> Identity:
        if self.provider.is_demo():
            return DemoIdentity(fixed_user_id=self.demo_user_id)

        token = self.provider.access_token()
        if token:
            return AuthenticatedIdentity(
                session_token=token, user_id=self.provider.user_id()
            )

        logger.debug("No live session, falling back to public credential")
        return AnonymousIdentity()
