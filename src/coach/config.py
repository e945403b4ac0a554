import os
import logging
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

DEMO_USER_ID = "00000000-0000-0000-0000-000000000000"
HISTORY_BACKENDS = ("sqlite", "rest", "none")


class ConfigError(Exception):
    pass


def get_optional_env(name: str, default: str) -> str:
    return os.environ.get(name, default)


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from e


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from e


@dataclass
class BackendConfig:
    url: str = field(default_factory=lambda: get_optional_env("SUPABASE_URL", ""))
    anon_key: str = field(
        default_factory=lambda: get_optional_env("SUPABASE_ANON_KEY", "")
    )
    function_name: str = field(
        default_factory=lambda: get_optional_env("COACH_CHAT_FUNCTION", "chat-assistant")
    )
    timeout_seconds: float = field(
        default_factory=lambda: _env_float("COACH_REQUEST_TIMEOUT", 30.0)
    )

    @property
    def endpoint(self) -> str:
        return f"{self.url.rstrip('/')}/functions/v1/{self.function_name}"


@dataclass
class RetryConfig:
    max_attempts: int = field(default_factory=lambda: _env_int("COACH_MAX_ATTEMPTS", 3))
    base_delay: float = field(
        default_factory=lambda: _env_float("COACH_BASE_DELAY", 1.0)
    )
    exponential_base: float = 2.0

    def backoff(self, attempt: int) -> float:
        return self.base_delay * (self.exponential_base**attempt)


@dataclass
class DemoConfig:
    delay_seconds: float = field(
        default_factory=lambda: _env_float("COACH_DEMO_DELAY", 1.0)
    )
    user_id: str = DEMO_USER_ID


@dataclass
class HistoryConfig:
    backend: str = field(
        default_factory=lambda: get_optional_env("COACH_HISTORY_BACKEND", "sqlite")
    )
    db_path: str = field(
        default_factory=lambda: get_optional_env(
            "COACH_HISTORY_DB", "data/chat_history.db"
        )
    )
    table: str = "chat_history"
    max_workers: int = 2


@dataclass
class CoachConfig:
    backend: BackendConfig = field(default_factory=BackendConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)
    demo: DemoConfig = field(default_factory=DemoConfig)
    history: HistoryConfig = field(default_factory=HistoryConfig)

    @classmethod
    def from_env(cls) -> "CoachConfig":
        return cls()

    def validate(self, *, demo: bool = False) -> None:
        if self.retry.max_attempts < 1:
            raise ConfigError("max_attempts must be at least 1")
        if self.retry.base_delay < 0:
            raise ConfigError("base_delay must be >= 0")
        if self.demo.delay_seconds < 0:
            raise ConfigError("demo delay must be >= 0")
        if self.backend.timeout_seconds <= 0:
            raise ConfigError("request timeout must be > 0")
        if self.history.backend not in HISTORY_BACKENDS:
            raise ConfigError(
                f"history backend must be one of {', '.join(HISTORY_BACKENDS)}"
            )
        if self.history.max_workers < 1:
            raise ConfigError("history max_workers must be at least 1")
        if not demo:
            if not self.backend.url:
                raise ConfigError("SUPABASE_URL is not set")
            if not self.backend.anon_key:
                raise ConfigError("SUPABASE_ANON_KEY is not set")
        if self.history.backend == "rest" and not (
            self.backend.url and self.backend.anon_key
        ):
            raise ConfigError(
                "REST history requires SUPABASE_URL and SUPABASE_ANON_KEY"
            )
        logger.info("Configuration validated successfully")
