GENERIC_FAILURE_MESSAGE = "Failed to send message, please try again."


class CoachError(Exception):
    pass


class NetworkError(CoachError):
    """No response was received from the chat backend."""


class HttpError(CoachError):
    def __init__(self, status: int, message: str | None = None):
        self.status = status
        self.message = message or f"Request failed with status {status}"
        super().__init__(f"HTTP {status}: {self.message}")


class RateLimited(HttpError):
    def __init__(self, message: str | None = None):
        super().__init__(429, message or "Too many requests")


class InvalidFormat(CoachError):
    pass


class ChatDeliveryFailed(CoachError):
    def __init__(
        self, cause: Exception, message: str = "failed to send message after retries"
    ):
        self.cause = cause
        super().__init__(f"{message}: {cause}")


def error_kind(error: BaseException) -> str:
    if isinstance(error, ChatDeliveryFailed):
        return f"delivery_failed:{error_kind(error.cause)}"
    if isinstance(error, RateLimited):
        return "rate_limited"
    if isinstance(error, HttpError):
        return f"http_{error.status}"
    if isinstance(error, NetworkError):
        return "network"
    if isinstance(error, InvalidFormat):
        return "invalid_format"
    return "unknown"


def user_facing_message(error: BaseException) -> str:
    """Text shown to the user for a failed send; details stay in the logs."""
    return GENERIC_FAILURE_MESSAGE
