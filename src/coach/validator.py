import json
import logging
from typing import Any

from pydantic import ValidationError

from coach.errors import InvalidFormat
from coach.models import Choice, ResponsePayload

logger = logging.getLogger(__name__)


def validate(payload: Any) -> str:
    """Extract the assistant text from a decoded chat backend response.

    Only the first choice is inspected. The content is returned as-is, without
    trimming or re-encoding.
    """
    try:
        parsed = ResponsePayload.model_validate(payload)
        first = Choice.model_validate(parsed.choices[0])
    except ValidationError as e:
        raise InvalidFormat(
            f"Invalid response format from chat service: {e.error_count()} error(s)"
        ) from e
    return first.message.content


def validate_body(raw: str | bytes) -> str:
    try:
        payload = json.loads(raw)
    except ValueError as e:
        logger.debug(f"Undecodable chat response body: {raw[:200]!r}")
        raise InvalidFormat("Chat service returned a non-JSON body") from e
    return validate(payload)
