import logging
import random
import time
from typing import Callable

from coach.demo_responses import DEFAULT_TOPIC, DEMO_RESPONSES

logger = logging.getLogger(__name__)


def match_topic(text: str, responses: dict[str, list[str]] = DEMO_RESPONSES) -> str:
    """Return the topic key with the longest substring match in ``text``.

    Matching is case-insensitive. Ties keep the key that appears first in the
    table. The reserved ``default`` key is never matched by content and is
    returned when nothing else matches.
    """
    lowered = text.lower()
    best_key = DEFAULT_TOPIC
    best_len = 0
    for key in responses:
        if key == DEFAULT_TOPIC:
            continue
        if key in lowered and len(key) > best_len:
            best_key = key
            best_len = len(key)
    return best_key


class DemoResponder:
    """Simulated coach replies for demo sessions.

    Answers are drawn uniformly at random from the matched topic, so asking the
    same question twice can produce different replies. Pass a seeded
    ``random.Random`` to pin the selection.

    ``simulate`` sleeps for ``delay`` seconds first so demo replies arrive with
    the same pacing as live ones.
    """

    def __init__(
        self,
        responses: dict[str, list[str]] | None = None,
        *,
        delay: float = 1.0,
        rng: random.Random | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.responses = responses if responses is not None else DEMO_RESPONSES
        if not self.responses.get(DEFAULT_TOPIC):
            raise ValueError(f"demo responses need a non-empty '{DEFAULT_TOPIC}' entry")
        self.delay = delay
        self.rng = rng or random.Random()
        self._sleep = sleep

    def simulate(self, message: str) -> str:
        if self.delay > 0:
            self._sleep(self.delay)

        topic = match_topic(message, self.responses)
        answers = self.responses.get(topic) or self.responses[DEFAULT_TOPIC]
        logger.debug(f"Demo reply for topic '{topic}' ({len(answers)} variants)")
        return self.rng.choice(answers)
