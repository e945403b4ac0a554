#!/usr/bin/env python3
"""
Coach - Python API Examples

This shows how to use the chat pipeline programmatically instead of via CLI.
"""

import random
import sys

from common.events import Event, RetryScheduledEvent
from coach.config import CoachConfig
from coach.conversation import Conversation
from coach.demo import DemoResponder
from coach.errors import ChatDeliveryFailed, InvalidFormat
from coach.pipeline import ChatPipeline
from coach.session import StaticSessionProvider


def example_demo_chat():
    """Example 1: Demo mode, no backend needed"""
    print("=== Example 1: Demo Chat ===\n")

    config = CoachConfig.from_env()
    config.history.backend = "none"
    config.demo.delay_seconds = 0.2

    session = StaticSessionProvider(demo=True)
    pipeline = ChatPipeline.from_config(config, session)
    # Seeded so every run picks the same variants
    pipeline.demo = DemoResponder(delay=config.demo.delay_seconds, rng=random.Random(1))

    try:
        for question in (
            "How can I improve my sleep quality?",
            "What supplements should I take?",
            "Tell me something",
        ):
            reply = pipeline.send_chat_message(question)
            print(f"you>   {question}")
            print(f"coach> {reply.content[:160]}...\n")
    finally:
        pipeline.close()


def example_live_chat():
    """Example 2: Live backend with retry progress"""
    print("=== Example 2: Live Chat ===\n")

    config = CoachConfig.from_env()
    config.validate()

    def on_event(event: Event):
        if isinstance(event, RetryScheduledEvent):
            print(f"  retry {event.attempt}/{event.max_attempts} in {event.delay_seconds:.1f}s")

    session = StaticSessionProvider.from_env()
    pipeline = ChatPipeline.from_config(config, session, on_event=on_event)

    try:
        reply = pipeline.send_chat_message(
            "How's my metabolic health?",
            context={"steps": 8432, "sleep_score": 82, "goal": "improve deep sleep"},
        )
        print(reply.content)
    except ChatDeliveryFailed as e:
        print(f"Delivery failed, last cause: {e.cause!r}")
    except InvalidFormat as e:
        print(f"Backend returned an unexpected payload: {e}")
    finally:
        pipeline.close()


def example_conversation():
    """Example 3: Conversation transcript"""
    print("=== Example 3: Conversation ===\n")

    config = CoachConfig.from_env()
    config.history.backend = "none"
    config.demo.delay_seconds = 0

    pipeline = ChatPipeline.from_config(config, StaticSessionProvider(demo=True))
    conversation = Conversation(pipeline)
    try:
        conversation.send("help me reduce stress")
        conversation.send("and my nutrition?")
        for message in conversation.messages:
            print(f"[{message.role}] {message.content.splitlines()[0]}")
    finally:
        pipeline.close()


if __name__ == "__main__":
    example_demo_chat()
    example_conversation()
    if "--live" in sys.argv:
        example_live_chat()
