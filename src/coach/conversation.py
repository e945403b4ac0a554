import logging

from coach.errors import CoachError, user_facing_message
from coach.models import ChatMessage
from coach.pipeline import ChatPipeline
from coach.session import SessionProvider

logger = logging.getLogger(__name__)


class Conversation:
    """Transcript of one chat window.

    Keeps the user and assistant messages in order and turns pipeline failures
    into a single ``error`` string, the way a chat screen would show them.
    """

    def __init__(
        self,
        pipeline: ChatPipeline,
        session: SessionProvider | None = None,
        context: dict | None = None,
    ):
        self.pipeline = pipeline
        self.session = session
        self.context = context
        self.messages: list[ChatMessage] = []
        self.error: str | None = None
        self.is_loading = False

    def send(self, content: str) -> ChatMessage | None:
        if not content.strip():
            return None

        self.messages.append(ChatMessage(role="user", content=content))
        self.is_loading = True
        self.error = None
        try:
            reply = self.pipeline.send_chat_message(
                content, session=self.session, context=self.context
            )
        except CoachError as e:
            logger.error(f"Error sending message: {e}")
            self.error = user_facing_message(e)
            return None
        finally:
            self.is_loading = False

        self.messages.append(reply)
        return reply

    def clear(self) -> None:
        self.messages = []
        self.error = None
