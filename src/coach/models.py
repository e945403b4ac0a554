from datetime import datetime, timezone
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from coach.config import DEMO_USER_ID


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ChatMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Literal["user", "assistant"]
    content: str
    timestamp: datetime = Field(default_factory=utc_now)

    def to_wire(self) -> dict:
        return {"role": self.role, "content": self.content}


class AuthenticatedIdentity(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["authenticated"] = "authenticated"
    session_token: str
    user_id: str | None = None


class AnonymousIdentity(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["anonymous"] = "anonymous"
    user_id: None = None


class DemoIdentity(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["demo"] = "demo"
    fixed_user_id: str = DEMO_USER_ID

    @property
    def user_id(self) -> str:
        return self.fixed_user_id


Identity = Annotated[
    Union[AuthenticatedIdentity, AnonymousIdentity, DemoIdentity],
    Field(discriminator="kind"),
]


class ChoiceMessage(BaseModel):
    role: str | None = None
    content: str


class Choice(BaseModel):
    message: ChoiceMessage


class ResponsePayload(BaseModel):
    choices: list[Any] = Field(min_length=1)


class HistoryRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str
    message: str
    response: str
    created_at: datetime = Field(default_factory=utc_now)
