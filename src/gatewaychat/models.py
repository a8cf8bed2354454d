from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from common.ids import generate_id

DEFAULT_TITLE = "New chat"
TITLE_MAX_CHARS = 50
TITLE_ELLIPSIS = "..."


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Role(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class Message(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=generate_id)
    role: Role
    content: str
    reasoning: str | None = None
    timestamp: datetime = Field(default_factory=utc_now)

    @classmethod
    def system(cls, content: str) -> "Message":
        return cls(role=Role.SYSTEM, content=content)

    @classmethod
    def user(cls, content: str) -> "Message":
        return cls(role=Role.USER, content=content)

    @classmethod
    def assistant(cls, content: str, reasoning: str | None = None) -> "Message":
        return cls(role=Role.ASSISTANT, content=content, reasoning=reasoning)


@dataclass(frozen=True, slots=True)
class ShapedMessage:
    role: Role
    content: str

    def to_wire(self) -> dict[str, str]:
        return {"role": self.role.value, "content": self.content}


def derive_title(text: str) -> str:
    truncated = text[:TITLE_MAX_CHARS]
    if len(truncated) < len(text):
        return f"{truncated}{TITLE_ELLIPSIS}"
    return truncated


class Session(BaseModel):
    """An ordered conversation plus the model it talks to.

    Message order is insertion order. Every change to ``messages`` goes
    through ``append``/``remove`` so ``last_updated_at`` and the in-memory
    ``version`` stay in step with the list.
    """

    model_config = ConfigDict(protected_namespaces=())

    id: str = Field(default_factory=generate_id)
    title: str = DEFAULT_TITLE
    title_locked: bool = False
    messages: list[Message] = Field(default_factory=list)
    model_id: str = ""
    created_at: datetime = Field(default_factory=utc_now)
    last_updated_at: datetime = Field(default_factory=utc_now)

    _version: int = PrivateAttr(default=0)

    @property
    def version(self) -> int:
        return self._version

    def append(self, message: Message) -> None:
        if any(m.id == message.id for m in self.messages):
            raise ValueError(f"Duplicate message id {message.id} in session {self.id}")
        self.messages = [*self.messages, message]
        self._touch()

    def remove(self, message_id: str) -> bool:
        kept = [m for m in self.messages if m.id != message_id]
        if len(kept) == len(self.messages):
            return False
        self.messages = kept
        self._touch()
        return True

    def rename(self, title: str) -> None:
        title = title.strip()
        self.title = title or DEFAULT_TITLE
        self.title_locked = bool(title)

    def set_model(self, model_id: str) -> None:
        self.model_id = model_id

    def update_title_from_content(self) -> None:
        if self.title_locked or (self.title and self.title != DEFAULT_TITLE):
            return
        first_user = next((m for m in self.messages if m.role == Role.USER), None)
        if first_user is not None:
            self.title = derive_title(first_user.content)

    def _touch(self) -> None:
        self._version += 1
        self.last_updated_at = utc_now()
        self.update_title_from_content()
