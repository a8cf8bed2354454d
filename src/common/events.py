from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, TypeAlias


@dataclass(frozen=True, slots=True)
class SendStateEvent:
    session_id: str
    state: str
    model: str = ""
    message: str = ""


@dataclass(frozen=True, slots=True)
class AssistantMessageEvent:
    session_id: str
    content: str
    reasoning: str | None = None


@dataclass(frozen=True, slots=True)
class ErrorEvent:
    message: str
    source: str | None = None


Event: TypeAlias = SendStateEvent | AssistantMessageEvent | ErrorEvent
EventCallback: TypeAlias = Callable[[Event], None] | None


class EventEmitter:
    def __init__(self, callback: EventCallback = None):
        self._callback = callback

    def emit(self, event: Event) -> None:
        if self._callback is not None:
            self._callback(event)
