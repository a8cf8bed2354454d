"""Turns a session's raw history into the message list sent to the gateway.

Everything here is a pure function of its inputs: no clock, no ids, no I/O.
"""

from collections.abc import Sequence

from gatewaychat.models import Message, Role, ShapedMessage
from gatewaychat.providers import ProviderPolicy

DEFAULT_SYSTEM_PROMPT = "You are a helpful assistant."
CONVERSATION_INIT_PROMPT = "Conversation initialization."
SKIPPED_NOTICE = (
    "An earlier portion of the conversation was skipped to keep the request short."
)

HISTORY_LIMIT = 20
HISTORY_KEEP = 12
ALTERNATION_LIMIT = 10
ALTERNATION_KEEP = 8


def shortened_notice(kept: int) -> str:
    return f"The conversation history was shortened. Only the last {kept} messages are included."


def split_head(history: Sequence[Message]) -> tuple[list[ShapedMessage], list[ShapedMessage]]:
    """Split history into the leading system run and the non-system body."""
    head: list[ShapedMessage] = []
    index = 0
    while index < len(history) and history[index].role == Role.SYSTEM:
        head.append(ShapedMessage(role=Role.SYSTEM, content=history[index].content))
        index += 1
    body = [
        ShapedMessage(role=m.role, content=m.content)
        for m in history[index:]
        if m.role != Role.SYSTEM
    ]
    return head, body


def cap_history(body: list[ShapedMessage]) -> tuple[list[ShapedMessage], ShapedMessage | None]:
    if len(body) <= HISTORY_LIMIT:
        return body, None
    notice = ShapedMessage(role=Role.SYSTEM, content=shortened_notice(HISTORY_KEEP))
    return body[-HISTORY_KEEP:], notice


def merge_consecutive(body: list[ShapedMessage]) -> list[ShapedMessage]:
    merged: list[ShapedMessage] = []
    for message in body:
        if merged and merged[-1].role == message.role:
            previous = merged[-1]
            merged[-1] = ShapedMessage(
                role=previous.role, content=f"{previous.content}\n\n{message.content}"
            )
        else:
            merged.append(message)
    return merged


def enforce_alternation(body: list[ShapedMessage]) -> list[ShapedMessage]:
    shaped = merge_consecutive([m for m in body if m.role != Role.SYSTEM])
    if shaped[0].role != Role.USER:
        shaped.insert(0, ShapedMessage(role=Role.USER, content=CONVERSATION_INIT_PROMPT))
    if len(shaped) > ALTERNATION_LIMIT:
        shaped = [ShapedMessage(role=Role.SYSTEM, content=SKIPPED_NOTICE)] + shaped[-ALTERNATION_KEEP:]
    return shaped


def normalize(history: Sequence[Message], policy: ProviderPolicy) -> list[ShapedMessage]:
    if not history:
        return [ShapedMessage(role=Role.SYSTEM, content=DEFAULT_SYSTEM_PROMPT)]

    head, body = split_head(history)
    has_system = bool(head) or any(m.role == Role.SYSTEM for m in history)

    body, notice = cap_history(body)
    if notice is not None:
        head = head + [notice]
    elif not has_system:
        head = [ShapedMessage(role=Role.SYSTEM, content=DEFAULT_SYSTEM_PROMPT)]

    if policy.requires_strict_alternation and body:
        body = enforce_alternation(body)

    return head + body
