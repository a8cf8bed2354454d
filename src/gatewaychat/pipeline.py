from __future__ import annotations

import logging
from enum import Enum

from common.events import (
    AssistantMessageEvent,
    ErrorEvent,
    EventCallback,
    EventEmitter,
    SendStateEvent,
)
from gatewaychat.config import CredentialLookup, GatewayConfig
from gatewaychat.errors import PipelineError, SessionBusyError, StaleSessionError
from gatewaychat.extractor import extract_body
from gatewaychat.models import Message, Role, Session
from gatewaychat.normalizer import normalize
from gatewaychat.providers import policy_for_model
from gatewaychat.request_builder import build_request
from gatewaychat.store import SessionStore
from gatewaychat.transport import Transport

logger = logging.getLogger(__name__)


class SendState(str, Enum):
    IDLE = "idle"
    BUILDING = "building"
    AWAITING_RESPONSE = "awaiting_response"
    EXTRACTING = "extracting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class ChatPipeline:
    """Runs one send at a time per session: shape, post, extract, append.

    A failed or abandoned send leaves the session's message list exactly as
    it was before the call. ``complete`` is the re-entry point for retrying
    a history that ends in an unanswered user turn.
    """

    def __init__(
        self,
        config: GatewayConfig,
        credentials: CredentialLookup,
        transport: Transport,
        store: SessionStore | None = None,
        *,
        on_event: EventCallback = None,
    ):
        self.config = config
        self.credentials = credentials
        self.transport = transport
        self.store = store
        self.emitter = EventEmitter(on_event)
        self._in_flight: set[str] = set()

    async def __aenter__(self) -> "ChatPipeline":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.transport.aclose()

    def is_sending(self, session_id: str) -> bool:
        return session_id in self._in_flight

    async def send(self, session: Session, text: str) -> Message:
        text = (text or "").strip()
        if not text:
            raise ValueError("message text is empty")

        self._claim(session)
        title_before = session.title
        user_message = Message.user(text)
        succeeded = False
        try:
            session.append(user_message)
            self._persist(session)
            assistant = await self._run(session, expected_version=session.version)
            succeeded = True
            return assistant
        finally:
            if not succeeded:
                self._withdraw(session, user_message, title_before)
            self._in_flight.discard(session.id)

    async def complete(self, session: Session) -> Message:
        last = next((m for m in reversed(session.messages) if m.role != Role.SYSTEM), None)
        if last is None or last.role != Role.USER:
            raise ValueError("nothing to retry: the conversation does not end with a user turn")

        self._claim(session)
        try:
            return await self._run(session, expected_version=session.version)
        finally:
            self._in_flight.discard(session.id)

    def _claim(self, session: Session) -> None:
        if session.id in self._in_flight:
            raise SessionBusyError(f"Session {session.id} already has a send in flight")
        self._in_flight.add(session.id)

    async def _run(self, session: Session, expected_version: int) -> Message:
        model_id = session.model_id or self.config.default_model
        try:
            self._set_state(session, SendState.BUILDING, model_id)
            policy = policy_for_model(model_id)
            shaped = normalize(session.messages, policy)
            request = build_request(shaped, model_id, policy, self.config, self.credentials)
            logger.debug(
                f"Shaped {len(session.messages)} messages into {len(shaped)} for {model_id} "
                f"(provider={policy.provider.value})"
            )

            self._set_state(session, SendState.AWAITING_RESPONSE, model_id)
            body = await self.transport.post(request)

            self._set_state(session, SendState.EXTRACTING, model_id)
            extracted = extract_body(body)

            if session.version != expected_version:
                raise StaleSessionError(
                    f"Session {session.id} changed while waiting for {model_id}; response discarded"
                )
        except PipelineError as e:
            logger.warning(f"Send for session {session.id} failed: {type(e).__name__}: {e}")
            self._set_state(session, SendState.FAILED, model_id, message=str(e))
            self.emitter.emit(ErrorEvent(message=str(e), source=type(e).__name__))
            raise

        assistant = Message.assistant(extracted.answer, reasoning=extracted.reasoning)
        session.append(assistant)
        try:
            self._persist(session)
        except OSError as e:
            session.remove(assistant.id)
            logger.error(f"Could not save reply for session {session.id}: {e}")
            self._set_state(session, SendState.FAILED, model_id, message=str(e))
            self.emitter.emit(ErrorEvent(message=str(e), source=type(e).__name__))
            raise
        self._set_state(session, SendState.SUCCEEDED, model_id)
        self.emitter.emit(
            AssistantMessageEvent(
                session_id=session.id, content=assistant.content, reasoning=assistant.reasoning
            )
        )
        return assistant

    def _withdraw(self, session: Session, user_message: Message, title_before: str) -> None:
        if session.messages and session.messages[-1].id == user_message.id:
            session.remove(user_message.id)
            session.title = title_before
            self._persist(session)
        else:
            logger.warning(
                f"Session {session.id} changed during a failed send; leaving it untouched"
            )

    def _persist(self, session: Session) -> None:
        if self.store is not None:
            self.store.save(session)

    def _set_state(
        self, session: Session, state: SendState, model_id: str, message: str = ""
    ) -> None:
        logger.debug(f"Session {session.id}: {state.value}")
        self.emitter.emit(
            SendStateEvent(
                session_id=session.id, state=state.value, model=model_id, message=message
            )
        )
