import logging
from pathlib import Path

from pydantic import ValidationError

from common.jsonio import atomic_write_json, load_json, remove_json
from gatewaychat.models import Session

logger = logging.getLogger(__name__)


class SessionStore:
    """JSON-file persistence for chat sessions and the current selection.

    One file per session under ``<data_dir>/sessions``; the current session
    id lives in ``<data_dir>/current.json``.
    """

    def __init__(self, data_dir: str | Path, default_model: str = ""):
        self.data_dir = Path(data_dir)
        self.sessions_dir = self.data_dir / "sessions"
        self.current_path = self.data_dir / "current.json"
        self.default_model = default_model

    def _session_path(self, session_id: str) -> Path:
        return self.sessions_dir / f"{session_id}.json"

    @property
    def current_session_id(self) -> str | None:
        data = load_json(self.current_path)
        if not data:
            return None
        return data.get("session_id")

    def switch_to(self, session_id: str) -> Session:
        session = self.load_session(session_id)
        if session is None:
            raise KeyError(f"Unknown session {session_id}")
        atomic_write_json(self.current_path, {"session_id": session_id})
        return session

    def create_session(self, model_id: str | None = None, title: str | None = None) -> Session:
        session = Session(model_id=model_id if model_id is not None else self.default_model)
        if title:
            session.rename(title)
        self.save(session)
        atomic_write_json(self.current_path, {"session_id": session.id})
        logger.info(f"Created session {session.id} (model={session.model_id or 'unset'})")
        return session

    def current_session(self) -> Session:
        session_id = self.current_session_id
        if session_id:
            session = self.load_session(session_id)
            if session is not None:
                return session
            logger.warning(f"Current session {session_id} is missing, starting a new one")
        return self.create_session()

    def save(self, session: Session) -> None:
        atomic_write_json(self._session_path(session.id), session.model_dump(mode="json"))
        logger.debug(f"Saved session {session.id} ({len(session.messages)} messages)")

    def load_session(self, session_id: str) -> Session | None:
        data = load_json(self._session_path(session_id))
        if data is None:
            return None
        try:
            return Session.model_validate(data)
        except ValidationError as e:
            logger.error(f"Failed to parse session {session_id}: {e}")
            return None

    def list_sessions(self) -> list[Session]:
        sessions: list[Session] = []
        if self.sessions_dir.exists():
            for path in self.sessions_dir.glob("*.json"):
                session = self.load_session(path.stem)
                if session is not None:
                    sessions.append(session)
        return sorted(sessions, key=lambda s: s.last_updated_at, reverse=True)

    def rename_session(self, session_id: str, title: str) -> Session:
        session = self.load_session(session_id)
        if session is None:
            raise KeyError(f"Unknown session {session_id}")
        session.rename(title)
        self.save(session)
        return session

    def delete_session(self, session_id: str) -> Session | None:
        """Delete a session.

        When the deleted session was the current one, the most recently
        updated remaining session (or a fresh one) becomes current and is
        returned. Otherwise returns None.
        """
        removed = remove_json(self._session_path(session_id))
        if not removed:
            raise KeyError(f"Unknown session {session_id}")
        logger.info(f"Deleted session {session_id}")

        if self.current_session_id != session_id:
            return None
        remaining = self.list_sessions()
        if remaining:
            return self.switch_to(remaining[0].id)
        return self.create_session()
