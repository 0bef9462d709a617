# appforge/core/session_store.py
"""
Session Conversation Store

In-memory, append-only log of one conversation. The session id is only a
correlation token sent with every backend request; nothing is persisted.
One writer at a time: the pipeline marks the store busy while a request is
in flight and a second submission is refused with SessionBusyError.
"""
import time
import uuid
import string
import secrets
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

ROLES = ("user", "assistant")
_SESSION_ALPHABET = string.ascii_lowercase + string.digits


class SessionBusyError(RuntimeError):
    pass


def new_session_id() -> str:
    return "sess_" + "".join(secrets.choice(_SESSION_ALPHABET) for _ in range(7))


@dataclass(frozen=True)
class Message:
    id: str
    role: str
    content: str
    timestamp: float
    files: Optional[Dict[str, str]] = None

    @classmethod
    def create(cls, role: str, content: str, files: Optional[Dict[str, str]] = None) -> "Message":
        if role not in ROLES:
            raise ValueError(f"unknown message role: {role!r}")
        return cls(
            id=uuid.uuid4().hex,
            role=role,
            content=content,
            timestamp=time.time(),
            files=dict(files) if files else None,
        )

    @property
    def created_at(self) -> str:
        return datetime.fromtimestamp(self.timestamp).isoformat()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "role": self.role,
            "content": self.content,
            "files": self.files,
            "timestamp": self.timestamp,
            "created_at": self.created_at,
        }


class SessionStore:
    def __init__(self, session_id: Optional[str] = None):
        self.session_id = session_id or new_session_id()
        self.busy = False
        self._messages: List[Message] = []

    def append(self, message: Message) -> None:
        if not isinstance(message, Message):
            raise TypeError("SessionStore only accepts Message instances")
        self._messages.append(message)

    def messages(self) -> Tuple[Message, ...]:
        return tuple(self._messages)

    @property
    def has_messages(self) -> bool:
        return bool(self._messages)

    def latest_files(self) -> Dict[str, str]:
        """Files of the newest assistant turn that produced a project."""
        for m in reversed(self._messages):
            if m.role == "assistant" and m.files:
                return dict(m.files)
        return {}

    def reset(self) -> str:
        if self.busy:
            raise SessionBusyError(f"session {self.session_id} has a request in flight; reset refused")
        old = self.session_id
        self._messages = []
        self.session_id = new_session_id()
        logger.info("Session %s reset -> %s", old, self.session_id)
        return self.session_id


class SessionRegistry:
    """Sessions known to this process, keyed by their current id."""

    def __init__(self):
        self._sessions: Dict[str, SessionStore] = {}

    def create(self) -> SessionStore:
        store = SessionStore()
        self._sessions[store.session_id] = store
        return store

    def get(self, session_id: str) -> Optional[SessionStore]:
        return self._sessions.get(session_id)

    def rekey(self, old_id: str, store: SessionStore) -> None:
        self._sessions.pop(old_id, None)
        self._sessions[store.session_id] = store

    def drop(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    def __len__(self) -> int:
        return len(self._sessions)
