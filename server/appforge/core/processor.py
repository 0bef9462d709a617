# appforge/core/processor.py
"""
Generation pipeline for one conversation.

    user text -> store (user turn) -> backend -> extract -> normalize + manifest
              -> store (assistant turn) -> preview engine

Only the backend call suspends. Everything after it runs synchronously and
ends in a single append, so a failed or half-recovered response can never
leave the store with a partial turn.
"""
import logging
from typing import Any, Dict, Optional, Tuple

from appforge.core.extractor import RecoveredPayload, extract
from appforge.core.project import build_project_tree
from appforge.core.session_store import Message, SessionBusyError, SessionStore
from appforge.core.webhook_client import EmptyResponseError, make_backend
from appforge.utils.config import PipelineConfig
from appforge.utils.file_helpers import save_debug_log

logger = logging.getLogger(__name__)

CONNECTION_ERROR_MESSAGE = (
    "Connection error. Check that the generation workflow is active "
    "and that the webhook URL in your .env file is correct."
)


class GenerationPipeline:
    def __init__(self, config: PipelineConfig, store: Optional[SessionStore] = None, backend=None):
        self.config = config
        self.store = store if store is not None else SessionStore()
        self.backend = backend if backend is not None else make_backend(config)

    @property
    def session_id(self) -> str:
        return self.store.session_id

    @property
    def is_loading(self) -> bool:
        return self.store.busy

    def recover(self, raw: Any) -> Tuple[RecoveredPayload, Optional[Dict[str, str]]]:
        """Extract the payload and, when it carries code, assemble the project tree."""
        payload = extract(raw, scan_limit=self.config.scan_limit)
        generated = payload.project_files()
        tree = build_project_tree(generated, self.config.pinned_versions) if generated else None

        if self.config.debug and payload.strategy in ("repaired", "scan", "fallback"):
            save_debug_log(f"recovery_{payload.strategy}", {
                "session_id": self.session_id,
                "raw": raw,
                "payload": payload.to_dict(),
            }, log_dir=self.config.log_dir)
        logger.info("Recovered %s payload via %s (%d generated files)",
                    payload.kind, payload.strategy, len(generated))
        return payload, tree

    async def send_message(self, text: str) -> Optional[Message]:
        if not isinstance(text, str) or not text.strip():
            return None
        if self.store.busy:
            raise SessionBusyError(f"session {self.session_id} already has a request in flight")

        self.store.append(Message.create("user", text))
        self.store.busy = True
        try:
            try:
                raw = await self.backend.generate(text, self.session_id)
            except EmptyResponseError as e:
                logger.error("Empty response for session %s: %s", self.session_id, e)
                reply = Message.create("assistant", CONNECTION_ERROR_MESSAGE)
            except Exception:
                logger.exception("Generation backend failed for session %s", self.session_id)
                reply = Message.create("assistant", CONNECTION_ERROR_MESSAGE)
            else:
                payload, tree = self.recover(raw)
                reply = Message.create("assistant", payload.explanation, files=tree)
            self.store.append(reply)
            return reply
        finally:
            self.store.busy = False

    def reset(self) -> str:
        if self.store.busy:
            raise SessionBusyError(f"session {self.session_id} has a request in flight; reset refused")
        forget = getattr(self.backend, "forget", None)
        if callable(forget):
            forget(self.session_id)
        return self.store.reset()
