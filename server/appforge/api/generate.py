# appforge/api/generate.py
from fastapi import APIRouter, HTTPException, Request
from typing import Optional
import logging

from appforge.core.fences import strip_code_fences
from appforge.core.processor import GenerationPipeline
from appforge.core.session_store import SessionBusyError, SessionRegistry, SessionStore
from appforge.core.webhook_client import make_backend
from appforge.models import (
    ChatResponse,
    MessagesResponse,
    PromptRequest,
    RecoverRequest,
    RecoverResponse,
    SessionOut,
)
from appforge.utils.config import PipelineConfig, load_config
from appforge.utils.file_helpers import save_debug_log

logger = logging.getLogger(__name__)

router = APIRouter()


def _state(request: Request):
    """Config, backend and session registry shared by the routes of one app."""
    st = request.app.state
    if getattr(st, "pipeline_config", None) is None:
        st.pipeline_config = load_config()
    if getattr(st, "backend", None) is None:
        st.backend = make_backend(st.pipeline_config)
    if getattr(st, "sessions", None) is None:
        st.sessions = SessionRegistry()
    return st.pipeline_config, st.backend, st.sessions


def _pipeline(request: Request, session_id: str) -> GenerationPipeline:
    config, backend, sessions = _state(request)
    store: Optional[SessionStore] = sessions.get(session_id)
    if store is None:
        raise HTTPException(status_code=404, detail=f"unknown session: {session_id}")
    return GenerationPipeline(config, store=store, backend=backend)


@router.post("", response_model=SessionOut)
async def create_session(request: Request):
    _, _, sessions = _state(request)
    store = sessions.create()
    logger.info("Created session %s", store.session_id)
    return {"session_id": store.session_id}


@router.post("/recover", response_model=RecoverResponse)
async def recover_output(req: RecoverRequest, request: Request):
    """
    Stateless recovery: run a raw backend output through extraction and
    project assembly without touching any session.
    """
    config, backend, _ = _state(request)
    if config.debug:
        save_debug_log("recover_incoming", req.dict(), log_dir=config.log_dir)
    pipeline = GenerationPipeline(config, store=SessionStore(), backend=backend)
    payload, tree = pipeline.recover(req.output)
    return {"payload": payload.to_dict(), "project": tree}


@router.get("/{session_id}/messages", response_model=MessagesResponse)
async def list_messages(session_id: str, request: Request):
    pipeline = _pipeline(request, session_id)
    return {
        "session_id": pipeline.session_id,
        "messages": [m.to_dict() for m in pipeline.store.messages()],
        "busy": pipeline.is_loading,
    }


@router.post("/{session_id}/messages", response_model=ChatResponse)
async def send_message(session_id: str, req: PromptRequest, request: Request):
    pipeline = _pipeline(request, session_id)
    if not req.prompt.strip():
        raise HTTPException(status_code=400, detail="prompt must not be empty")
    try:
        reply = await pipeline.send_message(req.prompt)
    except SessionBusyError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except Exception as e:
        logger.exception("send_message failed for session %s", session_id)
        raise HTTPException(status_code=500, detail=str(e))

    return {
        "session_id": pipeline.session_id,
        "message": reply.to_dict(),
        "display_text": strip_code_fences(reply.content) or reply.content,
        "files": reply.files,
    }


@router.post("/{session_id}/reset", response_model=SessionOut)
async def reset_session(session_id: str, request: Request):
    _, _, sessions = _state(request)
    pipeline = _pipeline(request, session_id)
    if pipeline.is_loading:
        raise HTTPException(status_code=409, detail="cannot reset a session with a request in flight")
    new_id = pipeline.reset()
    sessions.rekey(session_id, pipeline.store)
    return {"session_id": new_id}


@router.delete("/{session_id}")
async def delete_session(session_id: str, request: Request):
    _, backend, sessions = _state(request)
    store = sessions.get(session_id)
    if store is None:
        raise HTTPException(status_code=404, detail=f"unknown session: {session_id}")
    if store.busy:
        raise HTTPException(status_code=409, detail="cannot delete a session with a request in flight")
    forget = getattr(backend, "forget", None)
    if callable(forget):
        forget(session_id)
    sessions.drop(session_id)
    return {"deleted": session_id}


def configure(app, config: PipelineConfig, backend=None) -> None:
    """Install an explicit config (and optionally a backend) on an app."""
    app.state.pipeline_config = config
    app.state.backend = backend if backend is not None else make_backend(config)
    app.state.sessions = SessionRegistry()
