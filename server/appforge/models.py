from pydantic import BaseModel
from typing import Any, Dict, List, Optional

class PromptRequest(BaseModel):
    prompt: str

class RecoverRequest(BaseModel):
    output: Any = None

class SessionOut(BaseModel):
    session_id: str

class MessageOut(BaseModel):
    id: str
    role: str
    content: str
    files: Optional[Dict[str, str]] = None
    timestamp: float
    created_at: str

class RecoveredPayloadOut(BaseModel):
    explanation: str
    files: Optional[Dict[str, str]] = None
    code: Optional[str] = None
    kind: str
    strategy: str
    repaired: bool = False

class ChatResponse(BaseModel):
    session_id: str
    message: MessageOut
    display_text: str
    files: Optional[Dict[str, str]] = None

class RecoverResponse(BaseModel):
    payload: RecoveredPayloadOut
    project: Optional[Dict[str, str]] = None

class MessagesResponse(BaseModel):
    session_id: str
    messages: List[MessageOut]
    busy: bool = False
