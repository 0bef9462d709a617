# appforge/core/llm_client.py
"""
Direct model backend (Gemini through LangChain).

Alternative to the webhook: the prompt is sent straight to the model and the
raw text is returned untouched. Nothing here parses the answer; recovery is
the extractor's job, the model's output is treated exactly like a webhook reply.
"""
import os
import time
import asyncio
import logging
from typing import Any, Dict, List, Optional

from langchain_google_genai import ChatGoogleGenerativeAI

from appforge.core.prompts import build_system_prompt, build_user_prompt
from appforge.core.webhook_client import BackendError, EmptyResponseError
from appforge.utils.config import DEFAULT_GEMINI_MODEL, DEFAULT_LOG_DIR
from appforge.utils.file_helpers import save_debug_log

logger = logging.getLogger(__name__)


def get_llm(model: str = DEFAULT_GEMINI_MODEL, temperature: float = 0.5):
    api_key = os.getenv("GOOGLE_API_KEY_GEMINI")
    if not api_key:
        raise RuntimeError("Please set GOOGLE_API_KEY_GEMINI environment variable for Gemini access.")
    if "GOOGLE_API_KEY" not in os.environ:
        os.environ["GOOGLE_API_KEY"] = api_key
    return ChatGoogleGenerativeAI(model=model, temperature=temperature)


def _content_text(result: Any) -> str:
    # AIMessage.content is a str or a list of content parts
    content = getattr(result, "content", result)
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, dict):
                parts.append(str(part.get("text", "")))
            else:
                parts.append(str(part))
        return "".join(parts)
    return content if isinstance(content, str) else str(content)


class GeminiBackend:
    def __init__(self, llm=None, max_retries: int = 1, debug: bool = False,
                 model: str = DEFAULT_GEMINI_MODEL, log_dir: str = DEFAULT_LOG_DIR):
        self._llm = llm
        self.model = model
        self.log_dir = log_dir
        self.max_retries = max_retries
        self.debug = debug
        self._history: Dict[str, List[str]] = {}

    @property
    def llm(self):
        if self._llm is None:
            self._llm = get_llm(self.model)
        return self._llm

    async def generate(self, prompt: str, session_id: str) -> str:
        history = self._history.setdefault(session_id, [])
        messages = [
            ("system", build_system_prompt()),
            ("human", build_user_prompt(prompt, history)),
        ]

        last_exc: Optional[Exception] = None
        total_attempts = 1 + self.max_retries
        for attempt in range(1, total_attempts + 1):
            start_ts = time.time()
            try:
                result = await asyncio.to_thread(self.llm.invoke, messages)
            except Exception as e:
                last_exc = e
                logger.exception("Gemini attempt %d failed: %s", attempt, e)
                if self.debug:
                    save_debug_log(f"llm_error_attempt_{attempt}", {"prompt": prompt, "error": repr(e)},
                                   log_dir=self.log_dir)
                if attempt < total_attempts:
                    await asyncio.sleep(1 * attempt)
                continue

            text = _content_text(result)
            logger.info("Gemini answered in %.1fs (%d chars)", time.time() - start_ts, len(text))
            if self.debug:
                save_debug_log(f"llm_attempt_{attempt}", {"prompt": prompt, "raw_result": text},
                               log_dir=self.log_dir)
            if not text.strip():
                raise EmptyResponseError("Gemini returned an empty response")
            history.append(prompt)
            return text

        raise BackendError(f"Gemini generation failed after {total_attempts} attempts. Last error: {last_exc}")

    def forget(self, session_id: str) -> None:
        self._history.pop(session_id, None)
