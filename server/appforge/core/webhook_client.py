# appforge/core/webhook_client.py
"""
Generation backend reached over a webhook.

Request body:  {"prompt": str, "sessionId": str, "config": {"userId": str}}
Response body: {"output": str|object} or [{"output": ...}, ...]

generate() returns the raw output (string or object) or raises BackendError.
"""
import asyncio
import logging
from typing import Any, Dict, Optional, Union

import requests

from appforge.utils.config import PipelineConfig

logger = logging.getLogger(__name__)

MOCK_OUTPUT = (
    "[MOCK] The generation webhook is not configured. Set AI_WEBHOOK_URL in your .env file.\n\n"
    "```tsx\n"
    "export default function App() {\n"
    "  return <div className='p-4 text-red-500 font-bold'>Webhook URL not configured</div>;\n"
    "}\n"
    "```"
)


class BackendError(RuntimeError):
    """Transport failure: network error or non-success status."""


class EmptyResponseError(BackendError):
    """The backend answered but carried no usable output."""


def unwrap_output(data: Any) -> Optional[Union[str, Dict[str, Any]]]:
    # the webhook answers either {output} or [{output}, ...]
    if isinstance(data, list):
        data = data[0] if data else None
    if not isinstance(data, dict):
        return None
    return data.get("output")


def _is_empty(output: Any) -> bool:
    if output is None:
        return True
    if isinstance(output, str):
        return not output.strip()
    return not output


class WebhookBackend:
    def __init__(self, endpoint: str, user_id: Optional[str] = None, timeout: int = 180):
        self.endpoint = endpoint
        self.user_id = user_id
        self.timeout = timeout

    def build_payload(self, prompt: str, session_id: str) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"prompt": prompt, "sessionId": session_id}
        if self.user_id:
            payload["config"] = {"userId": self.user_id}
        return payload

    def _post(self, payload: Dict[str, Any]) -> Any:
        try:
            resp = requests.post(self.endpoint, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise BackendError(f"webhook request failed: {e}") from e
        if not resp.ok:
            raise BackendError(f"webhook returned {resp.status_code}: {resp.reason}")
        try:
            return resp.json()
        except ValueError:
            # some workflows answer with plain text instead of JSON
            return {"output": resp.text}

    async def generate(self, prompt: str, session_id: str) -> Union[str, Dict[str, Any]]:
        payload = self.build_payload(prompt, session_id)
        logger.info("POST %s (session %s, %d chars)", self.endpoint, session_id, len(prompt))
        data = await asyncio.to_thread(self._post, payload)
        output = unwrap_output(data)
        if _is_empty(output):
            raise EmptyResponseError("webhook returned an empty response")
        return output


class MockBackend:
    def __init__(self, delay: float = 0.0, output: str = MOCK_OUTPUT):
        self.delay = delay
        self.output = output

    async def generate(self, prompt: str, session_id: str) -> str:
        logger.warning("MOCK MODE: no webhook configured, returning the fixed payload")
        if self.delay:
            await asyncio.sleep(self.delay)
        return self.output


def make_backend(config: PipelineConfig):
    if config.mock_mode:
        return MockBackend(delay=config.mock_delay)
    if config.backend == "gemini":
        from appforge.core.llm_client import GeminiBackend  # localized import
        return GeminiBackend(model=config.gemini_model, log_dir=config.log_dir, debug=config.debug)
    return WebhookBackend(config.endpoint, user_id=config.user_id, timeout=config.timeout)
