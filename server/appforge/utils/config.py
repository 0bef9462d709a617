# appforge/utils/config.py
"""
Pipeline configuration.

Everything the generation pipeline needs to know about its environment lives in
one PipelineConfig value that is built once (usually by load_config) and passed
explicitly into the pipeline, the backends and the project assembler.
"""
import os
import json
import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# webhook URLs that were never filled in from the sample .env
PLACEHOLDER_MARKERS = ("YOUR_WEBHOOK_URL", "your-webhook-url", "<webhook>")

DEFAULT_PINNED_VERSIONS: Dict[str, str] = {
    "vite": "4.4.5",
    "esbuild-wasm": "0.18.20",
}

DEFAULT_USER_ID = "appforge-dev"
DEFAULT_TIMEOUT = 180
DEFAULT_LOG_DIR = "./ai_backend_logs"
DEFAULT_GEMINI_MODEL = "gemini-2.5-flash-lite"


@dataclass
class PipelineConfig:
    endpoint: Optional[str] = None
    mock_mode: bool = False
    pinned_versions: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_PINNED_VERSIONS))
    user_id: str = DEFAULT_USER_ID
    timeout: int = DEFAULT_TIMEOUT
    backend: str = "webhook"  # "webhook" | "gemini"
    debug: bool = False
    scan_limit: Optional[int] = None
    mock_delay: float = 0.0
    log_dir: str = DEFAULT_LOG_DIR
    gemini_model: str = DEFAULT_GEMINI_MODEL

    def __post_init__(self):
        if self.backend == "webhook" and not is_usable_endpoint(self.endpoint):
            if not self.mock_mode:
                logger.warning("No usable webhook endpoint configured; mock mode enabled")
            self.mock_mode = True


def is_usable_endpoint(endpoint: Optional[str]) -> bool:
    if not endpoint or not endpoint.strip():
        return False
    return not any(marker in endpoint for marker in PLACEHOLDER_MARKERS)


def _env_bool(name: str, default: bool = False) -> bool:
    val = os.environ.get(name)
    if val is None:
        return default
    return val.strip().lower() in ("1", "true", "yes", "on")


def _env_pins() -> Dict[str, str]:
    pins = dict(DEFAULT_PINNED_VERSIONS)
    raw = os.environ.get("AI_PINNED_VERSIONS")
    if not raw:
        return pins
    try:
        extra = json.loads(raw)
    except ValueError:
        logger.warning("AI_PINNED_VERSIONS is not valid JSON; using defaults")
        return pins
    if isinstance(extra, dict):
        pins.update({str(k): str(v) for k, v in extra.items()})
    return pins


def load_config(**overrides) -> PipelineConfig:
    """
    Build a PipelineConfig from the environment (.env is honoured).
    Keyword overrides win over environment values.
    """
    load_dotenv()

    scan_limit = os.environ.get("AI_SCAN_LIMIT")
    values = {
        "endpoint": os.environ.get("AI_WEBHOOK_URL"),
        "mock_mode": _env_bool("AI_MOCK_MODE"),
        "pinned_versions": _env_pins(),
        "user_id": os.environ.get("AI_USER_ID", DEFAULT_USER_ID),
        "timeout": int(os.environ.get("AI_TIMEOUT", DEFAULT_TIMEOUT)),
        "backend": os.environ.get("AI_BACKEND", "webhook"),
        "debug": _env_bool("AI_DEBUG"),
        "scan_limit": int(scan_limit) if scan_limit else None,
        "mock_delay": float(os.environ.get("AI_MOCK_DELAY", 0)),
        "log_dir": os.environ.get("AI_BACKEND_LOG_DIR", DEFAULT_LOG_DIR),
        "gemini_model": os.environ.get("AI_GEMINI_MODEL", DEFAULT_GEMINI_MODEL),
    }
    values.update(overrides)
    return PipelineConfig(**values)
