# appforge/core/extractor.py
"""
Output Extractor

Turns whatever the generation backend returned into a RecoveredPayload.
Attempts run cheapest/strictest first and the first success wins:

    object -> strict -> repaired -> scan -> fence -> fallback

extract() never raises: losing the file structure is acceptable, losing the
text the user should see is not.
"""
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from appforge.core.fences import split_code_fence
from appforge.core.json_repair import is_payload, looks_truncated, repair_truncated, scan_backward
from appforge.core.webhook_client import unwrap_output

logger = logging.getLogger(__name__)

EMPTY_OUTPUT_MESSAGE = "The generator returned an empty response."
TRUNCATED_NOTE = "[The response was cut off before it finished; the project files could not be recovered.]"
FENCE_ONLY_MESSAGE = "Code generated."
LEGACY_ENTRY_PATH = "/src/App.tsx"


@dataclass
class RecoveredPayload:
    explanation: str
    files: Optional[Dict[str, str]] = None
    code: Optional[str] = None
    strategy: str = "fallback"
    repaired: bool = False

    @property
    def kind(self) -> str:
        if self.files:
            return "files"
        if self.code:
            return "single_file"
        return "text"

    def project_files(self) -> Dict[str, str]:
        """Files to materialize: the named mapping, the legacy single file, or nothing."""
        if self.files:
            return dict(self.files)
        if self.code:
            return {LEGACY_ENTRY_PATH: self.code}
        return {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "explanation": self.explanation,
            "files": self.files,
            "code": self.code,
            "kind": self.kind,
            "strategy": self.strategy,
            "repaired": self.repaired,
        }


def _coerce_files(files: Any) -> Optional[Dict[str, str]]:
    # accept {path: content} or [{"path": ..., "content": ...}, ...]
    out: Dict[str, str] = {}
    if isinstance(files, dict):
        for p, c in files.items():
            if isinstance(p, str) and isinstance(c, str):
                out[p] = c
    elif isinstance(files, list):
        for it in files:
            if not isinstance(it, dict):
                continue
            p = it.get("path")
            c = it.get("content")
            if isinstance(p, str) and isinstance(c, str):
                out[p] = c
    return out or None


def _from_object(obj: Dict[str, Any], raw_text: str, strategy: str) -> RecoveredPayload:
    files = _coerce_files(obj.get("files"))
    explanation = obj.get("explanation")
    if not isinstance(explanation, str) or not explanation.strip():
        if files:
            explanation = f"Generated {len(files)} file(s)."
        else:
            explanation = raw_text.strip() or EMPTY_OUTPUT_MESSAGE
    return RecoveredPayload(
        explanation=explanation,
        files=files,
        strategy=strategy,
        repaired=(strategy == "repaired"),
    )


def _is_envelope(obj: Any) -> bool:
    # {output} or [{output}, ...] as sent by the webhook
    if isinstance(obj, list):
        obj = obj[0] if obj else None
    return isinstance(obj, dict) and "output" in obj


def _fallback(text: str) -> RecoveredPayload:
    body = text.strip()
    if not body:
        return RecoveredPayload(explanation=EMPTY_OUTPUT_MESSAGE)
    if looks_truncated(body):
        body = f"{body}\n\n{TRUNCATED_NOTE}"
    return RecoveredPayload(explanation=body)


def extract(raw: Any, scan_limit: Optional[int] = None) -> RecoveredPayload:
    # 1) pre-parsed object
    if not isinstance(raw, str):
        if raw is None:
            return _fallback("")
        if is_payload(raw):
            return _from_object(raw, "", "object")
        if _is_envelope(raw):
            return extract(unwrap_output(raw), scan_limit=scan_limit)
        try:
            raw = json.dumps(raw, ensure_ascii=False)
        except (TypeError, ValueError):
            raw = str(raw)

    text = raw
    stripped = text.strip()

    # 2) strict parse
    try:
        obj = json.loads(stripped)
    except ValueError:
        obj = None
    if is_payload(obj):
        return _from_object(obj, text, "strict")
    if _is_envelope(obj):
        return extract(unwrap_output(obj), scan_limit=scan_limit)

    # 3) truncation repair
    obj = repair_truncated(text)
    if obj is not None:
        logger.info("Recovered truncated model output (%d chars)", len(text))
        return _from_object(obj, text, "repaired")

    # 4) backward brace scan
    obj = scan_backward(text, limit=scan_limit)
    if obj is not None:
        logger.info("Recovered embedded JSON payload by backward scan")
        return _from_object(obj, text, "scan")

    # 5) legacy fenced code
    fenced = split_code_fence(text)
    if fenced is not None:
        code, outside = fenced
        return RecoveredPayload(
            explanation=outside or FENCE_ONLY_MESSAGE,
            code=code or None,
            strategy="fence",
        )

    # 6) text only
    if stripped.startswith("{") or looks_truncated(stripped):
        logger.warning("Could not recover structured payload from model output (%d chars)", len(text))
    return _fallback(text)
