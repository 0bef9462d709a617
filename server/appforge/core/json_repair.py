# appforge/core/json_repair.py
"""
Salvage helpers for JSON payloads the model did not finish writing.

- repair_truncated: two-shot closer for a document cut off by a token limit
- scan_backward: find the largest {...} slice of a noisy blob that parses
- looks_truncated: cheap check used to annotate unrecoverable output
"""
import re
import json
from typing import Any, Dict, Optional

PAYLOAD_KEYS = ("explanation", "files")

# 1) cut inside a string value: close the string, the file-entry object and the outer object
# 2) cut right after a complete value: close the two open objects
REPAIR_SUFFIXES = ('"} }', '} }')

# lenient decoder: raw control characters inside strings are common in model output
_DECODER = json.JSONDecoder(strict=False)
_DANGLING_UNICODE = re.compile(r"\\u[0-9a-fA-F]{0,3}$")


def is_payload(obj: Any) -> bool:
    return isinstance(obj, dict) and any(k in obj for k in PAYLOAD_KEYS)


def _odd_backslashes(text: str, end: int) -> bool:
    n = 0
    i = end - 1
    while i >= 0 and text[i] == "\\":
        n += 1
        i -= 1
    return n % 2 == 1


def _trim_dangling_escape(text: str) -> str:
    # a cut in the middle of an escape sequence would swallow the closing quote
    m = _DANGLING_UNICODE.search(text)
    if m and _odd_backslashes(text, m.start() + 1):
        return text[:m.start()]
    if _odd_backslashes(text, len(text)):
        return text[:-1]
    return text


def repair_truncated(text: str) -> Optional[Dict[str, Any]]:
    """
    Try to close a truncated {explanation, files} document.

    Only the two truncation points seen in practice are handled; anything else
    returns None and is left to scan_backward. Extra closing braces after a
    complete object are ignored (raw_decode stops at the end of the first value).
    """
    if not isinstance(text, str):
        return None
    body = text.lstrip()
    if not body.startswith("{"):
        return None
    body = _trim_dangling_escape(body)

    for suffix in REPAIR_SUFFIXES:
        try:
            obj, end = _DECODER.raw_decode(body + suffix)
        except ValueError:
            continue
        # the object must close inside the suffix, not before trailing text
        if end > len(body) and is_payload(obj):
            return obj
    return None


def scan_backward(text: str, limit: Optional[int] = None) -> Optional[Dict[str, Any]]:
    """
    Parse text[first '{' : some '}'] trying every closing brace from the right,
    so the largest parseable object wins. `limit` caps the number of candidates.
    """
    if not isinstance(text, str):
        return None
    start = text.find("{")
    if start == -1:
        return None

    tried = 0
    end = text.rfind("}")
    while end > start:
        if limit is not None and tried >= limit:
            break
        tried += 1
        try:
            obj = json.loads(text[start:end + 1], strict=False)
        except ValueError:
            obj = None
        if is_payload(obj):
            return obj
        end = text.rfind("}", start, end)
    return None


def looks_truncated(text: str) -> bool:
    s = (text or "").strip()
    start = s.find("{")
    if start == -1 or s.endswith("}"):
        return False
    tail = s[start:]
    return any(f'"{k}"' in tail for k in PAYLOAD_KEYS)
