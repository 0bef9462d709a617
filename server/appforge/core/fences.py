# appforge/core/fences.py
"""
Markdown code-fence helpers.

extract_code_fence / split_code_fence serve the legacy single-file responses
(one fenced component, no structured file map). strip_code_fences is the
display transform applied to chat text and is not part of recovery.
"""
import re
from typing import Optional, Tuple

LANGUAGE_HINTS = ("tsx", "jsx", "javascript", "js", "react", "typescript", "ts")

FENCE_RE = re.compile(r"```([A-Za-z0-9_+#.-]*)[^\S\r\n]*\r?\n?(.*?)```", re.DOTALL)
_BLANK_RUNS = re.compile(r"\n{3,}")


def _find_fence(content: str):
    if not isinstance(content, str):
        return None
    for m in FENCE_RE.finditer(content):
        tag = m.group(1).lower()
        if not tag or tag in LANGUAGE_HINTS:
            return m
    return None


def extract_code_fence(content: str) -> Optional[str]:
    m = _find_fence(content)
    return m.group(2).strip() if m else None


def split_code_fence(content: str) -> Optional[Tuple[str, str]]:
    """Returns (code, text outside the fence) for the first usable fence."""
    m = _find_fence(content)
    if not m:
        return None
    outside = content[:m.start()] + content[m.end():]
    return m.group(2).strip(), outside.strip()


def strip_code_fences(content: str) -> str:
    if not content:
        return ""
    text = FENCE_RE.sub("", content)
    return _BLANK_RUNS.sub("\n\n", text).strip()
