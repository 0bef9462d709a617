import os
import json
import time
import logging
import posixpath
from typing import Any, Dict, Optional

from appforge.utils.config import DEFAULT_LOG_DIR

logger = logging.getLogger(__name__)


# --- Helper: clean a generated path & reject traversal ---
def safe_path(p: Any) -> Optional[str]:
    """
    Returns the path with forward slashes and '.' / empty segments collapsed,
    or None when it is empty or tries to climb out of the project with '..'.
    """
    if not isinstance(p, str) or p.strip() == "":
        return None
    p = p.replace("\\", "/")
    if ".." in p.split("/"):
        return None
    p = posixpath.normpath(p)
    if p.startswith("//"):
        p = "/" + p.lstrip("/")
    if p in (".", "/"):
        return None
    return p


def save_debug_log(prefix: str, payload: Dict[str, Any], log_dir: str = DEFAULT_LOG_DIR) -> Optional[str]:
    fname = f"{int(time.time())}_{prefix}.json"
    path = os.path.join(log_dir, fname)
    try:
        os.makedirs(log_dir, exist_ok=True)
        with open(path, "w", encoding="utf-8") as fh:
            json.dump(payload, fh, indent=2, ensure_ascii=False, default=str)
    except OSError:
        logger.exception("Failed to write debug log")
        return None
    return path
