# appforge/core/path_normalizer.py
"""
Maps generated file paths onto the preview template's layout (Vite + React):
root config files stay at the root, source files live under /src, static files
under /public. Files belonging to other frameworks' entry points are dropped
because they would fight the template.
"""
import logging
from typing import Dict, Optional

from appforge.utils.file_helpers import safe_path

logger = logging.getLogger(__name__)

SOURCE_ROOT = "/src"
PUBLIC_ROOT = "/public"

DENIED_PATHS = {
    "/next.config.ts",
    "/next.config.js",
    "/app/page.tsx",
    "/app/layout.tsx",
}
ROOT_CONFIG_PATHS = {"/package.json", "/vite.config.ts", "/index.html"}
LEGACY_ROOT_COMPONENTS = {"/App.tsx", "App.tsx"}
SOURCE_EXTENSIONS = (".tsx", ".ts", ".jsx", ".js", ".css")


def _rooted(path: str) -> str:
    return path if path.startswith("/") else "/" + path


def normalize_path(path: str) -> Optional[str]:
    """Canonical path for one generated file, or None when it must be dropped."""
    p = safe_path(path)
    if p is None:
        return None
    if _rooted(p) in DENIED_PATHS:
        return None
    if _rooted(p) in ROOT_CONFIG_PATHS:
        return _rooted(p)
    if p in LEGACY_ROOT_COMPONENTS:
        return SOURCE_ROOT + "/App.tsx"
    if p.startswith(SOURCE_ROOT + "/") or p.startswith(PUBLIC_ROOT + "/") or "config" in p:
        return p
    if p.startswith("src/") or p.startswith("public/"):
        return "/" + p
    if p.endswith(SOURCE_EXTENSIONS):
        return SOURCE_ROOT + _rooted(p)
    return p


def normalize_files(files: Dict[str, str]) -> Dict[str, str]:
    """
    Normalize every path of a generated file map. Later entries win when two
    inputs land on the same canonical path. normalize_files is idempotent.
    """
    out: Dict[str, str] = {}
    for path, content in (files or {}).items():
        target = normalize_path(path)
        if target is None:
            logger.debug("Dropping generated file %r", path)
            continue
        if target in out and target != path:
            logger.debug("Generated file %r overwrites %r", path, target)
        out[target] = content
    return out
