# appforge/core/manifest.py
"""
package.json handling for the preview template.

- BASE_MANIFEST: the starter manifest every preview begins from.
- merge_manifest: fold a generated package.json into the base.
- Pinned devDependencies (the bundler and its WASM runtime) are written last
  and always win: the preview engine only runs those exact versions.
"""
import copy
import json
import logging
from typing import Any, Dict, Optional

from appforge.utils.config import DEFAULT_PINNED_VERSIONS

logger = logging.getLogger(__name__)

MANIFEST_PATH = "/package.json"
DEPENDENCY_SECTIONS = ("dependencies", "devDependencies")

BASE_MANIFEST: Dict[str, Any] = {
    "name": "vite-react-starter",
    "private": True,
    "version": "0.0.0",
    "type": "module",
    "scripts": {"dev": "vite", "build": "tsc && vite build", "preview": "vite preview"},
    "dependencies": {
        "react": "^18.2.0",
        "react-dom": "^18.2.0",
        "lucide-react": "latest",
        "clsx": "latest",
        "tailwind-merge": "latest",
        "class-variance-authority": "latest",
        "react-router-dom": "^6.20.0",
    },
    "devDependencies": {
        "@types/react": "^18.2.15",
        "@types/react-dom": "^18.2.7",
        "@vitejs/plugin-react": "^4.0.3",
        "vite": "4.4.5",
        "esbuild-wasm": "0.18.20",
        "typescript": "^5.0.2",
        "tailwindcss": "^3.3.3",
        "postcss": "^8.4.27",
        "autoprefixer": "^10.4.14",
    },
}


def _pins(pinned: Optional[Dict[str, str]]) -> Dict[str, str]:
    return DEFAULT_PINNED_VERSIONS if pinned is None else pinned


def apply_pins(manifest: Dict[str, Any], pinned: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    dev = manifest.get("devDependencies")
    if not isinstance(dev, dict):
        dev = {}
        manifest["devDependencies"] = dev
    dev.update(_pins(pinned))
    return manifest


def base_manifest(pinned: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    return apply_pins(copy.deepcopy(BASE_MANIFEST), pinned)


def merge_manifest(base: Dict[str, Any],
                   incoming: Optional[str],
                   pinned: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """
    Merge the raw text of a generated package.json into `base`.

    Absent, unparsable or non-object input returns `base` unchanged. Otherwise
    top-level fields are merged shallowly (incoming wins), dependencies and
    devDependencies are unioned per key (incoming wins), and the pinned
    devDependency versions are forced last. `base` is never mutated.
    """
    if incoming is None:
        return base
    try:
        generated = json.loads(incoming)
    except (TypeError, ValueError) as e:
        logger.warning("Ignoring unparsable generated package.json: %s", e)
        return base
    if not isinstance(generated, dict):
        logger.warning("Ignoring generated package.json: top level is %s, not an object", type(generated).__name__)
        return base

    merged = copy.deepcopy(base)
    merged.update(copy.deepcopy(generated))
    for sec in DEPENDENCY_SECTIONS:
        base_sec = base.get(sec) if isinstance(base.get(sec), dict) else {}
        gen_sec = generated.get(sec) if isinstance(generated.get(sec), dict) else {}
        section = dict(base_sec)
        section.update(gen_sec)
        merged[sec] = section

    return apply_pins(merged, pinned)


def dump_manifest(manifest: Dict[str, Any]) -> str:
    return json.dumps(manifest, indent=2)
