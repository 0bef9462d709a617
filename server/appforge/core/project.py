# appforge/core/project.py
"""
Project assembly: preview template + normalized generated files + merged manifest.
The result is the flat {path: content} mapping the preview engine consumes.
"""
from typing import Dict, Optional

from appforge.core.manifest import MANIFEST_PATH, base_manifest, dump_manifest, merge_manifest
from appforge.core.path_normalizer import normalize_files

TEMPLATE_FILES: Dict[str, str] = {
    "/vite.config.ts": (
        "import { defineConfig } from 'vite';\n"
        "import react from '@vitejs/plugin-react';\n\n"
        "export default defineConfig({ plugins: [react()] });\n"
    ),
    "/tailwind.config.js": (
        "/** @type {import('tailwindcss').Config} */\n"
        "export default {\n"
        "  content: ['./index.html', './src/**/*.{js,ts,jsx,tsx}'],\n"
        "  theme: { extend: {} },\n"
        "  plugins: [],\n"
        "};\n"
    ),
    "/postcss.config.js": "export default { plugins: { tailwindcss: {}, autoprefixer: {} } };\n",
    "/index.html": (
        "<!doctype html>\n"
        "<html lang=\"en\">\n"
        "  <head>\n"
        "    <meta charset=\"UTF-8\" />\n"
        "    <meta name=\"viewport\" content=\"width=device-width, initial-scale=1.0\" />\n"
        "    <title>Vite App</title>\n"
        "  </head>\n"
        "  <body>\n"
        "    <div id=\"root\"></div>\n"
        "    <script type=\"module\" src=\"/src/main.tsx\"></script>\n"
        "  </body>\n"
        "</html>\n"
    ),
    "/src/main.tsx": (
        "import { StrictMode } from 'react';\n"
        "import { createRoot } from 'react-dom/client';\n"
        "import './index.css';\n"
        "import App from './App';\n\n"
        "createRoot(document.getElementById('root')!).render(<StrictMode><App /></StrictMode>);\n"
    ),
    "/src/index.css": (
        "@tailwind base;\n@tailwind components;\n@tailwind utilities;\n\n"
        ":root { --background: 255 255 255; --foreground: 23 23 23; }\n"
        "@media (prefers-color-scheme: dark) {\n"
        "  :root { --background: 10 10 10; --foreground: 237 237 237; }\n"
        "}\n"
        "body {\n"
        "  background-color: rgb(var(--background));\n"
        "  color: rgb(var(--foreground));\n"
        "  font-family: system-ui, sans-serif;\n"
        "}\n"
    ),
    "/src/App.tsx": (
        "export default function App() {\n"
        "  return (\n"
        "    <div className=\"flex h-screen items-center justify-center bg-zinc-950 text-white\">\n"
        "      <h1 className=\"text-xl\">Loading application...</h1>\n"
        "    </div>\n"
        "  );\n"
        "}\n"
    ),
}


def build_project_tree(files: Dict[str, str], pinned: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    normalized = normalize_files(files)
    tree = dict(TEMPLATE_FILES)
    tree.update(normalized)
    manifest = merge_manifest(base_manifest(pinned), normalized.get(MANIFEST_PATH), pinned)
    tree[MANIFEST_PATH] = dump_manifest(manifest)
    return tree
