# appforge/core/prompts.py
"""
Prompts used when the pipeline talks to a model directly (AI_BACKEND=gemini).
The webhook backend owns its own prompting; it only receives the user's text.

Goals:
- Ask for the {explanation, files} JSON object the extractor understands.
- Keep the generated project inside the Vite + React + Tailwind template.
"""
from typing import Optional, Sequence


def build_system_prompt(model_name: Optional[str] = None) -> str:
    """
    System prompt for the app-generation model.
    Clear, short rules to reduce accidental extra text.
    """
    return (
        "You are an expert React engineer building small single-page apps with Vite, TypeScript and Tailwind CSS.\n"
        "OUTPUT RULES:\n"
        " - Return EXACTLY one valid JSON object and nothing else (no markdown fences, no prose around it).\n"
        " - Keys: 'explanation' (short text for the user) and 'files'.\n"
        " - 'files' maps absolute paths to full file contents, e.g. {\"/src/App.tsx\": \"...\"}.\n"
        " - The entry component is /src/App.tsx; put other sources under /src.\n"
        " - Do NOT produce Next.js files (next.config.*, app/page.tsx, app/layout.tsx).\n"
        " - Only include /package.json when you need extra dependencies; never change vite or esbuild-wasm.\n"
        " - Keep files small; prefer several small components over one huge file.\n"
    )


def build_user_prompt(text: str, history: Optional[Sequence[str]] = None) -> str:
    """
    Prompt body for one turn. `history` holds earlier user requests of the
    same session, oldest first, so follow-up edits keep their context.
    """
    lines = []
    if history:
        lines.append("Earlier requests in this session:")
        for i, h in enumerate(history, 1):
            lines.append(f"{i}. {h}")
        lines.append("")
    lines.append("Request:")
    lines.append(text.strip())
    lines.append("")
    lines.append("Output: the single JSON object described by the system prompt. No extra text.")
    return "\n".join(lines)
