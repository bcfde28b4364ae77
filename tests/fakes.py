"""Test doubles: a scripted model and a known-good generated site.

ScriptedLLM answers by system prompt, so the whole workflow can run
deterministically.
"""

import json
import re
from collections.abc import Callable

from sitegen.domain.entities.project import GeneratedFile
from sitegen.domain.ports.llm import LLMMessage, LLMResponse
from sitegen.infrastructure.agents.llm_helpers import make_file
from sitegen.infrastructure.agents.prompts import (
    ANALYZER_SYSTEM,
    BLUEPRINT_SYSTEM,
    CHAT_SYSTEM,
    INTENT_SYSTEM,
    PAGES_SYSTEM,
)

_PATH_RE = re.compile(r"(src/[\w/.-]+?\.tsx)")

BLUEPRINT = {
    "projectName": "Crumb & Co Bakery",
    "description": "Neighbourhood bakery with online pre-orders",
    "features": [{"name": "Menu"}, "Pre-orders"],
    "pages": [],
    "components": [
        {"name": "Hero", "type": "ui", "props": ["title"]},
        {"name": "Navbar", "type": "layout"},
    ],
    "dependencies": {"date-fns": "^3.6.0"},
}

PAGES = {
    "pages": [
        {"name": "HomePage", "route": "/", "description": "Landing", "sections": ["Hero"]},
        {"name": "AboutPage", "route": "/about", "description": "Our story"},
    ]
}

MAIN_TSX = """import React from 'react';
import ReactDOM from 'react-dom/client';
import App from './App';
import './index.css';

ReactDOM.createRoot(document.getElementById('root')!).render(<App />);
"""

APP_TSX = """import { Navbar } from './components/layout/Navbar';
import { Footer } from './components/layout/Footer';
import HomePage from './pages/HomePage';
import AboutPage from './pages/AboutPage';

export default function App() {
  return null;
}
"""

BROKEN_APP_TSX = """import { Navbar } from './components/layout/Navbar';
import MissingPage from './pages/MissingPage';

export default function App() {
  return null;
}
"""


def component_source(path: str) -> str:
    """Valid module exporting the file stem both named and as default."""
    stem = path.rsplit("/", 1)[-1].split(".")[0]
    return f"export function {stem}() {{\n  return null;\n}}\n\nexport default {stem};\n"


def source_for(path: str) -> str:
    if path == "src/main.tsx":
        return MAIN_TSX
    if path == "src/App.tsx":
        return APP_TSX
    return component_source(path)


def path_in_prompt(user: str) -> str:
    match = _PATH_RE.search(user)
    assert match, f"no file path in prompt: {user[:200]!r}"
    return match.group(1)


def site_reply(system: str, user: str) -> str:
    """Answers of a well-behaved model for every stage."""
    if system == INTENT_SYSTEM:
        return "modify"
    if system == BLUEPRINT_SYSTEM:
        return json.dumps(BLUEPRINT)
    if system == PAGES_SYSTEM:
        return "```json\n" + json.dumps(PAGES) + "\n```"
    if system == ANALYZER_SYSTEM:
        return json.dumps(
            {
                "summary": "Add a gallery page",
                "changes": [
                    {"file": "src/pages/GalleryPage.tsx", "action": "create", "description": "New page"},
                    {"file": "/src/App.tsx", "action": "modify", "description": "Add the route"},
                    {"file": "src/components/layout/Navbar.tsx", "action": "modify", "description": "Add link"},
                ],
            }
        )
    if system == CHAT_SYSTEM:
        return "The landing page lives in src/pages/HomePage.tsx."
    # coder, repair and modify prompts all name the target file first
    return source_for(path_in_prompt(user))


def existing_site() -> dict[str, str]:
    """A valid, previously generated project (path -> content)."""
    files = {
        "package.json": json.dumps({"name": "crumb-co-bakery", "private": True}),
        "src/index.css": "@tailwind base;\n",
        "src/main.tsx": MAIN_TSX,
        "src/App.tsx": APP_TSX,
    }
    for path in (
        "src/components/layout/Navbar.tsx",
        "src/components/layout/Footer.tsx",
        "src/pages/HomePage.tsx",
        "src/pages/AboutPage.tsx",
    ):
        files[path] = component_source(path)
    return files


def existing_site_files() -> dict[str, GeneratedFile]:
    return {path: make_file(path, content) for path, content in existing_site().items()}


Reply = str | BaseException


class ScriptedLLM:
    """LLMPort double. Queued replies per system prompt win over the handler."""

    def __init__(self, handler: Callable[[str, str], Reply] = site_reply) -> None:
        self.handler = handler
        self.calls: list[dict] = []
        self._queued: dict[str, list[Reply]] = {}

    def script(self, system: str, *replies: Reply) -> None:
        self._queued.setdefault(system, []).extend(replies)

    def calls_for(self, system: str) -> list[dict]:
        return [c for c in self.calls if c["system"] == system]

    async def generate(
        self,
        messages: list[LLMMessage],
        model: str | None = None,
        temperature: float = 0.7,
        api_key: str | None = None,
        json_mode: bool = False,
    ) -> LLMResponse:
        system, user = messages[0].content, messages[-1].content
        self.calls.append(
            {"system": system, "user": user, "model": model, "api_key": api_key, "json_mode": json_mode}
        )
        queued = self._queued.get(system)
        reply = queued.pop(0) if queued else self.handler(system, user)
        if isinstance(reply, BaseException):
            raise reply
        return LLMResponse(content=reply, model=model or "scripted")

    async def is_available(self, api_key: str | None = None) -> bool:
        return True


