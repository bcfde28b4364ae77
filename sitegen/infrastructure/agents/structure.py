"""Structure agent - deterministic Vite + React + Tailwind scaffolding."""

import json
import re

from sitegen.domain.entities.project import Blueprint, GeneratedFile
from sitegen.domain.entities.workflow_state import WorkflowState
from sitegen.infrastructure.agents.llm_helpers import make_file
from sitegen.infrastructure.workflow.context import GenerationContext

DEV_DEPENDENCIES: dict[str, str] = {
    "@types/react": "^18.3.3",
    "@types/react-dom": "^18.3.0",
    "@types/node": "^22.10.2",
    "@vitejs/plugin-react": "^4.3.4",
    "autoprefixer": "^10.4.20",
    "postcss": "^8.4.49",
    "tailwindcss": "^3.4.17",
    "typescript": "^5.7.2",
    "vite": "^6.0.5",
}

TSCONFIG = {
    "compilerOptions": {
        "target": "ES2020",
        "useDefineForClassFields": True,
        "lib": ["ES2020", "DOM", "DOM.Iterable"],
        "module": "ESNext",
        "skipLibCheck": True,
        "moduleResolution": "bundler",
        "allowImportingTsExtensions": True,
        "resolveJsonModule": True,
        "isolatedModules": True,
        "noEmit": True,
        "jsx": "react-jsx",
        "strict": True,
        "baseUrl": ".",
        "paths": {"@/*": ["src/*"]},
    },
    "include": ["src"],
}

VITE_CONFIG = """import path from 'path';
import { defineConfig } from 'vite';
import react from '@vitejs/plugin-react';

export default defineConfig({
  plugins: [react()],
  resolve: {
    alias: {
      '@': path.resolve(__dirname, './src'),
    },
  },
});
"""

TAILWIND_CONFIG = """/** @type {import('tailwindcss').Config} */
export default {
  content: ['./index.html', './src/**/*.{ts,tsx}'],
  theme: {
    extend: {},
  },
  plugins: [],
};
"""

POSTCSS_CONFIG = """export default {
  plugins: {
    tailwindcss: {},
    autoprefixer: {},
  },
};
"""

INDEX_CSS = """@tailwind base;
@tailwind components;
@tailwind utilities;
"""


def package_name(blueprint: Blueprint) -> str:
    """npm-safe name derived from the blueprint's project name."""
    slug = re.sub(r"[^a-z0-9]+", "-", blueprint.project_name.lower()).strip("-")
    return slug or "generated-project"


def _package_json(blueprint: Blueprint) -> str:
    manifest = {
        "name": package_name(blueprint),
        "private": True,
        "version": "0.1.0",
        "type": "module",
        "scripts": {
            "dev": "vite",
            "build": "tsc && vite build",
            "preview": "vite preview",
        },
        "dependencies": dict(sorted(blueprint.dependencies.items())),
        "devDependencies": DEV_DEPENDENCIES,
    }
    return json.dumps(manifest, indent=2) + "\n"


def _index_html(blueprint: Blueprint) -> str:
    return f"""<!doctype html>
<html lang="en">
  <head>
    <meta charset="UTF-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1.0" />
    <title>{blueprint.project_name}</title>
  </head>
  <body>
    <div id="root"></div>
    <script type="module" src="/src/main.tsx"></script>
  </body>
</html>
"""


def scaffold_files(blueprint: Blueprint) -> list[GeneratedFile]:
    """Config and entry files, in the order they are reported."""
    return [
        make_file("package.json", _package_json(blueprint)),
        make_file("tsconfig.json", json.dumps(TSCONFIG, indent=2) + "\n"),
        make_file("vite.config.ts", VITE_CONFIG),
        make_file("tailwind.config.js", TAILWIND_CONFIG),
        make_file("postcss.config.js", POSTCSS_CONFIG),
        make_file("index.html", _index_html(blueprint)),
        make_file("src/index.css", INDEX_CSS),
    ]


async def structure_node(state: WorkflowState, ctx: GenerationContext) -> WorkflowState:
    """Write the scaffolding; no model calls."""
    files = scaffold_files(state["blueprint"])
    for file in files:
        ctx.notifier.file_produced(file)
    return {
        "files": {f.path: f for f in files},
        "messages": [f"Project structure ready ({len(files)} files)"],
    }
