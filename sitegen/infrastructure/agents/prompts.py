"""Prompt templates for generation stages."""

from sitegen.domain.entities.project import Blueprint, ComponentSpec, PageSpec, ProjectType

INTENT_SYSTEM = "You are an intent classifier. Respond with only one word."

BLUEPRINT_SYSTEM = (
    "You are a senior web architect. You plan React + TypeScript + Tailwind projects. "
    "Return ONLY valid JSON, no markdown."
)

PAGES_SYSTEM = (
    "You are a web architect who creates unique, project-specific page structures. "
    "You never use generic templates. Return ONLY valid JSON."
)

CODER_SYSTEM = (
    "You are an expert React/TypeScript developer. Write complete, production-ready files "
    "using Tailwind CSS, proper TypeScript types and all necessary imports. "
    "Import project files with relative paths that exist in the file list you are given. "
    "Return ONLY the file content, no markdown or explanations."
)

REPAIR_SYSTEM = (
    "You are an expert code fixer. Fix the reported problems in the given file. "
    "Preserve all existing functionality, keep imports and exports working. "
    "Return ONLY the complete corrected file content."
)

MODIFY_SYSTEM = (
    "You are an expert code modifier. Modify the given code according to the user's request. "
    "Preserve all existing functionality unless explicitly asked to remove it. "
    "Return ONLY the complete modified file content."
)

ANALYZER_SYSTEM = (
    "You are a code analyzer that determines which files need modification. Return only valid JSON."
)

CHAT_SYSTEM = (
    "You are a helpful AI assistant that explains project structure and answers questions "
    "about web applications. Be specific and mention file paths when relevant."
)


def build_intent_prompt(user_prompt: str, file_count: int, has_blueprint: bool) -> str:
    return f"""Analyze this user request and determine their intent.

USER REQUEST: "{user_prompt}"

CONTEXT:
- Project exists: {"Yes" if file_count else "No"}
- Number of files: {file_count}
- Blueprint exists: {"Yes" if has_blueprint else "No"}

POSSIBLE INTENTS:
1. "create" - user wants a new project from scratch
2. "modify" - user wants to add/change/remove something in the existing project
3. "question" - user asks where something is or how to find it
4. "explain" - user wants the project structure or features explained

Respond with ONLY ONE WORD: create, modify, question, or explain"""


def build_blueprint_prompt(user_prompt: str, project_type: ProjectType) -> str:
    return f"""Plan a {project_type.value} web project for this request:

"{user_prompt}"

Return a JSON object with this exact structure:
{{
  "projectName": "kebab-case-name",
  "description": "One paragraph description",
  "features": ["Feature 1", "Feature 2"],
  "components": [
    {{"name": "Button", "type": "ui", "props": ["children", "variant"]}},
    {{"name": "ProductCard", "type": "feature", "props": ["product"]}}
  ],
  "dependencies": {{"package-name": "^1.0.0"}}
}}

Component "type" is one of: ui, layout, feature. Do not plan Navbar or Footer, they always exist.
Only list dependencies beyond react, react-dom, react-router-dom, tailwindcss."""


def build_pages_prompt(user_prompt: str, blueprint: Blueprint) -> str:
    features = ", ".join(blueprint.features) or "none listed"
    return f"""Determine the pages this specific project needs.

PROJECT REQUIREMENT: "{user_prompt}"
PROJECT: {blueprint.project_name} - {blueprint.description}
IDENTIFIED FEATURES: {features}

Generate 5-8 pages unique to this project type (e.g. a bakery gets CakesPage and CustomOrderPage,
not a generic ServicesPage). The first page is HomePage with route "/", the last is NotFoundPage
with route "*".

Return a JSON object:
{{
  "pages": [
    {{"name": "PageName", "route": "/route", "description": "...", "sections": ["..."], "components": ["..."]}}
  ]
}}"""


def _file_list(paths: list[str]) -> str:
    return "\n".join(f"- {p}" for p in paths) if paths else "- (none yet)"


def build_core_file_prompt(path: str, purpose: str, blueprint: Blueprint, paths: list[str]) -> str:
    pages = "\n".join(f"- {p.name} ({p.route}) -> src/pages/{p.name}.tsx" for p in blueprint.pages)
    return f"""Project: {blueprint.project_name} - {blueprint.description}

Write the file {path}.
Purpose: {purpose}

Pages (each a default export in src/pages/<Name>.tsx):
{pages}

Existing and planned files:
{_file_list(paths)}"""


def build_component_prompt(component: ComponentSpec, blueprint: Blueprint, path: str) -> str:
    props = ", ".join(component.props) or "none"
    return f"""Project: {blueprint.project_name} - {blueprint.description}

Write the {component.type} component {component.name} in {path}.
Props: {props}
Export it both as a named export `{component.name}` and as the default export.
Only import from npm packages and from the React standard library."""


def build_page_prompt(page: PageSpec, blueprint: Blueprint, path: str, paths: list[str]) -> str:
    sections = ", ".join(page.sections) or "as appropriate"
    return f"""Project: {blueprint.project_name} - {blueprint.description}

Write the page {page.name} ({page.route}) in {path}.
Description: {page.description}
Sections: {sections}
The page must `export default` its component.

Available project files to import from:
{_file_list(paths)}"""


def build_repair_prompt(path: str, content: str, problems: list[str]) -> str:
    listed = "\n".join(f"- {p}" for p in problems)
    return f"""File: {path}

Problems found:
{listed}

Current code:
```
{content}
```

Return the complete corrected file."""


def build_new_file_prompt(path: str, request: str, description: str, paths: list[str]) -> str:
    return f"""Create the file {path} for this request: {request}
What it should do: {description}

Existing project files:
{_file_list(paths)}

Generate the complete code."""


def build_modify_file_prompt(path: str, content: str, request: str, description: str) -> str:
    return f"""Modification request: {request}
Change for this file: {description}
File: {path}

Current code:
```
{content}
```

Return the complete modified file."""


def build_analyzer_prompt(
    user_prompt: str,
    file_tree: str,
    app_excerpt: str | None,
    navbar_excerpt: str | None,
) -> str:
    return f"""Analyze this modification request and determine ALL files that need to change.

USER REQUEST: "{user_prompt}"

{file_tree}

CURRENT src/App.tsx (if exists):
{app_excerpt or "Not available"}

CURRENT NAVBAR/HEADER (if exists):
{navbar_excerpt or "Not available"}

Rules:
1. A new page also needs a route in src/App.tsx and a link in the Navbar/Header.
2. A new component needs its parent updated to import and use it.
3. A new section on a page only changes that page.

Return a JSON object:
{{
  "summary": "Brief description of what will be done",
  "changes": [
    {{"file": "src/pages/NewPage.tsx", "action": "create", "description": "Create new page"}},
    {{"file": "src/App.tsx", "action": "modify", "description": "Add route for /new-page"}}
  ]
}}
"action" is one of: create, modify, delete."""


def build_chat_prompt(question: str, project_context: str) -> str:
    return f"""Answer the user's question about this web project.

USER QUESTION: "{question}"

{project_context}

Be specific and mention exact file paths. Be concise. If the feature does not exist, say so."""
