"""Tests for generation stage agents."""

import asyncio
import json

import pytest

from sitegen.domain.entities.project import Blueprint, RequestIntent, ValidationIssue
from sitegen.domain.entities.workflow_state import initial_state
from sitegen.domain.errors import FatalGenerationError, GenerationExhausted, TransientGenerationError
from sitegen.domain.ports.llm import LLMResponse
from sitegen.domain.services.state_merge import merge_state
from sitegen.infrastructure.agents.blueprint import blueprint_node, fallback_pages
from sitegen.infrastructure.agents.chat_response import build_project_context, chat_response_node
from sitegen.infrastructure.agents.code_writers import components_node, core_node, pages_node
from sitegen.infrastructure.agents.intent_router import intent_router_node
from sitegen.infrastructure.agents.llm_helpers import generate_files, make_file
from sitegen.infrastructure.agents.prompts import (
    BLUEPRINT_SYSTEM,
    CHAT_SYSTEM,
    CODER_SYSTEM,
    INTENT_SYSTEM,
    PAGES_SYSTEM,
    REPAIR_SYSTEM,
)
from sitegen.infrastructure.agents.repair import group_errors, repair_node
from sitegen.infrastructure.agents.structure import package_name, scaffold_files, structure_node
from sitegen.infrastructure.workflow.context import GenerationNotifier
from tests.fakes import BLUEPRINT, BROKEN_APP_TSX, PAGES, existing_site_files


def _quota() -> TransientGenerationError:
    return TransientGenerationError("quota", status_code=429)


@pytest.fixture
def blueprint():
    return Blueprint.model_validate({**BLUEPRINT, **PAGES, "components": [{"name": "Hero", "type": "ui"}]})


class TestIntentRouter:
    async def test_new_project_skips_model(self, make_context, scripted_llm):
        update = await intent_router_node(initial_state("a bakery site"), make_context())

        assert update["request_intent"] == RequestIntent.CREATE
        assert scripted_llm.calls == []

    async def test_model_answer_used(self, make_context, scripted_llm):
        scripted_llm.script(INTENT_SYSTEM, "question")
        state = initial_state("tell me about the footer", files=existing_site_files())

        update = await intent_router_node(state, make_context())

        assert update["request_intent"] == RequestIntent.QUESTION
        assert scripted_llm.calls[0]["model"] == "router-m"

    async def test_exhaustion_falls_back_to_keywords(self, make_context, scripted_llm):
        scripted_llm.script(INTENT_SYSTEM, _quota(), _quota(), _quota())
        state = initial_state("where is the navbar?", files=existing_site_files())

        update = await intent_router_node(state, make_context())

        assert update["request_intent"] == RequestIntent.QUESTION
        assert len(scripted_llm.calls_for(INTENT_SYSTEM)) == 3


class TestChatResponse:
    async def test_answers_without_touching_files(self, make_context):
        state = initial_state("where is the home page?", files=existing_site_files())

        update = await chat_response_node(state, make_context())

        assert "files" not in update
        assert update["chat_response"] == "The landing page lives in src/pages/HomePage.tsx."
        assert update["messages"] == [update["chat_response"]]

    async def test_fallback_summary(self, make_context, scripted_llm, blueprint):
        scripted_llm.script(CHAT_SYSTEM, FatalGenerationError("bad", status_code=400))
        state = initial_state("what is this?", files=existing_site_files(), blueprint=blueprint)

        update = await chat_response_node(state, make_context())

        assert "8 files" in update["chat_response"]
        assert "Crumb & Co Bakery" in update["chat_response"]

    def test_project_context_lists_files(self, blueprint):
        context = build_project_context(initial_state("q", files=existing_site_files(), blueprint=blueprint))
        assert "PROJECT: Crumb & Co Bakery" in context
        assert "  src/pages/HomePage.tsx" in context
        assert "Navbar.tsx - src/components/layout/Navbar.tsx" in context


class TestBlueprint:
    async def test_plans_pages_and_filters_reserved(self, make_context, scripted_llm):
        update = await blueprint_node(initial_state("a bakery site"), make_context())

        bp = update["blueprint"]
        assert bp.project_name == "Crumb & Co Bakery"
        assert [p.name for p in bp.pages] == ["HomePage", "AboutPage"]
        assert [c.name for c in bp.components] == ["Hero"]
        assert bp.dependencies["react"].startswith("^18")
        assert bp.dependencies["date-fns"] == "^3.6.0"
        assert all(c["json_mode"] for c in scripted_llm.calls)

    async def test_page_extraction_fallback(self, make_context, scripted_llm):
        scripted_llm.script(PAGES_SYSTEM, "no json", "still none", "nope")

        update = await blueprint_node(initial_state("a bakery site"), make_context())

        assert update["blueprint"].pages == fallback_pages()

    async def test_blueprint_exhaustion_propagates(self, make_context, scripted_llm):
        scripted_llm.script(BLUEPRINT_SYSTEM, "{}", "{}", "{}")

        with pytest.raises(GenerationExhausted):
            await blueprint_node(initial_state("a bakery site"), make_context())


class TestStructure:
    def test_package_name(self, blueprint):
        assert package_name(blueprint) == "crumb-co-bakery"

    async def test_scaffold_notified_in_order(self, make_context, blueprint, scripted_llm):
        produced = []
        ctx = make_context(notifier=GenerationNotifier(on_file_produced=lambda f: produced.append(f.path)))

        update = await structure_node(initial_state("p", blueprint=blueprint), ctx)

        expected = [f.path for f in scaffold_files(blueprint)]
        assert produced == expected
        assert list(update["files"]) == expected
        assert scripted_llm.calls == []
        manifest = json.loads(update["files"]["package.json"].content)
        assert manifest["dependencies"] == dict(sorted(blueprint.dependencies.items()))


class TestCodeWriters:
    async def test_core_files(self, make_context, blueprint, scripted_llm):
        update = await core_node(initial_state("p", blueprint=blueprint), make_context())

        assert set(update["files"]) == {
            "src/components/layout/Navbar.tsx",
            "src/components/layout/Footer.tsx",
            "src/App.tsx",
            "src/main.tsx",
        }
        assert {c["model"] for c in scripted_llm.calls} == {"coder-m"}

    async def test_components_and_pages(self, make_context, blueprint):
        state = initial_state("p", blueprint=blueprint)

        components = await components_node(state, make_context())
        pages = await pages_node(state, make_context())

        assert list(components["files"]) == ["src/components/ui/Hero.tsx"]
        assert list(pages["files"]) == ["src/pages/HomePage.tsx", "src/pages/AboutPage.tsx"]
        assert pages["files"]["src/pages/HomePage.tsx"].exports == ("HomePage", "default")

    async def test_no_components(self, make_context, blueprint, scripted_llm):
        state = initial_state("p", blueprint=blueprint.model_copy(update={"components": []}))
        update = await components_node(state, make_context())
        assert "files" not in update
        assert scripted_llm.calls == []

    async def test_code_fences_stripped(self, make_context, blueprint, scripted_llm):
        scripted_llm.script(CODER_SYSTEM, "```tsx\nexport default function Hero() { return null; }\n```")

        update = await components_node(initial_state("p", blueprint=blueprint), make_context())

        assert update["files"]["src/components/ui/Hero.tsx"].content.startswith("export default")


class TestGenerateFiles:
    async def test_bounded_concurrency_keeps_job_order(self, make_context):
        running = 0
        peak = 0

        class SlowLLM:
            async def generate(self, messages, model=None, temperature=0.7, api_key=None, json_mode=False):
                nonlocal running, peak
                running += 1
                peak = max(peak, running)
                await asyncio.sleep(0.01)
                running -= 1
                return LLMResponse(content="export default 1;", model="m")

        ctx = make_context(llm=SlowLLM(), max_concurrency=2)
        jobs = [(f"src/pages/P{i}.tsx", f"page {i}") for i in range(6)]

        files = await generate_files(ctx, jobs)

        assert list(files) == [path for path, _ in jobs]
        assert peak == 2

    async def test_failure_propagates(self, make_context, scripted_llm):
        scripted_llm.script(CODER_SYSTEM, FatalGenerationError("bad", status_code=400))
        with pytest.raises(GenerationExhausted):
            await generate_files(make_context(), [("src/a.tsx", "Write src/a.tsx"), ("src/b.tsx", "Write src/b.tsx")])


class TestRepair:
    def test_group_errors_normalizes(self):
        grouped = group_errors(
            [
                ValidationIssue("/src/App.tsx", "one"),
                ValidationIssue("src/App.tsx", "two"),
                ValidationIssue("src/main.tsx", "three"),
            ]
        )
        assert grouped == {"src/App.tsx": ["one", "two"], "src/main.tsx": ["three"]}

    async def test_rewrites_reported_files(self, make_context, scripted_llm):
        files = existing_site_files()
        files["src/App.tsx"] = make_file("src/App.tsx", BROKEN_APP_TSX)
        state = merge_state(
            initial_state("p", files=files),
            {"errors": [ValidationIssue("src/App.tsx", "Cannot resolve import './pages/MissingPage'")]},
        )
        produced = []
        ctx = make_context(notifier=GenerationNotifier(on_file_produced=lambda f: produced.append(f.path)))

        update = await repair_node(state, ctx)

        assert list(update["files"]) == ["src/App.tsx"]
        assert "MissingPage" not in update["files"]["src/App.tsx"].content
        assert update["iteration_count"] == 1
        assert produced == ["src/App.tsx"]
        call = scripted_llm.calls_for(REPAIR_SYSTEM)[0]
        assert "MissingPage" in call["user"]

    async def test_unknown_file_still_counts_iteration(self, make_context, scripted_llm):
        state = initial_state("p", files=existing_site_files())
        state["errors"] = [ValidationIssue("src/Ghost.tsx", "missing")]
        state["iteration_count"] = 2

        update = await repair_node(state, make_context())

        assert update["files"] == {}
        assert update["iteration_count"] == 3
        assert scripted_llm.calls == []
