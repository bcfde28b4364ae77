"""LLM helpers: turn model answers into project files and report them."""

import asyncio
import re

from sitegen.domain.entities.project import GeneratedFile
from sitegen.infrastructure.agents.prompts import CODER_SYSTEM
from sitegen.infrastructure.llm.json_output import strip_code_fences
from sitegen.infrastructure.workflow.context import GenerationContext

_EXPORT_DECL_RE = re.compile(
    r"^export\s+(?:async\s+)?(?:function\*?|const|let|class|interface|type|enum)\s+([A-Za-z_$][\w$]*)",
    re.MULTILINE,
)
_EXPORT_LIST_RE = re.compile(r"^export\s*\{([^}]*)\}", re.MULTILINE)


def extract_exports(content: str) -> tuple[str, ...]:
    """Names exported by a TS/JS module, in order of appearance, without duplicates.

    A default export is recorded only as "default"; the local name after
    `export default` is not importable by name.
    """
    names: list[str] = []
    for match in _EXPORT_DECL_RE.finditer(content):
        names.append(match.group(1))
    for match in _EXPORT_LIST_RE.finditer(content):
        for part in match.group(1).split(","):
            name = part.split(" as ")[-1].strip()
            if name:
                names.append(name)
    if re.search(r"^export\s+default\b", content, re.MULTILINE):
        names.append("default")
    return tuple(dict.fromkeys(names))


def make_file(path: str, content: str) -> GeneratedFile:
    return GeneratedFile(path=path, content=content, exports=extract_exports(content))


async def generate_file(
    ctx: GenerationContext,
    path: str,
    prompt: str,
    *,
    system: str = CODER_SYSTEM,
    temperature: float = 0.5,
) -> GeneratedFile:
    """Ask the coder model for one file and report it as produced."""
    text = await ctx.ask(system, prompt, model=ctx.models.coder, temperature=temperature)
    file = make_file(path, strip_code_fences(text))
    ctx.notifier.file_produced(file)
    return file


async def generate_files(
    ctx: GenerationContext,
    jobs: list[tuple[str, str]],
    *,
    system: str = CODER_SYSTEM,
    temperature: float = 0.5,
) -> dict[str, GeneratedFile]:
    """Generate (path, prompt) jobs concurrently, bounded by ctx.max_concurrency.

    Paths must be distinct. The result keeps job order; notifications follow
    completion order. The first failure cancels the remaining jobs.
    """
    semaphore = asyncio.Semaphore(ctx.max_concurrency)

    async def _one(path: str, prompt: str) -> GeneratedFile:
        async with semaphore:
            return await generate_file(ctx, path, prompt, system=system, temperature=temperature)

    tasks = [asyncio.create_task(_one(path, prompt)) for path, prompt in jobs]
    try:
        files = await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        raise
    return {f.path: f for f in files}
