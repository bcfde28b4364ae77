"""Generation API routes."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sse_starlette.sse import EventSourceResponse

from sitegen.api.dependencies import generate_rate_limit, get_generation_use_case, limiter
from sitegen.application.generation.dto import GenerateRequest, GenerateResponse
from sitegen.application.generation.use_case import GenerationUseCase
from sitegen.domain.errors import WorkflowError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/generate", tags=["generate"])


@router.post("", response_model=None)
@limiter.limit(generate_rate_limit)
async def generate(
    request: Request,
    generate_request: GenerateRequest,
    use_case: GenerationUseCase = Depends(get_generation_use_case),
    stream: bool = False,
) -> GenerateResponse | EventSourceResponse:
    """Generate, modify or ask about a project. Use stream=true for SSE streaming."""
    if stream:
        return _stream_response(generate_request, use_case)
    try:
        return await use_case.execute(generate_request)
    except WorkflowError as e:
        logger.exception("Generation failed at stage %s", e.stage)
        raise HTTPException(status_code=502, detail=f"Generation failed at stage '{e.stage}'")
    except Exception:
        logger.exception("Generation failed")
        raise HTTPException(status_code=500, detail="Generation failed")


def _stream_response(
    generate_request: GenerateRequest,
    use_case: GenerationUseCase,
) -> EventSourceResponse:
    """Return SSE stream of generation events."""

    async def event_generator():
        try:
            async for evt in use_case.execute_stream(generate_request):
                yield {"event": evt.event_type, "data": evt.model_dump_json()}
        except Exception:
            logger.exception("Generation stream failed")
            yield {"event": "error", "data": '{"event_type": "error", "payload": {"message": "Stream failed"}}'}
        yield {"event": "close", "data": ""}

    return EventSourceResponse(event_generator())
