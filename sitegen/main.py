"""Application entry point."""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from sitegen.api.container import Container, get_container
from sitegen.api.dependencies import limiter
from sitegen.api.routes.generate import router as generate_router
from sitegen.shared.logging import setup_logging

log = structlog.get_logger()


def _apply_logging_config(container: Container) -> None:
    """Apply logging from container config (stdout + optional file)."""
    c = container.config
    setup_logging(
        level=c.log_level,
        file_path=c.log_file or "",
        rotation_max_mb=c.log_rotation_max_mb,
        rotation_backups=c.log_rotation_backups,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: load config, setup logging. Shutdown: close the LLM client."""
    container = get_container()
    _apply_logging_config(container)
    log.info(
        "startup_complete",
        llm_provider=container.config.llm.provider,
        base_url=container.config.openai_compatible.base_url,
        api_keys=container.credential_pool.size,
    )
    yield
    log.info("shutdown_begin")
    await container.llm.close()
    log.info("shutdown_complete")


app = FastAPI(
    title="SiteGen",
    version="0.1.0",
    description="LLM-driven website generation - blueprint, scaffold, code, validate, repair",
    lifespan=lifespan,
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS
container = get_container()
app.add_middleware(
    CORSMiddleware,
    allow_origins=container.config.security.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(generate_router)


@app.get("/health")
@limiter.limit("100/minute")
async def health(request: Request) -> dict:
    """Health check with LLM availability."""
    container = get_container()
    llm_available = await container.llm.is_available(container.credential_pool.current())
    return {
        "status": "ok",
        "service": "sitegen",
        "llm_provider": container.config.llm.provider,
        "api_keys": container.credential_pool.size,
        "llm_available": llm_available,
    }
