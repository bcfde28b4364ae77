"""Config Port - interface for configuration access."""

from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field


class LLMConfig(BaseModel):
    """LLM provider selection."""

    provider: str = "openai_compatible"


class OpenAICompatibleConfig(BaseModel):
    """OpenAI-compatible chat completions endpoint (Gemini, vLLM, LM Studio)."""

    base_url: str = "https://generativelanguage.googleapis.com/v1beta/openai"
    # Credential pool; rotated round-robin on transient failures.
    api_keys: list[str] = []
    timeout: int = 120
    # Optional: max tokens to generate. None = server/model default.
    max_tokens: int | None = None


class ModelConfig(BaseModel):
    """Model IDs per stage role."""

    model_config = ConfigDict(extra="ignore")

    router: str = "gemini-2.5-flash-lite"  # intent routing, modification analysis
    planner: str = "gemini-2.5-flash-lite"  # blueprint, page extraction
    coder: str = "gemini-2.5-flash"  # file generation, repair
    chat: str = "gemini-2.5-flash-lite"  # question answering


class RetryConfig(BaseModel):
    """Retry policy for a single model call."""

    max_attempts: int = Field(3, ge=1)
    base_delay: float = Field(1.0, ge=0)  # Seconds; doubles per attempt
    max_delay: float = Field(10.0, ge=0)


class GenerationConfig(BaseModel):
    """Workflow settings."""

    max_repair_iterations: int = Field(3, ge=0)
    max_concurrency: int = Field(4, ge=1)  # Parallel file generations inside one stage
    recursion_limit: int = 50


class SecurityConfig(BaseModel):
    """Security settings."""

    rate_limit_requests_per_minute: int = 100
    cors_origins: list[str] = ["http://localhost:5173"]


class ServerConfig(BaseModel):
    """Server configuration."""

    host: str = "0.0.0.0"
    port: int = 8000


class AppConfig(BaseModel):
    """Full application configuration."""

    server: ServerConfig = ServerConfig()
    llm: LLMConfig = LLMConfig()
    openai_compatible: OpenAICompatibleConfig = OpenAICompatibleConfig()
    models: ModelConfig = ModelConfig()
    retry: RetryConfig = RetryConfig()
    generation: GenerationConfig = GenerationConfig()
    security: SecurityConfig = SecurityConfig()
    log_level: str = "INFO"
    # Log file: path relative to cwd or absolute. Empty = only stdout. Rotation when file exceeds max_mb.
    log_file: str = ""
    log_rotation_max_mb: int = 5
    log_rotation_backups: int = 3


class ConfigPort(Protocol):
    """Interface for configuration providers."""

    def get_config(self) -> AppConfig:
        """Get the full application configuration."""
        ...
