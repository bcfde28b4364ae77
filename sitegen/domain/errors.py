"""Generation error taxonomy.

Transient failures are absorbed by the retry policy. Exhaustion is resolved by a
stage fallback where one exists, otherwise it becomes a WorkflowError that
aborts the run.
"""


class GenerationError(Exception):
    """Base class for text-generation failures."""


class TransientGenerationError(GenerationError):
    """Rate limit, quota or overload reported by the provider. Retried."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class FatalGenerationError(GenerationError):
    """Provider rejected the request (bad request, auth, unknown model). Not retried."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class OutputSchemaError(GenerationError):
    """Model output could not be parsed into the expected shape. Retried."""


class GenerationExhausted(GenerationError):
    """Retry budget consumed (or fatal error hit) for one logical model call."""

    def __init__(self, last_error: BaseException | None, attempts: int) -> None:
        detail = f"{type(last_error).__name__}: {last_error}" if last_error else "no error recorded"
        super().__init__(f"Generation failed after {attempts} attempt(s): {detail}")
        self.last_error = last_error
        self.attempts = attempts


class WorkflowError(Exception):
    """A stage failed with no fallback; the whole run is aborted."""

    def __init__(self, stage: str, cause: BaseException) -> None:
        super().__init__(f"Stage '{stage}' failed: {cause}")
        self.stage = stage
        self.cause = cause
