"""Resilience patterns - retry with credential rotation."""

from sitegen.infrastructure.resilience.retry import (
    CredentialPool,
    ResponseShape,
    RetryPolicy,
    is_transient,
)

__all__ = [
    "CredentialPool",
    "ResponseShape",
    "RetryPolicy",
    "is_transient",
]
