"""Intent detector - keyword heuristics for routing follow-up requests."""

import re
from functools import lru_cache

from sitegen.domain.entities.project import RequestIntent

MODIFY_KEYWORDS = (
    "add",
    "change",
    "update",
    "modify",
    "edit",
    "remove",
    "delete",
    "fix",
    "improve",
    "enhance",
    "create new",
    "add new",
    "include",
    "put",
    "place",
    "insert",
    "make",
    "build",
)
QUESTION_KEYWORDS = (
    "where is",
    "where are",
    "where can i find",
    "how do i",
    "what is",
    "what are",
    "which",
    "explain",
    "show me",
    "tell me",
    "describe",
    "help me understand",
    "can you explain",
)

_MODIFY_RE = re.compile(r"\b(" + "|".join(re.escape(k) for k in MODIFY_KEYWORDS) + r")\b")
_QUESTION_RE = re.compile(r"\b(" + "|".join(re.escape(k) for k in QUESTION_KEYWORDS) + r")\b")

_INTENT_WORDS = {i.value: i for i in RequestIntent}


@lru_cache(maxsize=128)
def _keyword_flags(text: str) -> tuple[bool, bool]:
    return bool(_MODIFY_RE.search(text)), bool(_QUESTION_RE.search(text))


class IntentDetector:
    """Deterministic intent detection used before and instead of the model."""

    def has_modify_keywords(self, prompt: str) -> bool:
        return _keyword_flags(prompt.strip().lower())[0]

    def has_question_keywords(self, prompt: str) -> bool:
        return _keyword_flags(prompt.strip().lower())[1]

    def detect(self, prompt: str, has_project: bool) -> RequestIntent:
        """Keyword fallback. Without an existing project the answer is always CREATE."""
        if not has_project:
            return RequestIntent.CREATE
        # Question phrasing wins; anything else against an existing project is a change request
        if self.has_question_keywords(prompt):
            return RequestIntent.QUESTION
        return RequestIntent.MODIFY

    def parse_model_answer(self, answer: str, prompt: str) -> RequestIntent:
        """Map the classifier's one-word answer; unknown words fall back to keywords."""
        word = answer.strip().strip(".\"'`").lower()
        if word in _INTENT_WORDS:
            return _INTENT_WORDS[word]
        return RequestIntent.QUESTION if self.has_question_keywords(prompt) else RequestIntent.MODIFY
