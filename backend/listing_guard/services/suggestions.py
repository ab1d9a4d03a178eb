# backend/listing_guard/services/suggestions.py
"""Re-check listing text suggested by the assistant with the listing compliance checks."""
from typing import Any, List, Optional

from listing_guard.schemas.assistant import AssistantResponse
from listing_guard.schemas.listing import FieldAnalysis
from listing_guard.services.compliance import (
    BACKEND_KEYWORDS_MIN_CHARS,
    BULLET_MIN_CHARS,
    check_backend_keywords,
    check_bullet_points,
    check_title,
)

TITLE_OK = (
    "*This suggested title has been validated and passes the listing title checks "
    "(length, no restricted words, no prohibited special characters).*"
)
BULLETS_OK = (
    f"*These suggested bullet points have been validated and pass the listing checks "
    f"(length ≥{BULLET_MIN_CHARS} each, no restricted words, no prohibited special characters).*"
)
KEYWORDS_OK = (
    f"*These suggested backend keywords have been validated and pass the listing checks "
    f"(≥{BACKEND_KEYWORDS_MIN_CHARS} characters, no duplicate words).*"
)


def _note(analysis: FieldAnalysis, ok: str, heading: str, lead: str, revise: str) -> str:
    if analysis.is_clean:
        return ok
    issues = " ".join(analysis.failing_messages())
    return f"**{heading}:** {lead} according to the listing rules: {issues} {revise}"


def title_note(title: str) -> str:
    return _note(
        check_title(title), TITLE_OK,
        "Title validation", "The suggested title still has issues", "Please revise the title to fix these.",
    )


def bullet_points_note(bullets: List[str]) -> str:
    return _note(
        check_bullet_points(bullets), BULLETS_OK,
        "Bullet points validation", "The suggested bullet points still have issues", "Please revise to fix these.",
    )


def backend_keywords_note(keywords: str) -> str:
    return _note(
        check_backend_keywords(keywords), KEYWORDS_OK,
        "Backend keywords validation", "The suggested keywords still have issues", "Please revise to fix these.",
    )


def _text(value: Any) -> Optional[str]:
    return value.strip() if isinstance(value, str) and value.strip() else None


def validate_suggestions(response: AssistantResponse) -> AssistantResponse:
    """
    Append a validation note for each suggested field (title, bullets, keywords).

    Notes are appended to the model's answer, never replacing it. Returns a new
    response; the input is left untouched.
    """
    notes: List[str] = []

    title = _text(response.suggested_title)
    if title:
        notes.append(title_note(title))

    bullets = [b for b in (response.suggested_bullet_points or []) if isinstance(b, str)]
    if bullets:
        notes.append(bullet_points_note(bullets))

    keywords = _text(response.suggested_backend_keywords)
    if keywords:
        notes.append(backend_keywords_note(keywords))

    if not notes:
        return response
    answer = response.answer_markdown + "".join(f"\n\n{n}" for n in notes)
    return response.model_copy(update={"answer_markdown": answer})
