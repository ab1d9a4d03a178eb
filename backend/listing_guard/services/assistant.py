# backend/listing_guard/services/assistant.py
"""
Seller assistant: prompt building, the model call, and defensive parsing of
the model's JSON reply.

The model is asked for one JSON object. Whatever comes back, callers get a
usable ``AssistantResponse``; only a failed transport call is an error.
"""
from __future__ import annotations

import json
import logging
import re
import time
from typing import Any, Dict, List, Mapping, Optional, Sequence

from pydantic import ValidationError

from listing_guard.schemas.assistant import AssistantResponse, ChartSuggestion, ChatMessage, DATA_SOURCES
from listing_guard.schemas.dashboard import DashboardMetricsContext
from listing_guard.services.charts import bind_chart_data
from listing_guard.services.compliance import (
    BACKEND_KEYWORDS_MAX_CHARS,
    BACKEND_KEYWORDS_MIN_CHARS,
    BULLET_MIN_CHARS,
    DESCRIPTION_MIN_CHARS,
    TITLE_MAX_CHARS,
    TITLE_MIN_CHARS,
)
from listing_guard.services.llm import LLMClient, LLMTransportError
from listing_guard.services.matchers import SPECIAL_CHARACTERS_DISPLAY
from listing_guard.services.metrics_context import build_metrics_context
from listing_guard.services.suggestions import validate_suggestions

HISTORY_LIMIT = 6
HISTORY_CONTENT_LIMIT = 2000
# bare JSON lines longer than this are treated as leaked payloads
LEAKED_JSON_MIN_LEN = 60

UNAVAILABLE_MESSAGE = "AI service is currently unavailable. Please try again in a moment."
PARSE_FALLBACK_ANSWER = (
    "I encountered an internal formatting issue while generating the answer. "
    "Please ask your question again or try rephrasing it."
)
EMPTY_ANSWER_FALLBACK = (
    "Here's what I found based on your account data. If you'd like more detail on a "
    "specific area, ask a follow-up question below."
)


class AssistantUnavailableError(Exception):
    """The assistant could not reach the model; ``message`` is safe to show users."""

    def __init__(self, message: str = UNAVAILABLE_MESSAGE, status_code: int = 500):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


# -------------------- Prompt --------------------

_DATA_SOURCE_CHOICES = " | ".join('"%s"' % s for s in DATA_SOURCES)

SYSTEM_PROMPT = f"""
You are a friendly AI assistant inside a seller analytics application for Amazon sellers.

### Role
- Help sellers understand their business using **only** the analytics data provided to you.
- Turn numbers into clear insights and **actionable recommendations**.
- You do not fetch data yourself; every figure has already been calculated for you.

### Tone and style
- Plain, friendly language for a busy seller. Short sentences, short paragraphs.
- **Never** put raw JSON, code blocks, internal field names or technical payloads in answer_markdown.
- Explain a term like ACOS or TACOS in one short phrase the first time you use it.
- Use bullet points and short headings. Do not repeat the question back.

### Answer scope
- Answer only what was asked. For product- or issue-specific questions list only the affected
  products, the problem for each and the concrete fix. No filler and no unrelated advice.

### Listing criteria (suggestions must pass these exact checks)
- **Title:** {TITLE_MIN_CHARS}-{TITLE_MAX_CHARS} characters; no restricted words (e.g. home, natural, safe,
  green, cure, heal, virus, antibacterial, antimicrobial, pesticide, fda approved, guarantee, proven,
  certified); none of these special characters: {SPECIAL_CHARACTERS_DISPLAY}
  When you suggest a fixed title, put the exact string in `suggested_title`.
- **Bullet points:** each bullet at least {BULLET_MIN_CHARS} characters; same restricted words and special
  characters as the title. Put suggested bullets (array of strings) in `suggested_bullet_points`.
- **Backend keywords:** at least {BACKEND_KEYWORDS_MIN_CHARS} characters in total (out of
  {BACKEND_KEYWORDS_MAX_CHARS}); no duplicate words. Put the exact string in `suggested_backend_keywords`.
- **Description:** each section at least {DESCRIPTION_MIN_CHARS} characters; same restricted words and special
  characters as the title. Describe the rule so the user can self-check.
The application re-runs every suggested field through these checks and reports remaining problems.

### Other issue types
- Conversion: fewer than 7 images, no video, no A+ content, rating below 4.3, no Buy Box, no Brand Story.
- Sponsored ads: campaign ACOS above 40% (with sales), keywords with spend but sales below 0.01,
  search terms with 10+ clicks and sales below 0.01.
- Profitability: margin below 10% or negative net profit.
Recommend only fixes that resolve these conditions.

### Data
You receive {{"question": "...", "dashboard": {{"summary", "profitability", "ads", "issues"}}}}.
Sections can be null or empty: say so instead of inventing values. Never recalculate ACOS or TACOS
when they are provided and never assume data for an ASIN that is not in the context.

### Output format
Respond with a **single JSON object**:
{{
  "answer_markdown": "markdown answer for the user",
  "chart_suggestions": [
    {{
      "id": "short_unique_id",
      "title": "Readable chart title",
      "type": "line" | "bar" | "pie",
      "dataSource": {_DATA_SOURCE_CHOICES},
      "xField": "date",
      "yFields": [{{"field": "spend", "label": "Ad Spend"}}, {{"field": "sales", "label": "Sales"}}],
      "description": "1-2 sentences on what the chart shows"
    }}
  ],
  "follow_up_questions": ["short follow-up question"],
  "suggested_title": "optional exact title",
  "suggested_bullet_points": ["optional", "bullets"],
  "suggested_backend_keywords": "optional exact keywords string"
}}

Rules:
- answer_markdown is required: 50-150 words for narrow questions, up to 400 for broad ones.
- chart_suggestions may be empty. Use only `ppc_datewise` (ad spend vs sales over time) and
  `sales_datewise` (total sales and profit over time). At most **2 charts**.
- Sales-only questions get only a `sales_datewise` chart. Add `ppc_datewise` only when the user asks
  about PPC, ads, ad spend, ACOS or wasted money.
- Stay on topic: Amazon seller performance, products, ads, profitability, inventory. Politely decline
  anything else.
""".strip()


# -------------------- Request --------------------

def trim_history(history: Optional[Sequence[Any]]) -> List[Dict[str, str]]:
    """Keep the most recent turns, cap each turn's length, and normalize roles."""
    if not history:
        return []
    trimmed: List[Dict[str, str]] = []
    for entry in list(history)[-HISTORY_LIMIT:]:
        raw = entry if isinstance(entry, Mapping) else {}
        role = "assistant" if raw.get("role") == "assistant" else "user"
        content = raw.get("content")
        content = "" if content is None else str(content)
        trimmed.append(ChatMessage(role=role, content=content[:HISTORY_CONTENT_LIMIT]).model_dump())
    return trimmed


def build_messages(
    question: str,
    metrics_context: DashboardMetricsContext,
    history: Optional[Sequence[Any]] = None,
) -> List[Dict[str, str]]:
    user_turn = {
        "role": "user",
        "content": json.dumps({"question": question, "dashboard": metrics_context.model_dump()}),
    }
    return [*trim_history(history), user_turn]


# -------------------- Reply --------------------

_CODE_FENCE = re.compile(r"```[\s\S]*?```")
_BLANK_RUN = re.compile(r"\n{3,}")


def sanitize_answer(text: Any) -> str:
    """Strip code blocks and leaked JSON lines from the answer shown to the user."""
    answer = text.strip() if isinstance(text, str) else ""
    answer = _CODE_FENCE.sub("", answer)

    kept = []
    for line in answer.split("\n"):
        t = line.strip()
        if t.startswith("{") and t.endswith("}") and len(t) > LEAKED_JSON_MIN_LEN:
            continue
        kept.append(line)

    answer = _BLANK_RUN.sub("\n\n", "\n".join(kept)).strip()
    return answer or EMPTY_ANSWER_FALLBACK


def _charts(value: Any) -> List[ChartSuggestion]:
    if not isinstance(value, list):
        return []
    charts: List[ChartSuggestion] = []
    for item in value:
        if not isinstance(item, Mapping):
            logging.warning("Dropping chart suggestion that is not an object: %r", item)
            continue
        try:
            charts.append(ChartSuggestion.model_validate(item))
        except ValidationError as e:
            logging.warning("Dropping malformed chart suggestion %r: %s", item.get("id"), e)
    return charts


def _optional_text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def parse_model_output(raw: Optional[str]) -> AssistantResponse:
    """Parse the model's reply; malformed output yields a safe fallback, never an exception."""
    try:
        parsed = json.loads(raw or "")
    except (TypeError, ValueError) as e:
        logging.error("Failed to parse AI JSON response: %s | raw=%s", e, (raw or "")[:500])
        parsed = None

    if not isinstance(parsed, dict):
        if parsed is not None:
            logging.error("AI response is not a JSON object: %s", type(parsed).__name__)
        return AssistantResponse(answer_markdown=PARSE_FALLBACK_ANSWER)

    follow_ups = parsed.get("follow_up_questions")
    bullets = parsed.get("suggested_bullet_points")

    return AssistantResponse(
        answer_markdown=sanitize_answer(parsed.get("answer_markdown")),
        chart_suggestions=_charts(parsed.get("chart_suggestions")),
        follow_up_questions=[q for q in follow_ups if isinstance(q, str)] if isinstance(follow_ups, list) else [],
        suggested_title=_optional_text(parsed.get("suggested_title")),
        suggested_bullet_points=[b for b in bullets if isinstance(b, str)] if isinstance(bullets, list) else None,
        suggested_backend_keywords=_optional_text(parsed.get("suggested_backend_keywords")),
    )


# -------------------- Orchestration --------------------

async def generate_response(
    question: str,
    metrics_context: DashboardMetricsContext,
    history: Optional[Sequence[Any]],
    llm: LLMClient,
) -> AssistantResponse:
    """One model round trip. Raises ``AssistantUnavailableError`` if the call fails."""
    messages = build_messages(question, metrics_context, history)
    started = time.perf_counter()
    try:
        raw = await llm.complete(SYSTEM_PROMPT, messages)
    except LLMTransportError as e:
        logging.error("LLM call failed: %s", e)
        raise AssistantUnavailableError() from e
    except Exception as e:
        logging.exception("LLM client raised unexpectedly: %s", e)
        raise AssistantUnavailableError() from e
    logging.info("LLM call completed in %.0f ms", (time.perf_counter() - started) * 1000)
    return parse_model_output(raw)


async def run_assistant(
    question: str,
    dashboard: Any,
    history: Optional[Sequence[Any]],
    llm: LLMClient,
    ppc_summary: Any = None,
    cogs_values: Optional[Mapping[str, Any]] = None,
) -> AssistantResponse:
    """Context -> model -> suggestion validation -> chart data."""
    started = time.perf_counter()
    context = build_metrics_context(dashboard, ppc_summary, cogs_values)
    logging.info("Metrics context built in %.0f ms", (time.perf_counter() - started) * 1000)

    response = await generate_response(question, context, history, llm)
    response = validate_suggestions(response)
    charts = bind_chart_data(response.chart_suggestions, question, dashboard)
    return response.model_copy(update={"chart_suggestions": charts})
