# backend/tests/test_assistant.py
import json
import pytest

from listing_guard.schemas.dashboard import DashboardMetricsContext
from listing_guard.services.assistant import (
    EMPTY_ANSWER_FALLBACK,
    PARSE_FALLBACK_ANSWER,
    SYSTEM_PROMPT,
    UNAVAILABLE_MESSAGE,
    AssistantUnavailableError,
    build_messages,
    generate_response,
    parse_model_output,
    run_assistant,
    sanitize_answer,
    trim_history,
)


# ========================= Prompt & history =========================

def test_system_prompt_carries_listing_criteria():
    assert "80-200 characters" in SYSTEM_PROMPT
    assert "at least 150 characters" in SYSTEM_PROMPT
    assert "at least 450 characters" in SYSTEM_PROMPT
    assert "! $ ? _ { } ^ ¬ ¦ ~ # < > *" in SYSTEM_PROMPT
    assert '"ppc_datewise" | "sales_datewise"' in SYSTEM_PROMPT


def test_trim_history_keeps_last_six_and_caps_content():
    history = [{"role": "assistant" if i % 2 else "user", "content": f"turn {i}"} for i in range(10)]
    history[-1]["content"] = "x" * 5000
    trimmed = trim_history(history)
    assert len(trimmed) == 6
    assert trimmed[0]["content"] == "turn 4"
    assert len(trimmed[-1]["content"]) == 2000


def test_trim_history_coerces_roles_and_bad_entries():
    trimmed = trim_history([{"role": "system", "content": "hi"}, "garbage", {"role": "assistant"}])
    assert [m["role"] for m in trimmed] == ["user", "user", "assistant"]
    assert trimmed[1]["content"] == ""
    assert trim_history(None) == []


def test_build_messages_serializes_question_and_dashboard():
    messages = build_messages("How are sales?", DashboardMetricsContext(), [{"role": "user", "content": "hello"}])
    assert messages[0] == {"role": "user", "content": "hello"}
    payload = json.loads(messages[-1]["content"])
    assert payload["question"] == "How are sales?"
    assert payload["dashboard"] == {"summary": None, "profitability": None, "ads": None, "issues": None}


# ========================= Parsing & sanitizing =========================

def test_malformed_json_returns_fallback():
    for raw in ("not json at all", "", None, "[1, 2, 3]", '"just a string"'):
        resp = parse_model_output(raw)
        assert resp.answer_markdown == PARSE_FALLBACK_ANSWER
        assert resp.chart_suggestions == []
        assert resp.follow_up_questions == []


def test_parse_coerces_arrays_and_ignores_unknown_fields():
    raw = json.dumps({
        "answer_markdown": "Sales are up.",
        "chart_suggestions": "a chart please",
        "follow_up_questions": ["What about ads?", 7, None],
        "secret_field": "ignored",
    })
    resp = parse_model_output(raw)
    assert resp.answer_markdown == "Sales are up."
    assert resp.chart_suggestions == []
    assert resp.follow_up_questions == ["What about ads?"]
    assert not hasattr(resp, "secret_field")


def test_parse_drops_only_non_object_chart_entries():
    raw = json.dumps({
        "answer_markdown": "ok",
        "chart_suggestions": [
            "nope",
            7,
            {"id": "loose", "yFields": "spend"},
            {"id": "good", "type": "line", "dataSource": "sales_datewise"},
        ],
    })
    resp = parse_model_output(raw)
    assert [c.id for c in resp.chart_suggestions] == ["loose", "good"]
    assert [y.field for y in resp.chart_suggestions[0].yFields] == ["spend"]


def test_parse_keeps_loosely_typed_charts():
    raw = json.dumps({
        "answer_markdown": "ok",
        "chart_suggestions": [
            {"id": 1, "title": "Sales", "type": "line", "dataSource": "sales_datewise"},
            {"id": "c2", "type": "bar", "dataSource": "ppc_datewise", "yFields": ["spend", "sales"]},
            {"id": "c3", "yFields": [{"field": "units", "label": 5}, {"label": "no field"}, 3], "data": "x"},
        ],
    })
    charts = parse_model_output(raw).chart_suggestions
    assert [c.id for c in charts] == ["1", "c2", "c3"]
    assert charts[0].dataSource == "sales_datewise"
    assert [y.field for y in charts[1].yFields] == ["spend", "sales"]
    assert charts[1].yFields[0].label is None
    assert [(y.field, y.label) for y in charts[2].yFields] == [("units", "5")]
    assert charts[2].data is None


def test_parse_reads_suggestion_fields():
    raw = json.dumps({
        "answer_markdown": "Try this.",
        "suggested_title": "  New title  ",
        "suggested_bullet_points": ["one", 2, "three"],
        "suggested_backend_keywords": "   ",
    })
    resp = parse_model_output(raw)
    assert resp.suggested_title == "New title"
    assert resp.suggested_bullet_points == ["one", "three"]
    assert resp.suggested_backend_keywords is None


def test_sanitize_strips_code_and_json_lines():
    leaked = '{"asinWiseSales": [{"asin": "B0X", "sales": 10}], "datewiseSales": [1, 2, 3]}'
    text = "Intro\n```json\n{\"a\": 1}\n```\nMiddle\n" + leaked + "\n{short: 1}\nEnd"
    out = sanitize_answer(text)
    assert "```" not in out
    assert "asinWiseSales" not in out
    assert "{short: 1}" in out
    assert out.startswith("Intro") and out.endswith("End")


def test_sanitize_collapses_blank_runs():
    assert sanitize_answer("a\n\n\n\n\nb") == "a\n\nb"


def test_sanitize_empty_answer_gets_fallback():
    assert sanitize_answer("```only code```") == EMPTY_ANSWER_FALLBACK
    assert sanitize_answer(None) == EMPTY_ANSWER_FALLBACK


# ========================= Orchestration =========================

@pytest.mark.asyncio
async def test_generate_response_sends_prompt_history_and_context(fake_llm):
    llm = fake_llm(reply={"answer_markdown": "All good.", "follow_up_questions": ["Next?"]})
    resp = await generate_response("Quick check?", DashboardMetricsContext(), [{"role": "user", "content": "hi"}], llm)

    assert resp.answer_markdown == "All good."
    assert resp.follow_up_questions == ["Next?"]
    call = llm.calls[0]
    assert call["system_prompt"] == SYSTEM_PROMPT
    assert len(call["messages"]) == 2


@pytest.mark.asyncio
async def test_transport_failure_raises_unavailable(failing_llm):
    with pytest.raises(AssistantUnavailableError) as exc:
        await generate_response("Anything?", DashboardMetricsContext(), [], failing_llm)
    assert exc.value.status_code == 500
    assert exc.value.message == UNAVAILABLE_MESSAGE
    assert "connection reset" not in exc.value.message
    assert len(failing_llm.calls) == 1


@pytest.mark.asyncio
async def test_unexpected_client_error_raises_unavailable(fake_llm):
    llm = fake_llm(error=RuntimeError("socket exploded"))
    with pytest.raises(AssistantUnavailableError) as exc:
        await generate_response("Anything?", DashboardMetricsContext(), [], llm)
    assert exc.value.message == UNAVAILABLE_MESSAGE
    assert "socket" not in exc.value.message


@pytest.mark.asyncio
async def test_generate_response_with_malformed_reply(fake_llm):
    resp = await generate_response("Q", DashboardMetricsContext(), [], fake_llm(reply="{broken"))
    assert resp.answer_markdown == PARSE_FALLBACK_ANSWER


@pytest.mark.asyncio
async def test_run_assistant_full_pipeline(fake_llm, dashboard):
    llm = fake_llm(reply={
        "answer_markdown": "Here is a better title.",
        "suggested_title": "A" * 80,
        "chart_suggestions": [{"id": "s", "type": "line", "dataSource": "sales_datewise"}],
    })
    resp = await run_assistant("Show my profit for the last 7 days", dashboard, [], llm)

    assert resp.answer_markdown.startswith("Here is a better title.")
    assert "validated" in resp.answer_markdown
    chart = resp.chart_suggestions[0]
    assert len(chart.data) == 7
    assert [y.field for y in chart.yFields] == ["sales", "profit"]

    payload = json.loads(llm.calls[0]["messages"][-1]["content"])
    assert payload["dashboard"]["summary"]["grossProfit"] == 250
