# backend/listing_guard/api/assistant.py
import logging

from fastapi import APIRouter, Depends, HTTPException

from listing_guard.schemas.assistant import AssistantResponse, ChatRequest
from listing_guard.services.assistant import AssistantUnavailableError, run_assistant
from listing_guard.services.llm import LLMClient, OpenAIChatClient

router = APIRouter(prefix="/api/assistant", tags=["assistant"])


def get_llm_client() -> LLMClient:
    return OpenAIChatClient()


@router.post("/chat", response_model=AssistantResponse)
async def chat(req: ChatRequest, llm: LLMClient = Depends(get_llm_client)):
    question = (req.message or "").strip()
    if not question:
        raise HTTPException(status_code=400, detail="A non-empty message is required.")

    logging.info(
        "Assistant chat request: history=%d dashboard=%s",
        len(req.history), req.dashboard is not None,
    )

    try:
        return await run_assistant(
            question=question,
            dashboard=req.dashboard,
            history=req.history,
            llm=llm,
            ppc_summary=req.ppcSummary,
            cogs_values=req.cogsValues,
        )
    except AssistantUnavailableError as e:
        logging.error("Assistant unavailable (status %d)", e.status_code)
        raise HTTPException(status_code=e.status_code, detail=e.message)
