from __future__ import annotations
import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sse_starlette.sse import EventSourceResponse
from copilot.database import async_session, get_db
from copilot.models.chat_message import Role
from copilot.schemas.chat import ChatRequest, ChatResponse, SummaryRequest, SummaryResponse
from copilot.services import chat_store
from copilot.services.chat_context import enrich_context_with_market_data, enrich_context_with_token_data
from copilot.services.claude import claude_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/claude", tags=["claude"])


@router.post("/chat", response_model=ChatResponse)
async def chat(req: ChatRequest, db: AsyncSession = Depends(get_db)):
    await chat_store.save_message(db, req.session_id, req.user_id, Role.user, req.message, req.context_data)

    context = await enrich_context_with_token_data(req.message, req.context_data)
    context = await enrich_context_with_market_data(context)
    try:
        reply = await claude_client.chat(req.message, context)
    except Exception as e:
        logger.warning(f"Chat failed for session {req.session_id}: {e}")
        raise HTTPException(status_code=502, detail="Failed to process chat message")

    await chat_store.save_message(db, req.session_id, req.user_id, Role.assistant, reply, req.context_data)
    return ChatResponse(message=reply)


@router.post("/stream")
async def stream(req: ChatRequest):
    """SSE stream of response chunks. The full reply is stored once the stream ends."""
    async with async_session() as db:
        await chat_store.save_message(db, req.session_id, req.user_id, Role.user, req.message, req.context_data)
        await db.commit()

    async def event_generator():
        chunks = []
        try:
            async for text in claude_client.stream_chat(req.message, req.context_data):
                chunks.append(text)
                yield {"event": "message", "data": text}
        except Exception as e:
            logger.warning(f"Stream failed for session {req.session_id}: {e}")
            yield {"event": "error", "data": "Failed to stream response"}
            return

        async with async_session() as db:
            await chat_store.save_message(
                db, req.session_id, req.user_id, Role.assistant, "".join(chunks), req.context_data
            )
            await db.commit()
        yield {"event": "done", "data": ""}

    return EventSourceResponse(event_generator())


@router.post("/summary", response_model=SummaryResponse)
async def summary(req: SummaryRequest):
    generators = {
        "token": claude_client.generate_token_summary,
        "wallet": claude_client.generate_wallet_summary,
        "portfolio": claude_client.generate_portfolio_insights,
    }
    try:
        text = await generators[req.kind](req.data)
    except Exception as e:
        logger.warning(f"{req.kind} summary failed: {e}")
        raise HTTPException(status_code=502, detail=f"Failed to generate {req.kind} summary")
    return SummaryResponse(summary=text)
