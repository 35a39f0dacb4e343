from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
from copilot.database import get_db
from copilot.schemas.chat import (
    ChatHistoryResponse,
    ChatMessageResponse,
    CreateSessionRequest,
    CreateSessionResponse,
    SessionListResponse,
    SessionResponse,
)
from copilot.services import chat_store

router = APIRouter(prefix="/api/chat", tags=["chat"])


@router.get("/history", response_model=ChatHistoryResponse)
async def history(
    session_id: Optional[str] = Query(None, alias="sessionId"),
    user_id: Optional[str] = Query(None, alias="userId"),
    db: AsyncSession = Depends(get_db),
):
    if not session_id or not user_id:
        raise HTTPException(status_code=400, detail="sessionId and userId are required")
    messages = await chat_store.get_history(db, session_id, user_id)
    return ChatHistoryResponse(history=[ChatMessageResponse.model_validate(m) for m in messages])


@router.get("/sessions", response_model=SessionListResponse)
async def list_sessions(
    user_id: Optional[str] = Query(None, alias="userId"),
    db: AsyncSession = Depends(get_db),
):
    if not user_id:
        raise HTTPException(status_code=400, detail="userId is required")
    sessions = await chat_store.get_sessions(db, user_id)
    return SessionListResponse(sessions=[SessionResponse.model_validate(s) for s in sessions])


@router.post("/sessions", response_model=CreateSessionResponse, status_code=status.HTTP_201_CREATED)
async def create_session(req: CreateSessionRequest, db: AsyncSession = Depends(get_db)):
    session = await chat_store.create_session(db, req.user_id, req.title)
    return CreateSessionResponse(session=SessionResponse.model_validate(session))
