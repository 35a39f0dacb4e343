from __future__ import annotations
from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field
from copilot.models.chat_message import Role


class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1)
    session_id: str = Field(..., alias="sessionId", min_length=1, max_length=64)
    user_id: str = Field(..., alias="userId", min_length=1, max_length=64)
    context_data: Optional[Dict[str, Any]] = Field(None, alias="contextData")


class ChatResponse(BaseModel):
    message: str
    success: bool = True


class ChatMessageResponse(BaseModel):
    id: int
    session_id: str
    user_id: str
    role: Role
    content: str
    context_data: Optional[Dict[str, Any]] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class ChatHistoryResponse(BaseModel):
    history: List[ChatMessageResponse]


class CreateSessionRequest(BaseModel):
    user_id: str = Field(..., alias="userId", min_length=1, max_length=64)
    title: str = Field(..., min_length=1, max_length=200)


class SessionResponse(BaseModel):
    id: str
    title: str
    updated_at: datetime

    model_config = {"from_attributes": True}


class SessionListResponse(BaseModel):
    sessions: List[SessionResponse]


class CreateSessionResponse(BaseModel):
    session: SessionResponse


class AddWatchlistRequest(BaseModel):
    user_id: str = Field(..., alias="userId", min_length=1, max_length=64)
    token_symbol: str = Field(..., alias="tokenSymbol", min_length=1, max_length=20)
    token_address: str = Field(..., alias="tokenAddress", min_length=1, max_length=100)


class WatchlistResponse(BaseModel):
    id: int
    token_symbol: str
    token_address: str
    added_at: datetime

    model_config = {"from_attributes": True}


class SaveInsightRequest(BaseModel):
    user_id: str = Field(..., alias="userId", min_length=1, max_length=64)
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)
    token_symbol: Optional[str] = Field(None, alias="tokenSymbol", max_length=20)
    wallet_address: Optional[str] = Field(None, alias="walletAddress", max_length=100)


class InsightResponse(BaseModel):
    id: int
    title: str
    content: str
    token_symbol: Optional[str] = None
    wallet_address: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class SummaryRequest(BaseModel):
    kind: str = Field(..., pattern="^(token|wallet|portfolio)$")
    data: Dict[str, Any]


class SummaryResponse(BaseModel):
    summary: str
    success: bool = True
