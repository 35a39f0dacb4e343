from __future__ import annotations
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from copilot.database import get_db
from copilot.schemas.chat import InsightResponse, SaveInsightRequest
from copilot.services import chat_store

router = APIRouter(prefix="/api/insights", tags=["insights"])


@router.get("", response_model=List[InsightResponse])
async def list_insights(
    user_id: Optional[str] = Query(None, alias="userId"),
    db: AsyncSession = Depends(get_db),
):
    if not user_id:
        raise HTTPException(status_code=400, detail="userId is required")
    insights = await chat_store.get_insights(db, user_id)
    return [InsightResponse.model_validate(i) for i in insights]


@router.post("", response_model=InsightResponse, status_code=status.HTTP_201_CREATED)
async def save_insight(req: SaveInsightRequest, db: AsyncSession = Depends(get_db)):
    insight = await chat_store.save_insight(
        db,
        user_id=req.user_id,
        title=req.title,
        content=req.content,
        token_symbol=req.token_symbol,
        wallet_address=req.wallet_address,
    )
    return InsightResponse.model_validate(insight)
