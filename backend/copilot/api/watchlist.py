from __future__ import annotations
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from copilot.database import get_db
from copilot.schemas.chat import AddWatchlistRequest, WatchlistResponse
from copilot.services import chat_store

router = APIRouter(prefix="/api/watchlist", tags=["watchlist"])


def _require_user(user_id: Optional[str]) -> str:
    if not user_id:
        raise HTTPException(status_code=400, detail="userId is required")
    return user_id


@router.get("", response_model=List[WatchlistResponse])
async def list_watchlist(
    user_id: Optional[str] = Query(None, alias="userId"),
    db: AsyncSession = Depends(get_db),
):
    items = await chat_store.get_watchlist(db, _require_user(user_id))
    return [WatchlistResponse.model_validate(i) for i in items]


@router.post("", response_model=WatchlistResponse, status_code=status.HTTP_201_CREATED)
async def add_token(req: AddWatchlistRequest, db: AsyncSession = Depends(get_db)):
    existing = await chat_store.get_watchlist_item(db, req.user_id, req.token_address)
    if existing:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Token is already on the watchlist",
        )
    item = await chat_store.add_to_watchlist(db, req.user_id, req.token_symbol, req.token_address)
    return WatchlistResponse.model_validate(item)


@router.delete("/{token_address}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_token(
    token_address: str,
    user_id: Optional[str] = Query(None, alias="userId"),
    db: AsyncSession = Depends(get_db),
):
    removed = await chat_store.remove_from_watchlist(db, _require_user(user_id), token_address)
    if not removed:
        raise HTTPException(status_code=404, detail="Token not on watchlist")
