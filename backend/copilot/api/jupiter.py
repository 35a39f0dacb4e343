from __future__ import annotations
from typing import Optional
from fastapi import APIRouter, HTTPException, Query
from copilot.schemas.token import JupiterTokenResponse
from copilot.services.jupiter import jupiter_client

router = APIRouter(prefix="/api/jupiter", tags=["jupiter"])


@router.get("/token", response_model=JupiterTokenResponse)
async def token(symbol: Optional[str] = Query(None)):
    if not symbol or not symbol.strip():
        raise HTTPException(status_code=400, detail="Token symbol is required")

    result = await jupiter_client.get_token_with_price(symbol.strip())
    if result is None:
        raise HTTPException(status_code=404, detail=f"Token not found: {symbol}")
    return JupiterTokenResponse(data=result)
