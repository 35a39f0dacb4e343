from __future__ import annotations
import asyncio
import logging
from datetime import datetime, timezone
from fastapi import APIRouter
from copilot.schemas.token import MarketMetrics, MarketTrendingResponse, TrendingToken
from copilot.services.coingecko import coingecko_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/market", tags=["market"])

TRENDING_LIMIT = 10


def to_trending_token(rank: int, coin: dict) -> TrendingToken:
    item = coin.get("item") or {}
    price = (item.get("data") or {}).get("price")
    return TrendingToken(
        rank=rank,
        name=item.get("name") or "Unknown",
        symbol=str(item.get("symbol") or "").upper(),
        price=str(price) if price is not None else None,
        market_cap_rank=item.get("market_cap_rank"),
        icon=item.get("small"),
    )


@router.get("/trending", response_model=MarketTrendingResponse)
async def trending():
    """Top trending coins plus global market metrics. Either half may come back empty."""
    coins, market = await asyncio.gather(
        coingecko_client.get_trending_tokens(),
        coingecko_client.get_global_market_data(),
    )
    logger.info(f"Market: {len(coins)} trending, global data {'ok' if market else 'missing'}")
    return MarketTrendingResponse(
        trending=[to_trending_token(i, coin) for i, coin in enumerate(coins[:TRENDING_LIMIT], start=1)],
        market_data=market or MarketMetrics(),
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
