from __future__ import annotations
import logging
import httpx
from typing import Optional

from copilot.config import get_settings
from copilot.schemas.token import JupiterToken

settings = get_settings()
logger = logging.getLogger(__name__)

JUPITER_TOKENS_API = "https://lite-api.jup.ag/tokens/v2"


def to_jupiter_token(token: dict) -> JupiterToken:
    """Project a Jupiter search row onto the fields the chat context uses."""
    stats = token.get("stats24h") or {}
    volume = None
    if stats:
        volume = (stats.get("buyVolume") or 0) + (stats.get("sellVolume") or 0)
    return JupiterToken(
        id=token.get("id", ""),
        symbol=token.get("symbol", ""),
        name=token.get("name", ""),
        decimals=token.get("decimals"),
        icon=token.get("icon"),
        price=token.get("usdPrice") or None,
        market_cap=token.get("mcap"),
        liquidity=token.get("liquidity"),
        holder_count=token.get("holderCount"),
        organic_score=token.get("organicScore"),
        price_change_24h=stats.get("priceChange"),
        volume_24h=volume,
    )


class JupiterClient:
    """Lightweight client for the Jupiter token search API (free, no auth required)."""

    async def search_token(self, symbol: str) -> Optional[dict]:
        """Exact symbol match (case-insensitive) among search results, or None."""
        try:
            async with httpx.AsyncClient(timeout=settings.http_timeout_seconds) as client:
                resp = await client.get(
                    f"{JUPITER_TOKENS_API}/search",
                    params={"query": symbol},
                )
                resp.raise_for_status()
                tokens = resp.json()
        except Exception as e:
            logger.warning(f"Jupiter search failed for {symbol}: {e}")
            return None

        if not isinstance(tokens, list):
            return None
        match = next(
            (t for t in tokens if str(t.get("symbol", "")).lower() == symbol.lower()),
            None,
        )
        if match is None:
            logger.info(f"Jupiter: token not found: {symbol}")
        return match

    async def get_token_with_price(self, symbol: str) -> Optional[JupiterToken]:
        token = await self.search_token(symbol)
        if token is None:
            return None
        return to_jupiter_token(token)

    async def get_multiple_tokens_with_prices(self, symbols: list[str]) -> list[JupiterToken]:
        """Sequential lookups; symbols that are not found are skipped."""
        results = []
        for symbol in symbols:
            token = await self.get_token_with_price(symbol)
            if token is not None:
                results.append(token)
        return results


jupiter_client = JupiterClient()
