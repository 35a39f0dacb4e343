from __future__ import annotations
import asyncio
import logging
from typing import Optional

import httpx

from copilot.config import get_settings
from copilot.schemas.token import MarketMetrics

settings = get_settings()
logger = logging.getLogger(__name__)

COINGECKO_API = "https://api.coingecko.com/api/v3"

# Zerion chain id -> CoinGecko on-chain network id
COINGECKO_NETWORKS = {
    "ethereum": "ethereum",
    "binance-smart-chain": "bsc",
    "polygon": "polygon-pos",
    "base": "base",
    "arbitrum": "arbitrum-one",
    "optimism": "optimistic-ethereum",
    "avalanche": "avalanche",
    "fantom": "fantom",
    "solana": "solana",
    "blast": "blast",
    "scroll": "scroll",
    "zksync-era": "zksync",
    "linea": "linea",
    "mantle": "mantle",
    "polygon-zkevm": "polygon-zkevm",
}

CATEGORY_ALIASES = {
    "defi": "DeFi",
    "decentralized finance": "DeFi",
    "meme": "Meme",
    "memecoin": "Meme",
    "meme coin": "Meme",
    "gaming": "Gaming",
    "gamefi": "Gaming",
    "nft": "NFT",
    "ai": "AI",
    "artificial intelligence": "AI",
    "layer 1": "L1",
    "layer 2": "L2",
    "infrastructure": "Infrastructure",
    "privacy": "Privacy",
    "oracle": "Oracle",
    "yield": "Yield",
    "lending": "Lending",
    "dex": "DEX",
    "derivatives": "Derivatives",
    "stablecoin": "Stablecoin",
    "governance": "Governance",
}


def normalize_category(category: str) -> str:
    return CATEGORY_ALIASES.get(category.lower().strip(), category)


def unique_categories(categories: list[str]) -> list[str]:
    """Normalized, deduplicated, first-appearance order."""
    return list(dict.fromkeys(normalize_category(c) for c in categories))


def format_trending_tokens(trending: list[dict], limit: int = 10) -> str:
    if not trending:
        return "No trending tokens found."
    lines = []
    for index, coin in enumerate(trending[:limit], start=1):
        item = coin.get("item") or {}
        price = (item.get("data") or {}).get("price")
        price_text = f"${price}" if price else "N/A"
        lines.append(f"{index}. {item.get('name', 'Unknown')} ({str(item.get('symbol', '')).upper()}) - Price: {price_text}")
    return "\n".join(lines)


class CoinGeckoClient:
    """Token categories (on-chain info) plus trending and global market data."""

    def __init__(self):
        self.headers = {"Accept": "application/json"}
        if settings.coingecko_api_key:
            self.headers["x-cg-demo-api-key"] = settings.coingecko_api_key
        self._semaphore = asyncio.Semaphore(settings.coingecko_rate_limit)

    async def _get(self, path: str, params: Optional[dict] = None) -> dict:
        async with self._semaphore:
            async with httpx.AsyncClient(timeout=settings.http_timeout_seconds) as client:
                resp = await client.get(
                    f"{COINGECKO_API}{path}",
                    headers=self.headers,
                    params=params or {},
                )
                resp.raise_for_status()
                return resp.json()

    async def get_token_info(self, address: str, chain_id: str) -> Optional[dict]:
        network = COINGECKO_NETWORKS.get(chain_id, "ethereum")
        try:
            return await self._get(f"/onchain/networks/{network}/tokens/{address.lower()}/info")
        except Exception as e:
            logger.warning(f"CoinGecko token info failed for {address[:10]} on {network}: {e}")
            return None

    async def get_token_categories(self, address: str, chain_id: str) -> list[str]:
        info = await self.get_token_info(address, chain_id)
        categories = (((info or {}).get("data") or {}).get("attributes") or {}).get("categories")
        return list(categories) if categories else []

    async def batch_get_token_categories(self, tokens: list[tuple[str, str]]) -> dict[str, list[str]]:
        """Categories for ``(address, chain_id)`` pairs, keyed by lowercased address.

        Runs in batches with a short pause between them to stay under the
        public rate limit.
        """
        results: dict[str, list[str]] = {}
        batch_size = settings.coingecko_batch_size
        for i in range(0, len(tokens), batch_size):
            batch = tokens[i:i + batch_size]
            categories = await asyncio.gather(
                *(self.get_token_categories(address, chain_id) for address, chain_id in batch)
            )
            for (address, _), cats in zip(batch, categories):
                results[address.lower()] = cats
            if i + batch_size < len(tokens):
                await asyncio.sleep(settings.coingecko_batch_delay)

        with_categories = sum(1 for cats in results.values() if cats)
        logger.info(f"CoinGecko categories: {with_categories}/{len(tokens)} tokens categorized")
        return results

    async def get_trending_tokens(self) -> list[dict]:
        try:
            data = await self._get("/search/trending")
        except Exception as e:
            logger.warning(f"CoinGecko trending fetch failed: {e}")
            return []
        coins = data.get("coins") or []
        logger.info(f"CoinGecko: {len(coins)} trending tokens")
        return coins

    async def get_global_market_data(self) -> Optional[MarketMetrics]:
        try:
            data = await self._get("/global")
        except Exception as e:
            logger.warning(f"CoinGecko global market fetch failed: {e}")
            return None
        market = data.get("data")
        if not market:
            return None
        return MarketMetrics(
            active_cryptos=market.get("active_cryptocurrencies"),
            total_market_cap=(market.get("total_market_cap") or {}).get("usd"),
            total_24h_volume=(market.get("total_volume") or {}).get("usd"),
            market_cap_change_24h=market.get("market_cap_change_percentage_24h_usd"),
        )


coingecko_client = CoinGeckoClient()
