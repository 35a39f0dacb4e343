from __future__ import annotations
import asyncio
import logging
from typing import Optional

import httpx

from copilot.config import get_settings
from copilot.schemas.token import Chain, ChartPoint, DAppData, TokenChart, TokenData

settings = get_settings()
logger = logging.getLogger(__name__)

ZERION_API = "https://api.zerion.io/v1"

CHAIN_ALIASES = {
    "eth": "ethereum",
    "matic": "polygon",
    "arb": "arbitrum",
    "op": "optimism",
    "sol": "solana",
    "avax": "avalanche",
    "bsc": "binance-smart-chain",
    "binance": "binance-smart-chain",
    "ftm": "fantom",
    "gnosis": "xdai",
    "zksync": "zksync-era",
    "manta": "manta-pacific",
}

CHAIN_NAMES = {
    "0g": "0G",
    "abstract": "Abstract",
    "ape": "ApeChain",
    "arbitrum": "Arbitrum",
    "aurora": "Aurora",
    "avalanche": "Avalanche",
    "base": "Base",
    "berachain": "Berachain",
    "binance-smart-chain": "BSC",
    "blast": "Blast",
    "celo": "Celo",
    "degen": "Degen",
    "ethereum": "Ethereum",
    "fantom": "Fantom",
    "gravity-alpha": "Gravity",
    "hyperevm": "HyperEVM",
    "ink": "Ink",
    "katana": "Katana",
    "lens": "Lens",
    "linea": "Linea",
    "manta-pacific": "Manta",
    "mantle": "Mantle",
    "metis-andromeda": "Metis",
    "mode": "Mode",
    "optimism": "Optimism",
    "plasma": "Plasma",
    "polygon": "Polygon",
    "polygon-zkevm": "Polygon zkEVM",
    "rari": "RARI",
    "ronin": "Ronin",
    "scroll": "Scroll",
    "sei": "Sei",
    "solana": "Solana",
    "somnia": "Somnia",
    "soneium": "Soneium",
    "sonic": "Sonic",
    "taiko": "Taiko",
    "unichain": "Unichain",
    "wonder": "Wonder",
    "world": "World",
    "xdai": "Gnosis",
    "xinfin-xdc": "XinFin",
    "zero": "Zero",
    "zkcandy": "zkCandy",
    "zksync-era": "zkSync Era",
    "zora": "Zora",
}


def normalize_chain_id(chain: str) -> str:
    lowered = chain.lower()
    return CHAIN_ALIASES.get(lowered, lowered)


def chain_name(chain_id: Optional[str]) -> str:
    if not chain_id:
        return "Unknown"
    return CHAIN_NAMES.get(chain_id, chain_id[:1].upper() + chain_id[1:])


def parse_token(fungible: dict) -> TokenData:
    """Flatten a Zerion fungible resource into TokenData."""
    attrs = fungible.get("attributes") or {}
    market = attrs.get("market_data") or {}
    changes = market.get("changes") or {}
    return TokenData(
        fungible_id=fungible.get("id", ""),
        symbol=attrs.get("symbol") or "Unknown",
        name=attrs.get("name") or "Unknown",
        price=market.get("price") or attrs.get("price") or 0,
        price_change_24h=changes.get("percent_1d") or attrs.get("price_change_24h"),
        price_change_30d=changes.get("percent_30d"),
        price_change_90d=changes.get("percent_90d"),
        price_change_365d=changes.get("percent_365d"),
        market_cap=market.get("market_cap") or attrs.get("market_cap"),
        circulating_supply=market.get("circulating_supply"),
        total_supply=market.get("total_supply"),
        icon=(attrs.get("icon") or {}).get("url"),
        verified=(attrs.get("flags") or {}).get("verified"),
    )


def parse_dapp(dapp: dict, fallback_name: str = "") -> DAppData:
    attrs = dapp.get("attributes") or {}
    dapp_id = dapp.get("id", "")
    return DAppData(
        dapp_id=dapp_id,
        name=attrs.get("name") or fallback_name or dapp_id,
        description=attrs.get("description"),
        logo=(attrs.get("icon") or {}).get("url"),
        website=attrs.get("url"),
    )


class ZerionClient:
    """Multi-chain wallet and token data. Auth is HTTP Basic with the key as username."""

    def __init__(self):
        self.api_key = settings.zerion_api_key
        self.headers = {"Accept": "application/json"}
        self._semaphore = asyncio.Semaphore(settings.zerion_rate_limit)

    async def _get(self, path: str, params: Optional[dict] = None) -> dict:
        async with self._semaphore:
            async with httpx.AsyncClient(timeout=settings.http_timeout_seconds) as client:
                resp = await client.get(
                    f"{ZERION_API}{path}",
                    headers=self.headers,
                    params=params or {},
                    auth=(self.api_key, ""),
                )
                resp.raise_for_status()
                logger.debug(f"Zerion GET {path} -> {resp.status_code}")
                return resp.json()

    # ── wallets ────────────────────────────────────────────────────

    async def get_portfolio(self, address: str) -> dict:
        return await self._get(f"/wallets/{address}/portfolio", params={"currency": "usd"})

    async def get_pnl(self, address: str) -> dict:
        return await self._get(f"/wallets/{address}/pnl", params={"currency": "usd"})

    async def get_positions(self, address: str, only_complex: bool = False) -> dict:
        """Non-trash wallet positions. Simple token balances unless ``only_complex``."""
        return await self._get(
            f"/wallets/{address}/positions/",
            params={
                "filter[positions]": "only_complex" if only_complex else "only_simple",
                "filter[trash]": "only_non_trash",
                "currency": "usd",
                "sort": "-value",
            },
        )

    async def get_transactions(self, address: str, page_size: int = 20, operation_type: Optional[str] = None) -> dict:
        params: dict = {"page[size]": page_size, "currency": "usd"}
        if operation_type:
            params["filter[operation_types]"] = operation_type
        return await self._get(f"/wallets/{address}/transactions/", params=params)

    async def get_wallet_chart(self, address: str, period: str = "month") -> dict:
        return await self._get(f"/wallets/{address}/charts/{period}", params={"currency": "usd"})

    async def get_wallet_inflows(self, address: str, limit: int = 10) -> dict:
        return await self.get_transactions(address, page_size=limit, operation_type="receive")

    async def get_wallet_outflows(self, address: str, limit: int = 10) -> dict:
        return await self.get_transactions(address, page_size=limit, operation_type="send")

    async def get_wallet_defi_positions(self, address: str) -> list[dict]:
        try:
            data = await self.get_positions(address, only_complex=True)
        except Exception as e:
            logger.warning(f"Zerion DeFi positions failed for {address[:8]}: {e}")
            return []
        return data.get("data") or []

    # ── tokens ─────────────────────────────────────────────────────

    async def get_token_by_address(self, token_address: str, chain: str = "solana") -> dict:
        """Fungible lookup by contract/mint address on one chain."""
        return await self._get(
            "/fungibles/",
            params={
                "filter[implementation_chain_id]": normalize_chain_id(chain),
                "filter[implementation_address]": token_address,
                "currency": "usd",
            },
        )

    async def search_fungibles(self, query: str, chain: Optional[str] = None, limit: int = 3) -> list[dict]:
        params = {
            "filter[search_query]": query,
            "currency": "usd",
            "page[size]": limit,
        }
        if chain:
            params["filter[implementation_chain_id]"] = normalize_chain_id(chain)
        data = await self._get("/fungibles/", params=params)
        return data.get("data") or []

    async def get_fungible(self, fungible_id: str) -> Optional[dict]:
        data = await self._get(f"/fungibles/{fungible_id}", params={"currency": "usd"})
        return data.get("data")

    async def search_token(self, query: str, chain: Optional[str] = None) -> list[TokenData]:
        """Search across chains and return detailed data for the best match only."""
        try:
            fungibles = await self.search_fungibles(query, chain)
        except Exception as e:
            logger.warning(f"Zerion token search failed for {query!r}: {e}")
            return []

        logger.info(f"Zerion token search {query!r}: {len(fungibles)} results")
        if not fungibles:
            return []

        top = fungibles[0]
        try:
            detailed = await self.get_fungible(top["id"])
        except Exception as e:
            logger.warning(f"Zerion token detail failed for {top.get('id')}: {e}")
            return []
        if not detailed:
            return []
        return [parse_token(detailed)]

    async def get_token_info(self, fungible_id: str) -> Optional[TokenData]:
        try:
            fungible = await self.get_fungible(fungible_id)
        except Exception as e:
            logger.warning(f"Zerion token info failed for {fungible_id}: {e}")
            return None
        return parse_token(fungible) if fungible else None

    async def get_token_chart(self, fungible_id: str, period: str = "month") -> Optional[TokenChart]:
        try:
            data = await self._get(f"/fungibles/{fungible_id}/charts/{period}", params={"currency": "usd"})
        except Exception as e:
            logger.warning(f"Zerion token chart failed for {fungible_id}: {e}")
            return None

        points = ((data.get("data") or {}).get("attributes") or {}).get("points")
        if not points:
            return None
        return TokenChart(
            period=period,
            points=[ChartPoint(timestamp=int(p[0]), value=float(p[1])) for p in points],
        )

    async def get_chains(self) -> list[Chain]:
        try:
            data = await self._get("/chains/")
        except Exception as e:
            logger.warning(f"Zerion chains fetch failed: {e}")
            return []
        return [
            Chain(
                id=c["id"],
                name=chain_name(c["id"]),
                icon=((c.get("attributes") or {}).get("icon") or {}).get("url"),
            )
            for c in data.get("data") or []
        ]

    # ── dapps ──────────────────────────────────────────────────────

    async def get_dapp_database(self, limit: int = 20) -> list[DAppData]:
        try:
            data = await self._get("/dapps/", params={"page[size]": limit})
        except Exception as e:
            logger.warning(f"Zerion dapp list failed: {e}")
            return []
        return [parse_dapp(d) for d in data.get("data") or []]

    async def search_dapp(self, query: str) -> list[DAppData]:
        """Try the query as a DApp id first ("magic eden" -> "magic-eden"), then filter the list."""
        dapp_id = "-".join(query.lower().split())
        try:
            data = await self._get(f"/dapps/{dapp_id}")
            if data.get("data"):
                return [parse_dapp(data["data"], fallback_name=query)]
        except Exception as e:
            logger.info(f"Zerion dapp {dapp_id!r} not found directly, searching list: {e}")

        lowered = query.lower()
        dapps = await self.get_dapp_database()
        return [d for d in dapps if lowered in d.name.lower() or lowered in d.dapp_id.lower()]

    async def get_dapp_info(self, dapp_id: str) -> Optional[DAppData]:
        dapps = await self.get_dapp_database()
        return next((d for d in dapps if d.dapp_id == dapp_id), None)


zerion_client = ZerionClient()
