from __future__ import annotations
import logging
from datetime import datetime, timezone
from typing import Optional
from fastapi import APIRouter, HTTPException, Query
from copilot.schemas.token import DAppInfoResponse, DAppSearchResponse, TokenSearchResponse
from copilot.schemas.wallet import WalletAnalysisResponse
from copilot.services.wallet_analytics import analyze_wallet
from copilot.services.zerion import zerion_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/zerion", tags=["zerion"])


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _require(value: Optional[str], message: str) -> str:
    if not value or not value.strip():
        raise HTTPException(status_code=400, detail=message)
    return value.strip()


@router.get("/wallet-analysis", response_model=WalletAnalysisResponse)
async def wallet_analysis(address: Optional[str] = Query(None)):
    """Full wallet analysis. Upstream failures degrade to empty sections."""
    address = _require(address, "Wallet address is required")
    analysis = await analyze_wallet(address)
    return WalletAnalysisResponse(address=address, timestamp=_now(), data=analysis)


@router.get("/portfolio")
async def portfolio(address: Optional[str] = Query(None)):
    address = _require(address, "Wallet address is required")
    try:
        return await zerion_client.get_portfolio(address)
    except Exception as e:
        logger.warning(f"Portfolio fetch failed for {address[:8]}: {e}")
        raise HTTPException(status_code=502, detail="Failed to fetch portfolio data")


@router.get("/wallet-flows")
async def wallet_flows(
    address: Optional[str] = Query(None),
    type: str = Query("both", pattern="^(inflows|outflows|both)$"),
    limit: int = Query(10, ge=1, le=100),
):
    address = _require(address, "Wallet address is required")
    result = {}
    try:
        if type in ("inflows", "both"):
            result["inflows"] = await zerion_client.get_wallet_inflows(address, limit)
        if type in ("outflows", "both"):
            result["outflows"] = await zerion_client.get_wallet_outflows(address, limit)
    except Exception as e:
        logger.warning(f"Wallet flows fetch failed for {address[:8]}: {e}")
        raise HTTPException(status_code=502, detail="Failed to fetch wallet flows")
    return result


@router.get("/token")
async def token(
    address: Optional[str] = Query(None),
    chain: str = Query("solana"),
):
    address = _require(address, "Token address is required")
    try:
        return await zerion_client.get_token_by_address(address, chain)
    except Exception as e:
        logger.warning(f"Token fetch failed for {address[:8]} on {chain}: {e}")
        raise HTTPException(status_code=502, detail="Failed to fetch token data")


@router.get("/token-search", response_model=TokenSearchResponse)
async def token_search(
    query: Optional[str] = Query(None),
    chain: Optional[str] = Query(None),
):
    query = _require(query, "Search query is required")
    results = await zerion_client.search_token(query, chain)
    return TokenSearchResponse(data=results, query=query, chain=chain, timestamp=_now())


@router.get("/dapp-info")
async def dapp_info(
    dapp_id: Optional[str] = Query(None, alias="dappId"),
    search: Optional[str] = Query(None),
):
    """Search DApps by name, or look one up by id. Search wins when both are given."""
    if search and search.strip():
        results = await zerion_client.search_dapp(search.strip())
        return DAppSearchResponse(data=results, timestamp=_now())

    dapp_id = _require(dapp_id, "Either dappId or search parameter is required")
    info = await zerion_client.get_dapp_info(dapp_id)
    if info is None:
        raise HTTPException(status_code=404, detail=f"DApp not found: {dapp_id}")
    return DAppInfoResponse(data=info, timestamp=_now())


@router.get("/token-info")
async def token_info(
    fungible_id: Optional[str] = Query(None, alias="fungibleId"),
    period: str = Query("month", pattern="^(hour|day|week|month|year|max)$"),
):
    """Token detail plus its price chart. The chart is optional."""
    fungible_id = _require(fungible_id, "fungibleId is required")
    info = await zerion_client.get_token_info(fungible_id)
    if info is None:
        raise HTTPException(status_code=404, detail=f"Token not found: {fungible_id}")
    chart = await zerion_client.get_token_chart(fungible_id, period)
    return {"success": True, "data": info, "chart": chart, "timestamp": _now()}


@router.get("/chains")
async def chains():
    return {"success": True, "data": await zerion_client.get_chains(), "timestamp": _now()}


@router.get("/defi-positions")
async def defi_positions(address: Optional[str] = Query(None)):
    address = _require(address, "Wallet address is required")
    positions = await zerion_client.get_wallet_defi_positions(address)
    return {"success": True, "address": address, "data": positions, "timestamp": _now()}
