from __future__ import annotations
import asyncio
import logging
from datetime import datetime
from typing import Optional

from copilot.config import get_settings
from copilot.schemas.wallet import (
    Diversification,
    Fee,
    Holding,
    Performance,
    PortfolioSummary,
    ProcessedTransaction,
    TradingFrequency,
    TradingMetrics,
    Transfer,
    WalletAnalysis,
    WalletStats,
)
from copilot.services.coingecko import coingecko_client, unique_categories
from copilot.services.wallet_profiler import profile_wallet
from copilot.services.zerion import chain_name, zerion_client

settings = get_settings()
logger = logging.getLogger(__name__)

# Trades per day thresholds, checked top to bottom
FREQUENCY_THRESHOLDS = (
    (1.0, TradingFrequency.very_active),
    (0.5, TradingFrequency.active),
    (0.2, TradingFrequency.moderate),
)


def calculate_return(points: Optional[list]) -> float:
    """Percent change from the first to the last ``[timestamp, value]`` point."""
    if not points or len(points) < 2:
        return 0.0
    first = points[0][1] or 0
    last = points[-1][1] or 0
    if first == 0:
        return 0.0
    return (last - first) / first * 100


def _parse_mined_at(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.debug(f"Unparseable mined_at: {value!r}")
        return None


def determine_trading_frequency(transactions: list[dict]) -> TradingFrequency:
    """Label from transactions/day between the oldest and newest tx (newest first)."""
    if not transactions:
        return TradingFrequency.unknown
    newest = _parse_mined_at((transactions[0].get("attributes") or {}).get("mined_at"))
    oldest = _parse_mined_at((transactions[-1].get("attributes") or {}).get("mined_at"))
    if newest is None or oldest is None:
        return TradingFrequency.unknown

    days = (newest - oldest).total_seconds() / 86400
    if days <= 0:
        # Everything landed at the same instant
        return TradingFrequency.very_active

    trades_per_day = len(transactions) / days
    for threshold, label in FREQUENCY_THRESHOLDS:
        if trades_per_day >= threshold:
            return label
    return TradingFrequency.passive


def process_transaction(tx: dict) -> ProcessedTransaction:
    attrs = tx.get("attributes") or {}
    chain = (((tx.get("relationships") or {}).get("chain") or {}).get("data") or {}).get("id") or "unknown"

    transfers = []
    for transfer in attrs.get("transfers") or []:
        info = transfer.get("fungible_info") or transfer.get("nft_info") or {}
        quantity = transfer.get("quantity") or {}
        transfers.append(Transfer(
            symbol=info.get("symbol") or "Unknown",
            name=info.get("name") or "Unknown",
            direction=transfer.get("direction") or "unknown",
            quantity=quantity.get("numeric") or "0",
            quantity_float=quantity.get("float") or 0.0,
            value=transfer.get("value") or None,
            price=transfer.get("price") or None,
            sender=transfer.get("sender"),
            recipient=transfer.get("recipient"),
            icon=(info.get("icon") or {}).get("url"),
            verified=bool((info.get("flags") or {}).get("verified")),
        ))

    fee = None
    raw_fee = attrs.get("fee")
    if raw_fee:
        fee_quantity = raw_fee.get("quantity") or {}
        fee = Fee(
            symbol=(raw_fee.get("fungible_info") or {}).get("symbol") or "Unknown",
            amount=fee_quantity.get("numeric") or "0",
            amount_float=fee_quantity.get("float") or 0.0,
            value=raw_fee.get("value") or None,
        )

    return ProcessedTransaction(
        type=attrs.get("operation_type") or "unknown",
        timestamp=attrs.get("mined_at"),
        hash=attrs.get("hash") or tx.get("id"),
        chain=chain,
        chain_name=chain_name(chain),
        status=attrs.get("status") or "unknown",
        transfers=transfers,
        fee=fee,
        sent_from=attrs.get("sent_from"),
        sent_to=attrs.get("sent_to"),
        block=attrs.get("mined_at_block"),
    )


def analyze_transactions(transactions: list[dict], recent_limit: int = 5) -> TradingMetrics:
    if not transactions:
        return TradingMetrics(
            total_transactions=0,
            recent_activity=[],
            trading_frequency=TradingFrequency.unknown,
            last_activity=None,
        )

    valid = [tx for tx in transactions if not ((tx.get("attributes") or {}).get("flags") or {}).get("is_trash")]
    return TradingMetrics(
        total_transactions=len(transactions),
        recent_activity=[process_transaction(tx) for tx in valid[:recent_limit]],
        trading_frequency=determine_trading_frequency(transactions),
        last_activity=(transactions[0].get("attributes") or {}).get("mined_at"),
    )


def _position_value(position: dict) -> float:
    return (position.get("attributes") or {}).get("value") or 0.0


def _position_chain(position: dict) -> str:
    return (((position.get("relationships") or {}).get("chain") or {}).get("data") or {}).get("id") or "unknown"


def position_token_address(position: dict) -> str:
    """Implementation address on the position's own chain, else the first one."""
    implementations = ((position.get("attributes") or {}).get("fungible_info") or {}).get("implementations") or []
    chain = _position_chain(position)
    match = next((impl for impl in implementations if impl.get("chain_id") == chain), None)
    if match is None and implementations:
        match = implementations[0]
    return (match or {}).get("address") or ""


def top_positions(positions: list[dict], limit: int) -> list[dict]:
    held = [p for p in positions if _position_value(p) > 0]
    held.sort(key=_position_value, reverse=True)
    return held[:limit]


def build_holding(position: dict, portfolio_value: float, category_map: dict[str, list[str]]) -> Holding:
    attrs = position.get("attributes") or {}
    info = attrs.get("fungible_info") or {}
    chain = _position_chain(position)
    value = _position_value(position)
    categories = category_map.get(position_token_address(position).lower(), [])
    return Holding(
        symbol=info.get("symbol") or "Unknown",
        name=info.get("name") or "Unknown",
        value=value,
        percentage=value * 100 / portfolio_value if portfolio_value > 0 else 0.0,
        quantity=(attrs.get("quantity") or {}).get("numeric") or "0",
        icon=(info.get("icon") or {}).get("url"),
        chain=chain,
        chain_name=chain_name(chain),
        categories=unique_categories(categories),
    )


def calculate_wallet_metrics(
    pnl: Optional[dict],
    positions: Optional[dict],
    transactions: Optional[dict],
    chart_30d: Optional[dict],
    chart_7d: Optional[dict],
    category_map: Optional[dict[str, list[str]]] = None,
) -> WalletAnalysis:
    """Derive every dashboard metric from raw Zerion payloads. Missing payloads count as empty."""
    category_map = category_map or {}

    pnl_attrs = ((pnl or {}).get("data") or {}).get("attributes") or {}
    realized = pnl_attrs.get("realized_gain") or 0.0
    unrealized = pnl_attrs.get("unrealized_gain") or 0.0
    total_pnl = realized + unrealized
    net_invested = pnl_attrs.get("net_invested") or 1

    position_rows = (positions or {}).get("data") or []
    portfolio_value = sum(_position_value(p) for p in position_rows)

    top = top_positions(position_rows, settings.wallet_top_holdings)
    holdings = [build_holding(p, portfolio_value, category_map) for p in top]
    total_holdings = sum(1 for p in position_rows if _position_value(p) > 0)
    top3_concentration = sum(h.percentage for h in holdings[:3])
    diversification_score = max(0.0, 100 - top3_concentration)

    trading = analyze_transactions((transactions or {}).get("data") or [], settings.wallet_recent_activity)

    stats = WalletStats(
        portfolio_value=portfolio_value,
        total_transactions=trading.total_transactions,
        trading_frequency=trading.trading_frequency,
        diversification_score=min(diversification_score, 100.0),
        top_holdings=holdings,
        recent_activity=trading.recent_activity,
    )
    profile, behavior = profile_wallet(stats)

    def _points(chart: Optional[dict]) -> list:
        return (((chart or {}).get("data") or {}).get("attributes") or {}).get("points") or []

    return WalletAnalysis(
        profile=profile,
        behavior=behavior,
        performance=Performance(
            portfolio_value=portfolio_value,
            realized_pnl=realized,
            unrealized_pnl=unrealized,
            total_pnl=total_pnl,
            pnl_percentage=total_pnl / net_invested * 100,
            total_fees=pnl_attrs.get("total_fee") or 0.0,
            return_30d=calculate_return(_points(chart_30d)),
            return_7d=calculate_return(_points(chart_7d)),
        ),
        portfolio=PortfolioSummary(
            total_value=portfolio_value,
            total_holdings=total_holdings,
            top_holdings=holdings,
            diversification=Diversification(
                top3_concentration=top3_concentration,
                diversification_score=diversification_score,
            ),
        ),
        trading=trading,
    )


async def analyze_wallet(address: str) -> WalletAnalysis:
    """Fan out to every Zerion wallet endpoint; failed calls degrade to empty data."""
    labels = ("pnl", "positions", "transactions", "chart_30d", "chart_7d")
    results = await asyncio.gather(
        zerion_client.get_pnl(address),
        zerion_client.get_positions(address),
        zerion_client.get_transactions(address, page_size=settings.wallet_transactions_page_size),
        zerion_client.get_wallet_chart(address, "month"),
        zerion_client.get_wallet_chart(address, "week"),
        return_exceptions=True,
    )

    raw: dict[str, Optional[dict]] = {}
    for label, result in zip(labels, results):
        if isinstance(result, Exception):
            logger.warning(f"Wallet analysis: {label} fetch failed for {address[:8]}: {result}")
            raw[label] = None
        else:
            raw[label] = result

    tokens = [
        (position_token_address(p), _position_chain(p))
        for p in top_positions((raw["positions"] or {}).get("data") or [], settings.wallet_top_holdings)
    ]
    tokens = [(addr, chain) for addr, chain in tokens if addr]
    category_map = await coingecko_client.batch_get_token_categories(tokens) if tokens else {}

    return calculate_wallet_metrics(category_map=category_map, **raw)
