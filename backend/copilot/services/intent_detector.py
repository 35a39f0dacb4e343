"""Intent detection for the chat box.

Scores a query against fixed keyword tables, boosts by extracted entities and
picks the best category. Also plans the follow-up data fetches for an intent
and renders the context sentence handed to the language model.

Scores are ``matches / len(keywords)`` per category, so categories with short
keyword lists saturate faster than long ones.
"""
from __future__ import annotations
import logging
from types import MappingProxyType
from typing import Callable, Optional

from copilot.schemas.intent import AlertType, DetectedIntent, FetchDescriptor, IntentType
from copilot.services.entity_extractor import (
    detect_comparison,
    extract_dapps,
    extract_tokens,
    extract_wallets,
)

logger = logging.getLogger(__name__)

INTENT_KEYWORDS = MappingProxyType({
    IntentType.token: (
        "price", "token", "sol", "usdc", "usdt", "eth", "btc", "what's", "show me",
        "health", "liquidity", "volume", "market cap", "holders", "risk", "safe",
        "pump", "chart",
    ),
    IntentType.wallet: (
        "wallet", "address", "balance", "portfolio", "whale", "inflow", "outflow",
        "transaction", "activity", "smart money",
    ),
    IntentType.market: (
        "trending", "top", "movers", "market", "trend", "trends", "sector", "defi",
        "nft", "arbitrage", "opportunity", "alerts", "crypto market", "market sentiment",
        "market cap", "dominance", "gainers", "losers", "overall", "overall market",
        "general market",
    ),
    IntentType.comparison: ("compare", "vs", "versus", "better", "difference", "which"),
    IntentType.alert: ("alert", "notify", "watch", "remind", "when", "set", "create alert"),
    IntentType.dapp: (
        "protocol", "tvl", "apy", "dapp", "defi", "yield", "pool", "staking",
        "farming", "trading",
    ),
})

# Queries about the market as a whole; symbols in them are not token lookups
MARKET_ONLY_PHRASES = (
    "trend", "overall market", "crypto market", "market sentiment", "gainers",
    "losers", "market cap ranking", "market dominance",
)

TOKEN_BOOST = 0.3
WALLET_BOOST = 0.3
COMPARISON_BOOST = 0.3
DAPP_BOOST = 0.4
ALERT_BOOST = 0.2

# First hit wins
ALERT_TYPE_KEYWORDS = (
    ("price", AlertType.price),
    ("volume", AlertType.volume),
    ("whale", AlertType.whale),
    ("risk", AlertType.risk),
)

TOKEN_SEARCH_ENDPOINT = "/api/zerion/token-search"
WALLET_ANALYSIS_ENDPOINT = "/api/zerion/wallet-analysis"
DAPP_INFO_ENDPOINT = "/api/zerion/dapp-info"


def score_keywords(lowered_query: str) -> dict[IntentType, float]:
    """Base score per category, in ``IntentType`` declaration order."""
    scores = {intent: 0.0 for intent in IntentType}
    for intent, keywords in INTENT_KEYWORDS.items():
        matches = sum(1 for kw in keywords if kw in lowered_query)
        scores[intent] = matches / len(keywords)
    return scores


def detect_intent(query: str) -> DetectedIntent:
    lowered = query.lower()
    scores = score_keywords(lowered)

    tokens = extract_tokens(query)
    wallets = extract_wallets(query)
    comparison = detect_comparison(query)
    dapps = extract_dapps(query)

    if any(phrase in lowered for phrase in MARKET_ONLY_PHRASES):
        tokens = []

    if tokens:
        scores[IntentType.token] += TOKEN_BOOST
    if wallets:
        scores[IntentType.wallet] += WALLET_BOOST
    if comparison:
        scores[IntentType.comparison] += COMPARISON_BOOST
    if dapps:
        scores[IntentType.dapp] += DAPP_BOOST
    if "alert" in lowered:
        scores[IntentType.alert] += ALERT_BOOST

    # Strictly greater, so ties go to the earlier category
    primary = IntentType.general
    max_score = scores[IntentType.general]
    for intent, score in scores.items():
        if score > max_score:
            max_score = score
            primary = intent

    if comparison:
        primary = IntentType.comparison

    alert_type: Optional[AlertType] = None
    if primary == IntentType.alert:
        alert_type = next((t for kw, t in ALERT_TYPE_KEYWORDS if kw in lowered), None)

    logger.debug("Intent %s (%.3f) for %r", primary.value, max_score, query)

    return DetectedIntent(
        type=primary,
        confidence=min(max_score, 1.0),
        tokens=tokens or None,
        wallets=wallets or None,
        dapps=dapps or None,
        comparison=comparison,
        alert_type=alert_type,
        raw_query=query,
    )


# ── Fetch planning ──────────────────────────────────────────────────


def _plan_tokens(intent: DetectedIntent) -> list[FetchDescriptor]:
    return [
        FetchDescriptor(endpoint=TOKEN_SEARCH_ENDPOINT, params={"query": token})
        for token in intent.tokens or []
    ]


def _plan_wallets(intent: DetectedIntent) -> list[FetchDescriptor]:
    return [
        FetchDescriptor(endpoint=WALLET_ANALYSIS_ENDPOINT, params={"address": wallet})
        for wallet in intent.wallets or []
    ]


def _plan_comparison(intent: DetectedIntent) -> list[FetchDescriptor]:
    if intent.comparison is None:
        return []
    return [
        FetchDescriptor(endpoint=TOKEN_SEARCH_ENDPOINT, params={"query": intent.comparison.from_}),
        FetchDescriptor(endpoint=TOKEN_SEARCH_ENDPOINT, params={"query": intent.comparison.to}),
    ]


def _plan_dapps(intent: DetectedIntent) -> list[FetchDescriptor]:
    return [
        FetchDescriptor(endpoint=DAPP_INFO_ENDPOINT, params={"search": dapp})
        for dapp in intent.dapps or []
    ]


def _plan_nothing(intent: DetectedIntent) -> list[FetchDescriptor]:
    return []


FETCH_PLANNERS: MappingProxyType[IntentType, Callable[[DetectedIntent], list[FetchDescriptor]]] = MappingProxyType({
    IntentType.token: _plan_tokens,
    IntentType.wallet: _plan_wallets,
    IntentType.market: _plan_nothing,
    IntentType.comparison: _plan_comparison,
    IntentType.alert: _plan_nothing,
    IntentType.dapp: _plan_dapps,
    IntentType.general: _plan_nothing,
})

_missing = set(IntentType) - set(FETCH_PLANNERS)
if _missing:
    raise RuntimeError(f"No fetch planner for intent types: {sorted(t.value for t in _missing)}")


def plan_data_fetches(intent: DetectedIntent) -> list[FetchDescriptor]:
    """Endpoints the dashboard should call next for this intent. No I/O."""
    return FETCH_PLANNERS[intent.type](intent)


# ── Prompt context ──────────────────────────────────────────────────


def generate_intent_context(intent: DetectedIntent) -> str:
    if intent.type == IntentType.token:
        return (
            f"The user is asking about token(s): {', '.join(intent.tokens or [])}. "
            "Provide detailed token analysis including price, liquidity, health metrics, "
            "multi-chain availability, and risk assessment."
        )
    if intent.type == IntentType.wallet:
        return (
            f"The user is asking about wallet(s): {', '.join(intent.wallets or [])}. "
            "Provide portfolio overview, recent activity, DeFi positions, and smart money insights."
        )
    if intent.type == IntentType.market:
        return (
            "The user is asking about market trends. Provide insights on trending tokens, "
            "sector performance, and market opportunities."
        )
    if intent.type == IntentType.comparison and intent.comparison is not None:
        return (
            f"The user wants to compare {intent.comparison.from_} with {intent.comparison.to}. "
            "Provide side-by-side comparison of key metrics."
        )
    if intent.type == IntentType.dapp:
        return (
            f"The user is asking about DApp protocol(s): {', '.join(intent.dapps or [])}. "
            "Provide TVL (Total Value Locked), user count, supported chains, position types, "
            "and yield opportunities. Include risk factors and usage metrics."
        )
    if intent.type == IntentType.alert:
        what = intent.alert_type.value if intent.alert_type else "general"
        return (
            f"The user wants to set up an alert for {what} changes. "
            "Help them configure appropriate thresholds."
        )
    return (
        "Provide helpful insights about crypto tokens, DeFi protocols, and wallets "
        "based on the user query."
    )
