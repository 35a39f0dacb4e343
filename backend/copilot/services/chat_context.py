from __future__ import annotations
import logging
import re
from typing import Optional

from copilot.services.coingecko import coingecko_client, format_trending_tokens
from copilot.services.jupiter import jupiter_client

logger = logging.getLogger(__name__)

CHAT_ADDRESS_PATTERN = re.compile(r"[1-9A-HJ-NP-Za-km-z]{32,44}")
CHAT_SYMBOL_PATTERN = re.compile(r"\b([A-Z]{2,10})\b")
CHAT_MENTION_PATTERN = re.compile(r"\b([a-z]{2,10})\s+(?:token|coin|price|chart|data|address)\b", re.I)
CHAT_STOPWORDS = frozenset({"USD", "THE", "AND", "FOR", "NOT", "BUT", "ARE", "YOU", "ALL", "CAN", "API"})
DEFAULT_TOKEN = "SOL"


def extract_chat_token_candidates(message: str) -> list[str]:
    """Symbols and addresses worth a Jupiter lookup, in first-seen order."""
    candidates: dict[str, None] = {}

    for address in CHAT_ADDRESS_PATTERN.findall(message):
        candidates[address] = None

    for symbol in CHAT_SYMBOL_PATTERN.findall(message):
        if symbol not in CHAT_STOPWORDS:
            candidates[symbol] = None

    for mention in CHAT_MENTION_PATTERN.findall(message):
        symbol = mention.upper()
        if symbol not in CHAT_STOPWORDS:
            candidates[symbol] = None

    lowered = message.lower()
    if not candidates and ("price" in lowered or "token" in lowered):
        candidates[DEFAULT_TOKEN] = None

    return list(candidates)


async def enrich_context_with_token_data(message: str, context: Optional[dict] = None) -> dict:
    """Copy of ``context`` with Jupiter token data under ``tokens`` when any was found."""
    enriched = dict(context or {})
    candidates = extract_chat_token_candidates(message)
    if not candidates:
        return enriched

    logger.info(f"Chat context: looking up {candidates}")
    try:
        tokens = await jupiter_client.get_multiple_tokens_with_prices(candidates)
    except Exception as e:
        logger.warning(f"Chat context enrichment failed: {e}")
        return enriched

    if tokens:
        enriched["tokens"] = [t.model_dump() for t in tokens]
    else:
        logger.info("Chat context: no token data found on Jupiter")
    return enriched


async def enrich_context_with_market_data(context: Optional[dict] = None) -> dict:
    """For market questions, attach a formatted trending list under ``trending``."""
    enriched = dict(context or {})
    intent = enriched.get("intent")
    if not isinstance(intent, dict) or intent.get("type") != "market" or enriched.get("trending"):
        return enriched

    coins = await coingecko_client.get_trending_tokens()
    if coins:
        enriched["trending"] = format_trending_tokens(coins)
    return enriched
