"""Regex-based entity extraction for chat queries.

Pulls token symbols, wallet addresses, DApp protocol names and "X vs Y"
comparison pairs out of free text. Everything here is pure: no I/O, no state,
and no exceptions for string input.
"""
from __future__ import annotations
import re
from typing import Optional

from copilot.schemas.intent import Comparison

BASE58_CHARS = "1-9A-HJ-NP-Za-km-z"

# Whole base58 runs only, so a longer blob is not split into fake addresses
ADDRESS_PATTERN = re.compile(
    rf"(?<![{BASE58_CHARS}])[{BASE58_CHARS}]{{32,44}}(?![{BASE58_CHARS}])"
)

TOKEN_CONTEXT_PATTERNS = (
    re.compile(r"(?:price|chart|buy|sell|swap|trade|cost|current|show)\s+(?:of\s+)?([A-Z]{2,10})\b", re.I),
    re.compile(r"\b([A-Z]{2,10})\s+(?:token|coin|price|chart|cost|current)", re.I),
    re.compile(r"(?:token|coin|price|current|cost)\s+([A-Z]{2,10})\b", re.I),
    re.compile(
        r"(?:what(?:'s|s)?|is|the|check)\s+(?:the\s+)?(?:current\s+)?(?:price\s+(?:of\s+)?)?([A-Z]{2,10})\b",
        re.I,
    ),
)

# "bonk coin", "wif price", "cbbtc token"
LOWERCASE_MENTION_PATTERN = re.compile(
    r"\b([a-z]{2,10})(?:\s+(?:token|coin|price|chart|data|current|cost))", re.I
)

SHORT_QUERY_MAX_LENGTH = 15
SHORT_QUERY_PATTERN = re.compile(r"^[a-z]{2,10}$", re.I)

COMPARISON_VS_PATTERN = re.compile(r"(\w+)\s+(?:vs\.?|versus)\s+(\w+)", re.I)
COMPARISON_COMPARE_PATTERN = re.compile(r"compare\s+(\w+)\s+(?:and|to|with)\s+(\w+)", re.I)

TOKEN_STOPWORDS = frozenset({
    "THE", "AND", "FOR", "NOT", "BUT", "ARE", "YOU", "ALL", "CAN", "HER",
    "WAS", "ONE", "OUR", "OUT", "DAY", "GET", "HAS", "HIM", "HIS", "HOW",
    "ITS", "MAY", "NEW", "NOW", "OLD", "SEE", "TWO", "WHO", "BOY", "DID",
    "LET", "PUT", "SAY", "SHE", "TOO", "USE", "WHY", "INTO", "EXPLAIN",
    "SHOW", "TELL", "WHAT", "WHEN", "WHERE", "WHICH", "WHILE", "WITH",
    "CHECK", "WHATS", "API", "USD",
    # short function words the context patterns pick up ("price of", "is it")
    "OF", "IS", "IT", "TO", "IN", "ON", "AT", "BE", "BY", "OR", "AN", "AS",
    "DO", "IF", "MY", "ME", "WE", "US", "THIS", "THAT", "FROM", "ABOUT",
    # trigger words themselves ("token price", "current price")
    "TOKEN", "TOKENS", "COIN", "COINS", "PRICE", "CHART", "DATA", "CURRENT", "COST",
})

DAPP_PROTOCOLS = tuple(dict.fromkeys([
    # DEXs
    "uniswap", "pancakeswap", "sushiswap", "curve", "balancer", "dydx", "aave", "0x", "matcha",
    # Lending
    "compound", "maker", "flux", "iron", "solend", "port", "jet", "larix", "orca", "raydium",
    # Staking
    "lido", "rocketpool", "stakewise", "marinade", "sanctum", "socean", "jup", "jupiter", "magic eden",
    # Bridges
    "wormhole", "cctp", "stargate", "anyswap",
    # Yield
    "yearn", "convex", "aura", "gains", "gmd",
    # Other protocols
    "opensea", "blur", "reservoir", "blur protocol", "gmx", "perpetual protocol", "kwenta",
    "instadapp", "morpho", "euler", "venus", "alpaca", "beefy", "autofarm",
]))

_DAPP_PATTERNS = tuple(
    (name, re.compile(rf"(?<!\w){re.escape(name)}(?!\w)")) for name in DAPP_PROTOCOLS
)


def _dedupe(items: list[str]) -> list[str]:
    return list(dict.fromkeys(items))


def extract_wallets(query: str) -> list[str]:
    """Base58 runs of 32-44 characters. No checksum validation."""
    return _dedupe(ADDRESS_PATTERN.findall(query))


def extract_tokens(query: str) -> list[str]:
    """Token candidates: addresses, symbols next to trigger words, short bare queries."""
    candidates: list[str] = list(ADDRESS_PATTERN.findall(query))

    for pattern in TOKEN_CONTEXT_PATTERNS:
        for match in pattern.finditer(query):
            candidates.append(match.group(1).upper())

    for match in LOWERCASE_MENTION_PATTERN.finditer(query):
        candidates.append(match.group(1).upper())

    tokens = [t for t in candidates if t.upper() not in TOKEN_STOPWORDS]

    # "eth", "bonk": a bare short query is taken as the symbol itself
    trimmed = query.strip()
    if (
        not tokens
        and len(trimmed) <= SHORT_QUERY_MAX_LENGTH
        and SHORT_QUERY_PATTERN.match(trimmed)
        and trimmed.upper() not in TOKEN_STOPWORDS
    ):
        tokens.append(trimmed.upper())

    return _dedupe(tokens)


def extract_dapps(query: str) -> list[str]:
    lowered = query.lower()
    return [name for name, pattern in _DAPP_PATTERNS if pattern.search(lowered)]


def detect_comparison(query: str) -> Optional[Comparison]:
    match = COMPARISON_VS_PATTERN.search(query) or COMPARISON_COMPARE_PATTERN.search(query)
    if not match:
        return None
    return Comparison(from_=match.group(1), to=match.group(2))
