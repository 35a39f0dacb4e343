from __future__ import annotations
import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from copilot.schemas.wallet import (
    Holding,
    PreferredCategory,
    ProcessedTransaction,
    RiskMetrics,
    RiskProfile,
    TradingBehavior,
    TradingFrequency,
    WalletCategory,
    WalletProfile,
    WalletStats,
)

logger = logging.getLogger(__name__)

WHALE_MIN_VALUE = 1_000_000
EXPERTISE_MIN_SHARE_PCT = 20.0  # inclusive
EXPERTISE_MIN_HOLDINGS = 3
EXPERTISE_FALLBACK_COUNT = 3
DIVERSIFIED_LABEL = "Diversified Portfolio"
PREFERRED_CATEGORY_LIMIT = 5
CONCENTRATION_TOP_N = 3

CATEGORY_BADGES = {
    WalletCategory.whale: "🐋",
    WalletCategory.smart_trader: "🎯",
    WalletCategory.degen: "🎲",
    WalletCategory.hodler: "💎",
    WalletCategory.bot: "🤖",
    WalletCategory.casual: "👤",
}

RISK_COLORS = {
    RiskProfile.conservative: "text-green-600",
    RiskProfile.moderate: "text-yellow-600",
    RiskProfile.aggressive: "text-red-600",
}


@dataclass(frozen=True)
class ProfileRule:
    category: WalletCategory
    confidence: int
    matches: Callable[[WalletStats], bool]
    reasoning: Callable[[WalletStats], str]


# Evaluated top to bottom, first match wins. Order is load-bearing.
PROFILE_RULES: tuple[ProfileRule, ...] = (
    ProfileRule(
        category=WalletCategory.whale,
        confidence=90,
        matches=lambda s: s.portfolio_value > WHALE_MIN_VALUE,
        reasoning=lambda s: (
            f"Large portfolio value of ${s.portfolio_value / 1_000_000:.2f}M indicates whale status."
        ),
    ),
    ProfileRule(
        category=WalletCategory.bot,
        confidence=75,
        matches=lambda s: (
            s.trading_frequency == TradingFrequency.very_active
            and s.diversification_score < 30
            and s.total_transactions > 100
        ),
        reasoning=lambda s: (
            "Very high trading frequency with low diversification suggests automated trading."
        ),
    ),
    ProfileRule(
        category=WalletCategory.degen,
        confidence=70,
        matches=lambda s: (
            s.diversification_score < 40 and s.trading_frequency != TradingFrequency.passive
        ),
        reasoning=lambda s: (
            "Low diversification with active trading suggests high-risk degen behavior."
        ),
    ),
    ProfileRule(
        category=WalletCategory.hodler,
        confidence=80,
        matches=lambda s: (
            s.trading_frequency == TradingFrequency.passive and s.total_transactions < 20
        ),
        reasoning=lambda s: "Low trading frequency indicates long-term holding strategy.",
    ),
    ProfileRule(
        category=WalletCategory.smart_trader,
        confidence=75,
        matches=lambda s: s.diversification_score > 60 and s.total_transactions > 30,
        reasoning=lambda s: (
            "Good diversification with consistent trading activity suggests smart trading strategy."
        ),
    ),
)

# No rule matched. Confidence and reasoning stay empty until better values are picked.
FALLBACK_CATEGORY = WalletCategory.casual
FALLBACK_CONFIDENCE = 0
FALLBACK_REASONING = ""


def match_rule(stats: WalletStats) -> Optional[ProfileRule]:
    return next((rule for rule in PROFILE_RULES if rule.matches(stats)), None)


def determine_risk_profile(diversification_score: float, category: WalletCategory) -> RiskProfile:
    if diversification_score < 40 or category == WalletCategory.degen:
        return RiskProfile.aggressive
    if diversification_score > 70 or category == WalletCategory.hodler:
        return RiskProfile.conservative
    return RiskProfile.moderate


def categorize_wallet(stats: WalletStats) -> WalletProfile:
    """Assign one category and a risk profile. Expertise is left empty."""
    rule = match_rule(stats)
    if rule is not None:
        category, confidence, reasoning = rule.category, rule.confidence, rule.reasoning(stats)
    else:
        category, confidence, reasoning = FALLBACK_CATEGORY, FALLBACK_CONFIDENCE, FALLBACK_REASONING

    return WalletProfile(
        category=category,
        expertise=[],
        risk_profile=determine_risk_profile(stats.diversification_score, category),
        confidence=confidence,
        reasoning=reasoning,
        badge=category_badge(category),
    )


def _category_totals(holdings: Sequence[Holding]) -> tuple[dict[str, int], dict[str, float]]:
    counts: dict[str, int] = defaultdict(int)
    values: dict[str, float] = defaultdict(float)
    for holding in holdings:
        for category in holding.categories:
            counts[category] += 1
            values[category] += holding.value
    return dict(counts), dict(values)


def analyze_expertise(holdings: Sequence[Holding]) -> list[str]:
    """Categories worth >= 20% of value or held in >= 3 positions.

    Falls back to the top 3 categories by value, then to a single
    "Diversified Portfolio" label when no holding is categorized.
    """
    counts, values = _category_totals(holdings)
    total_value = sum(h.value for h in holdings)

    expertise = []
    for category, count in counts.items():
        share = values[category] * 100 / total_value if total_value > 0 else 0.0
        if share >= EXPERTISE_MIN_SHARE_PCT or count >= EXPERTISE_MIN_HOLDINGS:
            expertise.append(category)

    if not expertise and values:
        ranked = sorted(values.items(), key=lambda kv: kv[1], reverse=True)
        expertise = [category for category, _ in ranked[:EXPERTISE_FALLBACK_COUNT]]
        logger.debug("Expertise (top %d by value): %s", EXPERTISE_FALLBACK_COUNT, expertise)
        return expertise

    return expertise or [DIVERSIFIED_LABEL]


def average_trade_size(recent_activity: Sequence[ProcessedTransaction]) -> float:
    trade_values = [
        transfer.value
        for tx in recent_activity
        for transfer in tx.transfers
        if transfer.value is not None and transfer.value > 0
    ]
    return sum(trade_values) / len(trade_values) if trade_values else 0.0


def estimate_trades_per_week(recent_activity: Sequence[ProcessedTransaction], total_transactions: int) -> float:
    # The recent-activity window is treated as exactly one week.
    if total_transactions <= 0:
        return 0.0
    return float(len(recent_activity))


def analyze_trading_behavior(
    recent_activity: Sequence[ProcessedTransaction],
    top_holdings: Sequence[Holding],
    total_transactions: int,
    trading_frequency: TradingFrequency,
    diversification_score: Optional[float] = None,
) -> TradingBehavior:
    counts, values = _category_totals(top_holdings)
    total_value = sum(h.value for h in top_holdings)

    preferred = [
        PreferredCategory(
            category=category,
            percentage=values[category] * 100 / total_value if total_value > 0 else 0.0,
            trade_count=counts[category],
        )
        for category in counts
    ]
    preferred.sort(key=lambda p: p.percentage, reverse=True)

    top_value = sum(h.value for h in top_holdings[:CONCENTRATION_TOP_N])
    concentration = top_value * 100 / total_value if total_value > 0 else 0.0

    if diversification_score is not None:
        category_diversification = diversification_score
    else:
        category_diversification = float(min(len(counts) * 20, 100))

    avg_position_size = 100 / len(top_holdings) if top_holdings else 0.0

    return TradingBehavior(
        avg_trade_size=average_trade_size(recent_activity),
        trading_frequency=trading_frequency,
        trades_per_week=estimate_trades_per_week(recent_activity, total_transactions),
        preferred_categories=preferred[:PREFERRED_CATEGORY_LIMIT],
        risk_metrics=RiskMetrics(
            portfolio_concentration=concentration,
            category_diversification=category_diversification,
            avg_position_size=avg_position_size,
        ),
    )


def profile_wallet(stats: WalletStats) -> tuple[WalletProfile, TradingBehavior]:
    """Full profile (with expertise) plus trading behavior for one snapshot."""
    profile = categorize_wallet(stats)
    profile = profile.model_copy(update={"expertise": analyze_expertise(stats.top_holdings)})
    behavior = analyze_trading_behavior(
        recent_activity=stats.recent_activity,
        top_holdings=stats.top_holdings,
        total_transactions=stats.total_transactions,
        trading_frequency=stats.trading_frequency,
        diversification_score=stats.diversification_score,
    )
    return profile, behavior


def category_badge(category: WalletCategory) -> str:
    return CATEGORY_BADGES[category]


def risk_color(risk_profile: RiskProfile) -> str:
    return RISK_COLORS[risk_profile]
