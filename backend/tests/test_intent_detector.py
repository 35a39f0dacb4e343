"""Tests for intent classification, fetch planning and prompt context."""
import pytest

from copilot.schemas.intent import AlertType, IntentType
from copilot.services.intent_detector import (
    FETCH_PLANNERS,
    INTENT_KEYWORDS,
    detect_intent,
    generate_intent_context,
    plan_data_fetches,
    score_keywords,
)

WALLET = "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU"


class TestScoreKeywords:

    def test_ratio_of_matched_keywords(self):
        scores = score_keywords("compare which is better")
        expected = 3 / len(INTENT_KEYWORDS[IntentType.comparison])
        assert scores[IntentType.comparison] == pytest.approx(expected)

    def test_general_has_no_keywords(self):
        assert score_keywords("anything")[IntentType.general] == 0.0


class TestDetectIntent:

    def test_price_question(self):
        intent = detect_intent("What's the price of SOL?")
        assert intent.type == IntentType.token
        assert intent.tokens == ["SOL"]
        assert intent.confidence > 0

    def test_wallet_query(self):
        intent = detect_intent(f"analyze wallet {WALLET}")
        assert intent.type == IntentType.wallet
        assert intent.wallets == [WALLET]

    def test_comparison_vs(self):
        intent = detect_intent("SOL vs ETH")
        assert intent.type == IntentType.comparison
        assert intent.comparison.from_ == "SOL"
        assert intent.comparison.to == "ETH"

    def test_comparison_overrides_higher_scores(self):
        # Token and DApp signals outweigh the comparison score here
        intent = detect_intent("compare aave and uniswap token price liquidity volume")
        assert intent.type == IntentType.comparison
        assert (intent.comparison.from_, intent.comparison.to) == ("aave", "uniswap")

    def test_market_query_drops_tokens(self):
        intent = detect_intent("overall crypto market sentiment")
        assert intent.type == IntentType.market
        assert intent.tokens is None

    def test_dapp_query(self):
        intent = detect_intent("what is the tvl on aave")
        assert intent.type == IntentType.dapp
        assert intent.dapps == ["aave"]

    def test_alert_with_type(self):
        intent = detect_intent("alert me when a whale moves")
        assert intent.type == IntentType.alert
        assert intent.alert_type == AlertType.whale

    def test_general_fallback(self):
        intent = detect_intent("hello there")
        assert intent.type == IntentType.general
        assert intent.confidence == 0.0
        assert intent.tokens is None
        assert intent.wallets is None
        assert intent.dapps is None

    def test_empty_query(self):
        intent = detect_intent("")
        assert intent.type == IntentType.general
        assert intent.raw_query == ""

    def test_confidence_is_clamped(self):
        intent = detect_intent(f"wallet address balance portfolio whale inflow outflow transaction activity {WALLET}")
        assert intent.confidence == 1.0

    def test_idempotent(self):
        query = "compare BONK and WIF price"
        assert detect_intent(query) == detect_intent(query)
        assert detect_intent(query).model_dump() == detect_intent(query).model_dump()


class TestPlanDataFetches:

    def test_every_intent_type_has_a_planner(self):
        assert set(FETCH_PLANNERS) == set(IntentType)

    def test_token_plan(self):
        fetches = plan_data_fetches(detect_intent("What's the price of SOL?"))
        assert len(fetches) == 1
        assert fetches[0].endpoint == "/api/zerion/token-search"
        assert fetches[0].params == {"query": "SOL"}

    def test_wallet_plan(self):
        fetches = plan_data_fetches(detect_intent(f"analyze wallet {WALLET}"))
        assert [(f.endpoint, f.params) for f in fetches] == [
            ("/api/zerion/wallet-analysis", {"address": WALLET}),
        ]

    def test_comparison_plan_has_both_sides(self):
        fetches = plan_data_fetches(detect_intent("SOL vs ETH"))
        assert [f.params["query"] for f in fetches] == ["SOL", "ETH"]
        assert all(f.endpoint == "/api/zerion/token-search" for f in fetches)

    def test_dapp_plan(self):
        fetches = plan_data_fetches(detect_intent("what is the tvl on aave"))
        assert [(f.endpoint, f.params) for f in fetches] == [
            ("/api/zerion/dapp-info", {"search": "aave"}),
        ]

    @pytest.mark.parametrize("query", [
        "overall crypto market sentiment",
        "alert me when a whale moves",
        "hello there",
    ])
    def test_display_only_intents_plan_nothing(self, query):
        assert plan_data_fetches(detect_intent(query)) == []


class TestGenerateIntentContext:

    def test_token_context_names_tokens(self):
        context = generate_intent_context(detect_intent("What's the price of SOL?"))
        assert "token(s): SOL" in context

    def test_comparison_context(self):
        context = generate_intent_context(detect_intent("SOL vs ETH"))
        assert "compare SOL with ETH" in context

    def test_alert_context_names_type(self):
        context = generate_intent_context(detect_intent("alert me when a whale moves"))
        assert "alert for whale changes" in context

    def test_general_context(self):
        context = generate_intent_context(detect_intent("hello there"))
        assert context.startswith("Provide helpful insights")
