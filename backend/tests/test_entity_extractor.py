"""Tests for regex entity extraction from chat queries."""
from copilot.services.entity_extractor import (
    detect_comparison,
    extract_dapps,
    extract_tokens,
    extract_wallets,
)

SOLANA_ADDRESS = "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM"


class TestExtractWallets:

    def test_finds_address_in_sentence(self):
        wallets = extract_wallets(f"how is {SOLANA_ADDRESS} doing lately?")
        assert wallets == [SOLANA_ADDRESS]

    def test_accepts_32_char_address(self):
        address = SOLANA_ADDRESS[:32]
        assert extract_wallets(f"check {address}") == [address]

    def test_rejects_runs_longer_than_44(self):
        too_long = SOLANA_ADDRESS + "abc"
        assert extract_wallets(too_long) == []

    def test_address_between_punctuation(self):
        assert extract_wallets(f"wallet:{SOLANA_ADDRESS}.") == [SOLANA_ADDRESS]
        assert extract_wallets(f"({SOLANA_ADDRESS})") == [SOLANA_ADDRESS]

    def test_address_glued_to_base58_text_is_one_run(self):
        # "et" + 44 chars is a 46-char run, not an address
        assert extract_wallets(f"wallet{SOLANA_ADDRESS}") == []

    def test_rejects_non_base58_characters(self):
        # 0, O, I and l are not in the base58 alphabet
        assert extract_wallets("0OIl" * 10) == []

    def test_deduplicates(self):
        assert extract_wallets(f"{SOLANA_ADDRESS} and {SOLANA_ADDRESS}") == [SOLANA_ADDRESS]

    def test_no_match_returns_empty(self):
        assert extract_wallets("") == []
        assert extract_wallets("no addresses here") == []


class TestExtractTokens:

    def test_price_question(self):
        assert extract_tokens("What's the price of SOL?") == ["SOL"]

    def test_lowercase_mention_is_uppercased(self):
        assert "BONK" in extract_tokens("show me bonk price")

    def test_symbol_before_trigger_word(self):
        assert extract_tokens("JUP token") == ["JUP"]

    def test_stopwords_are_dropped(self):
        tokens = extract_tokens("what is the price of the token")
        assert tokens == [], f"Stopwords leaked through: {tokens}"

    def test_short_query_is_taken_as_symbol(self):
        assert extract_tokens("bonk") == ["BONK"]
        assert extract_tokens("  eth ") == ["ETH"]

    def test_short_query_fallback_skips_stopwords(self):
        assert extract_tokens("the") == []

    def test_long_bare_word_is_not_a_symbol(self):
        assert extract_tokens("supercalifragilistic") == []

    def test_address_counts_as_token(self):
        assert SOLANA_ADDRESS in extract_tokens(f"price {SOLANA_ADDRESS}")

    def test_first_appearance_order(self):
        tokens = extract_tokens("buy WIF then sell BONK")
        assert tokens.index("WIF") < tokens.index("BONK")


class TestExtractDapps:

    def test_finds_protocols(self):
        assert extract_dapps("what is the tvl on Aave and Uniswap") == ["uniswap", "aave"]

    def test_multi_word_protocol(self):
        assert extract_dapps("is magic eden down?") == ["magic eden"]

    def test_word_boundaries(self):
        # "portfolio" must not match "port", "ironic" must not match "iron"
        assert extract_dapps("my portfolio is ironic") == []
        assert extract_dapps("uniswapv3 tvl") == []


class TestDetectComparison:

    def test_vs(self):
        comparison = detect_comparison("SOL vs ETH")
        assert comparison is not None
        assert (comparison.from_, comparison.to) == ("SOL", "ETH")

    def test_versus_with_dot(self):
        comparison = detect_comparison("bonk vs. wif")
        assert (comparison.from_, comparison.to) == ("bonk", "wif")

    def test_compare_and(self):
        comparison = detect_comparison("compare BONK and WIF please")
        assert (comparison.from_, comparison.to) == ("BONK", "WIF")

    def test_serializes_with_from_alias(self):
        comparison = detect_comparison("SOL versus ETH")
        assert comparison.model_dump(by_alias=True) == {"from": "SOL", "to": "ETH"}

    def test_none_when_absent(self):
        assert detect_comparison("price of SOL") is None
