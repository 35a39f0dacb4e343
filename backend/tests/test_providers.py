"""Tests for provider response parsing and client fallbacks."""
from unittest.mock import AsyncMock, patch

import pytest

from copilot.services.coingecko import (
    coingecko_client,
    format_trending_tokens,
    normalize_category,
    unique_categories,
)
from copilot.services.jupiter import to_jupiter_token
from copilot.services.zerion import normalize_chain_id, parse_dapp, parse_token, zerion_client

FUNGIBLE = {
    "id": "eth-fungible",
    "attributes": {
        "symbol": "ETH",
        "name": "Ethereum",
        "icon": {"url": "https://icons/eth.png"},
        "flags": {"verified": True},
        "market_data": {
            "price": 3200.5,
            "market_cap": 385_000_000_000,
            "circulating_supply": 120_000_000,
            "changes": {"percent_1d": -1.2, "percent_30d": 4.5},
        },
    },
}


class TestZerionParsing:

    def test_parse_token(self):
        token = parse_token(FUNGIBLE)
        assert token.fungible_id == "eth-fungible"
        assert token.price == 3200.5
        assert token.price_change_24h == -1.2
        assert token.price_change_30d == 4.5
        assert token.price_change_90d is None
        assert token.icon == "https://icons/eth.png"
        assert token.verified is True

    def test_parse_token_missing_market_data(self):
        token = parse_token({"id": "x", "attributes": {}})
        assert (token.symbol, token.name, token.price) == ("Unknown", "Unknown", 0)

    def test_parse_dapp_falls_back_to_query_name(self):
        dapp = parse_dapp({"id": "magic-eden", "attributes": {}}, fallback_name="magic eden")
        assert dapp.name == "magic eden"
        assert dapp.dapp_id == "magic-eden"

    @pytest.mark.parametrize("alias,chain_id", [
        ("eth", "ethereum"),
        ("ARB", "arbitrum"),
        ("bsc", "binance-smart-chain"),
        ("base", "base"),
    ])
    def test_normalize_chain_id(self, alias, chain_id):
        assert normalize_chain_id(alias) == chain_id


class TestZerionClient:

    @pytest.mark.asyncio
    async def test_search_token_returns_top_match_detail(self):
        responses = [
            {"data": [{"id": "eth-fungible"}, {"id": "weth-fungible"}]},
            {"data": FUNGIBLE},
        ]
        with patch.object(zerion_client, "_get", AsyncMock(side_effect=responses)) as get:
            results = await zerion_client.search_token("eth")

        assert [t.symbol for t in results] == ["ETH"]
        assert get.await_args_list[1].args[0] == "/fungibles/eth-fungible"

    @pytest.mark.asyncio
    async def test_search_token_swallows_upstream_errors(self):
        with patch.object(zerion_client, "_get", AsyncMock(side_effect=RuntimeError("429"))):
            assert await zerion_client.search_token("eth") == []

    @pytest.mark.asyncio
    async def test_search_dapp_falls_back_to_list(self):
        responses = [
            RuntimeError("404"),
            {"data": [
                {"id": "uniswap-v3", "attributes": {"name": "Uniswap V3"}},
                {"id": "aave-v3", "attributes": {"name": "Aave V3"}},
            ]},
        ]
        with patch.object(zerion_client, "_get", AsyncMock(side_effect=responses)):
            results = await zerion_client.search_dapp("uniswap")
        assert [d.dapp_id for d in results] == ["uniswap-v3"]


class TestCoinGecko:

    def test_normalize_category(self):
        assert normalize_category("Memecoin") == "Meme"
        assert normalize_category(" layer 2 ") == "L2"
        assert normalize_category("Real World Assets") == "Real World Assets"

    def test_unique_categories_keeps_first_order(self):
        assert unique_categories(["meme", "DeFi", "memecoin", "defi"]) == ["Meme", "DeFi"]

    def test_format_trending_tokens(self):
        coins = [
            {"item": {"name": "Pepe", "symbol": "pepe", "data": {"price": 0.00001}}},
            {"item": {"name": "Nameless", "symbol": "nl"}},
        ]
        lines = format_trending_tokens(coins).splitlines()
        assert lines[0].startswith("1. Pepe (PEPE) - Price: $")
        assert lines[1] == "2. Nameless (NL) - Price: N/A"
        assert format_trending_tokens([]) == "No trending tokens found."

    @pytest.mark.asyncio
    async def test_batch_categories_keyed_by_lowercase_address(self):
        tokens = [(f"0xABC{i}", "ethereum") for i in range(7)]
        lookup = AsyncMock(return_value=["DeFi"])
        with patch.object(coingecko_client, "get_token_categories", lookup), \
             patch("copilot.services.coingecko.asyncio.sleep", AsyncMock()) as sleep:
            results = await coingecko_client.batch_get_token_categories(tokens)

        assert set(results) == {f"0xabc{i}" for i in range(7)}
        assert lookup.await_count == 7
        # Two batches of at most five, one pause between them
        sleep.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_token_categories_empty_on_failure(self):
        with patch.object(coingecko_client, "_get", AsyncMock(side_effect=RuntimeError("down"))):
            assert await coingecko_client.get_token_categories("0xabc", "ethereum") == []


class TestJupiter:

    def test_to_jupiter_token(self):
        token = to_jupiter_token({
            "id": "JUPyiwrYJFskUPiHa7hkeR8VUtAeFoSYbKedZNsDvCN",
            "symbol": "JUP",
            "name": "Jupiter",
            "decimals": 6,
            "usdPrice": 0.85,
            "mcap": 1_150_000_000,
            "holderCount": 800_000,
            "stats24h": {"priceChange": 2.5, "buyVolume": 1000.0, "sellVolume": 500.0},
        })
        assert token.price == 0.85
        assert token.market_cap == 1_150_000_000
        assert token.holder_count == 800_000
        assert token.price_change_24h == 2.5
        assert token.volume_24h == 1500.0

    def test_to_jupiter_token_without_stats(self):
        token = to_jupiter_token({"id": "x", "symbol": "X", "name": "X"})
        assert token.volume_24h is None
        assert token.price is None
