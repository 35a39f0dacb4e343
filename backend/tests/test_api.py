"""HTTP API tests. Upstream providers are mocked; the database is a scratch SQLite file."""
from unittest.mock import AsyncMock, patch

from copilot.schemas.token import DAppData, MarketMetrics
from copilot.services.claude import claude_client
from copilot.services.coingecko import coingecko_client
from copilot.services.jupiter import jupiter_client
from copilot.services.wallet_analytics import calculate_wallet_metrics
from copilot.services.zerion import zerion_client

HODLER_STATS = {
    "portfolio_value": 50_000,
    "total_transactions": 5,
    "trading_frequency": "Passive",
    "diversification_score": 80,
}


def test_health(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


class TestIntentRoute:

    def test_token_query(self, client):
        resp = client.post("/api/intent", json={"query": "What's the price of SOL?"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["intent"]["type"] == "token"
        assert body["intent"]["tokens"] == ["SOL"]
        assert body["fetches"] == [{"endpoint": "/api/zerion/token-search", "params": {"query": "SOL"}}]
        assert "SOL" in body["context"]

    def test_comparison_uses_from_key(self, client):
        body = client.post("/api/intent", json={"query": "SOL vs ETH"}).json()
        assert body["intent"]["comparison"] == {"from": "SOL", "to": "ETH"}

    def test_blank_query(self, client):
        resp = client.post("/api/intent", json={"query": "   "})
        assert resp.status_code == 400


class TestWalletProfileRoute:

    def test_hodler(self, client):
        resp = client.post("/api/wallets/profile", json=HODLER_STATS)
        assert resp.status_code == 200
        body = resp.json()
        assert body["profile"]["category"] == "HODLer"
        assert body["profile"]["risk_profile"] == "Conservative"
        assert body["profile"]["confidence"] == 80
        assert body["profile"]["badge"] == "💎"
        assert body["risk_color"] == "text-green-600"
        assert body["behavior"]["trading_frequency"] == "Passive"

    def test_rejects_negative_value(self, client):
        resp = client.post("/api/wallets/profile", json={**HODLER_STATS, "portfolio_value": -10})
        assert resp.status_code == 422


class TestZerionRoutes:

    def test_wallet_analysis_requires_address(self, client):
        assert client.get("/api/zerion/wallet-analysis").status_code == 400

    def test_wallet_analysis(self, client):
        analysis = calculate_wallet_metrics(None, None, None, None, None)
        with patch("copilot.api.zerion.analyze_wallet", AsyncMock(return_value=analysis)):
            resp = client.get("/api/zerion/wallet-analysis", params={"address": "0xabc"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["address"] == "0xabc"
        assert body["data"]["portfolio"]["total_value"] == 0

    def test_portfolio_upstream_failure(self, client):
        with patch.object(zerion_client, "get_portfolio", AsyncMock(side_effect=RuntimeError("500"))):
            resp = client.get("/api/zerion/portfolio", params={"address": "0xabc"})
        assert resp.status_code == 502

    def test_wallet_flows_inflows_only(self, client):
        with patch.object(zerion_client, "get_wallet_inflows", AsyncMock(return_value={"data": []})), \
             patch.object(zerion_client, "get_wallet_outflows", AsyncMock()) as outflows:
            resp = client.get("/api/zerion/wallet-flows", params={"address": "0xabc", "type": "inflows"})
        assert resp.status_code == 200
        assert resp.json() == {"inflows": {"data": []}}
        outflows.assert_not_awaited()

    def test_token_search_requires_query(self, client):
        assert client.get("/api/zerion/token-search", params={"query": " "}).status_code == 400

    def test_token_search(self, client):
        with patch.object(zerion_client, "search_token", AsyncMock(return_value=[])) as search:
            resp = client.get("/api/zerion/token-search", params={"query": "SOL", "chain": "solana"})
        assert resp.status_code == 200
        assert resp.json()["data"] == []
        search.assert_awaited_once_with("SOL", "solana")

    def test_dapp_info_requires_a_parameter(self, client):
        assert client.get("/api/zerion/dapp-info").status_code == 400

    def test_dapp_info_not_found(self, client):
        with patch.object(zerion_client, "get_dapp_info", AsyncMock(return_value=None)):
            resp = client.get("/api/zerion/dapp-info", params={"dappId": "nope"})
        assert resp.status_code == 404

    def test_dapp_search(self, client):
        dapps = [DAppData(dapp_id="aave-v3", name="Aave V3")]
        with patch.object(zerion_client, "search_dapp", AsyncMock(return_value=dapps)):
            resp = client.get("/api/zerion/dapp-info", params={"search": "aave"})
        assert resp.status_code == 200
        assert resp.json()["data"][0]["dapp_id"] == "aave-v3"

    def test_token_info_not_found(self, client):
        with patch.object(zerion_client, "get_token_info", AsyncMock(return_value=None)):
            resp = client.get("/api/zerion/token-info", params={"fungibleId": "missing"})
        assert resp.status_code == 404


class TestMarketRoute:

    def test_trending(self, client):
        coins = [{"item": {"name": "Bonk", "symbol": "bonk", "market_cap_rank": 60, "small": "https://img", "data": {"price": 0.00002}}}]
        market = MarketMetrics(active_cryptos=15000, total_market_cap=2.5e12)
        with patch.object(coingecko_client, "get_trending_tokens", AsyncMock(return_value=coins)), \
             patch.object(coingecko_client, "get_global_market_data", AsyncMock(return_value=market)):
            resp = client.get("/api/market/trending")
        assert resp.status_code == 200
        body = resp.json()
        assert body["trending"][0]["rank"] == 1
        assert body["trending"][0]["symbol"] == "BONK"
        assert body["trending"][0]["icon"] == "https://img"
        assert body["market_data"]["active_cryptos"] == 15000

    def test_trending_degrades(self, client):
        with patch.object(coingecko_client, "get_trending_tokens", AsyncMock(return_value=[])), \
             patch.object(coingecko_client, "get_global_market_data", AsyncMock(return_value=None)):
            resp = client.get("/api/market/trending")
        assert resp.status_code == 200
        assert resp.json()["trending"] == []


class TestJupiterRoute:

    def test_missing_token(self, client):
        with patch.object(jupiter_client, "get_token_with_price", AsyncMock(return_value=None)):
            resp = client.get("/api/jupiter/token", params={"symbol": "NOPE"})
        assert resp.status_code == 404


class TestChatRoutes:

    def test_sessions_require_user(self, client):
        assert client.get("/api/chat/sessions").status_code == 400

    def test_create_and_list_sessions(self, client):
        resp = client.post("/api/chat/sessions", json={"userId": "sessions-user", "title": "SOL research"})
        assert resp.status_code == 201
        session_id = resp.json()["session"]["id"]

        sessions = client.get("/api/chat/sessions", params={"userId": "sessions-user"}).json()["sessions"]
        assert [s["id"] for s in sessions] == [session_id]
        assert client.get("/api/chat/sessions", params={"userId": "someone-else"}).json()["sessions"] == []

    def test_chat_persists_both_turns(self, client):
        session_id = client.post(
            "/api/chat/sessions", json={"userId": "chat-user", "title": "Chat"}
        ).json()["session"]["id"]

        with patch.object(jupiter_client, "get_multiple_tokens_with_prices", AsyncMock(return_value=[])), \
             patch.object(claude_client, "chat", AsyncMock(return_value="SOL looks healthy.")) as chat:
            resp = client.post("/api/claude/chat", json={
                "message": "What's the price of SOL?",
                "sessionId": session_id,
                "userId": "chat-user",
            })

        assert resp.status_code == 200
        assert resp.json() == {"message": "SOL looks healthy.", "success": True}
        chat.assert_awaited_once()

        history = client.get(
            "/api/chat/history", params={"sessionId": session_id, "userId": "chat-user"}
        ).json()["history"]
        assert [(m["role"], m["content"]) for m in history] == [
            ("user", "What's the price of SOL?"),
            ("assistant", "SOL looks healthy."),
        ]

    def test_chat_upstream_failure(self, client):
        with patch.object(jupiter_client, "get_multiple_tokens_with_prices", AsyncMock(return_value=[])), \
             patch.object(claude_client, "chat", AsyncMock(side_effect=RuntimeError("overloaded"))):
            resp = client.post("/api/claude/chat", json={
                "message": "hello",
                "sessionId": "default",
                "userId": "failing-user",
            })
        assert resp.status_code == 502

    def test_chat_requires_fields(self, client):
        resp = client.post("/api/claude/chat", json={"message": "hi", "sessionId": "", "userId": "u"})
        assert resp.status_code == 422

    def test_chat_body_uses_camel_case(self, client):
        resp = client.post("/api/claude/chat", json={"message": "hi", "session_id": "s", "user_id": "u"})
        assert resp.status_code == 422

    def test_stream_persists_full_reply(self, client):
        async def fake_stream(message, context=None):
            for chunk in ("Hello", " world"):
                yield chunk

        with patch.object(claude_client, "stream_chat", fake_stream):
            resp = client.post("/api/claude/stream", json={
                "message": "hi",
                "sessionId": "stream-session",
                "userId": "stream-user",
            })

        assert resp.status_code == 200
        assert "data: Hello" in resp.text
        assert "event: done" in resp.text

        history = client.get(
            "/api/chat/history", params={"sessionId": "stream-session", "userId": "stream-user"}
        ).json()["history"]
        assert [m["content"] for m in history] == ["hi", "Hello world"]

    def test_history_requires_params(self, client):
        assert client.get("/api/chat/history", params={"sessionId": "x"}).status_code == 400

    def test_summary(self, client):
        with patch.object(claude_client, "generate_wallet_summary", AsyncMock(return_value="Active trader.")):
            resp = client.post("/api/claude/summary", json={"kind": "wallet", "data": {"value": 1}})
        assert resp.status_code == 200
        assert resp.json()["summary"] == "Active trader."

    def test_summary_rejects_unknown_kind(self, client):
        resp = client.post("/api/claude/summary", json={"kind": "nft", "data": {}})
        assert resp.status_code == 422


class TestWatchlistRoutes:

    def test_add_list_remove(self, client):
        item = {"userId": "watch-user", "tokenSymbol": "BONK", "tokenAddress": "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263"}
        resp = client.post("/api/watchlist", json=item)
        assert resp.status_code == 201
        assert resp.json()["token_symbol"] == "BONK"

        assert client.post("/api/watchlist", json=item).status_code == 409

        listed = client.get("/api/watchlist", params={"userId": "watch-user"}).json()
        assert [i["token_address"] for i in listed] == [item["tokenAddress"]]

        path = f"/api/watchlist/{item['tokenAddress']}"
        assert client.delete(path, params={"userId": "watch-user"}).status_code == 204
        assert client.delete(path, params={"userId": "watch-user"}).status_code == 404
        assert client.get("/api/watchlist", params={"userId": "watch-user"}).json() == []

    def test_list_requires_user(self, client):
        assert client.get("/api/watchlist").status_code == 400


class TestInsightRoutes:

    def test_save_and_list(self, client):
        resp = client.post("/api/insights", json={
            "userId": "insight-user",
            "title": "JUP accumulation",
            "content": "Smart wallets kept adding JUP this week.",
            "tokenSymbol": "JUP",
        })
        assert resp.status_code == 201
        assert resp.json()["wallet_address"] is None

        insights = client.get("/api/insights", params={"userId": "insight-user"}).json()
        assert [i["title"] for i in insights] == ["JUP accumulation"]
