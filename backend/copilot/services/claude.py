from __future__ import annotations
import json
import logging
from typing import AsyncIterator, Optional

from anthropic import AsyncAnthropic

from copilot.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)

INSIGHTS_MAX_TOKENS = 250

CHAT_SYSTEM_PROMPT = """You are an expert multi-chain crypto analyst AI assistant. You help users understand on-chain data, token health across 50+ blockchains, wallet activity, and provide insights for better investment decisions.

You have access to real-time data from multiple sources:
- **Zerion API**: Real-time token prices, market cap, supply information across 50+ blockchains
- **CoinGecko API**: Trending tokens and global market metrics (market cap, volume, market sentiment)
- **Jupiter API**: Solana token prices, liquidity and holder counts

The data panel next to the chat displays:
- For TOKENS: Price, market cap, supply, price changes (24h, 30d, 90d, 365d), verification status, risk analysis
- For MARKETS: Global market metrics, trending tokens, market sentiment indicators

YOUR ROLE:
- Do NOT repeat or list the raw data shown in the data panel (e.g. "Current Price: $X")
- Focus on analysis: price momentum, risk given volatility and market cap, market sentiment, and what the data suggests about token health
- Reference specific metrics only when making a point (e.g. "The 365d gain of +14.30% shows strong recovery potential")
- Be concise and accurate. Explain what the data MEANS, not just what it IS."""

MARKET_SECTION = """

=== MARKET ANALYSIS REQUEST ===
User is asking about overall market trends or sentiment. Real-time trending data is displayed in the data panel. Focus on:
- What sectors or token types are gaining traction (analyze the trending tokens)
- Market momentum and investor sentiment based on trends
- Key opportunities and risks in current market conditions
- Why specific tokens are trending (fundamental or sentiment-driven)
- Strategic recommendations for different risk appetites

Do NOT repeat the data. Explain what it MEANS for investors right now."""

TOKEN_SECTION = """

=== TOKEN DATA CONTEXT ===
The following token data is available for analysis (do not repeat this data, analyze it instead):
{tokens}

Use this data to provide market analysis and investment perspective. The user can see all these metrics in the data panel, so focus on WHAT IT MEANS."""

STREAM_SYSTEM_PROMPT = """You are an expert Solana and DeFi analyst AI assistant. You help users understand on-chain data, token health, wallet activity, and provide insights for better investment decisions.

You have access to real-time data including:
- Portfolio information
- Token health metrics
- Wallet activity and smart money moves
- Market data and liquidity information

Always be concise, accurate, and provide actionable insights."""

TOKEN_SUMMARY_PROMPT = """Analyze this token data and provide a concise summary with key insights about token health, liquidity, and risks:

Token Data:
{data}

Provide a 2-3 sentence summary highlighting:
1. Overall token health
2. Key risks or opportunities
3. Liquidity situation"""

WALLET_SUMMARY_PROMPT = """Analyze this wallet activity data and provide insights about trading patterns and strategy:

Wallet Data:
{data}

Provide a 2-3 sentence summary highlighting:
1. Wallet activity patterns
2. Trading strategy insights
3. Recent moves and impact"""

PORTFOLIO_INSIGHTS_PROMPT = """Analyze this portfolio data and provide personalized investment insights:

Portfolio Data:
{data}

Provide a 3-4 sentence insight highlighting:
1. Portfolio composition and diversification
2. Key holdings performance
3. Suggested actions or rebalancing ideas"""


def _dump(data) -> str:
    return json.dumps(data, indent=2, default=str)


def build_chat_system_prompt(context: Optional[dict] = None) -> str:
    prompt = CHAT_SYSTEM_PROMPT
    if not context:
        return prompt

    intent = context.get("intent")
    if isinstance(intent, dict) and intent.get("type") == "market":
        prompt += MARKET_SECTION
        trending = context.get("trending")
        if isinstance(trending, str) and trending:
            prompt += f"\n\nTrending now:\n{trending}"
        return prompt
    if context.get("tokens"):
        return prompt + TOKEN_SECTION.format(tokens=_dump(context["tokens"]))
    return prompt + f"\n\nContext Data Available:\n{_dump(context)}"


def build_stream_system_prompt(context: Optional[dict] = None) -> str:
    if not context:
        return STREAM_SYSTEM_PROMPT
    return STREAM_SYSTEM_PROMPT + f"\n\nContext Data Available:\n{_dump(context)}"


def _extract_text(message) -> str:
    return next((block.text for block in message.content if block.type == "text"), "")


class ClaudeClient:
    """Chat answers and short AI summaries over dashboard data."""

    def __init__(self):
        self._client: Optional[AsyncAnthropic] = None

    @property
    def client(self) -> AsyncAnthropic:
        # Created lazily so importing the app never requires a key
        if self._client is None:
            self._client = AsyncAnthropic(api_key=settings.anthropic_api_key or None)
        return self._client

    async def _complete(self, prompt: str, max_tokens: int, system: Optional[str] = None) -> str:
        kwargs = {
            "model": settings.claude_model,
            "max_tokens": max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system:
            kwargs["system"] = system
        message = await self.client.messages.create(**kwargs)
        return _extract_text(message)

    async def chat(self, message: str, context: Optional[dict] = None) -> str:
        text = await self._complete(
            message,
            max_tokens=settings.claude_max_tokens,
            system=build_chat_system_prompt(context),
        )
        return text or "Unable to process message"

    async def stream_chat(self, message: str, context: Optional[dict] = None) -> AsyncIterator[str]:
        """Yield response text chunks as the model produces them."""
        async with self.client.messages.stream(
            model=settings.claude_model,
            max_tokens=settings.claude_max_tokens,
            system=build_stream_system_prompt(context),
            messages=[{"role": "user", "content": message}],
        ) as stream:
            async for text in stream.text_stream:
                yield text

    async def generate_token_summary(self, token_data: dict) -> str:
        text = await self._complete(
            TOKEN_SUMMARY_PROMPT.format(data=_dump(token_data)),
            max_tokens=settings.claude_summary_max_tokens,
        )
        return text or "Unable to generate summary"

    async def generate_wallet_summary(self, wallet_data: dict) -> str:
        text = await self._complete(
            WALLET_SUMMARY_PROMPT.format(data=_dump(wallet_data)),
            max_tokens=settings.claude_summary_max_tokens,
        )
        return text or "Unable to generate summary"

    async def generate_portfolio_insights(self, portfolio_data: dict) -> str:
        text = await self._complete(
            PORTFOLIO_INSIGHTS_PROMPT.format(data=_dump(portfolio_data)),
            max_tokens=INSIGHTS_MAX_TOKENS,
        )
        return text or "Unable to generate insights"


claude_client = ClaudeClient()
