from __future__ import annotations
from typing import List, Optional
from pydantic import BaseModel


class TokenData(BaseModel):
    fungible_id: str
    symbol: str
    name: str
    price: float
    price_change_24h: Optional[float] = None
    price_change_30d: Optional[float] = None
    price_change_90d: Optional[float] = None
    price_change_365d: Optional[float] = None
    market_cap: Optional[float] = None
    circulating_supply: Optional[float] = None
    total_supply: Optional[float] = None
    icon: Optional[str] = None
    verified: Optional[bool] = None


class ChartPoint(BaseModel):
    timestamp: int
    value: float


class TokenChart(BaseModel):
    period: str
    points: List[ChartPoint]


class Chain(BaseModel):
    id: str
    name: str
    icon: Optional[str] = None


class DAppData(BaseModel):
    dapp_id: str
    name: str
    description: Optional[str] = None
    logo: Optional[str] = None
    website: Optional[str] = None


class JupiterToken(BaseModel):
    id: str
    symbol: str
    name: str
    decimals: Optional[int] = None
    icon: Optional[str] = None
    price: Optional[float] = None
    market_cap: Optional[float] = None
    liquidity: Optional[float] = None
    holder_count: Optional[int] = None
    organic_score: Optional[float] = None
    price_change_24h: Optional[float] = None
    volume_24h: Optional[float] = None


class TrendingToken(BaseModel):
    rank: int
    name: str
    symbol: str
    price: Optional[str] = None
    market_cap_rank: Optional[int] = None
    icon: Optional[str] = None


class MarketMetrics(BaseModel):
    active_cryptos: Optional[int] = None
    total_market_cap: Optional[float] = None
    total_24h_volume: Optional[float] = None
    market_cap_change_24h: Optional[float] = None


class TokenSearchResponse(BaseModel):
    success: bool = True
    data: List[TokenData]
    query: str
    chain: Optional[str] = None
    timestamp: str


class DAppSearchResponse(BaseModel):
    success: bool = True
    data: List[DAppData]
    timestamp: str


class DAppInfoResponse(BaseModel):
    success: bool = True
    data: DAppData
    timestamp: str


class JupiterTokenResponse(BaseModel):
    success: bool = True
    data: JupiterToken


class MarketTrendingResponse(BaseModel):
    success: bool = True
    trending: List[TrendingToken]
    market_data: MarketMetrics
    timestamp: str
