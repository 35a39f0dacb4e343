from __future__ import annotations
import enum
from typing import List, Optional
from pydantic import BaseModel, Field


class WalletCategory(str, enum.Enum):
    whale = "Whale"
    smart_trader = "Smart Trader"
    degen = "Degen"
    hodler = "HODLer"
    bot = "Bot"
    casual = "Casual"


class RiskProfile(str, enum.Enum):
    conservative = "Conservative"
    moderate = "Moderate"
    aggressive = "Aggressive"


class TradingFrequency(str, enum.Enum):
    very_active = "Very Active"
    active = "Active"
    moderate = "Moderate"
    passive = "Passive"
    unknown = "Unknown"


class Holding(BaseModel):
    symbol: str
    name: str = "Unknown"
    value: float = Field(0.0, ge=0, allow_inf_nan=False)
    percentage: float = Field(0.0, ge=0, allow_inf_nan=False)
    quantity: str = "0"
    icon: Optional[str] = None
    chain: str = "unknown"
    chain_name: str = "Unknown"
    categories: List[str] = []


class Transfer(BaseModel):
    symbol: str = "Unknown"
    name: str = "Unknown"
    direction: str = "unknown"
    quantity: str = "0"
    quantity_float: float = 0.0
    value: Optional[float] = None
    price: Optional[float] = None
    sender: Optional[str] = None
    recipient: Optional[str] = None
    icon: Optional[str] = None
    verified: bool = False


class Fee(BaseModel):
    symbol: str = "Unknown"
    amount: str = "0"
    amount_float: float = 0.0
    value: Optional[float] = None


class ProcessedTransaction(BaseModel):
    type: str = "unknown"
    timestamp: Optional[str] = None
    hash: Optional[str] = None
    chain: str = "unknown"
    chain_name: str = "Unknown"
    status: str = "unknown"
    transfers: List[Transfer] = []
    fee: Optional[Fee] = None
    sent_from: Optional[str] = None
    sent_to: Optional[str] = None
    block: Optional[int] = None


class WalletStats(BaseModel):
    """Snapshot of aggregate wallet statistics fed to the profiler."""

    portfolio_value: float = Field(..., ge=0, allow_inf_nan=False)
    total_transactions: int = Field(..., ge=0)
    trading_frequency: TradingFrequency = TradingFrequency.unknown
    diversification_score: float = Field(..., ge=0, le=100, allow_inf_nan=False)
    top_holdings: List[Holding] = []
    recent_activity: List[ProcessedTransaction] = []


class WalletProfile(BaseModel):
    category: WalletCategory
    expertise: List[str] = []
    risk_profile: RiskProfile
    confidence: int = Field(..., ge=0, le=100)
    reasoning: str
    badge: str = ""


class PreferredCategory(BaseModel):
    category: str
    percentage: float
    trade_count: int


class RiskMetrics(BaseModel):
    portfolio_concentration: float
    category_diversification: float
    avg_position_size: float


class TradingBehavior(BaseModel):
    avg_trade_size: float
    trading_frequency: TradingFrequency
    trades_per_week: float
    preferred_categories: List[PreferredCategory]
    risk_metrics: RiskMetrics


class WalletProfileResponse(BaseModel):
    profile: WalletProfile
    behavior: TradingBehavior
    risk_color: str


class Performance(BaseModel):
    portfolio_value: float
    realized_pnl: float
    unrealized_pnl: float
    total_pnl: float
    pnl_percentage: float
    total_fees: float
    return_30d: float
    return_7d: float


class Diversification(BaseModel):
    top3_concentration: float
    diversification_score: float


class PortfolioSummary(BaseModel):
    total_value: float
    total_holdings: int
    top_holdings: List[Holding]
    diversification: Diversification


class TradingMetrics(BaseModel):
    total_transactions: int
    recent_activity: List[ProcessedTransaction]
    trading_frequency: TradingFrequency
    last_activity: Optional[str] = None


class WalletAnalysis(BaseModel):
    profile: WalletProfile
    behavior: TradingBehavior
    performance: Performance
    portfolio: PortfolioSummary
    trading: TradingMetrics


class WalletAnalysisResponse(BaseModel):
    success: bool = True
    address: str
    timestamp: str
    data: WalletAnalysis
