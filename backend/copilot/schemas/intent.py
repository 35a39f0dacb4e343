from __future__ import annotations
import enum
from typing import Dict, List, Optional
from pydantic import BaseModel, Field


class IntentType(str, enum.Enum):
    token = "token"
    wallet = "wallet"
    market = "market"
    comparison = "comparison"
    alert = "alert"
    dapp = "dapp"
    general = "general"


class AlertType(str, enum.Enum):
    price = "price"
    volume = "volume"
    whale = "whale"
    risk = "risk"


class Comparison(BaseModel):
    from_: str = Field(..., alias="from")
    to: str

    model_config = {"populate_by_name": True, "frozen": True}


class DetectedIntent(BaseModel):
    type: IntentType
    confidence: float = Field(..., ge=0, le=1)
    tokens: Optional[List[str]] = None
    wallets: Optional[List[str]] = None
    dapps: Optional[List[str]] = None
    comparison: Optional[Comparison] = None
    alert_type: Optional[AlertType] = None
    raw_query: str

    model_config = {"frozen": True}


class FetchDescriptor(BaseModel):
    endpoint: str
    params: Dict[str, str]


class IntentRequest(BaseModel):
    query: str = Field(..., max_length=2000)


class IntentResponse(BaseModel):
    intent: DetectedIntent
    fetches: List[FetchDescriptor]
    context: str
