from __future__ import annotations
from fastapi import APIRouter
from copilot.schemas.wallet import WalletProfileResponse, WalletStats
from copilot.services.wallet_profiler import profile_wallet, risk_color

router = APIRouter(prefix="/api/wallets", tags=["wallets"])


@router.post("/profile", response_model=WalletProfileResponse)
async def profile(stats: WalletStats):
    """Profile a wallet snapshot the caller already holds. No upstream calls."""
    wallet_profile, behavior = profile_wallet(stats)
    return WalletProfileResponse(
        profile=wallet_profile,
        behavior=behavior,
        risk_color=risk_color(wallet_profile.risk_profile),
    )
