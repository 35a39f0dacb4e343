from __future__ import annotations
import logging
from contextlib import asynccontextmanager

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from copilot.config import get_settings
from copilot.database import init_db

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    yield


app = FastAPI(
    title="Crypto Copilot",
    description="Chat copilot and analytics panels over multi-chain wallet and token data",
    version="1.0.0",
    lifespan=lifespan,
)

_origins = [settings.frontend_url.rstrip("/"), "http://localhost:3000", "http://localhost:3001"]
if settings.extra_cors_origins:
    _origins.extend([o.strip().rstrip("/") for o in settings.extra_cors_origins.split(",") if o.strip()])
# Deduplicate
_origins = list(dict.fromkeys(_origins))

logger = logging.getLogger(__name__)
logger.info("CORS allowed origins: %s", _origins)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register route modules
from copilot.api import chat, claude, insights, intent, jupiter, market, wallets, watchlist, zerion

app.include_router(intent.router)
app.include_router(wallets.router)
app.include_router(zerion.router)
app.include_router(market.router)
app.include_router(jupiter.router)
app.include_router(claude.router)
app.include_router(chat.router)
app.include_router(watchlist.router)
app.include_router(insights.router)


@app.get("/api/health")
async def health():
    return {"status": "ok"}
