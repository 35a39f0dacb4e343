from __future__ import annotations
import logging
from typing import Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from copilot.models.chat_message import ChatMessage, Role
from copilot.models.chat_session import ChatSession
from copilot.models.saved_insight import SavedInsight
from copilot.models.watchlist_item import WatchlistItem

logger = logging.getLogger(__name__)


# ── chat ───────────────────────────────────────────────────────────

async def save_message(
    db: AsyncSession,
    session_id: str,
    user_id: str,
    role: Role,
    content: str,
    context_data: Optional[dict] = None,
) -> ChatMessage:
    """Append one chat turn and bump the owning session's ``updated_at``."""
    message = ChatMessage(
        session_id=session_id,
        user_id=user_id,
        role=role,
        content=content,
        context_data=context_data,
    )
    db.add(message)
    await db.execute(
        update(ChatSession)
        .where(ChatSession.id == session_id, ChatSession.user_id == user_id)
        .values(updated_at=func.now())
    )
    await db.flush()
    await db.refresh(message)
    return message


async def get_history(db: AsyncSession, session_id: str, user_id: str) -> list[ChatMessage]:
    result = await db.execute(
        select(ChatMessage)
        .where(ChatMessage.session_id == session_id, ChatMessage.user_id == user_id)
        .order_by(ChatMessage.created_at.asc(), ChatMessage.id.asc())
    )
    return list(result.scalars().all())


async def get_sessions(db: AsyncSession, user_id: str) -> list[ChatSession]:
    result = await db.execute(
        select(ChatSession)
        .where(ChatSession.user_id == user_id)
        .order_by(ChatSession.updated_at.desc())
    )
    return list(result.scalars().all())


async def create_session(db: AsyncSession, user_id: str, title: str) -> ChatSession:
    session = ChatSession(user_id=user_id, title=title)
    db.add(session)
    await db.flush()
    await db.refresh(session)
    logger.info(f"Created chat session {session.id} for user {user_id}")
    return session


# ── watchlist ──────────────────────────────────────────────────────

async def get_watchlist_item(db: AsyncSession, user_id: str, token_address: str) -> Optional[WatchlistItem]:
    result = await db.execute(
        select(WatchlistItem).where(
            WatchlistItem.user_id == user_id,
            WatchlistItem.token_address == token_address,
        )
    )
    return result.scalar_one_or_none()


async def add_to_watchlist(db: AsyncSession, user_id: str, token_symbol: str, token_address: str) -> WatchlistItem:
    item = WatchlistItem(user_id=user_id, token_symbol=token_symbol, token_address=token_address)
    db.add(item)
    await db.flush()
    await db.refresh(item)
    return item


async def get_watchlist(db: AsyncSession, user_id: str) -> list[WatchlistItem]:
    result = await db.execute(
        select(WatchlistItem)
        .where(WatchlistItem.user_id == user_id)
        .order_by(WatchlistItem.added_at.desc(), WatchlistItem.id.desc())
    )
    return list(result.scalars().all())


async def remove_from_watchlist(db: AsyncSession, user_id: str, token_address: str) -> bool:
    result = await db.execute(
        delete(WatchlistItem).where(
            WatchlistItem.user_id == user_id,
            WatchlistItem.token_address == token_address,
        )
    )
    return result.rowcount > 0


# ── insights ───────────────────────────────────────────────────────

async def save_insight(
    db: AsyncSession,
    user_id: str,
    title: str,
    content: str,
    token_symbol: Optional[str] = None,
    wallet_address: Optional[str] = None,
) -> SavedInsight:
    insight = SavedInsight(
        user_id=user_id,
        title=title,
        content=content,
        token_symbol=token_symbol,
        wallet_address=wallet_address,
    )
    db.add(insight)
    await db.flush()
    await db.refresh(insight)
    return insight


async def get_insights(db: AsyncSession, user_id: str) -> list[SavedInsight]:
    result = await db.execute(
        select(SavedInsight)
        .where(SavedInsight.user_id == user_id)
        .order_by(SavedInsight.created_at.desc(), SavedInsight.id.desc())
    )
    return list(result.scalars().all())
