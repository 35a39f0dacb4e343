from copilot.models.chat_session import ChatSession
from copilot.models.chat_message import ChatMessage
from copilot.models.watchlist_item import WatchlistItem
from copilot.models.saved_insight import SavedInsight

__all__ = [
    "ChatSession",
    "ChatMessage",
    "WatchlistItem",
    "SavedInsight",
]
