"""Tests for database URL handling."""
from copilot.database import async_database_url


class TestAsyncDatabaseUrl:

    def test_postgres_urls_get_asyncpg(self):
        assert async_database_url("postgresql://u:p@db:5432/copilot") == "postgresql+asyncpg://u:p@db:5432/copilot"
        assert async_database_url("postgres://u:p@db/copilot") == "postgresql+asyncpg://u:p@db/copilot"

    def test_plain_sqlite_gets_aiosqlite(self):
        assert async_database_url("sqlite:///./copilot.db") == "sqlite+aiosqlite:///./copilot.db"

    def test_async_urls_unchanged(self):
        for url in ("sqlite+aiosqlite:///./copilot.db", "postgresql+asyncpg://u:p@db/copilot"):
            assert async_database_url(url) == url, url
