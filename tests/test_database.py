"""Tests for engine configuration."""

from cardtracker.config import Settings
from cardtracker.db.database import engine_options


class TestEngineOptions:
    def test_sqlite_gets_busy_timeout_and_no_pool_sizing(self) -> None:
        options = engine_options(
            Settings(database_url="sqlite+aiosqlite:///./cards.db", db_busy_timeout_seconds=2.5)
        )

        assert options["connect_args"] == {"timeout": 2.5}
        assert "pool_size" not in options
        assert options["pool_pre_ping"] is True

    def test_postgres_pool_from_settings(self) -> None:
        options = engine_options(
            Settings(
                database_url="postgresql+asyncpg://cards:secret@db/cards",
                db_pool_size=12,
                db_max_overflow=3,
                db_pool_recycle_seconds=600,
            )
        )

        assert options["pool_size"] == 12
        assert options["max_overflow"] == 3
        assert options["pool_recycle"] == 600
        assert "connect_args" not in options

    def test_debug_echoes_sql(self) -> None:
        assert engine_options(Settings(debug=True))["echo"] is True
