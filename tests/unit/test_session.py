"""Unit tests for engine construction"""

from pot_ledger.infrastructure.database.session import build_engine


def test_sqlite_engine_for_local_runs():
    engine = build_engine("sqlite:///./session-check.db")

    assert engine.dialect.name == "sqlite"
    engine.dispose()


def test_server_engine_uses_configured_pool():
    engine = build_engine("postgresql+psycopg2://user:pw@localhost:5432/pots")

    assert engine.pool.size() == 5
    assert engine.pool._max_overflow == 5
    assert engine.pool._recycle == 1800
    engine.dispose()
