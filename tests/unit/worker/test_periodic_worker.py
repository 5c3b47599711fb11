"""Unit tests for the PeriodicWorker base

Tests cover:
- Engine options derived from configuration
- run_forever keeps looping after a failing cycle
- Shutdown disposes the engine
"""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from src.worker.base import PeriodicWorker


class StopWorker(Exception):
    pass


class CountingWorker(PeriodicWorker):
    name = "CountingWorker"

    def __init__(self, outcomes):
        super().__init__()
        self.outcomes = list(outcomes)

    async def run_once(self):
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def configure(mock_app_config, db_uri="postgresql+asyncpg://test@localhost/db"):
    mock_app_config.DB_URI = db_uri
    mock_app_config.LOCK_TIMEOUT_MS = 5000


class TestPeriodicWorkerInit:

    @patch("src.worker.base.ApplicationConfig")
    @patch("src.worker.base.create_async_engine")
    def test_postgres_lock_timeout(self, mock_create_engine, mock_app_config):
        """
        Given: A PostgreSQL URI in the configuration
        When: A worker is created
        Then: The engine gets lock_timeout through server_settings
        """
        # Arrange
        configure(mock_app_config)

        # Act
        worker = CountingWorker([])

        # Assert
        assert worker.db_uri == "postgresql+asyncpg://test@localhost/db"
        connect_args = mock_create_engine.call_args.kwargs["connect_args"]
        assert connect_args == {"server_settings": {"lock_timeout": "5000"}}

    @patch("src.worker.base.ApplicationConfig")
    @patch("src.worker.base.create_async_engine")
    def test_sqlite_busy_timeout(self, mock_create_engine, mock_app_config):
        # Arrange
        configure(mock_app_config, db_uri="sqlite+aiosqlite:///./worker.db")

        # Act
        CountingWorker([])

        # Assert
        assert mock_create_engine.call_args.kwargs["connect_args"] == {"timeout": 5.0}


@pytest.mark.asyncio
class TestPeriodicWorkerLifecycle:

    @patch("src.worker.base.ApplicationConfig")
    @patch("src.worker.base.create_async_engine")
    @patch("src.worker.base.asyncio.sleep")
    async def test_run_forever_continues_after_failure(self, mock_sleep, mock_create_engine, mock_app_config):
        """
        Given: The first cycle raises
        When: run_forever is running
        Then: The loop sleeps and runs the next cycle
        """
        # Arrange
        configure(mock_app_config)
        mock_sleep.side_effect = [None, StopWorker()]
        worker = CountingWorker([RuntimeError("db down"), "ok"])

        # Act
        with pytest.raises(StopWorker):
            await worker.run_forever(interval_seconds=60)

        # Assert
        assert worker.outcomes == []
        mock_sleep.assert_called_with(60)

    @patch("src.worker.base.ApplicationConfig")
    @patch("src.worker.base.create_async_engine")
    async def test_shutdown_disposes_engine(self, mock_create_engine, mock_app_config):
        # Arrange
        configure(mock_app_config)
        mock_engine = MagicMock()
        mock_engine.dispose = AsyncMock()
        mock_create_engine.return_value = mock_engine

        # Act
        worker = CountingWorker([])
        await worker.shutdown()

        # Assert
        mock_engine.dispose.assert_called_once()

    async def test_base_run_once_is_abstract(self):
        with patch("src.worker.base.create_async_engine"):
            worker = PeriodicWorker(db_uri="sqlite+aiosqlite:///./x.db")

        with pytest.raises(NotImplementedError):
            await worker.run_once()
