"""Shared plumbing for the periodic background workers

Each worker owns its engine and session factory, implements run_once()
and summarize(), and inherits the loop and shutdown.
"""

import asyncio
import logging
from typing import Any, Optional
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.services.engine import build_connect_args, apply_sqlite_locking

logger = logging.getLogger(__name__)


class PeriodicWorker:
    """Base class: engine setup, run_forever loop, shutdown"""

    name = "worker"

    def __init__(self, db_uri: Optional[str] = None):
        self.db_uri = db_uri or ApplicationConfig.DB_URI

        self.engine = create_async_engine(
            self.db_uri,
            echo=False,
            future=True,
            connect_args=build_connect_args(self.db_uri, ApplicationConfig.LOCK_TIMEOUT_MS),
        )
        apply_sqlite_locking(self.engine)
        self.async_session_factory = sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
        )

    async def run_once(self) -> Any:
        raise NotImplementedError

    def summarize(self, result: Any) -> str:
        return str(result)

    async def run_forever(self, interval_seconds: int):
        """
        Run cycles until cancelled

        A failing cycle is logged and the next one still runs after the
        interval.
        """
        logger.info(f"Starting {self.name} with {interval_seconds}s interval")

        while True:
            try:
                result = await self.run_once()
                logger.info(f"{self.name} cycle complete. {self.summarize(result)}")
            except Exception as e:
                logger.error(f"{self.name} cycle failed: {e}")

            await asyncio.sleep(interval_seconds)

    async def shutdown(self):
        await self.engine.dispose()
        logger.info(f"{self.name} shutdown complete")


def configure_logging():
    logging.basicConfig(
        level=getattr(logging, str(ApplicationConfig.LOG_LEVEL).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
