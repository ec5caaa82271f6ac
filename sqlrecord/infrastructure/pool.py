"""
Connection pool management for sqlrecord.

A single aiomysql pool serves the whole process. It is created on first use
and torn down explicitly with `close()`, or by leaving an
``async with PoolManager():`` block. Executors receive the manager rather
than building pools of their own.
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional

import aiomysql

from sqlrecord.config import Settings, get_settings
from sqlrecord.utils.logging import get_logger

log = get_logger(__name__)


class PoolManager:
    """
    Owns one lazily created aiomysql pool.

    Parameters
    ----------
    settings : Settings, optional
        Connection values; defaults to `get_settings()`.
    max_size : int, optional
        Maximum connections; defaults to `settings.pool_max_size`.
    """

    def __init__(self, settings: Optional[Settings] = None, max_size: Optional[int] = None) -> None:
        self._settings = settings
        self._max_size = max_size
        self._pool: Optional[aiomysql.Pool] = None
        self._lock = asyncio.Lock()

    @property
    def settings(self) -> Settings:
        return self._settings or get_settings()

    @property
    def is_open(self) -> bool:
        return self._pool is not None

    async def get_pool(self) -> aiomysql.Pool:
        """
        Get or create the pool.

        Returns
        -------
        aiomysql.Pool
            Autocommit pool whose connections hand out dict rows.
        """
        async with self._lock:
            if self._pool is None:
                settings = self.settings
                max_size = self._max_size or settings.pool_max_size
                log.debug(
                    "Opening MySQL pool %s@%s:%s/%s (maxsize=%s)",
                    settings.db_user,
                    settings.db_host,
                    settings.db_port,
                    settings.db_name,
                    max_size,
                )
                self._pool = await aiomysql.create_pool(
                    host=settings.db_host,
                    port=settings.db_port,
                    user=settings.db_user,
                    password=settings.db_password,
                    db=settings.db_name,
                    minsize=1,
                    maxsize=max_size,
                    autocommit=True,
                    cursorclass=aiomysql.DictCursor,
                )
            return self._pool

    async def close(self) -> None:
        """
        Close the pool and wait for its connections to be released.
        """
        async with self._lock:
            if self._pool is None:
                return
            pool, self._pool = self._pool, None
            pool.close()
            await pool.wait_closed()
            log.debug("Closed MySQL pool")

    async def __aenter__(self) -> "PoolManager":
        await self.get_pool()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()


__all__ = ["PoolManager"]
