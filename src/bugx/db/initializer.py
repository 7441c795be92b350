"""
Single-flight database initialization.

Concurrent callers of ``ensure_initialized`` share one attempt: the first
caller runs it and the others wait for its outcome. A failed attempt is
reported to everyone who waited on it; the next call starts a new attempt
until ``max_attempts`` is exhausted. A cancelled attempt does not count.
"""

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, Optional

from ..errors import DependencyFailure


logger = logging.getLogger(__name__)


class InitState(Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    FAILED = "failed"


class DatabaseInitializer:
    """Runs an async initialization callable at most once at a time."""

    def __init__(self, initialize: Callable[[], Awaitable[None]],
                 max_attempts: Optional[int] = None):
        self._initialize = initialize
        self.max_attempts = max_attempts
        self._state = InitState.UNINITIALIZED
        self._attempts = 0
        self._generation = 0
        self._last_error: Optional[BaseException] = None
        self._condition = asyncio.Condition()

    @property
    def state(self) -> InitState:
        return self._state

    @property
    def attempts(self) -> int:
        return self._attempts

    @property
    def last_error(self) -> Optional[BaseException]:
        return self._last_error

    async def ensure_initialized(self) -> None:
        """
        Return once initialization has succeeded.

        Raises:
            DependencyFailure: if the attempt this call ran or waited on
                failed, or no attempts are left
        """
        async with self._condition:
            while True:
                if self._state is InitState.READY:
                    return

                if self._state is InitState.INITIALIZING:
                    generation = self._generation
                    await self._condition.wait_for(lambda: self._generation != generation)
                    if self._state is InitState.FAILED:
                        raise DependencyFailure(
                            f"Database initialization failed: {self._last_error}"
                        ) from self._last_error
                    # READY returns above; UNINITIALIZED means the leader was cancelled
                    continue

                if self.max_attempts is not None and self._attempts >= self.max_attempts:
                    raise DependencyFailure(
                        f"Database initialization failed after {self._attempts} attempts: "
                        f"{self._last_error}"
                    ) from self._last_error

                self._state = InitState.INITIALIZING
                self._attempts += 1
                break

        logger.info(f"Ensuring database is initialized (attempt {self._attempts})")
        try:
            await self._initialize()
        except asyncio.CancelledError:
            logger.warning("Database initialization cancelled")
            await self._finish(InitState.UNINITIALIZED, None, cancelled=True)
            raise
        except Exception as e:
            logger.error(f"Database initialization failed: {e}")
            await self._finish(InitState.FAILED, e)
            raise DependencyFailure(f"Database initialization failed: {e}") from e

        await self._finish(InitState.READY, None)
        logger.info("Database initialization complete")

    async def _finish(self, state: InitState, error: Optional[BaseException],
                      cancelled: bool = False) -> None:
        async with self._condition:
            self._state = state
            if error is not None:
                self._last_error = error
            if cancelled:
                self._attempts -= 1
            self._generation += 1
            self._condition.notify_all()

    async def reset(self) -> None:
        """Forget a previous outcome so the next call initializes again."""
        async with self._condition:
            if self._state is InitState.INITIALIZING:
                return
            self._state = InitState.UNINITIALIZED
            self._attempts = 0
            self._last_error = None
