"""
Token usage recorder.

Successful token validations bump ``use_count`` and ``last_used_at`` through
a bounded in-process queue. Callers never wait on the write: when the queue
is full the update is dropped and logged, and a failing write is retried a
few times by the worker before it gives up.
"""

import asyncio
import contextlib
import logging

from sqlalchemy import update

from sharehub import database
from sharehub.config import settings
from sharehub.models.access_token import AccessToken
from sharehub.utils.timeutils import utcnow

logger = logging.getLogger(__name__)


class UsageRecorder:
    def __init__(self, maxsize: int = 1000, max_retries: int = 3, retry_delay: float = 0.5):
        self.maxsize = maxsize
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self._queue: asyncio.Queue[tuple[int, object]] = asyncio.Queue(maxsize=maxsize)
        self._worker: asyncio.Task | None = None

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def record_use(self, token_id: int) -> bool:
        """Queue a usage update. Returns False when the update was dropped."""
        try:
            self._queue.put_nowait((token_id, utcnow()))
        except asyncio.QueueFull:
            logger.warning("Usage queue full, dropping usage update for token id=%d", token_id)
            return False
        return True

    async def _write(self, token_id: int, used_at) -> None:
        async with database.AsyncSessionLocal() as db:
            await db.execute(
                update(AccessToken)
                .where(AccessToken.id == token_id)
                .values(use_count=AccessToken.use_count + 1, last_used_at=used_at)
            )
            await db.commit()

    async def _write_with_retry(self, token_id: int, used_at) -> bool:
        for attempt in range(1, self.max_retries + 1):
            try:
                await self._write(token_id, used_at)
                return True
            except Exception as e:
                logger.warning(
                    "Usage update failed for token id=%d (attempt %d/%d): %s",
                    token_id,
                    attempt,
                    self.max_retries,
                    e,
                )
                if attempt < self.max_retries:
                    await asyncio.sleep(self.retry_delay * attempt)
        logger.error("Giving up on usage update for token id=%d", token_id)
        return False

    async def process_pending(self) -> int:
        """Drain the queue in the current task. Returns the number of updates applied."""
        applied = 0
        while True:
            try:
                token_id, used_at = self._queue.get_nowait()
            except asyncio.QueueEmpty:
                return applied
            try:
                if await self._write_with_retry(token_id, used_at):
                    applied += 1
            finally:
                self._queue.task_done()

    async def _run(self) -> None:
        while True:
            token_id, used_at = await self._queue.get()
            try:
                await self._write_with_retry(token_id, used_at)
            finally:
                self._queue.task_done()

    def start(self) -> None:
        if self._worker is not None and not self._worker.done():
            return
        # A queue is tied to the loop that first waits on it, so move anything
        # queued so far onto a fresh one owned by the running loop.
        old_queue = self._queue
        self._queue = asyncio.Queue(maxsize=self.maxsize)
        while not old_queue.empty():
            self._queue.put_nowait(old_queue.get_nowait())
        self._worker = asyncio.create_task(self._run(), name="token-usage-recorder")
        logger.info("Usage recorder started (queue size=%d)", self.maxsize)

    async def stop(self) -> None:
        if self._worker is None:
            return
        self._worker.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._worker
        self._worker = None
        await self.process_pending()
        logger.info("Usage recorder stopped")


usage_recorder = UsageRecorder(maxsize=settings.usage_queue_size, max_retries=settings.usage_max_retries)
