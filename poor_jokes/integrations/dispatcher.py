"""
Fan-out of moderation events to every configured notification channel.

Moderation calls only enqueue a job; a background worker delivers it. Each channel runs
under its own timeout and its failures are logged and dropped, so one broken channel
never affects the moderation result or the other channels.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from poor_jokes.integrations.base import Notifier
from poor_jokes.models.dtos import SubmissionDTO

logger = logging.getLogger(__name__)

SUBMISSION_CREATED = "submission_created"
APPROVED = "approved"
REJECTED = "rejected"


@dataclass(frozen=True)
class NotificationJob:
    event: str
    submission: SubmissionDTO
    reason: Optional[str] = None


class NotificationDispatcher:
    """
    Queue-backed notification fan-out.

    Args:
        notifiers: Channels to deliver to. Unconfigured ones are skipped at delivery time.
        timeout_seconds: Per-channel delivery timeout.
        queue_size: Maximum number of undelivered jobs; further jobs are dropped.
    """

    def __init__(
        self,
        notifiers: Iterable[Notifier],
        timeout_seconds: float = 10.0,
        queue_size: int = 100,
    ):
        self.notifiers: List[Notifier] = list(notifiers)
        self.timeout_seconds = timeout_seconds
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=queue_size)
        self._worker: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    @property
    def pending_jobs(self) -> int:
        return self._queue.qsize()

    def start(self) -> None:
        if self.is_running:
            return
        self._worker = asyncio.create_task(self._run(), name="notification-dispatcher")
        configured = [n.name for n in self.notifiers if n.is_configured]
        logger.info(f"Notification dispatcher started (channels: {', '.join(configured) or 'none'})")

    async def stop(self) -> None:
        """Deliver what is queued, then stop the worker."""
        await self.drain()
        if self._worker is not None:
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass
            self._worker = None
        logger.info("Notification dispatcher stopped")

    async def drain(self) -> None:
        """Wait until every queued job has been delivered."""
        if self.is_running:
            await self._queue.join()
            return
        while not self._queue.empty():
            job = self._queue.get_nowait()
            try:
                await self.dispatch(job)
            finally:
                self._queue.task_done()

    def enqueue(self, job: NotificationJob) -> bool:
        try:
            self._queue.put_nowait(job)
        except asyncio.QueueFull:
            logger.warning(
                f"Notification queue full, dropping '{job.event}' notification for submission {job.submission.id}"
            )
            return False
        return True

    def notify_submission_created(self, submission: SubmissionDTO) -> bool:
        return self.enqueue(NotificationJob(SUBMISSION_CREATED, submission))

    def notify_approved(self, submission: SubmissionDTO) -> bool:
        return self.enqueue(NotificationJob(APPROVED, submission))

    def notify_rejected(self, submission: SubmissionDTO, reason: Optional[str] = None) -> bool:
        return self.enqueue(NotificationJob(REJECTED, submission, reason))

    async def dispatch(self, job: NotificationJob) -> None:
        """Deliver one job to every configured channel concurrently."""
        channels = [n for n in self.notifiers if n.is_configured]
        for notifier in self.notifiers:
            if not notifier.is_configured:
                logger.debug(f"Notifier '{notifier.name}' not configured, skipping {job.event}")
        if channels:
            await asyncio.gather(*(self._deliver(notifier, job) for notifier in channels))

    async def _deliver(self, notifier: Notifier, job: NotificationJob) -> None:
        if job.event == SUBMISSION_CREATED:
            call = notifier.notify_submission_created(job.submission)
        elif job.event == APPROVED:
            call = notifier.notify_approved(job.submission)
        elif job.event == REJECTED:
            call = notifier.notify_rejected(job.submission, job.reason)
        else:
            logger.error(f"Unknown notification event '{job.event}'")
            return

        try:
            await asyncio.wait_for(call, timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            logger.warning(
                f"Notifier '{notifier.name}' timed out after {self.timeout_seconds}s "
                f"({job.event}, submission {job.submission.id})"
            )
        except Exception as e:  # pylint: disable=broad-except
            logger.warning(
                f"Notifier '{notifier.name}' failed ({job.event}, submission {job.submission.id}): {e}",
                exc_info=True,
            )

    async def _run(self) -> None:
        while True:
            job = await self._queue.get()
            try:
                await self.dispatch(job)
            finally:
                self._queue.task_done()

    async def close(self) -> None:
        """Stop the worker and close every channel's network resources."""
        await self.stop()
        for notifier in self.notifiers:
            try:
                await notifier.close()
            except Exception as e:  # pylint: disable=broad-except
                logger.warning(f"Failed to close notifier '{notifier.name}': {e}")
