"""
beacon_os/engine/queue.py

Background job queue - stub backend.

Only the submission contract is defined: submit a job, get an identifier
back. Execution guarantees (retry, backoff, dead-letter) belong to whatever
real backend is plugged in later; in stub mode jobs are recorded and logged.
"""
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional
import logging
import uuid

logger = logging.getLogger(__name__)


@dataclass
class QueuedJob:
    """A submitted job"""
    id: str
    queue: str
    name: str
    data: Any
    priority: int = 0
    run_at: Optional[datetime] = None
    submitted_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class QueueStats:
    """Queue counters"""
    waiting: int = 0
    active: int = 0
    completed: int = 0
    failed: int = 0


JobProcessor = Callable[[QueuedJob], Awaitable[None]]


class QueueManager:
    """
    Queue manager (stub mode).

    Example:
        >>> queue = QueueManager("redis://localhost:6379")
        >>> await queue.initialize()
        >>> job_id = await queue.add("messaging", "review_request", {"reservation_id": "r-1"})
    """

    def __init__(self, redis_url: Optional[str] = None):
        self._redis_url = redis_url
        self._jobs: Dict[str, List[QueuedJob]] = {}
        self._workers: Dict[str, JobProcessor] = {}
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        if self._initialized:
            return
        logger.info("Initializing queue manager (stub mode)")
        self._initialized = True

    async def shutdown(self) -> None:
        logger.info("Shutting down queue manager")
        for name in self._workers:
            logger.info(f"Closing worker: {name}")
        self._initialized = False

    async def add(
        self,
        queue_name: str,
        job_name: str,
        data: Any,
        delay: Optional[timedelta] = None,
        priority: int = 0,
    ) -> str:
        """
        Submit a job.

        Args:
            queue_name: Target queue
            job_name: Job name
            data: Job data
            delay: Optional delay before the job becomes runnable
            priority: Job priority

        Returns:
            Job identifier
        """
        job = QueuedJob(
            id=str(uuid.uuid4()),
            queue=queue_name,
            name=job_name,
            data=data,
            priority=priority,
            run_at=datetime.now(timezone.utc) + delay if delay else None,
        )
        self._jobs.setdefault(queue_name, []).append(job)
        logger.info(f"Job {job.id} ({job_name}) queued on {queue_name} (stub mode)")
        return job.id

    def register_worker(self, queue_name: str, processor: JobProcessor) -> None:
        """Register the processor for a queue"""
        self._workers[queue_name] = processor
        logger.info(f"Registered worker for queue: {queue_name}")

    def get_jobs(self, queue_name: str) -> List[QueuedJob]:
        """Jobs submitted to a queue"""
        return list(self._jobs.get(queue_name, []))

    async def get_queue_stats(self, queue_name: str) -> QueueStats:
        return QueueStats(waiting=len(self._jobs.get(queue_name, [])))

    async def clear_queue(self, queue_name: str) -> None:
        logger.info(f"Clearing queue: {queue_name}")
        self._jobs.pop(queue_name, None)
