# site_crawler/crawler/scheduler.py
"""
Bounded-concurrency, rate-limited job scheduler with retries.

Jobs are zero-argument coroutine functions. A single dispatch loop task takes
jobs from a FIFO queue while fewer than ``max_concurrent_jobs`` are running,
spacing starts at least ``1 / max_requests_per_second`` seconds apart. A job
that raises is re-queued after ``delay_fn(retry_count)`` seconds with its
retry count bumped; once the count reaches ``max_retries`` the job goes to
the dead-letter list instead of running again.

A job's ``on_done`` hook fires exactly once per submission, when the
scheduler is finished with it: after a run that did not raise, when it is
dead-lettered, or when stop() drops it (queued, waiting to retry, or failing
after the stop).
"""
from __future__ import annotations

import asyncio
import random
import time
from collections import deque
from dataclasses import dataclass
from functools import partial
from typing import Awaitable, Callable, Deque, List, Optional, Set

from site_crawler.logger import get_logger

__all__ = ("JobRecord", "JobScheduler", "default_backoff")

logger = get_logger("scheduler")

Task = Callable[[], Awaitable[object]]
DelayFn = Callable[[int], float]
DoneHook = Callable[["JobRecord"], None]


def default_backoff(retry_count: int) -> float:
    """Linear backoff with jitter: 100 ms per retry plus up to 50 ms, in seconds."""
    return 0.1 * retry_count + random.uniform(0, 0.05)


@dataclass(slots=True)
class JobRecord:
    task: Task
    retry_count: int = 0
    name: str = ""
    on_done: Optional[DoneHook] = None


class JobScheduler:
    """Runs submitted jobs on the current event loop under concurrency and rate limits."""

    def __init__(
        self,
        max_concurrent_jobs: int = 5,
        max_requests_per_second: Optional[float] = None,
        max_retries: int = 5,
        delay_fn: DelayFn = default_backoff,
    ) -> None:
        if max_concurrent_jobs < 1:
            raise ValueError("max_concurrent_jobs must be >= 1")
        if max_requests_per_second is not None and max_requests_per_second <= 0:
            raise ValueError("max_requests_per_second must be > 0")
        self.max_concurrent_jobs = max_concurrent_jobs
        self.max_retries = max_retries
        self._delay_fn = delay_fn
        self._min_interval = 1 / max_requests_per_second if max_requests_per_second else 0.0

        self._queue: Deque[JobRecord] = deque()
        self._dead: List[JobRecord] = []
        self._active = 0
        self._delayed = 0
        self._running = False
        self._last_start = float("-inf")

        self._loop_task: Optional[asyncio.Task[None]] = None
        self._job_tasks: Set[asyncio.Task[None]] = set()
        self._retry_tasks: Set[asyncio.Task[None]] = set()
        self._wakeup = asyncio.Event()
        self._settled = asyncio.Event()
        self._settled.set()

    # ------------------------------------------------------------------ API
    def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._loop_task = asyncio.get_running_loop().create_task(self._dispatch_loop())
        self._update_settled()

    def stop(self) -> None:
        was_running, self._running = self._running, False
        for task in list(self._retry_tasks):
            task.cancel()
        self._wakeup.set()
        self._settled.set()
        if not was_running:
            return
        logger.debug("Scheduler stopped: %d pending, %d active", len(self._queue), self.active_count())
        for job in self._queue:
            self._finish(job)
        if self._dead:
            logger.warning(
                "%d job(s) exhausted %d retries: %s",
                len(self._dead),
                self.max_retries,
                ", ".join(job.name or repr(job.task) for job in self._dead),
            )

    def submit(self, task: Task, name: str = "", on_done: Optional[DoneHook] = None) -> None:
        self._enqueue(JobRecord(task=task, retry_count=0, name=name, on_done=on_done))

    def pending_count(self) -> int:
        return len(self._queue)

    def active_count(self) -> int:
        return self._active

    def is_running(self) -> bool:
        return self._running

    def has_work(self) -> bool:
        """Pending, running, or waiting out a retry delay."""
        return bool(self._queue) or self._active > 0 or self._delayed > 0

    def dead_letters(self) -> List[JobRecord]:
        return list(self._dead)

    async def join(self) -> None:
        """Return once there is nothing left to do, or the scheduler was stopped."""
        await self._settled.wait()

    async def wait_closed(self) -> None:
        """Wait for the dispatch loop, already started jobs and cancelled retries to finish."""
        if self._loop_task is not None:
            await asyncio.wait({self._loop_task})
        pending = self._job_tasks | self._retry_tasks
        if pending:
            await asyncio.wait(pending)

    # ------------------------------------------------------------ internals
    def _enqueue(self, job: JobRecord) -> None:
        self._queue.append(job)
        self._wakeup.set()
        self._update_settled()

    def _finish(self, job: JobRecord) -> None:
        if job.on_done is not None:
            job.on_done(job)

    def _update_settled(self) -> None:
        if not self._running or not self.has_work():
            self._settled.set()
        else:
            self._settled.clear()

    def _can_take(self) -> bool:
        return self.active_count() < self.max_concurrent_jobs and bool(self._queue)

    async def _throttle(self) -> None:
        if self._min_interval <= 0:
            return
        wait = self._min_interval - (time.monotonic() - self._last_start)
        if wait > 0:
            await asyncio.sleep(wait)

    async def _dispatch_loop(self) -> None:
        while self._running:
            if not self._can_take():
                self._wakeup.clear()
                await self._wakeup.wait()
                continue

            await self._throttle()
            if not self._running:
                break
            job = self._queue.popleft()

            if job.retry_count >= self.max_retries:
                logger.warning("Dead-lettering %s after %d attempts", job.name or job.task, job.retry_count)
                self._dead.append(job)
                self._finish(job)
                self._update_settled()
                continue

            self._active += 1
            self._last_start = time.monotonic()
            task = asyncio.get_running_loop().create_task(self._execute(job))
            self._job_tasks.add(task)
            task.add_done_callback(self._job_tasks.discard)

            await asyncio.sleep(0)

    async def _execute(self, job: JobRecord) -> None:
        retrying = False
        try:
            await job.task()
        except Exception as exc:
            delay = self._delay_fn(job.retry_count)
            logger.debug(
                "Job %s failed (%s), retry %d/%d in %.3f s",
                job.name or job.task,
                exc,
                job.retry_count + 1,
                self.max_retries,
                delay,
            )
            retrying = self._schedule_retry(
                JobRecord(job.task, job.retry_count + 1, job.name, job.on_done), delay
            )
        finally:
            self._active -= 1
            if not retrying:
                self._finish(job)
            self._wakeup.set()
            self._update_settled()

    def _schedule_retry(self, job: JobRecord, delay: float) -> bool:
        if not self._running:
            return False
        self._delayed += 1
        task = asyncio.get_running_loop().create_task(self._requeue_later(job, delay))
        self._retry_tasks.add(task)
        task.add_done_callback(partial(self._retry_done, job))
        return True

    def _retry_done(self, job: JobRecord, task: asyncio.Task[None]) -> None:
        self._retry_tasks.discard(task)
        self._delayed -= 1
        # cancelled by stop(), possibly before the task ever ran
        if task.cancelled():
            self._finish(job)
        self._update_settled()

    async def _requeue_later(self, job: JobRecord, delay: float) -> None:
        await asyncio.sleep(delay)
        self._enqueue(job)
