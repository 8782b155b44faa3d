"""
Background jobs that run after a response has been sent.

Jobs are named ("generate-advice", "update-statistics") and dispatched to a
registered handler. Each job is isolated: a failing handler is retried up to
`max_attempts` times and then logged, never re-raised, so one job cannot
affect another or the request that enqueued it.

In the API the runner is FastAPI's BackgroundTasks; without a runner, jobs
wait in `pending` until drain() is called (scripts, tests).
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

logger = logging.getLogger("testcraft.background")

GENERATE_ADVICE = "generate-advice"
UPDATE_STATISTICS = "update-statistics"

JobHandler = Callable[..., Any]


@dataclass
class Job:
    name: str
    payload: dict
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    attempts: int = 0
    succeeded: bool = False
    last_error: Optional[str] = None


class BackgroundJobQueue:
    def __init__(self, max_attempts: int = 2):
        self.max_attempts = max(1, max_attempts)
        self._handlers: dict[str, JobHandler] = {}
        self.pending: list[Job] = []

    def register(self, name: str, handler: JobHandler) -> None:
        self._handlers[name] = handler

    def enqueue(self, name: str, payload: dict, runner=None) -> Job:
        """Queue a job. `runner` is anything with add_task(fn, *args), e.g. BackgroundTasks."""
        job = Job(name=name, payload=dict(payload))
        if runner is not None:
            runner.add_task(self.run, job)
        else:
            self.pending.append(job)
        logger.debug("[background.enqueue] %s id=%s", name, job.id)
        return job

    def run(self, job: Job) -> bool:
        handler = self._handlers.get(job.name)
        if handler is None:
            logger.error("[background.run] no handler registered for %s id=%s", job.name, job.id)
            job.last_error = "no_handler"
            return False

        while job.attempts < self.max_attempts:
            job.attempts += 1
            try:
                handler(**job.payload)
                job.succeeded = True
                logger.info(
                    "[background.run] %s id=%s done (attempt %d)", job.name, job.id, job.attempts
                )
                return True
            except Exception as e:
                job.last_error = str(e)
                logger.error(
                    "[background.run] %s id=%s attempt %d/%d: %s",
                    job.name, job.id, job.attempts, self.max_attempts, e,
                    exc_info=True,
                )
        return False

    def drain(self) -> list[Job]:
        jobs, self.pending = self.pending, []
        for job in jobs:
            self.run(job)
        return jobs
