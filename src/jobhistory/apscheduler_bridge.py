# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
APScheduler adapter for jobhistory.

Turns an APScheduler 3.x scheduler into a jobhistory Scheduler: job
listeners registered here receive to-be-executed, was-executed and vetoed
callbacks for the scheduler's jobs.

APScheduler only reports a submission after the job has been handed to a
worker, often after it has already finished. The bridge therefore installs
its own thread pool executor, which announces each run from the worker
thread before the job's callable starts. The rest comes from job events:
- EVENT_JOB_EXECUTED / EVENT_JOB_ERROR       -> job_was_executed
- EVENT_JOB_MISSED / EVENT_JOB_MAX_INSTANCES -> job_execution_vetoed

Only jobs that run on the bridge's executor are announced.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional

from apscheduler.events import (
    EVENT_JOB_ERROR,
    EVENT_JOB_EXECUTED,
    EVENT_JOB_MAX_INSTANCES,
    EVENT_JOB_MISSED,
    JobEvent,
)
from apscheduler.executors.base import run_job
from apscheduler.executors.pool import ThreadPoolExecutor
from apscheduler.job import Job
from apscheduler.schedulers.base import BaseScheduler

from jobhistory.events import JobExecutionEvent, JobListener

logger = logging.getLogger(__name__)

JOB_EVENT_MASK = (
    EVENT_JOB_EXECUTED
    | EVENT_JOB_ERROR
    | EVENT_JOB_MISSED
    | EVENT_JOB_MAX_INSTANCES
)

# Trigger name used when the job has already left its job store
UNKNOWN_TRIGGER = "UNKNOWN"

DEFAULT_EXECUTOR = "default"


class AnnouncingThreadPoolExecutor(ThreadPoolExecutor):
    """Thread pool executor that announces each run before the job body runs."""

    def __init__(self, bridge: "ApschedulerBridge", max_workers: int = 10, pool_kwargs=None):
        super().__init__(max_workers, pool_kwargs)
        self.bridge = bridge

    def _do_submit_job(self, job: Job, run_times: List[datetime]) -> None:
        def callback(f):
            exc = f.exception()
            if exc:
                self._run_job_error(job.id, exc, exc.__traceback__)
            else:
                self._run_job_success(job.id, f.result())

        f = self._pool.submit(self.run, job, run_times)
        f.add_done_callback(callback)

    def run(self, job: Job, run_times: List[datetime]) -> list:
        """Worker body: announce the run, then hand over to APScheduler's run_job."""
        run_time = _runnable_time(job, run_times)
        if run_time is not None:
            self.bridge.announce(job, run_time)
        return run_job(job, job._jobstore_alias, run_times, self._logger.name)


class ApschedulerBridge:
    """Registers jobhistory listeners on an APScheduler scheduler.

    Args:
        scheduler: Scheduler that is not yet running and has no executor
            under the executor alias
        executor: Alias the announcing executor is installed under
        max_workers: Thread pool size of the announcing executor
    """

    def __init__(
        self,
        scheduler: BaseScheduler,
        executor: str = DEFAULT_EXECUTOR,
        max_workers: int = 10,
    ):
        self.scheduler = scheduler
        self._callbacks: Dict[int, Callable[[JobEvent], None]] = {}
        self._listeners: Dict[int, JobListener] = {}
        scheduler.add_executor(AnnouncingThreadPoolExecutor(self, max_workers), executor)

    def add_global_job_listener(self, listener: JobListener) -> None:
        """Subscribe listener to every job event of the scheduler."""
        key = id(listener)
        if key in self._callbacks:
            logger.debug(f"Listener '{listener.name}' already registered")
            return

        def callback(event: JobEvent) -> None:
            self.dispatch(listener, event)

        self._callbacks[key] = callback
        self._listeners[key] = listener
        self.scheduler.add_listener(callback, JOB_EVENT_MASK)
        logger.debug(f"Added global job listener '{listener.name}'")

    def remove_global_job_listener(self, listener: JobListener) -> None:
        callback = self._callbacks.pop(id(listener), None)
        if callback is None:
            return
        self._listeners.pop(id(listener), None)
        self.scheduler.remove_listener(callback)
        logger.debug(f"Removed global job listener '{listener.name}'")

    def announce(self, job: Job, run_time: datetime) -> None:
        """Call job_to_be_executed on every listener for a run about to start.

        Runs on the executor's worker thread. Listener failures are logged
        and never stop the job.
        """
        try:
            job_event = JobExecutionEvent(
                job_name=job.id,
                job_group=job._jobstore_alias,
                trigger_name=str(job.trigger),
                trigger_group=job._jobstore_alias,
                previous_fire_time=run_time,
                next_fire_time=_next_fire_time(job, run_time),
                refire_count=0,
            )
        except Exception:
            logger.exception(f"Could not describe run of job {job.id}")
            return

        for listener in list(self._listeners.values()):
            try:
                listener.job_to_be_executed(job_event)
            except Exception:
                logger.exception(
                    f"Job listener '{listener.name}' failed announcing job {job.id}"
                )

    def dispatch(self, listener: JobListener, event: JobEvent) -> None:
        """Translate one APScheduler job event and hand it to listener.

        Listener failures are logged here so they never reach APScheduler's
        event loop.
        """
        try:
            job_event = self.translate(event)
            if event.code == EVENT_JOB_EXECUTED:
                listener.job_was_executed(job_event, None)
            elif event.code == EVENT_JOB_ERROR:
                listener.job_was_executed(job_event, event.exception)
            elif event.code in (EVENT_JOB_MISSED, EVENT_JOB_MAX_INSTANCES):
                listener.job_execution_vetoed(job_event)
        except Exception:
            logger.exception(f"Job listener '{listener.name}' failed on event {event.code}")

    def translate(self, event: JobEvent) -> JobExecutionEvent:
        """Build a JobExecutionEvent from an APScheduler job event."""
        job = self.scheduler.get_job(event.job_id, event.jobstore)

        if job is not None:
            trigger_name = str(job.trigger)
            next_fire_time = job.next_run_time
        else:
            trigger_name = UNKNOWN_TRIGGER
            next_fire_time = None

        return JobExecutionEvent(
            job_name=event.job_id,
            job_group=event.jobstore,
            trigger_name=trigger_name,
            trigger_group=event.jobstore,
            previous_fire_time=_scheduled_time(event),
            next_fire_time=next_fire_time,
            refire_count=0,
            result=getattr(event, "retval", None),
        )


def _runnable_time(job: Job, run_times: List[datetime]) -> Optional[datetime]:
    """Latest run time still inside the misfire grace time, as run_job judges it."""
    if job.misfire_grace_time is None:
        return run_times[-1] if run_times else None
    now = datetime.now(timezone.utc)
    grace = timedelta(seconds=job.misfire_grace_time)
    runnable = [run_time for run_time in run_times if now - run_time <= grace]
    return runnable[-1] if runnable else None


def _next_fire_time(job: Job, run_time: datetime) -> Optional[datetime]:
    # The scheduler moves next_run_time concurrently; ask the trigger instead
    return job.trigger.get_next_fire_time(run_time, datetime.now(run_time.tzinfo))


def _scheduled_time(event: JobEvent) -> Optional[datetime]:
    # Execution events carry one run time, submission events the coalesced list
    run_time = getattr(event, "scheduled_run_time", None)
    if run_time is not None:
        return run_time
    run_times = getattr(event, "scheduled_run_times", None)
    if run_times:
        return max(run_times)
    return None
