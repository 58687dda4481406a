# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
Job lifecycle event model for jobhistory.

Defines the per-callback event value, the listener and plugin contracts a
scheduler calls into, and the registration protocol a scheduler exposes.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Protocol


class JobExecutionError(Exception):
    """Raised by a job to report a failed execution."""

    def __init__(self, message: str, refire_immediately: bool = False):
        super().__init__(message)
        self.refire_immediately = refire_immediately


class SchedulerConfigError(Exception):
    """Raised when a plugin is initialized twice or reconfigured after start."""

    pass


@dataclass(frozen=True)
class JobExecutionEvent:
    """Snapshot of one job firing, created fresh for every callback."""

    job_name: str
    job_group: str
    trigger_name: str
    trigger_group: str
    previous_fire_time: Optional[datetime] = None
    next_fire_time: Optional[datetime] = None
    refire_count: int = 0
    result: Any = None

    def __post_init__(self):
        if self.refire_count < 0:
            raise ValueError(f"refire_count must be >= 0, got {self.refire_count}")


class JobListener(ABC):
    """Receives job lifecycle callbacks from a scheduler."""

    @property
    @abstractmethod
    def name(self) -> Optional[str]:
        ...

    @abstractmethod
    def job_to_be_executed(self, event: JobExecutionEvent) -> None:
        """Called before the job body runs."""

    @abstractmethod
    def job_was_executed(
        self, event: JobExecutionEvent, error: Optional[BaseException] = None
    ) -> None:
        """Called after the job body ran; error is set when it failed."""

    @abstractmethod
    def job_execution_vetoed(self, event: JobExecutionEvent) -> None:
        """Called when a firing was cancelled before the job ran."""


class Scheduler(Protocol):
    """The registration surface a scheduler offers to job listeners."""

    def add_global_job_listener(self, listener: JobListener) -> None:
        ...

    def remove_global_job_listener(self, listener: JobListener) -> None:
        ...


class SchedulerPlugin(ABC):
    """Lifecycle contract for components plugged into a scheduler."""

    @abstractmethod
    def initialize(self, name: str, scheduler: Scheduler) -> None:
        ...

    @abstractmethod
    def start(self) -> None:
        ...

    @abstractmethod
    def shutdown(self) -> None:
        ...
