"""Job history plugin: writes one audit log line per job lifecycle event.

Rules enforced here:
- Level gate first: nothing is assembled or rendered when the target level is off
- Never raise into the scheduler's dispatch path from a callback
- A defective template is reported once per event kind at ERROR, then at DEBUG
- Templates are frozen once start() has been called

Copyright 2025 Ben Mensi
Licensed under the Apache License, Version 2.0
"""

import logging
import threading
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Set

from jobhistory.date_utils import ENGLISH, DateSymbols
from jobhistory.events import (
    JobExecutionEvent,
    JobListener,
    Scheduler,
    SchedulerConfigError,
    SchedulerPlugin,
)
from jobhistory.message_format import MessageTemplate, TemplateError, render

logger = logging.getLogger(__name__)

TO_BE_FIRED = "job_to_be_fired"
SUCCESS = "job_success"
FAILED = "job_failed"
VETOED = "job_was_vetoed"

EVENT_KINDS = (TO_BE_FIRED, SUCCESS, FAILED, VETOED)

DEFAULT_MESSAGES = {
    TO_BE_FIRED: "Job {1}.{0} fired (by trigger {4}.{3}) at: {2, date, HH:mm:ss MM/dd/yyyy}",
    SUCCESS: (
        "Job {1}.{0} execution complete at {2, date, HH:mm:ss MM/dd/yyyy} and reports: {8}"
    ),
    FAILED: "Job {1}.{0} execution failed at {2, date, HH:mm:ss MM/dd/yyyy} and reports: {8}",
    VETOED: (
        "Job {1}.{0} was vetoed.  It was to be fired (by trigger {4}.{3}) "
        "at: {2, date, HH:mm:ss MM/dd/yyyy}"
    ),
}

# Number of positional arguments each event kind supplies to its template
ARGUMENT_COUNTS = {TO_BE_FIRED: 8, SUCCESS: 9, FAILED: 9, VETOED: 8}

# Stands in for a job that finished without setting a result
NULL_RESULT = "NULL"


def job_arguments(event: JobExecutionEvent, now: datetime) -> List[Any]:
    """Build the 8 positional arguments shared by every event kind."""
    return [
        event.job_name,
        event.job_group,
        now,
        event.trigger_name,
        event.trigger_group,
        event.previous_fire_time,
        event.next_fire_time,
        event.refire_count,
    ]


def _template_property(kind: str, doc: str) -> property:
    def getter(self) -> str:
        return self._templates[kind].source

    def setter(self, value: str) -> None:
        self._set_template(kind, value)

    return property(getter, setter, doc=doc)


class LoggingJobHistoryPlugin(SchedulerPlugin, JobListener):
    """
    Logs the history of job executions and vetoes.

    Messages are rendered from four configurable templates. Each template
    receives these positional arguments:

        {0} job name            {5} previous fire time (NONE if unset)
        {1} job group           {6} next fire time (NONE if unset)
        {2} current time        {7} re-fire count
        {3} trigger name        {8} result text / error message
        {4} trigger group           (success and failure templates only)
    """

    job_to_be_fired_message = _template_property(
        TO_BE_FIRED, "Template logged at INFO before a job runs."
    )
    job_success_message = _template_property(
        SUCCESS, "Template logged at INFO after a job completes."
    )
    job_failed_message = _template_property(
        FAILED, "Template logged at WARNING after a job fails."
    )
    job_was_vetoed_message = _template_property(
        VETOED, "Template logged at INFO when a firing is vetoed."
    )

    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        clock: Optional[Callable[[], datetime]] = None,
        date_symbols: Optional[DateSymbols] = None,
    ):
        """
        Initialize the plugin with default templates.

        Args:
            logger: Logger records are written to (default: this module's logger)
            clock: Returns the current time for {2} (default: datetime.now)
            date_symbols: Month/day names for date placeholders (default: English)
        """
        self.logger = logger or logging.getLogger(__name__)
        self.clock = clock or datetime.now
        self.date_symbols = date_symbols or ENGLISH
        self._name: Optional[str] = None
        self._started = False
        self._reported: Set[str] = set()
        self._reported_lock = threading.Lock()
        self._templates: Dict[str, MessageTemplate] = {
            kind: MessageTemplate.parse(text, self.date_symbols)
            for kind, text in DEFAULT_MESSAGES.items()
        }

    @property
    def name(self) -> Optional[str]:
        return self._name

    def _set_template(self, kind: str, text: str) -> None:
        if self._started:
            raise SchedulerConfigError(
                f"Cannot change the {kind} template after the plugin has started"
            )
        self._templates[kind] = MessageTemplate.parse(text, self.date_symbols)

    def initialize(self, name: str, scheduler: Scheduler) -> None:
        """Register as a global job listener on scheduler under name.

        Registration errors propagate to the caller unchanged.
        """
        if self._name is not None:
            raise SchedulerConfigError(f"Plugin already initialized as '{self._name}'")
        self._name = name
        try:
            scheduler.add_global_job_listener(self)
        except Exception:
            self._name = None
            raise
        logger.debug(f"Registered job history listener '{name}'")

    def start(self) -> None:
        self._started = True
        logger.debug(f"Job history listener '{self._name}' started")

    def shutdown(self) -> None:
        logger.debug(f"Job history listener '{self._name}' shut down")

    def job_to_be_executed(self, event: JobExecutionEvent) -> None:
        if not self.logger.isEnabledFor(logging.INFO):
            return
        self._emit(TO_BE_FIRED, logging.INFO, event)

    def job_was_executed(
        self, event: JobExecutionEvent, error: Optional[BaseException] = None
    ) -> None:
        if error is not None:
            if not self.logger.isEnabledFor(logging.WARNING):
                return
            self._emit(FAILED, logging.WARNING, event, error=error)
        else:
            if not self.logger.isEnabledFor(logging.INFO):
                return
            self._emit(SUCCESS, logging.INFO, event)

    def job_execution_vetoed(self, event: JobExecutionEvent) -> None:
        if not self.logger.isEnabledFor(logging.INFO):
            return
        self._emit(VETOED, logging.INFO, event)

    def _emit(
        self,
        kind: str,
        level: int,
        event: JobExecutionEvent,
        error: Optional[BaseException] = None,
    ) -> None:
        try:
            args = job_arguments(event, self.clock())
            if kind == SUCCESS:
                args.append(_result_text(event.result))
            elif kind == FAILED:
                args.append(str(error))
            message = render(self._templates[kind], args)
        except TemplateError as e:
            self._report_defect(kind, e)
            return
        except Exception:
            self.logger.exception(
                f"Could not build {kind} record for job {event.job_group}.{event.job_name}"
            )
            return

        self.logger.log(level, message, exc_info=error)

    def _report_defect(self, kind: str, error: TemplateError) -> None:
        with self._reported_lock:
            first = kind not in self._reported
            self._reported.add(kind)

        if first:
            self.logger.error(
                f"Job history template '{kind}' could not be rendered: {error}",
                exc_info=error,
            )
        else:
            self.logger.debug(f"Job history template '{kind}' still failing: {error}")


def _result_text(result: Any) -> str:
    if result is None:
        return NULL_RESULT
    return str(result)
