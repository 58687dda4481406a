"""
jobhistory - audit logging for scheduled job executions.

Copyright 2025 Ben Mensi
Licensed under the Apache License, Version 2.0
"""

from jobhistory.events import JobExecutionError, JobExecutionEvent, JobListener
from jobhistory.message_format import MessageTemplate, TemplateError, render
from jobhistory.plugin import LoggingJobHistoryPlugin

__version__ = "0.1.0"

__all__ = [
    "JobExecutionError",
    "JobExecutionEvent",
    "JobListener",
    "LoggingJobHistoryPlugin",
    "MessageTemplate",
    "TemplateError",
    "render",
]
