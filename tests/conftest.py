# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""Pytest configuration and shared fixtures."""

import logging
from datetime import datetime
from typing import Any, Dict, List

import pytest

from jobhistory.events import JobExecutionEvent, JobListener


class FakeScheduler:
    """In-memory scheduler that only knows how to notify global listeners."""

    def __init__(self):
        self.listeners: List[JobListener] = []

    def add_global_job_listener(self, listener: JobListener) -> None:
        self.listeners.append(listener)

    def remove_global_job_listener(self, listener: JobListener) -> None:
        self.listeners.remove(listener)

    def fire(self, event: JobExecutionEvent, error=None) -> None:
        """Simulate one run: to-be-executed, then was-executed."""
        for listener in self.listeners:
            listener.job_to_be_executed(event)
        for listener in self.listeners:
            listener.job_was_executed(event, error)

    def veto(self, event: JobExecutionEvent) -> None:
        for listener in self.listeners:
            listener.job_execution_vetoed(event)


class RecordingListener(JobListener):
    """Listener that records every callback it receives."""

    def __init__(self, name: str = "recorder"):
        self._name = name
        self.calls: List[tuple] = []

    @property
    def name(self):
        return self._name

    def job_to_be_executed(self, event):
        self.calls.append(("to_be_executed", event, None))

    def job_was_executed(self, event, error=None):
        self.calls.append(("was_executed", event, error))

    def job_execution_vetoed(self, event):
        self.calls.append(("vetoed", event, None))


@pytest.fixture
def fixed_now() -> datetime:
    """Fixed 'current time' handed to plugins as their clock."""
    return datetime(2024, 11, 10, 14, 5, 9)


@pytest.fixture
def fixed_now_text() -> str:
    """fixed_now as rendered by the default templates."""
    return "14:05:09 11/10/2024"


@pytest.fixture
def recorder() -> RecordingListener:
    return RecordingListener()


@pytest.fixture
def sample_event() -> JobExecutionEvent:
    """Event matching the documented default-template examples."""
    return JobExecutionEvent(
        job_name="Job1",
        job_group="Group1",
        trigger_name="Trig1",
        trigger_group="GroupA",
        previous_fire_time=datetime(2024, 11, 10, 14, 0, 0),
        next_fire_time=datetime(2024, 11, 10, 14, 10, 0),
        refire_count=0,
    )


@pytest.fixture
def audit_logger():
    """Dedicated logger at INFO; reset afterwards."""
    logger = logging.getLogger("jobhistory.tests.audit")
    logger.setLevel(logging.INFO)
    yield logger
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def fake_scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def sample_config() -> Dict[str, Any]:
    """Sample configuration for testing."""
    return {
        "history": {
            "name": "AuditTrail",
            "logger": "jobhistory.tests.configured",
            "messages": {
                "job_to_be_fired": "START {1}.{0} at {2, date, yyyy-MM-dd HH:mm}",
                "job_success": "DONE {1}.{0}: {8}",
            },
        },
        "logging": {"level": "INFO"},
    }


@pytest.fixture
def config_file(tmp_path, sample_config):
    """Create a temporary config file."""
    config_path = tmp_path / "jobhistory.yml"
    import yaml
    with open(config_path, "w") as f:
        yaml.dump(sample_config, f)
    return config_path
