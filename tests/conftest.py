"""Pytest hooks and fixtures."""

import os
import sys
from pathlib import Path

import pytest

from advisorbridge.bridge import AdvisorBridge, ProcessSupervisor

FAKE_ADVISOR = Path(__file__).parent / "fixtures" / "fake_advisor.py"

# Short enough to keep the suite fast, long enough for a cold interpreter start.
TEST_SETTLE_DELAY = 0.05
TEST_RESPONSE_TIMEOUT = 10.0


def pytest_collection_modifyitems(config, items):
    """Mark tests that spawn the fake advisor as slow."""
    for item in items:
        if "make_supervisor" in getattr(item, "fixturenames", ()) or "make_bridge" in getattr(
            item, "fixturenames", ()
        ):
            item.add_marker(pytest.mark.slow)


@pytest.fixture
def advisor_log(tmp_path):
    """File the fake advisor appends 'recv <id>' / 'send <id>' events to."""
    return tmp_path / "advisor-events.log"


@pytest.fixture
def make_supervisor(advisor_log):
    """Factory for supervisors running tests/fixtures/fake_advisor.py; all are stopped afterwards."""
    created: list[ProcessSupervisor] = []

    def _make(mode: str = "echo", **kwargs) -> ProcessSupervisor:
        env = dict(os.environ)
        env["FAKE_ADVISOR_MODE"] = mode
        env["FAKE_ADVISOR_LOG"] = str(advisor_log)
        env["PYTHONUNBUFFERED"] = "1"
        kwargs.setdefault("settle_delay", TEST_SETTLE_DELAY)
        supervisor = ProcessSupervisor(
            sys.executable,
            args=(str(FAKE_ADVISOR), "--repl"),
            env=env,
            **kwargs,
        )
        created.append(supervisor)
        return supervisor

    yield _make
    for supervisor in created:
        supervisor.stop()


@pytest.fixture
def make_bridge(make_supervisor):
    """Factory for AdvisorBridge instances over the fake advisor."""

    def _make(mode: str = "echo", *, response_timeout: float = TEST_RESPONSE_TIMEOUT, **kwargs) -> AdvisorBridge:
        trace_methods = kwargs.pop("trace_methods", ())
        return AdvisorBridge(
            make_supervisor(mode, **kwargs),
            response_timeout=response_timeout,
            trace_methods=trace_methods,
        )

    return _make


@pytest.fixture
def read_events(advisor_log):
    def _read() -> list[str]:
        if not advisor_log.exists():
            return []
        return advisor_log.read_text(encoding="utf-8").splitlines()

    return _read
