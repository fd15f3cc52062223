"""Tests for the housekeeping scheduler."""

from unittest.mock import MagicMock

import pytest

from todo_backend.core import scheduler as scheduler_module


@pytest.fixture
def mock_scheduler(monkeypatch):
    mock = MagicMock()
    mock.running = False
    monkeypatch.setattr(scheduler_module, "scheduler", mock)
    return mock


def test_sweep_job_removes_expired_sessions(registry, clock, admin_identity, user_identity) -> None:
    registry.create_session(admin_identity)
    clock.advance(minutes=31)
    registry.create_session(user_identity)

    scheduler_module.sweep_expired_sessions(registry)

    assert registry.active_count() == 1


def test_sweep_job_logs_failures(caplog) -> None:
    broken = MagicMock()
    broken.sweep_expired.side_effect = RuntimeError("lock poisoned")

    scheduler_module.sweep_expired_sessions(broken)

    assert "session_sweep_failed" in caplog.text


def test_start_registers_sweep_job(mock_scheduler, registry) -> None:
    scheduler_module.start_scheduler(registry)

    mock_scheduler.add_job.assert_called_once()
    kwargs = mock_scheduler.add_job.call_args.kwargs
    assert kwargs["id"] == scheduler_module.SWEEP_JOB_ID
    assert kwargs["args"] == [registry]
    mock_scheduler.start.assert_called_once()


def test_start_skipped_when_interval_disabled(mock_scheduler, registry, monkeypatch) -> None:
    monkeypatch.setattr(scheduler_module.settings, "session_sweep_interval_minutes", 0)

    scheduler_module.start_scheduler(registry)

    mock_scheduler.add_job.assert_not_called()
    mock_scheduler.start.assert_not_called()


def test_stop_only_when_running(mock_scheduler) -> None:
    scheduler_module.stop_scheduler()
    mock_scheduler.shutdown.assert_not_called()

    mock_scheduler.running = True
    scheduler_module.stop_scheduler()
    mock_scheduler.shutdown.assert_called_once()
