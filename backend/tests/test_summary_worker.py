from __future__ import annotations

from datetime import date

from apscheduler.schedulers.background import BackgroundScheduler

from app.worker import scheduler_main


class _FakeSession:
    def __init__(self):
        self.closed = False

    def close(self) -> None:
        self.closed = True


def test_register_jobs_adds_daily_summary_job() -> None:
    scheduler = BackgroundScheduler(timezone="Asia/Seoul")

    scheduler_main.register_jobs(scheduler)

    job = scheduler.get_job(scheduler_main.SUMMARY_JOB_ID)
    assert job is not None
    assert job.func is scheduler_main.run_summary_for_yesterday


def test_summary_runs_for_yesterday_and_closes_session(monkeypatch) -> None:
    session = _FakeSession()
    seen = []
    monkeypatch.setattr(scheduler_main, "SessionLocal", lambda: session)
    monkeypatch.setattr(scheduler_main, "run_daily_summary_job", lambda db, day: seen.append((db, day)))

    scheduler_main.run_summary_for_yesterday()

    assert seen and seen[0][0] is session
    assert isinstance(seen[0][1], date)
    assert seen[0][1] <= date.today()
    assert session.closed is True
