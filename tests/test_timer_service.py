import asyncio

import pytest

from liferpg.core.catalog import PREDEFINED_TASKS, get_task
from liferpg.core.models import DayLog, ValidationError
from liferpg.services.timer_service import (
    FocusCompletion, FocusSession, TimerPhase, TimerService, apply_completion, eligible_focus_tasks
)


def builtin(task_id):
    return get_task(PREDEFINED_TASKS, task_id)


def test_only_listed_tasks_and_campaigns_are_eligible(project):
    ids = [t.id for t in eligible_focus_tasks(list(PREDEFINED_TASKS) + [project])]
    assert ids == ["basic_charge", "const_run", "const_strength", "const_read", "proj_1"]

    with pytest.raises(ValidationError):
        FocusSession(builtin("basic_food"))


def test_standard_session_uses_task_duration():
    session = FocusSession(builtin("basic_charge"), today="2024-03-01")

    assert session.phase == TimerPhase.WORK
    assert session.format_time() == "20:00"
    assert session.tick(1199) is None
    assert session.format_time() == "00:01"

    completion = session.tick(1)
    assert completion == FocusCompletion("basic_charge", "2024-03-01", 10)
    assert session.phase == TimerPhase.COMPLETED
    assert not session.is_running
    assert session.tick(5) is None


def test_pause_stops_the_countdown():
    session = FocusSession(builtin("const_read"), today="2024-03-01")
    session.tick(60)
    session.pause()
    session.tick(600)
    assert session.format_time() == "24:00"

    session.resume()
    session.tick(60)
    assert session.format_time() == "23:00"

    session.reset()
    assert session.phase == TimerPhase.IDLE
    session.resume()
    assert not session.is_running


def test_project_session_alternates_work_and_break(project):
    session = FocusSession(project, stage_id="s2", work_minutes=25, break_minutes=5)

    assert session.tick(25 * 60) is None
    assert session.phase == TimerPhase.BREAK
    assert session.cycles_completed == 1
    assert session.format_time() == "05:00"

    session.tick(5 * 60)
    assert session.phase == TimerPhase.WORK
    assert session.format_time() == "25:00"

    completion = session.finish()
    assert completion == FocusCompletion("s2", "2024-01-05", 25)
    assert session.phase == TimerPhase.COMPLETED
    assert session.finish() == completion


def test_project_session_requires_existing_stage(project):
    with pytest.raises(ValidationError):
        FocusSession(project)
    with pytest.raises(ValidationError):
        FocusSession(project, stage_id="missing")


def test_apply_completion_is_idempotent():
    completion = FocusCompletion("basic_charge", "2024-03-01", 10)
    log = [DayLog("2024-03-01", ["const_run"])]

    once = apply_completion(log, completion)
    twice = apply_completion(once, completion)

    assert once == [DayLog("2024-03-01", ["const_run", "basic_charge"])]
    assert twice == once


def test_timer_service_reports_completion():
    completed = []

    async def scenario():
        service = TimerService(on_complete=lambda key, c: completed.append((key, c)),
                               tick_interval=0, tick_seconds=600)
        await service.start("hero", FocusSession(builtin("basic_charge"), today="2024-03-01"))
        assert service.is_active("hero")

        for _ in range(20):
            if not service.is_active("hero"):
                break
            await asyncio.sleep(0)
        return service

    service = asyncio.run(scenario())
    assert completed == [("hero", FocusCompletion("basic_charge", "2024-03-01", 10))]
    assert not service.is_active("hero")
    assert service.get_session("hero").phase == TimerPhase.COMPLETED


def test_timer_service_finish_and_cleanup(project):
    completed = []

    async def on_complete(key, completion):
        completed.append(completion)

    async def scenario():
        service = TimerService(on_complete=on_complete, tick_interval=60)
        await service.start("stage", FocusSession(project, stage_id="s1"))
        await service.start("read", FocusSession(builtin("const_read")))

        completion = await service.finish("stage")
        assert not service.is_active("stage")
        assert await service.stop("stage") is False

        await service.cleanup_all()
        assert service.active_timers == {}
        return completion

    completion = asyncio.run(scenario())
    assert completion == FocusCompletion("s1", "2024-01-01", 5)
    assert completed == [completion]
