import pytest

from liferpg.core.campaigns import (
    add_stage, campaign_overview, delete_stage, has_dependency_cycle, is_stage_unlocked,
    stage_progress, stage_scheduled_for, stage_state, update_stage,
)
from liferpg.core.models import (
    Category, DayLog, Difficulty, StageState, Task, TaskStage, TaskType, ValidationError,
)


def test_dependent_stage_locked_even_if_logged(project):
    s2 = project.get_stage("s2")
    log = [DayLog("2024-01-05", ["s2"])]
    assert not is_stage_unlocked(s2, log)
    assert not is_stage_unlocked(s2, log, project)


def test_stage_unlocks_when_prerequisite_logged_on_any_date(project):
    s2 = project.get_stage("s2")
    log = [DayLog("2023-12-01", ["s1"])]
    assert is_stage_unlocked(s2, log)
    assert is_stage_unlocked(project.get_stage("s1"), [])


def test_self_reference_never_unlocks():
    stage = TaskStage("s", "S", "2024-01-01", depends_on="s")
    assert not is_stage_unlocked(stage, [DayLog("2024-01-01", ["s"])])


def test_cycle_is_permanently_locked():
    task = Task("p", "P", TaskType.TEMPORARY, [Category.PROFESSIONAL], stages=[
        TaskStage("a", "A", "2024-01-01", depends_on="b"),
        TaskStage("b", "B", "2024-01-02", depends_on="a"),
        TaskStage("c", "C", "2024-01-03", depends_on="a"),
    ])
    log = [DayLog("2024-01-01", ["a", "b"])]

    assert has_dependency_cycle(task.stages)
    assert has_dependency_cycle(task.stages, "c")
    assert not is_stage_unlocked(task.get_stage("a"), log, task)
    assert not is_stage_unlocked(task.get_stage("c"), log, task)


def test_deleted_prerequisite_keeps_dependent_locked(project):
    trimmed = delete_stage(project, "s1")
    log = [DayLog("2024-01-01", ["s1"])]
    assert [s.id for s in trimmed.stages] == ["s2", "s3"]
    assert not is_stage_unlocked(trimmed.get_stage("s2"), log, trimmed)


def test_stage_scheduled_for(project):
    assert stage_scheduled_for(project, "2024-01-05").id == "s2"
    assert stage_scheduled_for(project, "2024-01-06") is None


def test_stage_progress_rounds_half_up():
    stages = [TaskStage(f"s{i}", "S", "2024-01-01") for i in range(8)]
    task = Task("p", "P", TaskType.TEMPORARY, [Category.PROFESSIONAL], stages=stages)

    progress = stage_progress(task, [DayLog("2024-01-01", ["s0"])])
    assert (progress.completed, progress.total, progress.percent) == (1, 8, 13)


def test_stage_progress_empty_and_complete(project):
    empty = project.with_stages([])
    assert stage_progress(empty, []).percent == 0

    log = [DayLog("2024-01-01", ["s1"]), DayLog("2024-01-05", ["s2", "s3"])]
    assert stage_progress(project, log).percent == 100


def test_stage_states(project):
    log = [DayLog("2024-01-01", ["s1"])]
    assert stage_state(project.get_stage("s1"), project, log, "2024-01-05") == StageState.COMPLETED
    assert stage_state(project.get_stage("s2"), project, log, "2024-01-05") == StageState.DUE
    assert stage_state(project.get_stage("s2"), project, log, "2024-01-07") == StageState.OVERDUE
    assert stage_state(project.get_stage("s2"), project, log, "2024-01-02") == StageState.SCHEDULED
    assert stage_state(project.get_stage("s3"), project, log, "2024-01-02") == StageState.LOCKED


def test_campaign_overview(project):
    overview = campaign_overview(project, [DayLog("2024-01-01", ["s1"])], "2024-01-03")
    assert overview.progress.percent == 33
    assert [s.id for s in overview.stages_in(StageState.LOCKED)] == ["s3"]

    data = overview.to_dict()
    assert data["progress"] == {"completed": 1, "total": 3, "percent": 33}
    assert data["stages"][1]["state"] == "scheduled"


def test_add_stage_validates_dependency(project):
    updated = add_stage(project, "Тест", "2024-01-12", Difficulty.HARD, depends_on="s3", stage_id="s4")
    assert updated.get_stage("s4").depends_on == "s3"
    assert project.get_stage("s4") is None

    with pytest.raises(ValidationError):
        add_stage(project, "Тест", "2024-01-12", depends_on="missing")
    with pytest.raises(ValidationError):
        add_stage(project, "", "2024-01-12")
    with pytest.raises(ValidationError):
        add_stage(project, "Тест", "2024/01/12")
    with pytest.raises(ValidationError):
        add_stage(project, "Тест", "2024-01-12", stage_id="s1")


def test_add_stage_only_for_campaigns(basic_task):
    with pytest.raises(ValidationError):
        add_stage(basic_task, "Этап", "2024-01-01")


def test_update_stage_rejects_cycles(project):
    with pytest.raises(ValidationError):
        update_stage(project, "s1", depends_on="s3")
    with pytest.raises(ValidationError):
        update_stage(project, "s1", depends_on="s1")
    with pytest.raises(ValidationError):
        update_stage(project, "s1", colour="red")

    renamed = update_stage(project, "s2", name=" Код v2 ", date="2024-01-06")
    assert renamed.get_stage("s2").name == "Код v2"
    assert renamed.get_stage("s2").date == "2024-01-06"


def test_delete_unknown_stage_is_noop(project):
    assert delete_stage(project, "nope") is project
