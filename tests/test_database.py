import json

import pytest

from liferpg.core.catalog import CatalogIntegrityError
from liferpg.core.database import NotFoundError, StateStore, StorageError
from liferpg.core.models import Category, ChallengeStatus, DayLog, Difficulty, TaskType, ValidationError


def test_fresh_store_has_builtins(tmp_path):
    store = StateStore(tmp_path)
    assert len(store.tasks) == 12
    assert store.logs == []
    assert store.profile is None
    assert store.stats().xp == 0


def test_mutations_persist_between_instances(tmp_path):
    store = StateStore(tmp_path)
    task = store.add_task("Йога", TaskType.CONSTANT, [Category.HEALTH], Difficulty.EASY)
    store.toggle("2024-01-01", task.id)
    store.toggle("2024-01-01", "const_run")
    store.set_profile("Артур", 30, "warrior")

    reloaded = StateStore(tmp_path)
    assert reloaded.get_task(task.id).name == "Йога"
    assert reloaded.logs == [DayLog("2024-01-01", [task.id, "const_run"])]
    assert reloaded.profile.character_class_name == "Поборник"
    assert reloaded.stats().xp == 15
    assert reloaded.stats().health == 5


def test_files_use_original_shape(tmp_path):
    store = StateStore(tmp_path)
    store.mark_completed("2024-01-01", "basic_charge")

    logs = json.loads((tmp_path / "logs.json").read_text(encoding="utf-8"))
    assert logs == [{"date": "2024-01-01", "completedTaskIds": ["basic_charge"]}]
    assert not (tmp_path / "logs.tmp").exists()


def test_corrupt_file_is_quarantined(tmp_path):
    (tmp_path / "logs.json").write_text("{not json", encoding="utf-8")

    store = StateStore(tmp_path)

    assert store.logs == []
    assert (tmp_path / "logs.json.corrupt").read_text(encoding="utf-8") == "{not json"


def test_bad_records_are_skipped(tmp_path):
    records = [
        {"date": "2024-01-01", "completedTaskIds": ["const_run"]},
        {"date": "not-a-date", "completedTaskIds": ["x"]},
        {"completedTaskIds": ["y"]},
        {"date": "2024-01-01", "completedTaskIds": ["const_read"]},
        {"date": "2024-01-02", "completedTaskIds": []},
    ]
    (tmp_path / "logs.json").write_text(json.dumps(records), encoding="utf-8")

    store = StateStore(tmp_path)

    assert store.logs == [DayLog("2024-01-01", ["const_run", "const_read"])]


def test_duplicate_stored_ids_fail_loading(tmp_path):
    stage = {"id": "dup", "name": "S", "date": "2024-01-01", "difficulty": "Medium"}
    tasks = [
        {"id": "p1", "name": "A", "type": "Temporary", "affectedCategories": ["Professional"],
         "isCustom": True, "stages": [stage]},
        {"id": "p2", "name": "B", "type": "Temporary", "affectedCategories": ["Professional"],
         "isCustom": True, "stages": [stage]},
    ]
    (tmp_path / "tasks.json").write_text(json.dumps(tasks), encoding="utf-8")

    with pytest.raises(StorageError):
        StateStore(tmp_path)


def test_builtin_tasks_cannot_be_deleted(tmp_path):
    store = StateStore(tmp_path)
    assert store.delete_task("const_run") is False
    with pytest.raises(NotFoundError):
        store.delete_task("missing")


def test_campaign_editing(tmp_path):
    store = StateStore(tmp_path)
    project = store.add_project("Книга")
    first = store.add_stage(project.id, "План", "2024-01-01", Difficulty.EASY)
    second = store.add_stage(project.id, "Черновик", "2024-01-02", Difficulty.HARD, depends_on=first.id)

    with pytest.raises(ValidationError):
        store.update_stage(project.id, first.id, depends_on=second.id)
    with pytest.raises(NotFoundError):
        store.add_stage("const_run", "X", "2024-01-01")

    store.toggle("2024-01-01", first.id)
    assert store.stats().professional == 5
    assert store.stats().xp == 5

    assert store.delete_stage(project.id, first.id)
    assert not store.delete_stage(project.id, first.id)
    assert StateStore(tmp_path).get_campaign(project.id).stages == [second]


def test_stage_id_must_be_globally_unique(tmp_path):
    store = StateStore(tmp_path)
    first = store.add_project("Книга")
    second = store.add_project("Сайт")

    with pytest.raises(CatalogIntegrityError):
        store.add_stage(second.id, "Этап", "2024-01-01", stage_id=first.id)
    assert store.get_campaign(second.id).stages == []


def test_challenge_lifecycle(tmp_path):
    store = StateStore(tmp_path)
    store.accept_challenge("ch_run_7", "2024-01-01")
    for day in range(1, 8):
        store.toggle(f"2024-01-0{day}", "const_run")

    view = {c.id: c for c in store.challenges_view("2024-01-07")}
    assert view["ch_run_7"].progress == 7

    claimed = store.claim_challenge("ch_run_7", "2024-01-07")
    assert claimed.status == ChallengeStatus.COMPLETED

    reloaded = StateStore(tmp_path)
    assert reloaded.get_challenge("ch_run_7").status == ChallengeStatus.COMPLETED
    assert reloaded.stats().xp == 7 * 10 + 100

    with pytest.raises(NotFoundError):
        reloaded.accept_challenge("unknown")


def test_set_profile_rejects_unknown_class(tmp_path):
    store = StateStore(tmp_path)
    with pytest.raises(ValidationError):
        store.set_profile("Артур", 30, "necromancer")


def test_challenge_with_bad_start_date_is_skipped(tmp_path):
    (tmp_path / "challenges.json").write_text(json.dumps([{
        "id": "ch_run_7", "title": "Неделя бега", "type": "streak", "targetTaskId": "const_run",
        "durationDays": 7, "rewardXP": 100, "status": "active", "startDate": "soon", "progress": 3,
    }]), encoding="utf-8")

    store = StateStore(tmp_path)
    run = store.get_challenge("ch_run_7")
    assert run.status == ChallengeStatus.AVAILABLE
    assert run.start_date is None
    assert store.challenges_view("2024-01-07")[0].progress == 0


def test_failed_write_keeps_previous_state(tmp_path, monkeypatch):
    store = StateStore(tmp_path)
    store.toggle("2024-01-01", "const_run")

    def broken_write(path, data):
        raise StorageError(f"диск недоступен: {path}")

    monkeypatch.setattr(store, "_write_json", broken_write)
    with pytest.raises(StorageError):
        store.toggle("2024-01-02", "const_run")
    with pytest.raises(StorageError):
        store.add_project("Книга")
    with pytest.raises(StorageError):
        store.accept_challenge("ch_run_7", "2024-01-01")
    with pytest.raises(StorageError):
        store.set_profile("Артур", 30, "warrior")

    assert store.logs == [DayLog("2024-01-01", ["const_run"])]
    assert len(store.tasks) == 12
    assert store.get_challenge("ch_run_7").status == ChallengeStatus.AVAILABLE
    assert store.profile is None
    assert store.stats().xp == 10
