import random

from liferpg.core.catalog import PREDEFINED_TASKS, build_index
from liferpg.core.models import (
    Category, Challenge, ChallengeStatus, ChallengeType, DayLog, Difficulty, Task, TaskType,
)
from liferpg.core.stats_engine import compute_stats, level_for_xp


def test_single_basic_completion(basic_task):
    stats = compute_stats([basic_task], [DayLog("2024-01-01", ["t1"])])
    assert stats.xp == 10
    assert stats.level == 1
    assert stats.physical == 5
    assert (stats.intellect, stats.health, stats.professional) == (0, 0, 0)


def test_negative_task_uses_penalty_override(sugar_task):
    stats = compute_stats([sugar_task], [DayLog("2024-01-01", ["neg_sugar"])])
    assert stats.xp == -30
    assert stats.physical == stats.intellect == stats.health == 0
    assert stats.level == 1


def test_negative_task_default_penalty():
    task = Task("neg_x", "X", TaskType.NEGATIVE, [Category.HEALTH])
    stats = compute_stats([task], [DayLog("2024-01-01", ["neg_x"])])
    assert stats.xp == -15


def test_difficulty_and_stage_rewards(project):
    easy = Task("e", "E", TaskType.CONSTANT, [Category.INTELLECT], difficulty=Difficulty.HARD)
    log = [DayLog("2024-01-01", ["e", "s1"]), DayLog("2024-01-05", ["s2"])]

    stats = compute_stats([easy, project], log)

    assert stats.xp == 25 + 5 + 25
    assert stats.intellect == 5
    assert stats.professional == 10


def test_unknown_ids_are_skipped(basic_task):
    stats = compute_stats([basic_task], [DayLog("2024-01-01", ["deleted", "t1"])])
    assert stats.xp == 10


def test_duplicate_ids_in_one_entry_count_once(basic_task):
    stats = compute_stats([basic_task], [DayLog("2024-01-01", ["t1", "t1"])])
    assert stats.xp == 10


def test_empty_categories_give_xp_only():
    bare = Task("bare", "B", TaskType.BASIC, [])
    stats = compute_stats([bare], [DayLog("2024-01-01", ["bare"])])
    assert stats.xp == 10
    assert sum(stats.categories.values()) == 0


def test_claimed_challenges_add_reward():
    done = Challenge("c1", "C", "", ChallengeType.STREAK, "t", 3, 100, status=ChallengeStatus.COMPLETED)
    active = Challenge("c2", "C", "", ChallengeType.STREAK, "t", 3, 500, status=ChallengeStatus.ACTIVE)
    stats = compute_stats([], [], [done, active])
    assert stats.xp == 100
    assert stats.level == 2


def test_accepts_prebuilt_index(catalog):
    log = [DayLog("2024-01-01", ["t1", "s1"])]
    assert compute_stats(build_index(catalog), log) == compute_stats(catalog, log)


def _mixed_log():
    return [
        DayLog("2024-01-01", ["neg_sugar", "basic_charge"]),
        DayLog("2024-01-02", ["const_run", "neg_fastfood", "neg_sugar"]),
        DayLog("2024-01-03", ["neg_doomscrolling", "const_read", "basic_sleep"]),
        DayLog("2024-01-04", ["neg_sugar", "neg_sugar", "basic_food"]),
    ]


def test_order_independence():
    log = _mixed_log()
    expected = compute_stats(PREDEFINED_TASKS, log)
    rng = random.Random(7)

    for _ in range(25):
        shuffled = [DayLog(e.date, rng.sample(e.completed_task_ids, len(e.completed_task_ids))) for e in log]
        rng.shuffle(shuffled)
        assert compute_stats(PREDEFINED_TASKS, shuffled) == expected


def test_categories_never_negative():
    log = [DayLog(f"2024-01-{day:02d}", ["neg_sugar", "neg_fastfood"]) for day in range(1, 20)]
    log.append(DayLog("2024-02-01", ["basic_charge"]))
    stats = compute_stats(PREDEFINED_TASKS, log)
    assert all(value >= 0 for value in stats.categories.values())
    assert stats.physical == 5


def test_level_monotonic_when_adding_rewards():
    base = _mixed_log()
    extended = base + [DayLog("2024-01-05", ["const_run", "const_read", "basic_charge"])]
    assert compute_stats(PREDEFINED_TASKS, extended).level >= compute_stats(PREDEFINED_TASKS, base).level


def test_level_for_xp():
    assert level_for_xp(-50) == 1
    assert level_for_xp(0) == 1
    assert level_for_xp(99) == 1
    assert level_for_xp(100) == 2
    assert level_for_xp(450) == 5
