import pytest

from liferpg.core.models import Category, Difficulty, Task, TaskStage, TaskType


@pytest.fixture
def basic_task():
    return Task("t1", "Зарядка", TaskType.BASIC, [Category.PHYSICAL])


@pytest.fixture
def sugar_task():
    return Task(
        "neg_sugar", "Сахар", TaskType.NEGATIVE,
        [Category.PHYSICAL, Category.INTELLECT, Category.HEALTH], penalty=30,
    )


@pytest.fixture
def project():
    return Task(
        "proj_1", "Релиз", TaskType.TEMPORARY, [Category.PROFESSIONAL],
        difficulty=Difficulty.MEDIUM, is_custom=True,
        stages=[
            TaskStage("s1", "Дизайн", "2024-01-01", Difficulty.EASY),
            TaskStage("s2", "Код", "2024-01-05", Difficulty.HARD, depends_on="s1"),
            TaskStage("s3", "Релиз", "2024-01-10", Difficulty.EPIC, depends_on="s2"),
        ],
    )


@pytest.fixture
def catalog(basic_task, sugar_task, project):
    return [basic_task, sugar_task, project]
