# core/titles.py
"""Звание и специализация героя по его статистике"""

from dataclasses import dataclass
from typing import Optional, Sequence

from liferpg.core.catalog import (
    LEVEL_RANKS, LevelRank, SPECIALIZATIONS, SPECIALIZATION_TOLERANCE, BALANCED
)
from liferpg.core.models import Category, UserStats

@dataclass(frozen=True)
class TitleInfo:
    rank: str
    specialization: str
    dominant: Optional[Category] = None

    @property
    def full(self) -> str:
        return f"{self.rank} {self.specialization}"

    @property
    def is_balanced(self) -> bool:
        return self.dominant is None

    def to_dict(self):
        return {
            "rank": self.rank,
            "specialization": self.specialization,
            "full": self.full,
            "dominant": self.dominant.value if self.dominant else None,
        }

def resolve_rank(level: int, ranks: Sequence[LevelRank] = LEVEL_RANKS) -> str:
    """Старшее звание, порог которого не выше уровня"""
    ordered = sorted(ranks, key=lambda r: r.min_level)
    rank = ordered[0]
    for candidate in ordered:
        if candidate.min_level <= level:
            rank = candidate
    return rank.title

def dominant_category(stats: UserStats) -> Category:
    """Категория с максимумом; при равенстве побеждает объявленная раньше"""
    best = Category.PHYSICAL
    for category in Category:
        if stats.get(category) > stats.get(best):
            best = category
    return best

def resolve_title(stats: UserStats) -> TitleInfo:
    rank = resolve_rank(stats.level)
    dominant = dominant_category(stats)
    top = stats.get(dominant)

    if all(top - stats.get(c) < SPECIALIZATION_TOLERANCE for c in Category):
        return TitleInfo(rank=rank, specialization=SPECIALIZATIONS[BALANCED])

    return TitleInfo(rank=rank, specialization=SPECIALIZATIONS[dominant.value], dominant=dominant)
