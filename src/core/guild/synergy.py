"""파티 시너지 평가

Party + Quest → (level_delta, relationship_factor, equipment_factor).
Pure functions: nothing here reads or writes shared state, so parties
can be evaluated in any order or concurrently.
"""

from dataclasses import dataclass
from itertools import permutations
from typing import Sequence

from src.core.guild.models import Hero, Quest
from src.core.guild.party import Party


@dataclass(frozen=True)
class SynergyTuple:
    level_delta: float
    relationship_factor: float  # -5 ~ +5
    equipment_factor: int  # 0 | 1


def average_effective_level(heroes: Sequence[Hero]) -> float:
    """평균 유효 레벨. 영구 부상자는 level × 0.8."""
    return sum(h.effective_level for h in heroes) / len(heroes)


def relationship_factor(heroes: Sequence[Hero]) -> float:
    """Mean of every directed opinion inside the party (6 for a trio)."""
    pairs = list(permutations(heroes, 2))
    if not pairs:
        return 0.0
    return sum(a.opinion_of(b.hero_id) for a, b in pairs) / len(pairs)


def equipment_factor(heroes: Sequence[Hero]) -> int:
    """1 only when every hero wields a maxed, class-compatible item.

    Partial equipment grants nothing.
    """
    for hero in heroes:
        item = hero.item
        if item is None or not item.is_maxed or not item.usable_by(hero.hero_class):
            return 0
    return 1


def evaluate_synergy(party: Party, quest: Quest) -> SynergyTuple:
    heroes = party.heroes
    return SynergyTuple(
        level_delta=average_effective_level(heroes) - quest.difficulty,
        relationship_factor=relationship_factor(heroes),
        equipment_factor=equipment_factor(heroes),
    )
