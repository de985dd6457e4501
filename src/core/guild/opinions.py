"""영웅 간 의견 변동

관찰자(observer)의 성격에 따라 파티원(subject)에 대한 의견을 갱신한다.
All pairs read the pre-quest snapshot, so the order in which pairs are
processed cannot change the result. Results are clamped to -5 ~ +5.
"""

import logging
from dataclasses import dataclass
from itertools import permutations
from typing import Callable, Dict, Iterable, Sequence, Set

from src.core.guild.models import Hero, Personality, clamp_opinion

logger = logging.getLogger(__name__)

OpinionSnapshot = Dict[str, Dict[str, int]]  # observer_id → {subject_id: value}


@dataclass(frozen=True)
class OpinionContext:
    """한 쌍(observer → subject)의 갱신 입력."""

    current: int  # observer's pre-quest opinion of subject
    counterpart: int  # subject's pre-quest opinion of observer
    observer_level: int
    subject_level: int
    success: bool
    subject_injured: bool


OpinionRule = Callable[[OpinionContext], int]


def _step_toward(current: int, target: int) -> int:
    if current < target:
        return current + 1
    if current > target:
        return current - 1
    return current


def _compare_levels(ctx: OpinionContext) -> int:
    """+1 subject stronger, -1 weaker, 0 tie."""
    if ctx.subject_level > ctx.observer_level:
        return 1
    if ctx.subject_level < ctx.observer_level:
        return -1
    return 0


# 성격별 규칙: 새 의견값(클램프 전)을 반환
PERSONALITY_RULES: Dict[Personality, OpinionRule] = {
    Personality.BONDED: lambda ctx: ctx.current + 1,
    Personality.RESULT_DRIVEN: lambda ctx: ctx.current + (1 if ctx.success else -1),
    Personality.MIRROR: lambda ctx: _step_toward(ctx.current, ctx.counterpart),
    Personality.PROTECTIVE: lambda ctx: ctx.current + (-2 if ctx.subject_injured else 1),
    Personality.STATUS_SEEKING: lambda ctx: ctx.current + _compare_levels(ctx),
    Personality.STATUS_AVERSE: lambda ctx: ctx.current - _compare_levels(ctx),
}


def take_snapshot(heroes: Iterable[Hero]) -> OpinionSnapshot:
    return {h.hero_id: dict(h.opinions) for h in heroes}


def updated_opinion(
    observer: Hero,
    subject: Hero,
    snapshot: OpinionSnapshot,
    success: bool,
    injured_ids: Set[str],
) -> int:
    ctx = OpinionContext(
        current=snapshot.get(observer.hero_id, {}).get(subject.hero_id, 0),
        counterpart=snapshot.get(subject.hero_id, {}).get(observer.hero_id, 0),
        observer_level=observer.level,
        subject_level=subject.level,
        success=success,
        subject_injured=subject.hero_id in injured_ids,
    )
    rule = PERSONALITY_RULES[observer.personality]
    return clamp_opinion(rule(ctx))


def compute_opinion_updates(
    heroes: Sequence[Hero],
    success: bool,
    injured_ids: Set[str],
) -> OpinionSnapshot:
    """파티 내 모든 순서쌍의 새 의견 계산 (적용은 하지 않음).

    Returns:
        {observer_id: {subject_id: new_value}}
    """
    snapshot = take_snapshot(heroes)
    updates: OpinionSnapshot = {h.hero_id: {} for h in heroes}
    for observer, subject in permutations(heroes, 2):
        updates[observer.hero_id][subject.hero_id] = updated_opinion(
            observer, subject, snapshot, success, injured_ids
        )
    return updates


def apply_opinion_updates(heroes: Sequence[Hero], updates: OpinionSnapshot) -> None:
    by_id = {h.hero_id: h for h in heroes}
    for observer_id, subjects in updates.items():
        observer = by_id.get(observer_id)
        if observer is None:
            continue
        for subject_id, value in subjects.items():
            observer.set_opinion(subject_id, value)


def record_companions(heroes: Sequence[Hero]) -> None:
    """이번 달 함께 퀘스트에 나선 동료 기록 (Bonded 감쇠 판정용)."""
    for hero in heroes:
        hero.companions.update(h.hero_id for h in heroes if h is not hero)


def decay_bonded_opinions(hero: Hero) -> Dict[str, int]:
    """Bonded: 이번 달 함께하지 않은 상대에 대한 의견이 0 쪽으로 1 감쇠.

    Returns:
        changed {subject_id: new_value}
    """
    if hero.personality != Personality.BONDED:
        return {}

    changed: Dict[str, int] = {}
    for subject_id, value in list(hero.opinions.items()):
        if subject_id in hero.companions or value == 0:
            continue
        changed[subject_id] = hero.set_opinion(subject_id, _step_toward(value, 0))
    if changed:
        logger.debug(f"Bonded decay for {hero.hero_id}: {changed}")
    return changed


def forget_hero(heroes: Iterable[Hero], hero_id: str) -> None:
    """로스터에서 사라진 영웅에 대한 의견 제거."""
    for hero in heroes:
        hero.opinions.pop(hero_id, None)
        hero.companions.discard(hero_id)
