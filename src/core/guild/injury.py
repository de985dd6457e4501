"""부상 상태 기계

HEALTHY → LIGHT_INJURED (1 week) → HEALTHY
HEALTHY → HEAVY_INJURED (4 weeks) → HEALTHY
HEALTHY → PERMANENTLY_INJURED (4 weeks recovering, then settled for good)
HEALTHY → DEAD (terminal, leaves the roster)

A settled permanent injury is never lifted. Further light/heavy wounds on
such a hero only add unavailability; the -20% debuff does not stack.

Survivors of a quest are also away for the quest's duration; that
countdown runs beside the injury timer and blocks party assignment too.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from src.core.guild.models import Guild, Hero, InjurySeverity, InjuryState
from src.core.guild.opinions import forget_hero

logger = logging.getLogger(__name__)

LIGHT_INJURY_WEEKS = 1
HEAVY_INJURY_WEEKS = 4
PERMANENT_RECOVERY_WEEKS = 4

# severity → (state, weeks)
INJURY_TABLE: Dict[InjurySeverity, tuple] = {
    InjurySeverity.LIGHT: (InjuryState.LIGHT_INJURED, LIGHT_INJURY_WEEKS),
    InjurySeverity.HEAVY: (InjuryState.HEAVY_INJURED, HEAVY_INJURY_WEEKS),
    InjurySeverity.PERMANENT: (InjuryState.PERMANENTLY_INJURED, PERMANENT_RECOVERY_WEEKS),
    InjurySeverity.DEATH: (InjuryState.DEAD, 0),
}


@dataclass
class Recovery:
    hero_id: str
    from_state: InjuryState
    to_state: InjuryState


def apply_injury(hero: Hero, severity: InjurySeverity) -> InjuryState:
    """부상 적용. 사망자는 변경하지 않는다."""
    if hero.is_dead:
        return hero.injury

    state, weeks = INJURY_TABLE[severity]
    if state == InjuryState.DEAD:
        hero.injury = InjuryState.DEAD
        hero.weeks_remaining = 0
    elif hero.is_permanently_injured:
        hero.weeks_remaining = max(hero.weeks_remaining, weeks)
    else:
        hero.injury = state
        hero.weeks_remaining = weeks

    logger.info(
        f"Hero {hero.hero_id} injured ({severity.value}): "
        f"{hero.injury.value}, {hero.weeks_remaining} weeks"
    )
    return hero.injury


def advance_injury_timer(hero: Hero, weeks: int = 1) -> Optional[Recovery]:
    """타이머 진행. 회복으로 다시 파티 배치 가능해지면 Recovery 반환."""
    if hero.is_dead or hero.weeks_remaining <= 0 or weeks <= 0:
        return None

    hero.weeks_remaining = max(0, hero.weeks_remaining - weeks)
    if hero.weeks_remaining > 0:
        return None

    from_state = hero.injury
    if hero.injury in (InjuryState.LIGHT_INJURED, InjuryState.HEAVY_INJURED):
        hero.injury = InjuryState.HEALTHY
    # PERMANENTLY_INJURED stays, now settled

    logger.info(f"Hero {hero.hero_id} recovered: {from_state.value} → {hero.injury.value}")
    return Recovery(hero_id=hero.hero_id, from_state=from_state, to_state=hero.injury)


def advance_roster_timers(guild: Guild, weeks: int) -> List[Recovery]:
    recoveries: List[Recovery] = []
    for hero in guild.roster.values():
        recovery = advance_injury_timer(hero, weeks)
        if recovery is not None:
            recoveries.append(recovery)
    return recoveries


def dispatch_party(heroes: Iterable[Hero], weeks: int) -> None:
    """퀘스트 기간 동안 생존 파티원을 배치 불가로 표시."""
    for hero in heroes:
        if not hero.is_dead:
            hero.quest_weeks_remaining = max(hero.quest_weeks_remaining, weeks)


def advance_quest_timers(guild: Guild, weeks: int) -> List[str]:
    """Count down time away on quests. Returns ids of heroes back this step."""
    returned: List[str] = []
    if weeks <= 0:
        return returned
    for hero in guild.roster.values():
        if hero.quest_weeks_remaining <= 0:
            continue
        hero.quest_weeks_remaining = max(0, hero.quest_weeks_remaining - weeks)
        if hero.quest_weeks_remaining == 0:
            returned.append(hero.hero_id)
    return returned


def release_hero(guild: Guild, hero_id: str) -> Hero:
    """로스터에서 제거 (사망/해고 공통). 장비는 길드 창고로 반환."""
    hero = guild.roster.pop(hero_id)
    if hero.item is not None:
        guild.storage[hero.item.item_id] = hero.item
        hero.item = None
    forget_hero(guild.roster.values(), hero_id)
    return hero


def bury_fallen(guild: Guild) -> List[Hero]:
    """Remove every dead hero from the active roster immediately."""
    fallen = [h for h in guild.roster.values() if h.is_dead]
    for hero in fallen:
        release_hero(guild, hero.hero_id)
        guild.fallen.append(hero.hero_id)
        logger.info(f"Hero {hero.hero_id} ({hero.name}) died and left the roster")
    return fallen
