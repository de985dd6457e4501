"""Guild domain model

Hero / Quest / Item / Guild entities and their enumerations.
Pure data classes, no DB and no random draws. Constructors clamp
levels, opinions and item bonuses into their legal ranges.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Set

# === Ranges ===
OPINION_MIN = -5
OPINION_MAX = 5
LEVEL_MIN = 1
LEVEL_MAX = 10
REPUTATION_MAX = 10

# === Equipment ===
MAX_ITEM_BONUS = 0.10  # +10% effectiveness cap

# === Permanent injury debuff (-20%) ===
PERMANENT_INJURY_MULTIPLIER = 0.8

# === Salary: level 1 → 10 gold, level 10 → 20 gold ===
SALARY_MIN = 10
SALARY_MAX = 20


class HeroClass(str, Enum):
    WARRIOR = "warrior"
    TANK = "tank"
    SUPPORT = "support"


class Personality(str, Enum):
    """Observer-side rule used when a hero re-evaluates party members."""

    BONDED = "bonded"
    RESULT_DRIVEN = "result_driven"
    MIRROR = "mirror"
    PROTECTIVE = "protective"
    STATUS_SEEKING = "status_seeking"
    STATUS_AVERSE = "status_averse"


class InjuryState(str, Enum):
    HEALTHY = "healthy"
    LIGHT_INJURED = "light_injured"
    HEAVY_INJURED = "heavy_injured"
    PERMANENTLY_INJURED = "permanently_injured"
    DEAD = "dead"


class InjurySeverity(str, Enum):
    LIGHT = "light"
    HEAVY = "heavy"
    PERMANENT = "permanent"
    DEATH = "death"


class ItemKind(str, Enum):
    EQUIPMENT = "equipment"  # worn by exactly one hero
    CHARTER = "charter"  # held by the guild, unlocks quest board tiers


class GameStatus(str, Enum):
    ACTIVE = "active"
    WON = "won"
    LOST = "lost"


def clamp_opinion(value: int) -> int:
    """-5 ~ +5 클램프."""
    return max(OPINION_MIN, min(OPINION_MAX, int(value)))


def clamp_level(value: int) -> int:
    return max(LEVEL_MIN, min(LEVEL_MAX, int(value)))


def salary_for_level(level: int) -> int:
    """Monthly salary, linear from 10 (level 1) to 20 (level 10)."""
    span = SALARY_MAX - SALARY_MIN
    return SALARY_MIN + round((clamp_level(level) - LEVEL_MIN) * span / (LEVEL_MAX - LEVEL_MIN))


@dataclass
class Item:
    """장비 또는 길드 보유 헌장"""

    item_id: str
    name: str = ""
    kind: ItemKind = ItemKind.EQUIPMENT
    class_restriction: Optional[HeroClass] = None  # None: any class
    effectiveness_bonus: float = 0.0  # 0.0 ~ MAX_ITEM_BONUS

    def __post_init__(self) -> None:
        if self.kind == ItemKind.CHARTER:
            self.class_restriction = None
            self.effectiveness_bonus = 0.0
        self.effectiveness_bonus = max(0.0, min(MAX_ITEM_BONUS, self.effectiveness_bonus))

    @property
    def is_maxed(self) -> bool:
        return self.effectiveness_bonus >= MAX_ITEM_BONUS

    def usable_by(self, hero_class: HeroClass) -> bool:
        if self.kind != ItemKind.EQUIPMENT:
            return False
        return self.class_restriction is None or self.class_restriction == hero_class


@dataclass
class Hero:
    """길드 소속 영웅

    opinions: outgoing, directional. A missing key reads as neutral (0).
    weeks_remaining: countdown of the current injury state; a settled
    permanent injury keeps PERMANENTLY_INJURED with 0 weeks remaining.
    quest_weeks_remaining: weeks left away on the last quest taken.
    companions: heroes this one shared a quest with during the current month.
    """

    hero_id: str
    name: str = ""
    level: int = 1
    hero_class: HeroClass = HeroClass.WARRIOR
    personality: Personality = Personality.BONDED
    experience: int = 0
    item: Optional[Item] = None
    opinions: Dict[str, int] = field(default_factory=dict)
    injury: InjuryState = InjuryState.HEALTHY
    weeks_remaining: int = 0
    quest_weeks_remaining: int = 0
    companions: Set[str] = field(default_factory=set)

    def __post_init__(self) -> None:
        self.level = clamp_level(self.level)
        self.opinions = {k: clamp_opinion(v) for k, v in self.opinions.items()}
        self.weeks_remaining = max(0, self.weeks_remaining)
        self.quest_weeks_remaining = max(0, self.quest_weeks_remaining)

    # ── opinions ──

    def opinion_of(self, other_id: str) -> int:
        return self.opinions.get(other_id, 0)

    def set_opinion(self, other_id: str, value: int) -> int:
        self.opinions[other_id] = clamp_opinion(value)
        return self.opinions[other_id]

    # ── availability ──

    @property
    def is_dead(self) -> bool:
        return self.injury == InjuryState.DEAD

    @property
    def is_permanently_injured(self) -> bool:
        return self.injury == InjuryState.PERMANENTLY_INJURED

    @property
    def is_available(self) -> bool:
        """Assignable to a party: back from any quest, and healthy or settled."""
        if self.quest_weeks_remaining > 0:
            return False
        if self.injury == InjuryState.HEALTHY:
            return True
        return self.is_permanently_injured and self.weeks_remaining == 0

    @property
    def effectiveness_multiplier(self) -> float:
        return PERMANENT_INJURY_MULTIPLIER if self.is_permanently_injured else 1.0

    @property
    def effective_level(self) -> float:
        return self.level * self.effectiveness_multiplier

    @property
    def salary(self) -> int:
        return salary_for_level(self.level)


@dataclass
class RewardBundle:
    """퀘스트 보상"""

    hero_experience: int = 0
    gold: int = 0
    reputation_experience: int = 0
    item: Optional[Item] = None


@dataclass
class Quest:
    """게시판에 올라온 퀘스트"""

    quest_id: str
    title: str = ""
    difficulty: int = 1
    duration_weeks: int = 1
    expires_in_weeks: int = 4
    rewards: RewardBundle = field(default_factory=RewardBundle)

    def __post_init__(self) -> None:
        self.difficulty = clamp_level(self.difficulty)
        self.duration_weeks = max(1, self.duration_weeks)

    @property
    def is_expired(self) -> bool:
        return self.expires_in_weeks <= 0


@dataclass
class RecruitmentOffer:
    offer_id: str
    hero: Hero
    signing_bonus: int


@dataclass
class Guild:
    """길드 전체 상태

    roster / quest_board / offers / storage / unlocks are keyed by id and
    keep insertion order, which is the order reports and queries use.
    """

    guild_id: str
    name: str = ""
    gold: int = 0
    reputation_level: int = 0
    reputation_experience: int = 0  # cumulative
    pending_reputation_experience: int = 0  # this month: quest rewards minus dismissals
    roster: Dict[str, Hero] = field(default_factory=dict)
    quest_board: Dict[str, Quest] = field(default_factory=dict)
    offers: Dict[str, RecruitmentOffer] = field(default_factory=dict)
    storage: Dict[str, Item] = field(default_factory=dict)
    unlocks: Dict[str, Item] = field(default_factory=dict)
    fallen: List[str] = field(default_factory=list)
    month: int = 1
    week: int = 0
    status: GameStatus = GameStatus.ACTIVE
    next_serial: int = 1

    def __post_init__(self) -> None:
        self.reputation_level = max(0, min(REPUTATION_MAX, self.reputation_level))

    def issue_id(self, prefix: str) -> str:
        """Deterministic id so a seeded game reproduces identical ids."""
        serial = self.next_serial
        self.next_serial += 1
        return f"{prefix}_{serial:05d}"

    @property
    def is_over(self) -> bool:
        return self.status != GameStatus.ACTIVE
