"""GuildService 결과 타입

Returned to the presentation layer. Plain dataclasses holding ids and
values only, never live Hero/Quest objects.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass
class HeroInjuryDetail:
    """퀘스트 후 영웅별 부상 결과"""

    hero_id: str
    severity: Optional[str] = None  # InjurySeverity 값, None: 무사
    injury: str = "healthy"  # 결과 InjuryState 값
    weeks_remaining: int = 0
    quest_weeks_remaining: int = 0  # 퀘스트 파견으로 배치 불가한 주


@dataclass
class GrantedRewards:
    hero_experience: int = 0
    gold: int = 0
    reputation_experience: int = 0
    item_id: Optional[str] = None


@dataclass
class QuestOutcome:
    """submit_quest_attempt 결과"""

    quest_id: str
    hero_ids: List[str]
    success: bool
    success_probability: float
    injury_avoid_probability: float
    level_delta: float
    relationship_factor: float
    equipment_factor: int
    injuries: Dict[str, HeroInjuryDetail] = field(default_factory=dict)
    rewards: GrantedRewards = field(default_factory=GrantedRewards)
    # new values after the quest, among the party members still alive
    opinions: Dict[str, Dict[str, int]] = field(default_factory=dict)
    level_ups: Dict[str, int] = field(default_factory=dict)  # hero_id → new level
    deaths: List[str] = field(default_factory=list)


@dataclass
class DismissalResult:
    hero_id: str
    reputation_penalty: int
    returned_item_id: Optional[str] = None


@dataclass
class WeeklyReport:
    week: int
    recoveries: List[str] = field(default_factory=list)
    returned: List[str] = field(default_factory=list)  # 퀘스트에서 복귀


@dataclass
class MonthlyReport:
    """advance_month 결과"""

    month: int  # 끝난 달
    recoveries: List[str] = field(default_factory=list)
    returned: List[str] = field(default_factory=list)
    opinion_decay: Dict[str, Dict[str, int]] = field(default_factory=dict)
    dismissed: List[DismissalResult] = field(default_factory=list)
    salaries: Dict[str, int] = field(default_factory=dict)
    salary_total: int = 0
    gold: int = 0
    shortfall: int = 0
    expired_quests: List[str] = field(default_factory=list)
    posted_quests: List[str] = field(default_factory=list)
    quest_board: List[str] = field(default_factory=list)
    recruitment_offers: List[str] = field(default_factory=list)
    reputation_delta: int = 0
    reputation_level: int = 0
    is_lost: bool = False
    is_won: bool = False
