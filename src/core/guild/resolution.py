"""퀘스트 판정 — 성공 확률, 부상 회피 확률, 부상 심각도

Anchor points (relationship, equipment, level_delta → success / avoid):
    (0, 0, 0)  → 70 / 50
    (+5, 0, 0) → 90 / 70
    (+5, 1, 0) → 100 / 80
    (-5, 0, 0) → 50 / 30
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

from src.core.guild.models import InjurySeverity, Quest
from src.core.guild.party import Party
from src.core.guild.rng import RandomSource, roll_percent
from src.core.guild.synergy import SynergyTuple, evaluate_synergy

logger = logging.getLogger(__name__)

# === 성공 확률 계수 ===
BASE_SUCCESS = 70.0
SUCCESS_RELATIONSHIP_WEIGHT = 4.0
SUCCESS_EQUIPMENT_WEIGHT = 10.0
SUCCESS_LEVEL_WEIGHT = 20.0

# === 부상 회피 확률 계수 (level_delta 무관) ===
BASE_INJURY_AVOID = 50.0
AVOID_RELATIONSHIP_WEIGHT = 4.0
AVOID_EQUIPMENT_WEIGHT = 10.0

# === 심각도 기준 분포 (회피 50% 지점) ===
SEVERITY_BASELINE: Dict[InjurySeverity, float] = {
    InjurySeverity.LIGHT: 0.70,
    InjurySeverity.HEAVY: 0.20,
    InjurySeverity.PERMANENT: 0.08,
    InjurySeverity.DEATH: 0.02,
}
BASELINE_INJURY_RISK = 0.5

# Draw order for the cumulative severity roll.
SEVERITY_ORDER = (
    InjurySeverity.LIGHT,
    InjurySeverity.HEAVY,
    InjurySeverity.PERMANENT,
    InjurySeverity.DEATH,
)


def _clamp_percent(value: float) -> float:
    return max(0.0, min(100.0, value))


def success_probability(synergy: SynergyTuple) -> float:
    """성공 확률 (0~100)."""
    return _clamp_percent(
        BASE_SUCCESS
        + SUCCESS_RELATIONSHIP_WEIGHT * synergy.relationship_factor
        + SUCCESS_EQUIPMENT_WEIGHT * synergy.equipment_factor
        + SUCCESS_LEVEL_WEIGHT * synergy.level_delta
    )


def injury_avoid_probability(synergy: SynergyTuple) -> float:
    """영웅 1인당 부상 회피 확률 (0~100)."""
    return _clamp_percent(
        BASE_INJURY_AVOID
        + AVOID_RELATIONSHIP_WEIGHT * synergy.relationship_factor
        + AVOID_EQUIPMENT_WEIGHT * synergy.equipment_factor
    )


def severity_distribution(avoid_probability: float) -> Dict[InjurySeverity, float]:
    """심각도 분포. 부상 위험이 클수록 Light → Heavy/Permanent/Death로 이동.

    Heavy, Permanent and Death scale linearly with injury risk
    (1 - avoid) relative to the 50% baseline; Light takes the remainder.
    At 0% avoidance the worse classes double, leaving Light at 40%.
    """
    risk = 1.0 - _clamp_percent(avoid_probability) / 100.0
    scale = risk / BASELINE_INJURY_RISK

    distribution = {
        severity: SEVERITY_BASELINE[severity] * scale
        for severity in SEVERITY_ORDER
        if severity != InjurySeverity.LIGHT
    }
    distribution[InjurySeverity.LIGHT] = 1.0 - sum(distribution.values())
    return {severity: distribution[severity] for severity in SEVERITY_ORDER}


def draw_severity(rng: RandomSource, avoid_probability: float) -> InjurySeverity:
    distribution = severity_distribution(avoid_probability)
    roll = rng.random()
    cumulative = 0.0
    for severity in SEVERITY_ORDER:
        cumulative += distribution[severity]
        if roll < cumulative:
            return severity
    # float rounding at the top edge
    return SEVERITY_ORDER[-1]


@dataclass(frozen=True)
class ResolutionOdds:
    """Pure evaluation result for one party/quest pairing."""

    quest_id: str
    hero_ids: tuple
    synergy: SynergyTuple
    success_probability: float
    injury_avoid_probability: float


@dataclass
class QuestResolution:
    """Drawn outcome. injuries: hero_id → severity (None: unhurt)."""

    odds: ResolutionOdds
    success: bool
    injuries: Dict[str, Optional[InjurySeverity]] = field(default_factory=dict)

    @property
    def injured_ids(self) -> set:
        return {hid for hid, severity in self.injuries.items() if severity is not None}

    @property
    def any_injury(self) -> bool:
        return bool(self.injured_ids)


def evaluate_odds(party: Party, quest: Quest) -> ResolutionOdds:
    synergy = evaluate_synergy(party, quest)
    odds = ResolutionOdds(
        quest_id=quest.quest_id,
        hero_ids=party.hero_ids,
        synergy=synergy,
        success_probability=success_probability(synergy),
        injury_avoid_probability=injury_avoid_probability(synergy),
    )
    logger.debug(
        f"Odds for {quest.quest_id} with {party.hero_ids}: {synergy} → "
        f"success={odds.success_probability:.1f}% "
        f"avoid={odds.injury_avoid_probability:.1f}%"
    )
    return odds


def draw_outcome(odds: ResolutionOdds, rng: RandomSource) -> QuestResolution:
    """One success draw, then one independent injury draw per hero in party order."""
    success = roll_percent(rng, odds.success_probability)

    injuries: Dict[str, Optional[InjurySeverity]] = {}
    for hero_id in odds.hero_ids:
        if roll_percent(rng, odds.injury_avoid_probability):
            injuries[hero_id] = None
        else:
            injuries[hero_id] = draw_severity(rng, odds.injury_avoid_probability)

    return QuestResolution(odds=odds, success=success, injuries=injuries)


def resolve_quest(
    party: Party, quest: Quest, rng: RandomSource
) -> QuestResolution:
    return draw_outcome(evaluate_odds(party, quest), rng)
