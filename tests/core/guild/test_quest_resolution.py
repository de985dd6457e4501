"""퀘스트 판정 테스트 — 확률 공식, 심각도 분포, 추첨 순서"""

import random

import pytest

from src.core.guild.models import (
    MAX_ITEM_BONUS,
    Hero,
    HeroClass,
    InjurySeverity,
    Item,
    Quest,
)
from src.core.guild.party import Party, assemble_party
from src.core.guild.resolution import (
    ResolutionOdds,
    draw_outcome,
    draw_severity,
    evaluate_odds,
    injury_avoid_probability,
    resolve_quest,
    severity_distribution,
    success_probability,
)
from src.core.guild.synergy import SynergyTuple


class ScriptedRandom:
    """random()이 미리 정한 값을 순서대로 반환"""

    def __init__(self, values):
        self._values = list(values)
        self.calls = 0

    def random(self) -> float:
        self.calls += 1
        return self._values.pop(0)

    def randint(self, a: int, b: int) -> int:
        return a

    def choice(self, seq):
        return seq[0]


def _odds(success: float, avoid: float) -> ResolutionOdds:
    return ResolutionOdds(
        quest_id="q",
        hero_ids=("a", "b", "c"),
        synergy=SynergyTuple(0.0, 0.0, 0),
        success_probability=success,
        injury_avoid_probability=avoid,
    )


class TestAnchorPoints:
    @pytest.mark.parametrize(
        "relationship, equipment, expected_success, expected_avoid",
        [
            (0, 0, 70, 50),
            (5, 0, 90, 70),
            (5, 1, 100, 80),
            (-5, 0, 50, 30),
        ],
    )
    def test_anchor(self, relationship, equipment, expected_success, expected_avoid):
        synergy = SynergyTuple(level_delta=0.0, relationship_factor=relationship, equipment_factor=equipment)
        assert success_probability(synergy) == pytest.approx(expected_success)
        assert injury_avoid_probability(synergy) == pytest.approx(expected_avoid)


class TestAnchorScenarios:
    """Level-5 trio against a level-5 quest, built from heroes and items."""

    CLASSES = (HeroClass.WARRIOR, HeroClass.TANK, HeroClass.SUPPORT)

    def _party(self, opinion: int = 0, equipped: bool = False) -> Party:
        ids = ("a", "b", "c")
        heroes = []
        for hero_id, hero_class in zip(ids, self.CLASSES):
            item = None
            if equipped:
                item = Item(
                    item_id=f"item_{hero_id}",
                    class_restriction=hero_class,
                    effectiveness_bonus=MAX_ITEM_BONUS,
                )
            heroes.append(
                Hero(
                    hero_id,
                    level=5,
                    hero_class=hero_class,
                    item=item,
                    opinions={other: opinion for other in ids if other != hero_id},
                )
            )
        roster = {h.hero_id: h for h in heroes}
        return assemble_party(roster, ids)

    def _odds(self, party: Party) -> ResolutionOdds:
        return evaluate_odds(party, Quest(quest_id="q", difficulty=5))

    def test_neutral_party(self):
        odds = self._odds(self._party())
        assert odds.synergy == SynergyTuple(0.0, 0.0, 0)
        assert odds.success_probability == pytest.approx(70.0)
        assert odds.injury_avoid_probability == pytest.approx(50.0)

    def test_mutual_trust(self):
        odds = self._odds(self._party(opinion=5))
        assert odds.synergy.relationship_factor == pytest.approx(5.0)
        assert odds.success_probability == pytest.approx(90.0)
        assert odds.injury_avoid_probability == pytest.approx(70.0)

    def test_mutual_trust_fully_equipped(self):
        odds = self._odds(self._party(opinion=5, equipped=True))
        assert odds.synergy.equipment_factor == 1
        assert odds.success_probability == pytest.approx(100.0)
        assert odds.injury_avoid_probability == pytest.approx(80.0)

    def test_mutual_distrust(self):
        odds = self._odds(self._party(opinion=-5))
        assert odds.success_probability == pytest.approx(50.0)
        assert odds.injury_avoid_probability == pytest.approx(30.0)


class TestProbabilityShape:
    def test_clamped_high(self):
        synergy = SynergyTuple(level_delta=5.0, relationship_factor=5.0, equipment_factor=1)
        assert success_probability(synergy) == 100.0

    def test_clamped_low(self):
        synergy = SynergyTuple(level_delta=-9.0, relationship_factor=-5.0, equipment_factor=0)
        assert success_probability(synergy) == 0.0

    def test_level_delta_raises_success(self):
        weak = SynergyTuple(level_delta=-1.0, relationship_factor=0.0, equipment_factor=0)
        strong = SynergyTuple(level_delta=1.0, relationship_factor=0.0, equipment_factor=0)
        assert success_probability(weak) < 70 < success_probability(strong)

    def test_level_delta_does_not_change_injury_avoidance(self):
        weak = SynergyTuple(level_delta=-3.0, relationship_factor=1.0, equipment_factor=0)
        strong = SynergyTuple(level_delta=3.0, relationship_factor=1.0, equipment_factor=0)
        assert injury_avoid_probability(weak) == injury_avoid_probability(strong)

    def test_relationship_monotonic(self):
        values = [
            success_probability(SynergyTuple(0.0, r, 0)) for r in (-5, -2.5, 0, 2.5, 5)
        ]
        assert values == sorted(values)


class TestSeverityDistribution:
    def test_baseline_at_fifty(self):
        dist = severity_distribution(50.0)
        assert dist[InjurySeverity.LIGHT] == pytest.approx(0.70)
        assert dist[InjurySeverity.HEAVY] == pytest.approx(0.20)
        assert dist[InjurySeverity.PERMANENT] == pytest.approx(0.08)
        assert dist[InjurySeverity.DEATH] == pytest.approx(0.02)

    @pytest.mark.parametrize("avoid", [0.0, 30.0, 50.0, 80.0, 100.0])
    def test_sums_to_one(self, avoid):
        assert sum(severity_distribution(avoid).values()) == pytest.approx(1.0)

    def test_worse_classes_grow_as_avoidance_drops(self):
        avoid_values = [100.0, 80.0, 50.0, 30.0, 0.0]
        for severity in (InjurySeverity.HEAVY, InjurySeverity.PERMANENT, InjurySeverity.DEATH):
            shares = [severity_distribution(a)[severity] for a in avoid_values]
            assert shares == sorted(shares)
        lights = [severity_distribution(a)[InjurySeverity.LIGHT] for a in avoid_values]
        assert lights == sorted(lights, reverse=True)

    def test_no_risk_means_light_only(self):
        dist = severity_distribution(100.0)
        assert dist[InjurySeverity.LIGHT] == pytest.approx(1.0)
        assert dist[InjurySeverity.DEATH] == 0.0

    @pytest.mark.parametrize(
        "roll, expected",
        [
            (0.0, InjurySeverity.LIGHT),
            (0.69, InjurySeverity.LIGHT),
            (0.85, InjurySeverity.HEAVY),
            (0.95, InjurySeverity.PERMANENT),
            (0.995, InjurySeverity.DEATH),
        ],
    )
    def test_draw_severity_cumulative(self, roll, expected):
        assert draw_severity(ScriptedRandom([roll]), 50.0) == expected


class TestDrawOutcome:
    def test_draw_order_success_then_per_hero(self):
        # success roll, then avoid roll per hero; an injured hero adds a severity roll
        rng = ScriptedRandom([0.69, 0.10, 0.90, 0.0, 0.20])
        resolution = draw_outcome(_odds(70.0, 50.0), rng)
        assert resolution.success is True
        assert resolution.injuries == {
            "a": None,
            "b": InjurySeverity.LIGHT,
            "c": None,
        }
        assert resolution.injured_ids == {"b"}
        assert resolution.any_injury
        assert rng.calls == 5

    def test_failure_roll(self):
        rng = ScriptedRandom([0.70, 0.0, 0.0, 0.0])
        resolution = draw_outcome(_odds(70.0, 50.0), rng)
        assert resolution.success is False
        assert not resolution.any_injury

    def test_certain_success(self):
        rng = ScriptedRandom([0.9999, 0.0, 0.0, 0.0])
        assert draw_outcome(_odds(100.0, 50.0), rng).success is True

    def test_impossible_success(self):
        rng = ScriptedRandom([0.0, 0.0, 0.0, 0.0])
        assert draw_outcome(_odds(0.0, 50.0), rng).success is False

    def test_seeded_resolution_reproducible(self):
        party = Party(heroes=(Hero("a"), Hero("b"), Hero("c")))
        quest = Quest(quest_id="q", difficulty=1)
        first = resolve_quest(party, quest, random.Random(99))
        second = resolve_quest(party, quest, random.Random(99))
        assert first.success == second.success
        assert first.injuries == second.injuries

    def test_evaluate_odds_neutral_party(self):
        party = Party(heroes=(Hero("a"), Hero("b"), Hero("c")))
        odds = evaluate_odds(party, Quest(quest_id="q", difficulty=1))
        assert odds.success_probability == pytest.approx(70.0)
        assert odds.injury_avoid_probability == pytest.approx(50.0)
        assert odds.hero_ids == ("a", "b", "c")
