"""파티 구성 검증"""

from dataclasses import dataclass
from typing import Dict, Sequence, Tuple

from src.core.guild.errors import HeroUnavailable, InvalidPartyComposition
from src.core.guild.models import Hero

PARTY_SIZE = 3


@dataclass(frozen=True)
class Party:
    """Ordered, exactly-3, distinct and available heroes."""

    heroes: Tuple[Hero, Hero, Hero]

    @property
    def hero_ids(self) -> Tuple[str, ...]:
        return tuple(h.hero_id for h in self.heroes)


def assemble_party(roster: Dict[str, Hero], hero_ids: Sequence[str]) -> Party:
    """roster에서 파티 조립. 실패 시 상태 변경 없이 예외.

    Raises:
        InvalidPartyComposition: wrong size, duplicates, or unknown ids.
        HeroUnavailable: a listed hero is injured, recovering, dead or away on a quest.
    """
    ids = list(hero_ids)
    if len(ids) != PARTY_SIZE:
        raise InvalidPartyComposition(
            f"A party needs exactly {PARTY_SIZE} heroes, got {len(ids)}",
            {"hero_ids": ids, "expected": PARTY_SIZE},
        )
    if len(set(ids)) != PARTY_SIZE:
        raise InvalidPartyComposition(
            "Party heroes must be distinct", {"hero_ids": ids}
        )

    missing = [hid for hid in ids if hid not in roster]
    if missing:
        raise InvalidPartyComposition(
            f"Heroes not on the roster: {missing}", {"missing": missing}
        )

    unavailable = [hid for hid in ids if not roster[hid].is_available]
    if unavailable:
        raise HeroUnavailable(
            f"Heroes unavailable for assignment: {unavailable}",
            {
                "unavailable": {
                    hid: {
                        "injury": roster[hid].injury.value,
                        "weeks_remaining": roster[hid].weeks_remaining,
                        "quest_weeks_remaining": roster[hid].quest_weeks_remaining,
                    }
                    for hid in unavailable
                }
            },
        )

    heroes = tuple(roster[hid] for hid in ids)
    return Party(heroes=heroes)  # type: ignore[arg-type]
