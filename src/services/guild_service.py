"""Guild Service — 길드 운영 진입점

Core 규칙을 조합해 게임 상태를 변경하고 EventBus로 알린다.
Every mutating call validates fully before touching the Guild, so a
raised GuildError is a no-op on the domain model. Draws come from the
injected random source in a fixed order: one seed, one game.
"""

import logging
import random
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from src.core.event_bus import EventBus, GameEvent
from src.core.event_types import EventTypes
from src.core.guild.economy import (
    WEEKS_PER_MONTH,
    advance_quest_expiry,
    apply_dismissal_penalty,
    apply_pending_reputation,
    award_hero_experience,
    create_guild,
    refresh_quest_board,
    roll_recruitment_offers,
    total_salary,
)
from src.core.guild.errors import (
    GameOver,
    HeroNotFound,
    InsufficientGold,
    InvalidEquipment,
    InvalidPartyComposition,
    ItemNotFound,
    MonthEndReached,
    OfferNotFound,
    QuestExpired,
    QuestNotOffered,
)
from src.core.guild.injury import (
    advance_quest_timers,
    advance_roster_timers,
    apply_injury,
    bury_fallen,
    dispatch_party,
    release_hero,
)
from src.core.guild.models import (
    REPUTATION_MAX,
    GameStatus,
    Guild,
    Hero,
    ItemKind,
    Quest,
    RecruitmentOffer,
)
from src.core.guild.opinions import (
    apply_opinion_updates,
    compute_opinion_updates,
    decay_bonded_opinions,
    record_companions,
)
from src.core.guild.party import Party, assemble_party
from src.core.guild.resolution import (
    QuestResolution,
    ResolutionOdds,
    draw_outcome,
    evaluate_odds,
)
from src.core.guild.rng import create_random_source
from src.services.guild_types import (
    DismissalResult,
    GrantedRewards,
    HeroInjuryDetail,
    MonthlyReport,
    QuestOutcome,
    WeeklyReport,
)

logger = logging.getLogger(__name__)

SOURCE = "guild_service"


class GuildService:
    """퀘스트 판정, 월간 진행, 모집, 해고, 장비 관리"""

    def __init__(self, guild: Guild, rng: random.Random, event_bus: EventBus) -> None:
        self._guild = guild
        self._rng = rng
        self._bus = event_bus

    @classmethod
    def new_game(
        cls,
        event_bus: EventBus,
        seed: int = 42,
        name: str = "Guild",
        gold: int = 200,
        starting_heroes: int = 3,
    ) -> "GuildService":
        rng = create_random_source(seed)
        guild = create_guild(rng, name=name, gold=gold, starting_heroes=starting_heroes)
        return cls(guild, rng, event_bus)

    # ── 조회 ─────────────────────────────────────────────────

    @property
    def guild(self) -> Guild:
        return self._guild

    @property
    def rng(self) -> random.Random:
        return self._rng

    def get_roster(self) -> List[Hero]:
        return list(self._guild.roster.values())

    def get_hero(self, hero_id: str) -> Hero:
        hero = self._guild.roster.get(hero_id)
        if hero is None:
            raise HeroNotFound(f"Hero not on the roster: {hero_id}", {"hero_id": hero_id})
        return hero

    def get_quest_board(self) -> List[Quest]:
        return list(self._guild.quest_board.values())

    def get_offers(self) -> List[RecruitmentOffer]:
        return list(self._guild.offers.values())

    def get_opinions(self, hero_id: str) -> Dict[str, int]:
        """Outgoing opinions of one hero toward every other roster hero."""
        hero = self.get_hero(hero_id)
        return {
            other_id: hero.opinion_of(other_id)
            for other_id in self._guild.roster
            if other_id != hero_id
        }

    def salary_due(self) -> Dict[str, int]:
        return {hero_id: hero.salary for hero_id, hero in self._guild.roster.items()}

    def preview_odds(self, hero_ids: Sequence[str], quest_id: str) -> ResolutionOdds:
        """Probabilities for a prospective party, without drawing anything."""
        quest = self._offered_quest(quest_id)
        party = assemble_party(self._guild.roster, hero_ids)
        return evaluate_odds(party, quest)

    # ── 퀘스트 시도 ──────────────────────────────────────────

    def submit_quest_attempt(self, hero_ids: Sequence[str], quest_id: str) -> QuestOutcome:
        """파티 + 퀘스트 → 판정 → 부상/의견/보상 적용."""
        return self.submit_quest_attempts([(hero_ids, quest_id)])[0]

    def submit_quest_attempts(
        self, attempts: Sequence[Tuple[Sequence[str], str]]
    ) -> List[QuestOutcome]:
        """여러 파티 동시 시도.

        All attempts are validated, then odds for every party are evaluated
        (pure, order-free). Draws and state changes then happen strictly in
        submission order. Any invalid attempt rejects the whole batch.
        """
        self._ensure_active()

        seen_heroes: Dict[str, str] = {}
        seen_quests: set = set()
        prepared: List[Tuple[Party, Quest]] = []
        for hero_ids, quest_id in attempts:
            if quest_id in seen_quests:
                raise QuestNotOffered(
                    f"Quest already claimed in this batch: {quest_id}",
                    {"quest_id": quest_id},
                )
            quest = self._offered_quest(quest_id)
            party = assemble_party(self._guild.roster, hero_ids)
            clashes = [hid for hid in party.hero_ids if hid in seen_heroes]
            if clashes:
                raise InvalidPartyComposition(
                    f"Heroes assigned to more than one party: {clashes}",
                    {"heroes": {hid: seen_heroes[hid] for hid in clashes}},
                )
            for hid in party.hero_ids:
                seen_heroes[hid] = quest_id
            seen_quests.add(quest_id)
            prepared.append((party, quest))

        odds_list = [evaluate_odds(party, quest) for party, quest in prepared]

        outcomes: List[QuestOutcome] = []
        try:
            for (party, quest), odds in zip(prepared, odds_list):
                resolution = draw_outcome(odds, self._rng)
                outcomes.append(self._apply_resolution(party, quest, resolution))
        finally:
            self._bus.reset_chain()
        return outcomes

    def _offered_quest(self, quest_id: str) -> Quest:
        quest = self._guild.quest_board.get(quest_id)
        if quest is None:
            raise QuestNotOffered(
                f"Quest not on the board: {quest_id}", {"quest_id": quest_id}
            )
        if quest.is_expired:
            raise QuestExpired(
                f"Quest has expired: {quest_id}",
                {"quest_id": quest_id, "expires_in_weeks": quest.expires_in_weeks},
            )
        return quest

    def _apply_resolution(
        self, party: Party, quest: Quest, resolution: QuestResolution
    ) -> QuestOutcome:
        heroes = list(party.heroes)
        odds = resolution.odds

        # 1. 의견: 퀘스트 전 스냅샷 기준
        updates = compute_opinion_updates(heroes, resolution.success, resolution.injured_ids)
        apply_opinion_updates(heroes, updates)
        record_companions(heroes)

        # 2. 부상
        injuries: Dict[str, HeroInjuryDetail] = {}
        for hero in heroes:
            severity = resolution.injuries.get(hero.hero_id)
            if severity is not None:
                apply_injury(hero, severity)
                self._emit(
                    EventTypes.HERO_INJURED,
                    {
                        "hero_id": hero.hero_id,
                        "name": hero.name,
                        "severity": severity.value,
                        "weeks_remaining": hero.weeks_remaining,
                    },
                    key=hero.hero_id,
                )

        # 2-1. 생존자는 퀘스트 기간 동안 파견
        dispatch_party(heroes, quest.duration_weeks)
        for hero in heroes:
            severity = resolution.injuries.get(hero.hero_id)
            injuries[hero.hero_id] = HeroInjuryDetail(
                hero_id=hero.hero_id,
                severity=severity.value if severity is not None else None,
                injury=hero.injury.value,
                weeks_remaining=hero.weeks_remaining,
                quest_weeks_remaining=hero.quest_weeks_remaining,
            )

        # 3. 보상: 영웅 경험치는 성패 무관, 골드/아이템/평판은 성공 시만
        rewards = GrantedRewards(hero_experience=quest.rewards.hero_experience)
        level_ups: Dict[str, int] = {}
        for hero in heroes:
            if hero.is_dead:
                continue
            if award_hero_experience(hero, quest.rewards.hero_experience):
                level_ups[hero.hero_id] = hero.level
                self._emit(
                    EventTypes.HERO_LEVELLED_UP,
                    {"hero_id": hero.hero_id, "name": hero.name, "level": hero.level},
                    key=hero.hero_id,
                )

        if resolution.success:
            rewards.gold = quest.rewards.gold
            rewards.reputation_experience = quest.rewards.reputation_experience
            self._guild.gold += quest.rewards.gold
            self._guild.pending_reputation_experience += quest.rewards.reputation_experience
            item = quest.rewards.item
            if item is not None:
                rewards.item_id = item.item_id
                if item.kind == ItemKind.CHARTER:
                    self._guild.unlocks[item.item_id] = item
                else:
                    self._guild.storage[item.item_id] = item
                self._emit(
                    EventTypes.ITEM_AWARDED,
                    {"item_id": item.item_id, "name": item.name, "kind": item.kind.value},
                    key=item.item_id,
                )

        # 4. 퀘스트 종료 (성패 무관 게시판에서 제거)
        del self._guild.quest_board[quest.quest_id]
        self._emit(
            EventTypes.QUEST_COMPLETED if resolution.success else EventTypes.QUEST_FAILED,
            {
                "quest_id": quest.quest_id,
                "title": quest.title,
                "hero_ids": list(party.hero_ids),
                "success_probability": odds.success_probability,
                "gold": rewards.gold,
            },
            key=quest.quest_id,
        )

        # 5. 사망자 즉시 로스터 제거
        deaths = [h.hero_id for h in bury_fallen(self._guild)]
        for hero in heroes:
            if hero.hero_id in deaths:
                self._emit(
                    EventTypes.HERO_DIED,
                    {"hero_id": hero.hero_id, "name": hero.name},
                    key=hero.hero_id,
                )
        opinions = {
            observer: {s: v for s, v in row.items() if s not in deaths}
            for observer, row in updates.items()
            if observer not in deaths
        }

        logger.info(
            f"Quest {quest.quest_id} {'succeeded' if resolution.success else 'failed'} "
            f"(p={odds.success_probability:.1f}%) party={list(party.hero_ids)} "
            f"injured={sorted(resolution.injured_ids)} deaths={deaths}"
        )

        return QuestOutcome(
            quest_id=quest.quest_id,
            hero_ids=list(party.hero_ids),
            success=resolution.success,
            success_probability=odds.success_probability,
            injury_avoid_probability=odds.injury_avoid_probability,
            level_delta=odds.synergy.level_delta,
            relationship_factor=odds.synergy.relationship_factor,
            equipment_factor=odds.synergy.equipment_factor,
            injuries=injuries,
            rewards=rewards,
            opinions=opinions,
            level_ups=level_ups,
            deaths=deaths,
        )

    # ── 시간 진행 ────────────────────────────────────────────

    def advance_week(self) -> WeeklyReport:
        """월중 1주 진행: 부상/파견 타이머, 퀘스트 만료 카운트다운.

        The final week of a month is closed by advance_month.
        """
        self._ensure_active()
        if self._guild.week >= WEEKS_PER_MONTH - 1:
            raise MonthEndReached(
                "Last week of the month: advance the month instead",
                {"month": self._guild.month, "week": self._guild.week},
            )

        try:
            recoveries, returned = self._advance_timers(1)
            self._guild.week += 1
        finally:
            self._bus.reset_chain()
        return WeeklyReport(week=self._guild.week, recoveries=recoveries, returned=returned)

    def advance_month(self, dismissals: Iterable[str] = ()) -> MonthlyReport:
        """월간 틱. 순서 고정:

        1. 부상/파견 타이머 진행 + 자동 회복, Bonded 의견 감쇠
        2. 해고(선택) 후 급여 차감. 적자면 패배하고 이후 단계는 중단
        3. 해고마다 평판 패널티
        4. 게시판 갱신 (만료 제거 + 신규 게시)
        5. 모집 제안 추첨
        6. 평판 경험치 반영, 평판 10 도달 시 승리
        """
        self._ensure_active()
        dismiss_ids = list(dict.fromkeys(dismissals))
        missing = [hid for hid in dismiss_ids if hid not in self._guild.roster]
        if missing:
            raise HeroNotFound(f"Cannot dismiss unknown heroes: {missing}", {"missing": missing})

        guild = self._guild
        report = MonthlyReport(month=guild.month)
        try:
            # 1
            report.recoveries, report.returned = self._advance_timers(
                WEEKS_PER_MONTH - guild.week
            )
            for hero in guild.roster.values():
                changed = decay_bonded_opinions(hero)
                if changed:
                    report.opinion_decay[hero.hero_id] = changed
                hero.companions.clear()

            # 2 + 3
            for hero_id in dismiss_ids:
                report.dismissed.append(self._dismiss(hero_id))

            report.salaries = self.salary_due()
            report.salary_total = total_salary(guild)
            guild.gold -= report.salary_total
            report.gold = guild.gold
            logger.info(
                f"Month {guild.month}: paid {report.salary_total} salary, gold={guild.gold}"
            )

            if guild.gold < 0:
                report.shortfall = -guild.gold
                report.is_lost = True
                guild.status = GameStatus.LOST
                report.reputation_level = guild.reputation_level
                logger.warning(
                    f"Guild {guild.guild_id} bankrupt: shortfall {report.shortfall} gold"
                )
                self._emit(
                    EventTypes.GAME_LOST,
                    {"month": guild.month, "shortfall": report.shortfall},
                )
                return report

            # 4
            expired, posted = refresh_quest_board(guild, self._rng)
            report.expired_quests = [q.quest_id for q in expired]
            report.posted_quests = [q.quest_id for q in posted]
            report.quest_board = list(guild.quest_board)
            for quest in expired:
                self._emit(
                    EventTypes.QUEST_EXPIRED,
                    {"quest_id": quest.quest_id, "title": quest.title},
                    key=quest.quest_id,
                )
            for quest in posted:
                self._emit(
                    EventTypes.QUEST_POSTED,
                    {
                        "quest_id": quest.quest_id,
                        "title": quest.title,
                        "difficulty": quest.difficulty,
                    },
                    key=quest.quest_id,
                )

            # 5
            guild.offers = {
                offer.offer_id: offer for offer in roll_recruitment_offers(guild, self._rng)
            }
            report.recruitment_offers = list(guild.offers)

            # 6
            report.reputation_delta = apply_pending_reputation(guild)
            report.reputation_level = guild.reputation_level
            if report.reputation_delta:
                self._emit(
                    EventTypes.REPUTATION_CHANGED,
                    {"delta": report.reputation_delta, "level": guild.reputation_level},
                )

            finished_month = guild.month
            guild.month += 1
            guild.week = 0
            report.gold = guild.gold
            self._emit(
                EventTypes.MONTH_ADVANCED,
                {"month": finished_month, "gold": guild.gold},
            )

            if guild.reputation_level >= REPUTATION_MAX:
                report.is_won = True
                guild.status = GameStatus.WON
                logger.info(f"Guild {guild.guild_id} reached reputation {REPUTATION_MAX}")
                self._emit(EventTypes.GAME_WON, {"month": finished_month})
            return report
        finally:
            self._bus.reset_chain()

    def _advance_timers(self, weeks: int) -> Tuple[List[str], List[str]]:
        """부상 회복 id, 퀘스트 복귀 id"""
        recoveries = advance_roster_timers(self._guild, weeks)
        returned = advance_quest_timers(self._guild, weeks)
        advance_quest_expiry(self._guild, weeks)
        for recovery in recoveries:
            self._emit(
                EventTypes.HERO_RECOVERED,
                {
                    "hero_id": recovery.hero_id,
                    "from": recovery.from_state.value,
                    "to": recovery.to_state.value,
                },
                key=recovery.hero_id,
            )
        return [r.hero_id for r in recoveries], returned

    # ── 모집 / 해고 ──────────────────────────────────────────

    def accept_recruitment(self, offer_id: str) -> Hero:
        """계약금 지불 후 로스터 합류."""
        self._ensure_active()
        offer = self._guild.offers.get(offer_id)
        if offer is None:
            raise OfferNotFound(f"No pending offer: {offer_id}", {"offer_id": offer_id})
        if self._guild.gold < offer.signing_bonus:
            raise InsufficientGold(
                f"Signing bonus {offer.signing_bonus} exceeds gold {self._guild.gold}",
                {"required": offer.signing_bonus, "available": self._guild.gold},
            )

        self._guild.gold -= offer.signing_bonus
        del self._guild.offers[offer_id]
        hero = offer.hero
        self._guild.roster[hero.hero_id] = hero
        try:
            self._emit(
                EventTypes.HERO_RECRUITED,
                {
                    "hero_id": hero.hero_id,
                    "name": hero.name,
                    "level": hero.level,
                    "hero_class": hero.hero_class.value,
                    "personality": hero.personality.value,
                    "signing_bonus": offer.signing_bonus,
                },
                key=hero.hero_id,
            )
        finally:
            self._bus.reset_chain()
        logger.info(f"Recruited {hero.hero_id} for {offer.signing_bonus} gold")
        return hero

    def dismiss_hero(self, hero_id: str) -> DismissalResult:
        """해고. 평판 패널티 고정 적용."""
        self._ensure_active()
        self.get_hero(hero_id)
        try:
            return self._dismiss(hero_id)
        finally:
            self._bus.reset_chain()

    def _dismiss(self, hero_id: str) -> DismissalResult:
        item = self._guild.roster[hero_id].item
        hero = release_hero(self._guild, hero_id)
        penalty = apply_dismissal_penalty(self._guild)
        self._emit(
            EventTypes.HERO_DISMISSED,
            {"hero_id": hero_id, "name": hero.name, "reputation_penalty": penalty},
            key=hero_id,
        )
        logger.info(f"Dismissed {hero_id}, reputation -{penalty}")
        return DismissalResult(
            hero_id=hero_id,
            reputation_penalty=penalty,
            returned_item_id=item.item_id if item is not None else None,
        )

    # ── 장비 ─────────────────────────────────────────────────

    def equip_item(self, hero_id: str, item_id: str) -> Optional[str]:
        """창고 장비를 영웅에게 장착. 기존 장비는 창고로. 반환: 빠진 장비 id."""
        self._ensure_active()
        hero = self.get_hero(hero_id)
        item = self._guild.storage.get(item_id)
        if item is None:
            if item_id in self._guild.unlocks:
                raise InvalidEquipment(
                    f"Guild charters cannot be equipped: {item_id}", {"item_id": item_id}
                )
            raise ItemNotFound(f"Item not in guild storage: {item_id}", {"item_id": item_id})
        if not item.usable_by(hero.hero_class):
            raise InvalidEquipment(
                f"{item.name or item_id} cannot be used by a {hero.hero_class.value}",
                {
                    "item_id": item_id,
                    "class_restriction": item.class_restriction.value
                    if item.class_restriction
                    else None,
                    "hero_class": hero.hero_class.value,
                },
            )

        previous = hero.item
        del self._guild.storage[item_id]
        if previous is not None:
            self._guild.storage[previous.item_id] = previous
        hero.item = item
        logger.info(f"Hero {hero_id} equipped {item_id}")
        return previous.item_id if previous is not None else None

    def unequip_item(self, hero_id: str) -> str:
        self._ensure_active()
        hero = self.get_hero(hero_id)
        if hero.item is None:
            raise ItemNotFound(f"Hero {hero_id} has nothing equipped", {"hero_id": hero_id})
        item = hero.item
        hero.item = None
        self._guild.storage[item.item_id] = item
        return item.item_id

    # ── 내부 ─────────────────────────────────────────────────

    def _ensure_active(self) -> None:
        if self._guild.is_over:
            raise GameOver(
                f"The game has ended: {self._guild.status.value}",
                {"status": self._guild.status.value},
            )

    def _emit(self, event_type: str, data: dict, key: str = "") -> None:
        self._bus.emit(GameEvent(event_type=event_type, data=data, source=SOURCE, key=key))
