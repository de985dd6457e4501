"""GuildPersistenceService 테스트 (인메모리 SQLite)

A reloaded game must continue exactly like the one that was saved.
"""

from dataclasses import asdict

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from src.core.event_bus import EventBus
from src.core.guild.models import InjurySeverity, Item, ItemKind
from src.core.guild.injury import apply_injury
from src.db.database import init_db
from src.db.models import GuildModel, HeroModel
from src.services.guild_service import GuildService
from src.services.persistence_service import GuildPersistenceService


@pytest.fixture()
def session_factory():
    engine = create_engine("sqlite:///:memory:")
    init_db(engine)
    return sessionmaker(bind=engine)


def _played_service() -> GuildService:
    """시드 고정 게임을 조금 진행한 상태"""
    service = GuildService.new_game(EventBus(), seed=13, gold=400, starting_heroes=4)
    guild = service.guild
    heroes = service.get_roster()
    heroes[0].set_opinion(heroes[1].hero_id, 3)
    heroes[1].set_opinion(heroes[0].hero_id, -2)
    heroes[1].companions.add(heroes[2].hero_id)
    apply_injury(heroes[3], InjurySeverity.HEAVY)
    heroes[0].quest_weeks_remaining = 2
    guild.storage["item_90001"] = Item(item_id="item_90001", name="Charm", effectiveness_bonus=0.1)
    guild.unlocks["item_90002"] = Item(item_id="item_90002", kind=ItemKind.CHARTER)
    heroes[2].item = Item(item_id="item_90003", name="Longsword", effectiveness_bonus=0.05)
    service.advance_week()
    return service


class TestSaveLoad:
    def test_roundtrip_restores_guild(self, session_factory):
        service = _played_service()
        GuildPersistenceService(session_factory()).save(service.guild, service.rng)

        loaded = GuildPersistenceService(session_factory()).load(service.guild.guild_id)

        assert loaded is not None
        guild, rng = loaded
        assert guild == service.guild
        assert list(guild.roster) == list(service.guild.roster)
        assert list(guild.quest_board) == list(service.guild.quest_board)
        assert rng.getstate() == service.rng.getstate()
        assert guild.roster[service.get_roster()[0].hero_id].quest_weeks_remaining == 1

    def test_loaded_game_continues_identically(self, session_factory):
        service = _played_service()
        GuildPersistenceService(session_factory()).save(service.guild, service.rng)
        restored = GuildPersistenceService(session_factory()).load_service(
            service.guild.guild_id, EventBus()
        )

        original_report = service.advance_month()
        restored_report = restored.advance_month()

        assert asdict(restored_report) == asdict(original_report)
        assert restored.guild == service.guild

    def test_resave_replaces_previous(self, session_factory):
        service = _played_service()
        persistence = GuildPersistenceService(session_factory())
        persistence.save(service.guild, service.rng)
        service.dismiss_hero(service.get_roster()[0].hero_id)
        persistence.save(service.guild, service.rng)

        db = session_factory()
        assert db.query(GuildModel).count() == 1
        roster_rows = db.query(HeroModel).filter(HeroModel.membership == "roster").count()
        assert roster_rows == len(service.guild.roster)

    def test_two_guilds_share_hero_ids(self, session_factory):
        first = GuildService.new_game(EventBus(), seed=1)
        second = GuildService.new_game(EventBus(), seed=1)
        second.guild.guild_id = "guild_second"
        persistence = GuildPersistenceService(session_factory())
        persistence.save(first.guild, first.rng)
        persistence.save(second.guild, second.rng)

        assert persistence.exists("guild_main")
        assert persistence.exists("guild_second")

    def test_missing_guild(self, session_factory):
        persistence = GuildPersistenceService(session_factory())
        assert persistence.load("nope") is None
        assert persistence.load_service("nope", EventBus()) is None
        assert not persistence.exists("nope")
