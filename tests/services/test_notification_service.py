"""NotificationService 테스트"""

from src.core.event_bus import EventBus, GameEvent
from src.core.event_types import EventTypes
from src.core.guild.models import Guild, Hero, Quest, RewardBundle
from src.services.guild_service import GuildService
from src.services.notification_service import NotificationService


class AlwaysZero:
    def random(self) -> float:
        return 0.0

    def randint(self, a: int, b: int) -> int:
        return a

    def choice(self, seq):
        return seq[0]


def _emit(bus: EventBus, event_type: str, data: dict) -> None:
    bus.emit(GameEvent(event_type=event_type, data=data, source="test"))
    bus.reset_chain()


class TestNotificationService:
    def test_subscribes_to_every_event_type(self):
        bus = EventBus()
        NotificationService(bus)
        assert bus.handler_count == len(EventTypes.ALL)

    def test_formats_message(self):
        bus = EventBus()
        service = NotificationService(bus)
        _emit(bus, EventTypes.HERO_DIED, {"hero_id": "hero_00001", "name": "Aldric"})
        [notification] = service.list_notifications()
        assert notification.message == "Aldric died on a quest"
        assert notification.event_type == EventTypes.HERO_DIED
        assert notification.is_unread

    def test_missing_template_data_falls_back(self):
        bus = EventBus()
        service = NotificationService(bus)
        _emit(bus, EventTypes.HERO_DIED, {"hero_id": "hero_00001"})
        [notification] = service.list_notifications()
        assert notification.message.startswith(EventTypes.HERO_DIED)

    def test_mark_all_read(self):
        bus = EventBus()
        service = NotificationService(bus)
        _emit(bus, EventTypes.GAME_WON, {"month": 12})
        _emit(bus, EventTypes.QUEST_FAILED, {"title": "Hunt the marsh wyrm"})
        assert service.unread_count == 2
        assert service.mark_all_read() == 2
        assert service.unread_count == 0
        assert service.list_notifications(unread_only=True) == []
        assert len(service.list_notifications()) == 2

    def test_detach(self):
        bus = EventBus()
        service = NotificationService(bus)
        service.detach()
        assert bus.handler_count == 0
        _emit(bus, EventTypes.GAME_WON, {"month": 1})
        assert service.list_notifications() == []

    def test_guild_actions_produce_notifications(self):
        bus = EventBus()
        notifications = NotificationService(bus)
        guild = Guild(guild_id="g", gold=100)
        for hero_id in ("a", "b", "c"):
            guild.roster[hero_id] = Hero(hero_id=hero_id, name=hero_id.upper())
        guild.quest_board["q1"] = Quest(
            quest_id="q1",
            title="Guard the harvest fair",
            rewards=RewardBundle(gold=35),
        )
        GuildService(guild, AlwaysZero(), bus).submit_quest_attempt(["a", "b", "c"], "q1")

        messages = [n.message for n in notifications.list_notifications()]
        assert "Quest completed: Guard the harvest fair. Gold reward: 35" in messages
