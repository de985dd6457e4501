"""Notification Service — EventBus 이벤트를 플레이어용 알림으로 기록"""

import logging
from dataclasses import dataclass
from typing import Dict, List

from src.core.event_bus import EventBus, GameEvent
from src.core.event_types import EventTypes

logger = logging.getLogger(__name__)


@dataclass
class Notification:
    message: str
    event_type: str
    is_unread: bool = True


# event_type → message template (str.format over event.data)
MESSAGE_TEMPLATES: Dict[str, str] = {
    EventTypes.HERO_RECRUITED: "{name} (level {level} {hero_class}) joined the guild",
    EventTypes.HERO_DISMISSED: "{name} was dismissed (reputation -{reputation_penalty})",
    EventTypes.HERO_INJURED: "{name} suffered a {severity} injury",
    EventTypes.HERO_RECOVERED: "{hero_id} recovered ({from} → {to})",
    EventTypes.HERO_DIED: "{name} died on a quest",
    EventTypes.HERO_LEVELLED_UP: "{name} reached level {level}",
    EventTypes.QUEST_POSTED: "New quest posted: {title} (difficulty {difficulty})",
    EventTypes.QUEST_EXPIRED: "An available quest expired: {title}",
    EventTypes.QUEST_COMPLETED: "Quest completed: {title}. Gold reward: {gold}",
    EventTypes.QUEST_FAILED: "Quest failed: {title}",
    EventTypes.ITEM_AWARDED: "The guild received {name}",
    EventTypes.MONTH_ADVANCED: "Month {month} ended. Gold: {gold}",
    EventTypes.REPUTATION_CHANGED: "Reputation is now level {level}",
    EventTypes.GAME_WON: "The guild reached the highest reputation. Victory!",
    EventTypes.GAME_LOST: "The guild could not pay its heroes ({shortfall} gold short)",
}


class NotificationService:
    """모든 이벤트 유형을 구독하여 알림 목록 유지"""

    def __init__(self, event_bus: EventBus) -> None:
        self._bus = event_bus
        self._notifications: List[Notification] = []
        for event_type in EventTypes.ALL:
            self._bus.subscribe(event_type, self.handle_event)

    def handle_event(self, event: GameEvent) -> None:
        template = MESSAGE_TEMPLATES.get(event.event_type)
        if template is None:
            message = f"{event.event_type}: {event.data}"
        else:
            try:
                message = template.format(**event.data)
            except KeyError:
                logger.warning(f"Notification template missing data: {event.event_type}")
                message = f"{event.event_type}: {event.data}"
        self._notifications.append(Notification(message=message, event_type=event.event_type))
        logger.info(f"Notification: {message}")

    def list_notifications(self, unread_only: bool = False) -> List[Notification]:
        if unread_only:
            return [n for n in self._notifications if n.is_unread]
        return list(self._notifications)

    @property
    def unread_count(self) -> int:
        return sum(1 for n in self._notifications if n.is_unread)

    def mark_all_read(self) -> int:
        count = 0
        for notification in self._notifications:
            if notification.is_unread:
                notification.is_unread = False
                count += 1
        return count

    def detach(self) -> None:
        for event_type in EventTypes.ALL:
            self._bus.unsubscribe(event_type, self.handle_event)
