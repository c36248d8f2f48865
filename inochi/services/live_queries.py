"""
Живые запросы: явная подписка на снимки результатов.

Подписчик регистрирует тему, функцию выборки и колбэк. Текущий снимок
доставляется сразу при подписке, затем после каждой публикации темы
(мутации скиллов, справочников, заявок). Подписка живёт столько же,
сколько потребитель (например, WebSocket-соединение), и закрывается явно.

publish выполняется внутри мутирующего запроса: выборки подписчиков идут
параллельно, и каждая ограничена LIVE_QUERY_TIMEOUT, поэтому зависший
клиент задерживает ответ не больше чем на таймаут.
"""
import asyncio
import logging
from collections import defaultdict
from typing import Any, Awaitable, Callable, Dict, List, Optional

from inochi.core.config import settings

logger = logging.getLogger(__name__)

SKILLS_TOPIC = "skills"
CATALOG_TOPIC = "catalog"
SUBMISSIONS_TOPIC = "submissions"

Fetch = Callable[[], Awaitable[Any]]
Callback = Callable[[Any], Awaitable[None]]


class Subscription:
    def __init__(self, hub: "QueryHub", topic: str, fetch: Fetch, callback: Callback):
        self.hub = hub
        self.topic = topic
        self.fetch = fetch
        self.callback = callback
        self.active = True

    async def refresh(self) -> None:
        snapshot = await self.fetch()
        if self.active:
            await self.callback(snapshot)

    def close(self) -> None:
        self.hub.unsubscribe(self)


class QueryHub:
    def __init__(self, timeout: Optional[float] = None):
        self._subscriptions: Dict[str, List[Subscription]] = defaultdict(list)
        self.timeout = timeout or settings.LIVE_QUERY_TIMEOUT

    def subscriber_count(self, topic: str) -> int:
        return len(self._subscriptions.get(topic, []))

    async def subscribe(self, topic: str, fetch: Fetch, callback: Callback) -> Subscription:
        """Зарегистрировать подписку и сразу доставить текущий снимок."""
        subscription = Subscription(self, topic, fetch, callback)
        self._subscriptions[topic].append(subscription)
        try:
            await subscription.refresh()
        except Exception:
            self.unsubscribe(subscription)
            raise
        logger.debug(f"Подписка на '{topic}' ({self.subscriber_count(topic)} активных)")
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        if not subscription.active:
            return
        subscription.active = False
        subscribers = self._subscriptions.get(subscription.topic, [])
        if subscription in subscribers:
            subscribers.remove(subscription)
        if not subscribers:
            self._subscriptions.pop(subscription.topic, None)

    async def _deliver(self, subscription: Subscription) -> bool:
        try:
            await asyncio.wait_for(subscription.refresh(), timeout=self.timeout)
            return True
        except asyncio.TimeoutError:
            logger.warning(f"Снимок '{subscription.topic}' не доставлен за {self.timeout} с")
        except Exception as e:
            logger.error(f"Ошибка доставки снимка '{subscription.topic}': {e}")
        return False

    async def publish(self, topic: str) -> int:
        """Перезапустить выборки подписчиков темы. Возвращает число доставленных снимков."""
        subscriptions = list(self._subscriptions.get(topic, []))
        if not subscriptions:
            return 0
        results = await asyncio.gather(*(self._deliver(s) for s in subscriptions))
        return sum(results)


live_hub = QueryHub()
