"""Simple per-user throttle to prevent rapid-fire searches."""

from __future__ import annotations

import time
from collections import defaultdict, deque
from typing import Any, Awaitable, Callable, Deque, Dict

from aiogram import BaseMiddleware
from aiogram.types import Message, TelegramObject

from relic_search.bot.utils.telegram import answer_with_retry
from relic_search.config import SearchBotSettings, get_settings
from relic_search.i18n import I18nService
from relic_search.logging import logger


class ThrottleMiddleware(BaseMiddleware):
    def __init__(
        self,
        settings: SearchBotSettings | None = None,
        *,
        i18n: I18nService | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.i18n = i18n or I18nService(default_locale=self.settings.default_language)
        self.window_seconds = self.settings.request_limit.interval_seconds
        self.max_requests = self.settings.request_limit.max_requests
        self._events: Dict[int, Deque[float]] = defaultdict(deque)

    async def __call__(
        self,
        handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: Dict[str, Any],
    ) -> Any:
        if not isinstance(event, Message) or event.from_user is None:
            return await handler(event, data)

        if self.max_requests <= 0:
            return await handler(event, data)

        user_id = event.from_user.id
        now = time.monotonic()
        bucket = self._events[user_id]

        while bucket and now - bucket[0] > self.window_seconds:
            bucket.popleft()

        if len(bucket) >= self.max_requests:
            logger.info("request_throttled", user_id=user_id, window_seconds=self.window_seconds)
            locale = getattr(event.from_user, "language_code", None)
            await answer_with_retry(
                event,
                self.i18n.gettext("throttle.limited", locale=locale),
                parse_mode=None,
            )
            return None

        bucket.append(now)
        return await handler(event, data)


__all__ = ["ThrottleMiddleware"]
