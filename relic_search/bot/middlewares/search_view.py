"""Attach the chat's ``SearchView`` to handler data."""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Dict

import structlog
from aiogram import BaseMiddleware
from aiogram.types import TelegramObject

from relic_search.bot.presenter import SearchViewRegistry


class SearchViewMiddleware(BaseMiddleware):
    def __init__(self, registry: SearchViewRegistry) -> None:
        self.registry = registry

    async def __call__(
        self,
        handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: Dict[str, Any],
    ) -> Any:
        chat = getattr(event, "chat", None)
        bot = data.get("bot") or getattr(event, "bot", None)
        if chat is None or bot is None:
            return await handler(event, data)

        data["search_view"] = self.registry.get(bot, chat.id)
        with structlog.contextvars.bound_contextvars(chat_id=chat.id):
            return await handler(event, data)


__all__ = ["SearchViewMiddleware"]
