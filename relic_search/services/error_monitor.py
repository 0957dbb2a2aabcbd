"""Notify the administrator about unhandled bot errors."""

from __future__ import annotations

import json
import traceback
from typing import Any

from aiogram import Bot
from aiogram.dispatcher.event.bases import UNHANDLED
from aiogram.types import Chat, ErrorEvent, User

from relic_search.bot.presenter import SearchViewRegistry
from relic_search.bot.utils.telegram import bot_send_with_retry
from relic_search.config import SearchBotSettings
from relic_search.logging import logger

# Telegram messages are limited to 4096 characters.
TELEGRAM_MESSAGE_LIMIT = 3900
TRACEBACK_CHAR_LIMIT = 1800
PAYLOAD_CHAR_LIMIT = 1200


class ErrorMonitor:
    """Error observer for the dispatcher.

    Every unhandled exception is logged; when ``admin_telegram_id`` is set a
    plain-text report is also sent there, including the search state of the
    affected chat so a failing query can be replayed.
    """

    def __init__(
        self,
        settings: SearchBotSettings,
        registry: SearchViewRegistry | None = None,
    ) -> None:
        self._settings = settings
        self._registry = registry

    async def handle_error(self, event: ErrorEvent, bot: Bot):
        update_id = getattr(event.update, "update_id", None)
        logger.error(
            "bot_error_captured",
            exception_type=event.exception.__class__.__name__,
            exception=str(event.exception),
            update_id=update_id,
        )

        admin_id = self._settings.admin_telegram_id
        if admin_id is None:
            return UNHANDLED

        report = self.build_report(event)
        try:
            await bot_send_with_retry(bot, chat_id=admin_id, text=report, parse_mode=None)
        except Exception:
            logger.exception("error_monitor_notification_failed", update_id=update_id)
        return UNHANDLED

    def build_report(self, event: ErrorEvent) -> str:
        update = event.update
        exception = event.exception
        message = getattr(update, "message", None)
        user = getattr(message, "from_user", None)
        chat = getattr(message, "chat", None)

        lines = [
            "RELIC SEARCH BOT ERROR",
            f"Environment: {self._settings.environment}",
            f"Exception: {exception.__class__.__name__}: {exception}",
            f"Update ID: {getattr(update, 'update_id', 'unknown')}",
            f"User: {self._format_user(user)}",
            f"Chat: {self._format_chat(chat)}",
        ]
        if message is not None and getattr(message, "text", None):
            lines.append(f"Text: {self._truncate(message.text, 200)}")

        search_state = self._describe_search_state(chat)
        if search_state:
            lines.extend(["", "Search state:", search_state])

        trace = self._format_traceback(exception)
        if trace:
            lines.extend(["", "Traceback:", trace])

        return self._truncate("\n".join(lines), TELEGRAM_MESSAGE_LIMIT)

    def _describe_search_state(self, chat: Chat | None) -> str:
        if chat is None or self._registry is None:
            return ""
        view = self._registry.peek(chat.id)
        if view is None:
            return ""
        state = view.state
        payload: dict[str, Any] = {
            "query": state.query,
            "loading": state.loading,
            "error": state.error,
            "has_searched": state.has_searched,
            "result_count": len(state.results),
        }
        return self._truncate(json.dumps(payload, ensure_ascii=False, indent=2), PAYLOAD_CHAR_LIMIT)

    @staticmethod
    def _format_user(user: User | None) -> str:
        if user is None:
            return "unknown"
        segments = [str(user.id)]
        if user.full_name:
            segments.append(user.full_name)
        if user.username:
            segments.append(f"@{user.username}")
        return " | ".join(segments)

    @staticmethod
    def _format_chat(chat: Chat | None) -> str:
        if chat is None:
            return "unknown"
        segments = [str(chat.id), chat.type, chat.title or chat.username or ""]
        return " | ".join(segment for segment in segments if segment)

    def _format_traceback(self, exception: BaseException) -> str:
        trace = "".join(traceback.format_exception(exception.__class__, exception, exception.__traceback__))
        return self._truncate(trace.strip(), TRACEBACK_CHAR_LIMIT) if trace.strip() else ""

    @staticmethod
    def _truncate(value: str, limit: int) -> str:
        value = value.strip()
        if len(value) <= limit:
            return value
        return f"{value[: limit - 15].rstrip()}\n...[truncated]"


__all__ = ["ErrorMonitor"]
