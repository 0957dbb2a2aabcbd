"""Telegram sending helpers with retry support."""

from __future__ import annotations

from typing import Any

from aiogram import Bot
from aiogram.exceptions import TelegramNetworkError, TelegramRetryAfter, TelegramServerError
from aiogram.types import Message

from relic_search.logging import logger
from relic_search.utils.retry import retry_async

TELEGRAM_SEND_MAX_ATTEMPTS = 3
TELEGRAM_SEND_BASE_DELAY = 0.3
RETRYABLE_ERRORS = (TelegramNetworkError, TelegramRetryAfter, TelegramServerError)


def _flood_wait(exc: BaseException) -> float | None:
    if isinstance(exc, TelegramRetryAfter):
        return float(exc.retry_after)
    return None


async def _with_retry(operation, operation_name: str) -> Any:
    return await retry_async(
        operation,
        max_attempts=TELEGRAM_SEND_MAX_ATTEMPTS,
        base_delay=TELEGRAM_SEND_BASE_DELAY,
        retry_on=RETRYABLE_ERRORS,
        delay_hint=_flood_wait,
        logger=logger,
        operation_name=operation_name,
    )


async def answer_with_retry(message: Message, text: str, **kwargs: Any) -> Any:
    """Send a reply with retry/backoff."""

    async def _send():
        return await message.answer(text, **kwargs)

    return await _with_retry(_send, "telegram_answer")


async def bot_send_with_retry(bot: Bot, *, chat_id: int, text: str, **kwargs: Any) -> Any:
    """Send a message via Bot with retry/backoff."""

    async def _send():
        return await bot.send_message(chat_id=chat_id, text=text, **kwargs)

    return await _with_retry(_send, "telegram_send_message")


async def bot_edit_with_retry(
    bot: Bot,
    *,
    chat_id: int,
    message_id: int,
    text: str,
    **kwargs: Any,
) -> Any:
    """Replace the text of an earlier bot message with retry/backoff."""

    async def _edit():
        return await bot.edit_message_text(
            text=text,
            chat_id=chat_id,
            message_id=message_id,
            **kwargs,
        )

    return await _with_retry(_edit, "telegram_edit_message")


async def bot_delete_with_retry(bot: Bot, *, chat_id: int, message_id: int) -> Any:
    async def _delete():
        return await bot.delete_message(chat_id=chat_id, message_id=message_id)

    return await _with_retry(_delete, "telegram_delete_message")


__all__ = [
    "answer_with_retry",
    "bot_delete_with_retry",
    "bot_edit_with_retry",
    "bot_send_with_retry",
]
