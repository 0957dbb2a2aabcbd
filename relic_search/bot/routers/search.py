"""Telegram handlers driving the per-chat search view."""

from __future__ import annotations

from aiogram import F, Router
from aiogram.filters import Command, CommandObject, CommandStart
from aiogram.types import Message

from relic_search.bot.utils.telegram import answer_with_retry
from relic_search.config import SearchBotSettings
from relic_search.i18n import I18nService
from relic_search.logging import logger
from relic_search.views.search_view import SearchView

router = Router()


def _locale(message: Message) -> str | None:
    return getattr(message.from_user, "language_code", None)


async def _reject_if_busy(message: Message, search_view: SearchView, i18n: I18nService) -> bool:
    if not search_view.state.loading:
        return False
    logger.info("search_busy", chat_id=message.chat.id)
    await answer_with_retry(
        message,
        i18n.gettext("search.busy", locale=_locale(message)),
        parse_mode=None,
    )
    return True


@router.message(CommandStart())
async def handle_start(message: Message, settings: SearchBotSettings, i18n: I18nService) -> None:
    locale = i18n.resolve_locale(_locale(message))
    logger.info("start_command", chat_id=message.chat.id, locale=locale)
    name = message.from_user.full_name if message.from_user else ""
    lines = [
        i18n.gettext("start.greeting", locale=locale, name=name),
        "",
        i18n.gettext("start.usage", locale=locale),
        "",
        i18n.gettext("start.endpoint", locale=locale, endpoint=settings.service.search_url),
    ]
    await answer_with_retry(message, "\n".join(lines), parse_mode=None)


@router.message(Command("search"))
async def handle_search_command(
    message: Message,
    command: CommandObject,
    i18n: I18nService,
    search_view: SearchView | None = None,
) -> None:
    if search_view is None:
        return
    if await _reject_if_busy(message, search_view, i18n):
        return
    logger.info("search_command", chat_id=message.chat.id)
    await search_view.submit_search(command.args or "")


@router.message(Command("relics"))
async def handle_list_relics(
    message: Message,
    i18n: I18nService,
    search_view: SearchView | None = None,
) -> None:
    if search_view is None:
        return
    if await _reject_if_busy(message, search_view, i18n):
        return
    logger.info("list_relics_command", chat_id=message.chat.id)
    await search_view.list_all()


@router.message(Command("clear"))
async def handle_clear(
    message: Message,
    i18n: I18nService,
    search_view: SearchView | None = None,
) -> None:
    if search_view is None:
        return
    await search_view.clear()
    await answer_with_retry(
        message,
        i18n.gettext("search.cleared", locale=_locale(message)),
        parse_mode=None,
    )


@router.message(F.text, ~F.text.startswith("/"))
async def handle_text_query(
    message: Message,
    i18n: I18nService,
    search_view: SearchView | None = None,
) -> None:
    if search_view is None:
        return
    if await _reject_if_busy(message, search_view, i18n):
        return
    await search_view.submit_search(message.text or "")


__all__ = ["router"]
