"""Per-chat search views and the presenter that mirrors them into Telegram."""

from __future__ import annotations

from collections import OrderedDict

from aiogram import Bot
from aiogram.enums import ParseMode
from aiogram.exceptions import TelegramBadRequest

from relic_search.bot.utils.messages import build_messages
from relic_search.bot.utils.telegram import (
    bot_delete_with_retry,
    bot_edit_with_retry,
    bot_send_with_retry,
)
from relic_search.domain.models import QueryState
from relic_search.logging import logger
from relic_search.services.search import SearchService
from relic_search.views.rendering import DisplayState, render_state
from relic_search.views.search_view import SearchView


class ChatPresenter:
    """State listener that renders every transition of one chat's view.

    The loading indicator is sent as its own message and later edited into
    the first page of the outcome, so a chat shows one message per search.
    """

    def __init__(self, bot: Bot, chat_id: int, *, markdown: bool = True) -> None:
        self._bot = bot
        self._chat_id = chat_id
        self._markdown = markdown
        self._status_message_id: int | None = None

    @property
    def parse_mode(self) -> str | None:
        return ParseMode.MARKDOWN_V2 if self._markdown else None

    async def __call__(self, state: QueryState) -> None:
        view = render_state(state)
        if view.display is DisplayState.IDLE:
            status_message_id, self._status_message_id = self._status_message_id, None
            if status_message_id is not None:
                await self._delete(status_message_id)
            return

        pages = build_messages(view, markdown=self._markdown)
        if view.display is DisplayState.LOADING:
            sent = await self._send(pages[0])
            self._status_message_id = getattr(sent, "message_id", None)
            return

        status_message_id, self._status_message_id = self._status_message_id, None
        first, rest = pages[0], pages[1:]
        if status_message_id is None:
            await self._send(first)
        else:
            await self._edit(status_message_id, first)
        for page in rest:
            await self._send(page)

    async def _send(self, text: str):
        return await bot_send_with_retry(
            self._bot,
            chat_id=self._chat_id,
            text=text,
            parse_mode=self.parse_mode,
        )

    async def _edit(self, message_id: int, text: str) -> None:
        try:
            await bot_edit_with_retry(
                self._bot,
                chat_id=self._chat_id,
                message_id=message_id,
                text=text,
                parse_mode=self.parse_mode,
            )
        except TelegramBadRequest as exc:
            logger.info(
                "status_message_edit_failed",
                chat_id=self._chat_id,
                message_id=message_id,
                error=str(exc),
            )
            await self._send(text)

    async def _delete(self, message_id: int) -> None:
        try:
            await bot_delete_with_retry(self._bot, chat_id=self._chat_id, message_id=message_id)
        except TelegramBadRequest as exc:
            logger.info(
                "status_message_delete_failed",
                chat_id=self._chat_id,
                message_id=message_id,
                error=str(exc),
            )


class SearchViewRegistry:
    """In-memory map of chat id to the chat's ``SearchView``.

    Holds at most ``max_views`` views. When full, the least recently used
    view that is not loading is forgotten; that chat starts fresh next time.
    """

    def __init__(self, service: SearchService, *, markdown: bool = True, max_views: int = 1000) -> None:
        self._service = service
        self._markdown = markdown
        self._max_views = max_views
        self._views: OrderedDict[int, SearchView] = OrderedDict()

    def get(self, bot: Bot, chat_id: int) -> SearchView:
        view = self._views.get(chat_id)
        if view is not None:
            self._views.move_to_end(chat_id)
            return view

        presenter = ChatPresenter(bot, chat_id, markdown=self._markdown)
        view = SearchView(self._service, on_change=presenter)
        self._views[chat_id] = view
        self._evict(keep=chat_id)
        logger.info("search_view_created", chat_id=chat_id, active_views=len(self._views))
        return view

    def peek(self, chat_id: int) -> SearchView | None:
        return self._views.get(chat_id)

    def _evict(self, *, keep: int) -> None:
        while len(self._views) > self._max_views:
            idle = next(
                (
                    chat_id
                    for chat_id, view in self._views.items()
                    if chat_id != keep and not view.state.loading
                ),
                None,
            )
            if idle is None:
                return
            del self._views[idle]
            logger.info("search_view_evicted", chat_id=idle)

    def __len__(self) -> int:
        return len(self._views)


__all__ = ["ChatPresenter", "SearchViewRegistry"]
