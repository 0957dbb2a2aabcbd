"""Application entrypoint."""

from __future__ import annotations

import asyncio

import httpx
from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.client.session.aiohttp import AiohttpSession
from aiogram.enums import ParseMode

from relic_search.bot.middlewares import SearchViewMiddleware, ThrottleMiddleware
from relic_search.bot.presenter import SearchViewRegistry
from relic_search.bot.routers import setup_routers
from relic_search.config import get_settings
from relic_search.i18n import I18nService
from relic_search.logging import configure_logging, logger
from relic_search.services.error_monitor import ErrorMonitor
from relic_search.services.search import SearchService


async def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level, json_logs=settings.environment != "dev")

    session = (
        AiohttpSession(proxy=settings.telegram_proxy) if settings.telegram_proxy else None
    )
    bot = Bot(
        token=settings.telegram_token.get_secret_value(),
        default=DefaultBotProperties(
            parse_mode=ParseMode.MARKDOWN_V2 if settings.enable_markdown_v2 else None
        ),
        session=session,
    )
    dp = Dispatcher()
    dp.include_router(setup_routers())
    i18n = I18nService(default_locale=settings.default_language)

    async with httpx.AsyncClient(timeout=settings.service.request_timeout_seconds) as http_client:
        service = SearchService(http_client, settings.service)
        registry = SearchViewRegistry(
            service,
            markdown=settings.enable_markdown_v2,
            max_views=settings.max_chat_views,
        )

        error_monitor = ErrorMonitor(settings=settings, registry=registry)
        dp.errors.register(error_monitor.handle_error)

        dp.message.middleware(ThrottleMiddleware(settings, i18n=i18n))
        dp.message.middleware(SearchViewMiddleware(registry))

        logger.info(
            "bot_starting",
            environment=settings.environment,
            search_url=settings.service.search_url,
            relics_url=settings.service.relics_url,
        )
        await dp.start_polling(bot, settings=settings, i18n=i18n)


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
