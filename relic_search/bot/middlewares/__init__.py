from relic_search.bot.middlewares.search_view import SearchViewMiddleware
from relic_search.bot.middlewares.throttle import ThrottleMiddleware

__all__ = [
    "SearchViewMiddleware",
    "ThrottleMiddleware",
]
