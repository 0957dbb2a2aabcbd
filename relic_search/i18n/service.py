"""String tables for the bot's own messages, one JSON file per language."""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any


class I18nService:
    """Looks up bot strings for a Telegram ``language_code``.

    ``de-AT`` is tried as ``de-at``, then ``de``, then the default locale.
    Unknown keys come back unchanged so a missing translation stays visible.
    """

    def __init__(self, *, locales_path: str | Path | None = None, default_locale: str = "en") -> None:
        self.locales_path = Path(locales_path or Path(__file__).with_name("locales"))
        self.default_locale = self._normalize(default_locale)

    def fallback_chain(self, locale: str | None) -> list[str]:
        chain: list[str] = []
        if locale:
            normalized = self._normalize(locale)
            chain.append(normalized)
            base = normalized.split("-", 1)[0]
            if base != normalized:
                chain.append(base)
        if self.default_locale not in chain:
            chain.append(self.default_locale)
        return chain

    def resolve_locale(self, locale: str | None) -> str:
        """Return the first locale in the fallback chain that has a table."""

        for candidate in self.fallback_chain(locale):
            if self._load_locale(candidate):
                return candidate
        return self.default_locale

    def gettext(self, key: str, *, locale: str | None = None, **kwargs: Any) -> str:
        text = key
        for candidate in self.fallback_chain(locale):
            table = self._load_locale(candidate)
            if key in table:
                text = table[key]
                break
        return text.format(**kwargs) if kwargs else text

    @staticmethod
    def _normalize(locale: str) -> str:
        return locale.strip().replace("_", "-").lower()

    @lru_cache(maxsize=16)
    def _load_locale(self, locale: str) -> dict[str, str]:
        file_path = self.locales_path / f"{locale}.json"
        if not file_path.exists():
            return {}
        with file_path.open("r", encoding="utf-8") as fp:
            return json.load(fp)


__all__ = ["I18nService"]
