"""Formatting helpers turning a rendered search view into Telegram messages."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Iterable

import telegramify_markdown

from relic_search.domain.description import BULLET, DescriptionLine
from relic_search.views.rendering import DisplayState, RenderedItem, SearchViewModel

# Telegram counts message length in UTF-16 code units, up to 4096.
TELEGRAM_TEXT_LIMIT = 3900
# MarkdownV2 escaping at most doubles a piece of source text.
MARKDOWN_SOURCE_LIMIT = TELEGRAM_TEXT_LIMIT // 2
RAW_DUMP_CHAR_LIMIT = 1500
MARKDOWN_ESCAPE_RE = re.compile(r"([\\`*_\[\]~|<])")
# List, quote, heading and setext markers at the start of a line.
BLOCK_MARKER_RE = re.compile(r"^([ \t]*\d*)([#>+=.)-])", re.MULTILINE)
ELLIPSIS = "…"

RARITY_BADGES = {
    "Rare": "🟡",
    "Uncommon": "⚪",
    "Common": "🟤",
}


@dataclass(frozen=True, slots=True)
class _Style:
    bold: Callable[[str], str]
    italic: Callable[[str], str]
    escape: Callable[[str], str]
    link: Callable[[str], str]
    code_block: Callable[[str], str]


def escape_markdown(text: str) -> str:
    """Escape user text so Markdown reads it literally, line starts included."""

    escaped = MARKDOWN_ESCAPE_RE.sub(r"\\\1", text)
    return BLOCK_MARKER_RE.sub(r"\1\\\2", escaped)


def text_length(text: str) -> int:
    return len(text.encode("utf-16-le")) // 2


MARKDOWN_STYLE = _Style(
    bold=lambda text: f"**{text}**",
    italic=lambda text: f"_{text}_",
    escape=escape_markdown,
    link=lambda url: f"[{escape_markdown(url)}]({url})",
    code_block=lambda text: f"```json\n{text}\n```",
)
PLAIN_STYLE = _Style(
    bold=lambda text: text,
    italic=lambda text: text,
    escape=lambda text: text,
    link=lambda url: url,
    code_block=lambda text: text,
)


def _truncate(value: str, limit: int) -> str:
    if len(value) <= limit:
        return value
    return f"{value[: limit - 15].rstrip()}\n...[truncated]"


def _format_description_line(line: DescriptionLine, style: _Style) -> str:
    if line.kind == "blank":
        return ""
    text = style.escape(line.text)
    if line.kind == "section":
        return style.italic(f"{text}:")
    if line.kind == "relic":
        return f"{style.bold('Relic:')} {text}"
    if line.kind == "item":
        if line.rarity:
            badge = RARITY_BADGES[line.rarity]
            return f"{BULLET} {text} {badge} {style.italic(f'({line.rarity})')}"
        return f"{BULLET} {text}"
    return text


def format_item(index: int, item: RenderedItem, style: _Style) -> str:
    if item.kind == "text":
        return style.escape(f"{index}. {item.text or ''}")
    if item.kind == "raw":
        dump = _truncate(item.dump or "", RAW_DUMP_CHAR_LIMIT)
        return f"{style.escape(f'{index}.')}\n{style.code_block(dump)}"

    lines: list[str] = []
    if item.heading:
        lines.append(style.bold(f"{index}. {style.escape(item.heading)}"))
    else:
        lines.append(style.escape(f"{index}."))
    lines.extend(_format_description_line(line, style) for line in item.description)
    if item.link:
        lines.append(style.link(item.link))
    for key, value in item.properties:
        lines.append(f"{style.bold(style.escape(key) + ':')} {style.escape(value)}")
    return "\n".join(lines)


def format_view(view: SearchViewModel, *, markdown: bool = True) -> list[str]:
    """Return the message blocks for ``view`` in display order."""

    style = MARKDOWN_STYLE if markdown else PLAIN_STYLE
    if view.display is DisplayState.IDLE:
        return []
    if view.display is DisplayState.ERROR:
        return [f"⚠️ {style.escape(view.message or '')}"]
    if view.display is DisplayState.LOADING:
        return [f"⏳ {style.escape(view.message or '')}"]

    blocks = [f"✅ {style.bold(style.escape(view.header or ''))}"]
    if view.display is DisplayState.EMPTY:
        empty = style.escape(view.message or "")
        if view.subtext:
            empty = f"{empty}\n{style.italic(style.escape(view.subtext))}"
        blocks.append(empty)
        return blocks

    blocks.extend(format_item(index, item, style) for index, item in enumerate(view.items, start=1))
    return blocks


def to_telegram_markdown(text: str) -> str:
    # Escaped brackets would otherwise be read as LaTeX display math.
    return telegramify_markdown.markdownify(
        text,
        max_line_length=None,
        normalize_whitespace=False,
        latex_escape=False,
    ).strip()


def _pack(parts: Iterable[str], limit: int, separator: str) -> list[str]:
    packed: list[str] = []
    buffer: list[str] = []
    size = 0
    for part in parts:
        extra = text_length(part) + (len(separator) if buffer else 0)
        if buffer and size + extra > limit:
            packed.append(separator.join(buffer))
            buffer, size = [], 0
            extra = text_length(part)
        buffer.append(part)
        size += extra
    if buffer:
        packed.append(separator.join(buffer))
    return packed


def _cut_line(line: str, limit: int) -> str:
    budget = limit - 1
    cut = line[:budget]
    while text_length(cut) > budget:
        cut = cut[: len(cut) - (text_length(cut) - budget)]
    # A trailing backslash would escape the ellipsis.
    return cut.rstrip().rstrip("\\") + ELLIPSIS


def split_block(block: str, limit: int) -> list[str]:
    """Split ``block`` on line boundaries into pieces of at most ``limit``.

    Formatted blocks never carry markup across a line break, so every piece
    stays valid Markdown on its own. A single line longer than ``limit`` is
    cut and ends with an ellipsis.
    """

    if text_length(block) <= limit:
        return [block]
    lines = [_cut_line(line, limit) if text_length(line) > limit else line for line in block.split("\n")]
    return [piece for piece in _pack(lines, limit, "\n") if piece.strip()]


def chunk_blocks(blocks: Iterable[str], limit: int = TELEGRAM_TEXT_LIMIT) -> list[str]:
    """Pack blocks into as few messages as possible without splitting a block."""

    return _pack(blocks, limit, "\n\n")


def build_messages(view: SearchViewModel, *, markdown: bool = True) -> list[str]:
    """Turn ``view`` into message texts that each fit into one Telegram message.

    Oversized blocks are split before the MarkdownV2 conversion, so a page
    never ends inside an escape sequence or an entity.
    """

    blocks = format_view(view, markdown=markdown)
    if not markdown:
        return chunk_blocks(piece for block in blocks for piece in split_block(block, TELEGRAM_TEXT_LIMIT))
    pieces = [piece for block in blocks for piece in split_block(block, MARKDOWN_SOURCE_LIMIT)]
    return chunk_blocks(to_telegram_markdown(piece) for piece in pieces)


__all__ = [
    "MARKDOWN_SOURCE_LIMIT",
    "TELEGRAM_TEXT_LIMIT",
    "build_messages",
    "chunk_blocks",
    "escape_markdown",
    "format_item",
    "format_view",
    "split_block",
    "text_length",
    "to_telegram_markdown",
]
