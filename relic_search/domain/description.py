"""Line-level parsing of result descriptions returned by the relic backend.

Descriptions are free text, but the backend marks structure by convention::

    Relic: Axi A1
    Items:
    • Akstiletto Prime Barrel (Rare)
    • Forma Blueprint (Common)

Dash and asterisk bullets (``- ``, ``* ``) are accepted as well. Each line is
classified so renderers can style headers, items and rarity tags without
re-implementing the conventions.
"""

from __future__ import annotations

import re
from typing import Literal

from pydantic import BaseModel

BULLET = "•"
ITEM_MARKERS = (BULLET, "- ", "* ")
RELIC_PREFIX = "Relic:"
SECTION_HEADERS = frozenset({"Items:", "Matched Items:"})
RARITY_RE = re.compile(r"\s*\((Rare|Uncommon|Common)\)\s*$")

LineKind = Literal["item", "relic", "section", "text", "blank"]
Rarity = Literal["Rare", "Uncommon", "Common"]


class DescriptionLine(BaseModel):
    kind: LineKind
    text: str
    rarity: Rarity | None = None


def classify_line(line: str) -> DescriptionLine:
    stripped = line.strip()
    if not stripped:
        return DescriptionLine(kind="blank", text="")
    marker = next((m for m in ITEM_MARKERS if stripped.startswith(m)), None)
    if marker is not None:
        entry = stripped[len(marker):].strip()
        match = RARITY_RE.search(entry)
        if match:
            return DescriptionLine(
                kind="item",
                text=entry[: match.start()].rstrip(),
                rarity=match.group(1),
            )
        return DescriptionLine(kind="item", text=entry)
    if stripped.startswith(RELIC_PREFIX):
        return DescriptionLine(kind="relic", text=stripped[len(RELIC_PREFIX):].strip())
    if stripped in SECTION_HEADERS:
        return DescriptionLine(kind="section", text=stripped[:-1])
    return DescriptionLine(kind="text", text=stripped)


def parse_description(description: str) -> list[DescriptionLine]:
    """Split a description on line breaks and classify every line."""

    return [classify_line(line) for line in description.splitlines()]


__all__ = [
    "BULLET",
    "ITEM_MARKERS",
    "DescriptionLine",
    "RELIC_PREFIX",
    "SECTION_HEADERS",
    "classify_line",
    "parse_description",
]
