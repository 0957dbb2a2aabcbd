"""Tests for description line classification."""

from __future__ import annotations

from relic_search.domain.description import DescriptionLine, classify_line, parse_description


def test_bullet_line_with_rarity_tag():
    line = classify_line("• Akstiletto Prime Barrel (Rare)")
    assert line == DescriptionLine(kind="item", text="Akstiletto Prime Barrel", rarity="Rare")


def test_bullet_line_without_rarity_tag():
    assert classify_line("•Forma Blueprint") == DescriptionLine(kind="item", text="Forma Blueprint")


def test_rarity_tag_must_be_trailing():
    line = classify_line("• (Common) Braton Prime Stock")
    assert line.kind == "item"
    assert line.rarity is None
    assert line.text == "(Common) Braton Prime Stock"


def test_relic_header():
    assert classify_line("Relic: Meso N5") == DescriptionLine(kind="relic", text="Meso N5")


def test_section_headers():
    assert classify_line("Items:") == DescriptionLine(kind="section", text="Items")
    assert classify_line("  Matched Items:  ") == DescriptionLine(kind="section", text="Matched Items")
    assert classify_line("Items: 6").kind == "text"


def test_parse_description_keeps_line_order():
    lines = parse_description(
        "Relic: Neo V8\nMatched Items:\n• Valkyr Prime Systems (Uncommon)\n\nVaulted since 2023"
    )
    assert [line.kind for line in lines] == ["relic", "section", "item", "blank", "text"]
    assert lines[2].rarity == "Uncommon"
    assert lines[4].text == "Vaulted since 2023"


def test_dash_and_asterisk_bullets_are_items():
    assert classify_line("- Forma Blueprint (Common)") == DescriptionLine(
        kind="item", text="Forma Blueprint", rarity="Common"
    )
    assert classify_line("  * Braton Prime Receiver (Uncommon)") == DescriptionLine(
        kind="item", text="Braton Prime Receiver", rarity="Uncommon"
    )
    assert classify_line("* Nikana Prime Hilt") == DescriptionLine(kind="item", text="Nikana Prime Hilt")


def test_dash_without_space_is_plain_text():
    line = classify_line("-5 ducats")
    assert line.kind == "text"
    assert line.text == "-5 ducats"
