import pytest

from lottery_previews.sections import (
    SectionNotFoundError,
    find_date,
    find_section,
    locate_section,
    locate_section_in_html,
    normalize_text,
)


def test_locate_section_stops_at_history_marker():
    text = "Lotto Saturday | 14 February 2026 7 8 18 31 32 34 + 24 History Wednesday | 11 February 2026 1 2"

    section = locate_section(text, "Lotto")

    assert section == "Saturday | 14 February 2026 7 8 18 31 32 34 + 24"


def test_locate_section_tolerates_whitespace_and_case():
    text = "SUPER \n\t  LOTTO\n\nTuesday |\n17 February 2026\n3 12 19 24 33 + 7"

    section = locate_section(text, "Super Lotto")

    assert section.startswith("Tuesday | 17 February 2026")
    assert section.endswith("33 + 7")


def test_locate_section_skips_navigation_occurrences():
    text = (
        "Cash Pot Lotto Super Lotto "
        "Lotto Results Saturday | 14 February 2026 7 8 18 31 32 34 + 24"
    )

    section = locate_section(text, "Lotto", boundaries=("Cash Pot", "Super Lotto", "History"))

    assert section == "Results Saturday | 14 February 2026 7 8 18 31 32 34 + 24"


def test_locate_section_ignores_heading_inside_longer_heading():
    text = (
        "Super Lotto Friday | 13 February 2026 1 2 3 4 5 + 6 "
        "Lotto Saturday | 14 February 2026 7 8 18 31 32 34 + 24"
    )

    section = locate_section(text, "Lotto", boundaries=("Super Lotto", "History"))

    assert section.startswith("Saturday | 14 February 2026")


def test_locate_section_uses_anchor():
    text = (
        "Lotto Monday | 9 February 2026 1 2 3 4 5 6 "
        "Latest Results Lotto Saturday | 14 February 2026 7 8 18 31 32 34"
    )

    section = locate_section(text, "Lotto", anchor="Latest Results")

    assert section.startswith("Saturday | 14 February 2026")


def test_locate_section_returns_first_span_when_no_date_anywhere():
    section = locate_section("Lotto coming soon History", "Lotto")

    assert section == "coming soon"


def test_locate_section_raises_when_heading_absent():
    with pytest.raises(SectionNotFoundError):
        locate_section("Cash Pot Sunday | 15 February 2026", "Super Lotto")


def test_locate_section_in_html_reads_nested_heading(cash_pot_html):
    html = cash_pot_html.replace("<h1>Cash Pot Results</h1>", "<h1><span>Cash</span> <em>Pot</em></h1>")

    section = locate_section_in_html(html, "Cash Pot", boundaries=("Lotto", "Super Lotto", "History"))

    assert section.startswith("Sunday | 15 February 2026 EARLYBIRD 8:30AM #37097 4 Egg")
    assert "37096" not in section


def test_locate_section_in_html_requires_heading_tag(super_lotto_html):
    with pytest.raises(SectionNotFoundError):
        locate_section_in_html(super_lotto_html, "Super Lotto")


def test_find_section_falls_back_to_text(super_lotto_html):
    section = find_section(super_lotto_html, "Super Lotto", boundaries=("Cash Pot", "Lotto", "History"))

    assert section == "Tuesday | 17 February 2026 3 12 19 24 33 + 7 Next Jackpot JMD 250 million"


def test_normalize_text_drops_scripts_and_nbsp():
    html = "<html><head><script>var x = 1;</script></head><body><p>A&nbsp;&nbsp;B</p>\n<p>C</p></body></html>"

    assert normalize_text(html) == "A B C"


def test_find_date_parses_iso():
    token = find_date("Results: Saturday |  14 February 2026 more")

    assert token.text == "Saturday | 14 February 2026"
    assert token.iso == "2026-02-14"


def test_find_date_keeps_label_when_month_unknown():
    token = find_date("Sat | 14 Febtember 2026")

    assert token.text == "Sat | 14 Febtember 2026"
    assert token.iso is None
