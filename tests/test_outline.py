from content_forge.workflow.outline import classify, parse_sections


def test_classify_bullets_and_headings() -> None:
    assert classify("* Choosing Green Beans") == "Choosing Green Beans"
    assert classify("- Roast Levels") == "Roast Levels"
    assert classify("  ## Storage and Resting  ") == "Storage and Resting"
    assert classify("#Cooling") == "Cooling"


def test_classify_rejects_plain_and_rule_lines() -> None:
    assert classify("Table of Contents") is None
    assert classify("1. Numbered entry") is None
    assert classify("") is None
    assert classify("---") is None
    assert classify("  *  ") is None


def test_classify_keeps_inline_markdown_after_marker() -> None:
    assert classify("* **Chapter 1:** Basics") == "**Chapter 1:** Basics"


def test_parse_sections_truncates_in_order() -> None:
    toc = "\n".join(
        [
            "# Home Coffee Roasting",
            "Intro text that is not a section",
            "* Beans",
            "* Equipment",
            "* Profiles",
        ]
    )

    assert parse_sections(toc, 2) == ["Home Coffee Roasting", "Beans"]
    assert parse_sections(toc, 10) == ["Home Coffee Roasting", "Beans", "Equipment", "Profiles"]


def test_parse_sections_non_positive_count() -> None:
    assert parse_sections("* A\n* B", 0) == []
    assert parse_sections("* A\n* B", -3) == []


def test_classify_keeps_symbol_only_titles() -> None:
    assert classify("* 🚀") == "🚀"
    assert classify("## ☕ & ♨") == "☕ & ♨"
    assert classify("* * *") is None
    assert classify("-- ") is None
