import re

SECTION_MARKERS = ("*", "-", "#")
_MARKER_PREFIX = re.compile(r"^(?:[*-]|#+)\s*")


def classify(line: str) -> str | None:
    """Return the section title carried by a TOC line, or None for other lines.

    A line counts when its trimmed form starts with a bullet (`*`, `-`) or a
    heading (`#`) marker. Lines made only of markers, like a `---` rule, do not.
    """
    stripped = line.strip()
    if not stripped.startswith(SECTION_MARKERS):
        return None
    title = _MARKER_PREFIX.sub("", stripped).strip()
    if not title.strip("".join(SECTION_MARKERS) + " \t"):
        return None
    return title


def parse_sections(toc: str, sections_count: int) -> list[str]:
    if sections_count <= 0:
        return []
    titles: list[str] = []
    for line in toc.splitlines():
        title = classify(line)
        if title is None:
            continue
        titles.append(title)
        if len(titles) >= sections_count:
            break
    return titles
