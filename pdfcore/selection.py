"""Page selection strings (1-based, as typed by a user) → 0-based indices.

Accepted forms: ``"3"``, ``"1-4"``, ``"1,3,5-7"``. Full-width commas,
semicolons and enumeration commas are treated as separators, and the usual
dash variants as range markers.
"""

_SEPARATORS = ("，", "；", "、", ";")
_DASHES = ("～", "~", "—", "–")


def _normalize(text):
    text = (text or "").strip()
    for sep in _SEPARATORS:
        text = text.replace(sep, ",")
    for dash in _DASHES:
        text = text.replace(dash, "-")
    return text


def _parse_part(part, total_pages):
    """Parse one comma-separated part into a list of 0-based indices."""
    if "-" in part:
        seg = part.split("-", 1)
        try:
            start = int(seg[0].strip())
            end = int(seg[1].strip())
        except ValueError:
            raise ValueError(f"Invalid range: {part}")
        if start < 1 or end < 1 or start > end:
            raise ValueError(f"Invalid range: {part}")
        if end > total_pages:
            raise ValueError(f"Page out of range (max {total_pages}): {part}")
        return list(range(start - 1, end))
    try:
        page = int(part)
    except ValueError:
        raise ValueError(f"Invalid page number: {part}")
    if page < 1 or page > total_pages:
        raise ValueError(f"Page out of range (max {total_pages}): {part}")
    return [page - 1]


def _parts(text):
    return [p.strip() for p in _normalize(text).split(",") if p.strip()]


def parse_page_selection(text, total_pages):
    """Selection set: deduplicated and sorted ascending, whatever the input order.

    An empty string selects nothing and returns ``[]``.
    """
    pages = set()
    for part in _parts(text):
        pages.update(_parse_part(part, total_pages))
    return sorted(pages)


def parse_page_sequence(text, total_pages):
    """Ordered sequence: keeps input order and duplicates (e.g. ``"3,1,1"``)."""
    sequence = []
    for part in _parts(text):
        sequence.extend(_parse_part(part, total_pages))
    return sequence


def parse_page_groups(text, total_pages):
    """One group per part, e.g. ``"1-3,4-6,7"`` → ``[[0, 1, 2], [3, 4, 5], [6]]``."""
    groups = [_parse_part(part, total_pages) for part in _parts(text)]
    if not groups:
        raise ValueError("No page ranges given, e.g. 1-3,4-6,7-10")
    return groups


def interval_groups(total_pages, interval):
    interval = max(1, int(interval))
    return [list(range(start, min(start + interval, total_pages)))
            for start in range(0, total_pages, interval)]
