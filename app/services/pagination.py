import math


def clamp_page(page: int, limit: int, max_limit: int) -> tuple[int, int]:
    """Return (page, limit) with page >= 1 and 1 <= limit <= max_limit."""
    return max(1, page), min(max_limit, max(1, limit))


def page_count(total: int, limit: int) -> int:
    return math.ceil(total / limit) if total else 0


def like_pattern(term: str) -> str:
    """Case-insensitive substring pattern with LIKE wildcards escaped."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"
