import math
from dataclasses import dataclass
from typing import Any, Dict

DEFAULT_PAGE = 1
DEFAULT_PAGE_LIMIT = 10
MAX_PAGE_LIMIT = 100
# Keeps skip inside a signed 64-bit column value
MAX_PAGE = 1_000_000


@dataclass(frozen=True)
class Pagination:
    skip: int
    limit: int
    page: int
    total_pages: int

    def metadata(self) -> Dict[str, Any]:
        return {
            "totalPages": self.total_pages,
            "current_page": self.page,
            "page_limit": self.limit,
        }


def _parse_int(raw: Any):
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    try:
        return int(str(raw).strip())
    except ValueError:
        return None


def normalize_page(raw_page: Any) -> int:
    page = _parse_int(raw_page)
    if page is None or page <= 0 or page > MAX_PAGE:
        return DEFAULT_PAGE
    return page


def normalize_limit(raw_limit: Any) -> int:
    limit = _parse_int(raw_limit)
    if limit is None or limit <= 0 or limit > MAX_PAGE_LIMIT:
        return DEFAULT_PAGE_LIMIT
    return limit


def compute(raw_page: Any, raw_limit: Any, total_count: int) -> Pagination:
    """Normalize raw query values into an offset window. Invalid input falls back to defaults."""
    page = normalize_page(raw_page)
    limit = normalize_limit(raw_limit)
    total_pages = math.ceil(total_count / limit) if total_count > 0 else 0
    return Pagination(
        skip=(page - 1) * limit,
        limit=limit,
        page=page,
        total_pages=total_pages,
    )
