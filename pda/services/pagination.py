from dataclasses import dataclass
import math


@dataclass(frozen=True)
class PageWindow:
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def total_pages(self, total: int) -> int:
        return math.ceil(total / self.limit) if total > 0 else 0


def normalize_page(page: int | None, limit: int | None, *, default_limit: int, max_limit: int) -> PageWindow:
    safe_page = max(1, int(page or 1))
    safe_limit = int(limit or default_limit)
    safe_limit = min(max(1, safe_limit), max(1, max_limit))
    return PageWindow(page=safe_page, limit=safe_limit)
