"""
Paginated, filterable admin table.

Filter changes reset to the first page. The search box has its own debounce
so typing does not refetch on every keystroke.
"""

import logging
import math
from typing import Any, Awaitable, Callable, Dict, Generic, List, Optional, TypeVar

from core.domain.models import Page
from core.state.debounce import LatestQueryDebouncer

logger = logging.getLogger(__name__)

T = TypeVar("T")

PageLoader = Callable[[Dict[str, Any], int, int], Awaitable[Page]]

# Changing a key clears the filters that depend on it
DEPENDENT_FILTERS = {
    "country_id": ("province_id",),
}


class TableController(Generic[T]):

    def __init__(self, loader: PageLoader, page_size: int, search_debounce_ms: int = 300):
        self._loader = loader
        self.page_size = page_size
        self.filters: Dict[str, Any] = {}
        self.page = 0
        self.rows: List[T] = []
        self.total_count = 0
        self.loading = False
        self.error: Optional[str] = None
        self._search = LatestQueryDebouncer(self._apply_search, search_debounce_ms)

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.page_size) if self.page_size else 0

    @property
    def has_previous(self) -> bool:
        return self.page > 0

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages - 1

    @property
    def showing(self) -> str:
        if not self.total_count:
            return "0 of 0"
        start = self.page * self.page_size + 1
        end = min((self.page + 1) * self.page_size, self.total_count)
        return f"{start} - {end} of {self.total_count}"

    async def load(self) -> List[T]:
        self.loading = True
        try:
            result = await self._loader(dict(self.filters), self.page, self.page_size)
        except Exception as e:
            logger.error(f"[ADMIN_TABLE] Load failed: {e}")
            self.error = str(e)
            return self.rows
        finally:
            self.loading = False
        self.error = None
        self.rows = list(result.rows)
        self.total_count = result.total_count
        return self.rows

    async def set_filter(self, key: str, value: Any) -> List[T]:
        # Empty values mean "no filter"; False is a real value for boolean filters
        self.filters[key] = value if value or value is False else None
        for dependent in DEPENDENT_FILTERS.get(key, ()):
            self.filters[dependent] = None
        self.page = 0
        return await self.load()

    async def set_search(self, text: str) -> Optional[List[T]]:
        """Debounced. None when a later keystroke superseded this one."""
        return await self._search.request(text)

    async def _apply_search(self, text: str) -> List[T]:
        self.filters["search"] = text or None
        self.page = 0
        return await self.load()

    async def go_to(self, page: int) -> List[T]:
        last = max(self.total_pages - 1, 0)
        self.page = min(max(page, 0), last)
        return await self.load()

    async def next_page(self) -> List[T]:
        return await self.go_to(self.page + 1)

    async def previous_page(self) -> List[T]:
        return await self.go_to(self.page - 1)
