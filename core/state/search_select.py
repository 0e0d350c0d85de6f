"""
Search-and-select widgets over the world club directory.

ClubPicker links a free-text club field to a directory club.
WorldSearchDropdown is the directory header search: matching countries
first, then clubs, navigable as one flat list.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Optional, Sequence

from yarl import URL

from core.domain.models import ClubSearchResult, CountryDirectoryEntry
from core.state.debounce import LatestQueryDebouncer

logger = logging.getLogger(__name__)

ClubSearch = Callable[[str], Awaitable[List[ClubSearchResult]]]

ARROW_DOWN = "ArrowDown"
ARROW_UP = "ArrowUp"
ENTER = "Enter"
ESCAPE = "Escape"


class HighlightList(ABC):
    """Keyboard bookkeeping over the currently visible items"""

    def __init__(self):
        self.open = False
        self.highlighted = -1

    @property
    @abstractmethod
    def items(self) -> Sequence[Any]:
        """Items currently shown, in display order."""

    def key(self, key: str) -> Optional[Any]:
        """Apply a key press. Returns the item chosen with Enter, if any."""
        items = self.items
        if not self.open or not items:
            return None
        if key == ARROW_DOWN:
            self.highlighted = min(self.highlighted + 1, len(items) - 1)
        elif key == ARROW_UP:
            self.highlighted = max(self.highlighted - 1, 0)
        elif key == ENTER and self.highlighted >= 0:
            return items[self.highlighted]
        elif key == ESCAPE:
            self.open = False
        return None


async def _safe_search(search: ClubSearch, query: str, tag: str) -> List[ClubSearchResult]:
    try:
        return await search(query)
    except Exception as e:
        logger.error(f"[{tag}] Club search failed: {e}")
        return []


# === CLUB PICKER ===

class ClubPicker(HighlightList):

    def __init__(self, search: ClubSearch, debounce_ms: int, min_length: int = 2):
        super().__init__()
        self.min_length = min_length
        self.text = ""
        self.selected: Optional[ClubSearchResult] = None
        self.selected_club_id: Optional[str] = None
        self.results: List[ClubSearchResult] = []
        self._debouncer: LatestQueryDebouncer[List[ClubSearchResult]] = LatestQueryDebouncer(
            lambda q: _safe_search(search, q.strip(), "CLUB_PICKER"), debounce_ms,
        )

    @property
    def items(self) -> Sequence[ClubSearchResult]:
        return self.results

    def link(self, club_id: Optional[str], club_name: str) -> None:
        """Seed from a saved profile (club text plus optional directory link)."""
        self.text = club_name or ""
        self.selected_club_id = club_id
        self.selected = None

    async def type(self, text: str) -> Optional[List[ClubSearchResult]]:
        """
        Handle a text change. Typing over a linked club unlinks it.
        Returns the results for this text, or None if a newer keystroke won.
        """
        self.text = text
        if self.selected_club_id:
            self.unlink(keep_text=True)

        if len(text.strip()) < self.min_length:
            self._debouncer.cancel()
            self.results = []
            self.open = False
            return []

        results = await self._debouncer.request(text)
        if results is None:
            return None
        self.results = results
        self.open = True
        self.highlighted = -1
        return results

    def select(self, club: ClubSearchResult) -> None:
        self.selected = club
        self.selected_club_id = str(club.id)
        self.text = club.club_name
        self.results = []
        self.open = False
        self.highlighted = -1

    def key(self, key: str) -> Optional[ClubSearchResult]:
        chosen = super().key(key)
        if chosen is not None:
            self.select(chosen)
        return chosen

    def unlink(self, keep_text: bool = False) -> None:
        self.selected = None
        self.selected_club_id = None
        if not keep_text:
            self.text = ""

    @property
    def can_add_to_directory(self) -> bool:
        """No directory match for the typed name, so offer to create one."""
        return (
            self.selected_club_id is None
            and len(self.text.strip()) >= self.min_length
            and not self._debouncer.pending
            and not self.results
        )


# === WORLD SEARCH DROPDOWN ===

@dataclass
class DropdownItem:
    type: str  # "country" or "club"
    data: Any


def country_url(country_code: str) -> str:
    return f"/world/{country_code.lower()}"


def club_url(club: ClubSearchResult) -> str:
    """Directory page of the club's league, highlighting the club."""
    country_slug = (club.country_code or "").lower()
    league_id = club.women_league_id or club.men_league_id
    query = {"club": str(club.id)}
    if league_id:
        query["league"] = str(league_id)
    if not club.women_league_id:
        query["gender"] = "men"
    path = f"/world/{country_slug}/{club.province_slug}" if club.province_slug else f"/world/{country_slug}"
    return str(URL(path).with_query(query))


class WorldSearchDropdown(HighlightList):

    def __init__(
        self,
        countries: List[CountryDirectoryEntry],
        search: ClubSearch,
        debounce_ms: int,
        country_limit: int = 5,
        min_length: int = 2,
    ):
        super().__init__()
        self.countries = countries
        self.country_limit = country_limit
        self.min_length = min_length
        self.query = ""
        self.club_results: List[ClubSearchResult] = []
        self._debouncer: LatestQueryDebouncer[List[ClubSearchResult]] = LatestQueryDebouncer(
            lambda q: _safe_search(search, q.strip(), "WORLD_SEARCH"), debounce_ms,
        )

    @property
    def matched_countries(self) -> List[CountryDirectoryEntry]:
        if not self.query.strip():
            return []
        needle = self.query.lower()
        return [c for c in self.countries if needle in c.country_name.lower()][:self.country_limit]

    @property
    def items(self) -> List[DropdownItem]:
        return (
            [DropdownItem("country", c) for c in self.matched_countries]
            + [DropdownItem("club", c) for c in self.club_results]
        )

    async def type(self, text: str) -> Optional[List[DropdownItem]]:
        """Update the query. Countries match at once; clubs after the debounce."""
        self.query = text
        self.highlighted = -1
        self.open = bool(text.strip())

        if len(text.strip()) < self.min_length:
            self._debouncer.cancel()
            self.club_results = []
            return self.items

        results = await self._debouncer.request(text)
        if results is None:
            return None
        self.club_results = results
        return self.items

    def select(self, index: int) -> Optional[str]:
        """Choose the item at a flat index; returns the URL to navigate to."""
        items = self.items
        if index < 0 or index >= len(items):
            return None
        item = items[index]
        self.open = False
        self.query = ""
        self.club_results = []
        self.highlighted = -1
        if item.type == "country":
            return country_url(item.data.country_code)
        return club_url(item.data)

    def key(self, key: str) -> Optional[str]:
        chosen = super().key(key)
        if chosen is None:
            return None
        return self.select(self.highlighted)
