"""
World directory service - club search, directory pages and club claims.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple
from uuid import UUID

from core.domain.errors import BackendError
from core.domain.models import (
    ClubSearchResult, CountryDirectoryEntry,
    WorldClub, WorldLeague, WorldProvince,
)
from core.interfaces.repositories import IWorldRepository
from core.state.search_select import ClubPicker, WorldSearchDropdown
from core.utils.text import normalize_club_name

logger = logging.getLogger(__name__)

GENDERS = ("women", "men")
DEFAULT_GENDER = "women"


@dataclass
class DirectoryPage:
    """Everything a /world/... page lists"""
    country: CountryDirectoryEntry
    region: Optional[WorldProvince] = None
    regions: List[WorldProvince] = field(default_factory=list)
    leagues: List[WorldLeague] = field(default_factory=list)
    clubs: List[WorldClub] = field(default_factory=list)
    # Set when the clubs are narrowed to one league
    league: Optional[WorldLeague] = None
    gender: str = DEFAULT_GENDER

    @property
    def path(self) -> str:
        """URL path of the country or region this page lists."""
        base = f"/world/{self.country.country_code.lower()}"
        return f"{base}/{self.region.slug}" if self.region else base


def clubs_in_league(clubs: List[WorldClub], league_id: int, gender: str) -> List[WorldClub]:
    """Clubs whose men's or women's team plays in the league."""
    if gender == "men":
        return [c for c in clubs if c.men_league_id == league_id]
    return [c for c in clubs if c.women_league_id == league_id]


class WorldService:

    def __init__(
        self,
        world_repo: IWorldRepository,
        search_limit: int = 15,
        dropdown_limit: int = 8,
        country_limit: int = 5,
        debounce_ms: int = 300,
        min_search_length: int = 2,
    ):
        self.world_repo = world_repo
        self.search_limit = search_limit
        self.dropdown_limit = dropdown_limit
        self.country_limit = country_limit
        self.debounce_ms = debounce_ms
        self.min_search_length = min_search_length

    # === SEARCH ===

    async def search_clubs(self, query: str, limit: Optional[int] = None) -> List[ClubSearchResult]:
        query = (query or "").strip()
        if len(query) < self.min_search_length:
            return []
        return await self.world_repo.search_clubs(query, limit or self.search_limit)

    def club_picker(self) -> ClubPicker:
        return ClubPicker(self.search_clubs, self.debounce_ms, self.min_search_length)

    async def search_dropdown(self) -> WorldSearchDropdown:
        countries = await self.get_directory_countries()
        return WorldSearchDropdown(
            countries,
            lambda q: self.search_clubs(q, self.dropdown_limit),
            self.debounce_ms,
            country_limit=self.country_limit,
            min_length=self.min_search_length,
        )

    # === DIRECTORY ===

    async def get_directory_countries(self) -> List[CountryDirectoryEntry]:
        try:
            return await self.world_repo.get_directory_countries()
        except BackendError as e:
            logger.error(f"[WORLD] Failed to fetch directory countries: {e.message}")
            return []

    async def _country_by_code(self, code: str) -> Optional[CountryDirectoryEntry]:
        code = (code or "").lower()
        for country in await self.get_directory_countries():
            if country.country_code.lower() == code:
                return country
        return None

    async def country_page(
        self, code: str, league_id: Optional[int] = None, gender: str = DEFAULT_GENDER,
    ) -> Optional[DirectoryPage]:
        """Regions for a country with regions, otherwise its leagues and clubs."""
        country = await self._country_by_code(code)
        if country is None:
            return None
        page = DirectoryPage(country=country)
        if country.has_regions:
            page.regions = await self.world_repo.get_regions(country.country_id)
        else:
            page.leagues = await self.world_repo.get_leagues_for_location(country.country_id, None)
            page.clubs = await self.world_repo.get_clubs(country.country_id)
            self._narrow_to_league(page, league_id, gender)
        return page

    async def region_page(
        self, code: str, region_slug: str, league_id: Optional[int] = None, gender: str = DEFAULT_GENDER,
    ) -> Optional[DirectoryPage]:
        """A region's leagues and clubs. Countries without regions resolve the slug as a league."""
        country = await self._country_by_code(code)
        if country is None:
            return None
        regions = await self.world_repo.get_regions(country.country_id)
        region = next((r for r in regions if r.slug == region_slug), None)
        if region is None:
            if country.has_regions:
                return None
            return await self._league_page(country, None, region_slug, gender)
        page = DirectoryPage(
            country=country,
            region=region,
            regions=regions,
            leagues=await self.world_repo.get_leagues_for_location(country.country_id, region.id),
            clubs=await self.world_repo.get_clubs(country.country_id, region.id),
        )
        self._narrow_to_league(page, league_id, gender)
        return page

    async def league_page(
        self, code: str, region_slug: str, league_slug: str, gender: str = DEFAULT_GENDER,
    ) -> Optional[DirectoryPage]:
        """Clubs playing in one league of a region."""
        country = await self._country_by_code(code)
        if country is None:
            return None
        regions = await self.world_repo.get_regions(country.country_id)
        region = next((r for r in regions if r.slug == region_slug), None)
        if region is None:
            return None
        page = await self._league_page(country, region, league_slug, gender)
        if page is not None:
            page.regions = regions
        return page

    async def _league_page(
        self, country: CountryDirectoryEntry, region: Optional[WorldProvince], league_slug: str, gender: str,
    ) -> Optional[DirectoryPage]:
        region_id = region.id if region else None
        leagues = await self.world_repo.get_leagues_for_location(country.country_id, region_id)
        league = next((league for league in leagues if league.url_slug == league_slug), None)
        if league is None:
            return None
        page = DirectoryPage(
            country=country,
            region=region,
            leagues=leagues,
            clubs=await self.world_repo.get_clubs(country.country_id, region_id),
        )
        self._narrow_to_league(page, league.id, gender)
        return page

    @staticmethod
    def _narrow_to_league(page: DirectoryPage, league_id: Optional[int], gender: str) -> None:
        if league_id is None:
            return
        league = next((league for league in page.leagues if league.id == league_id), None)
        if league is None:
            logger.info(f"[WORLD] League {league_id} not listed for {page.path}, showing all clubs")
            return
        page.league = league
        page.gender = gender if gender in GENDERS else DEFAULT_GENDER
        page.clubs = clubs_in_league(page.clubs, league.id, page.gender)

    async def get_regions(self, country_id: int) -> List[WorldProvince]:
        try:
            return await self.world_repo.get_regions(country_id)
        except BackendError as e:
            logger.error(f"[WORLD] Failed to fetch regions for {country_id}: {e.message}")
            return []

    # === ADD TO DIRECTORY ===

    async def add_club_to_directory(
        self, club_name: str, country_id: Optional[int], region_id: Optional[int] = None
    ) -> Tuple[Optional[ClubSearchResult], Optional[str]]:
        """Create a user-contributed club (or get the existing one) as a selectable result."""
        club_name = (club_name or "").strip()
        if not club_name or not country_id:
            return None, "Club name and country are required."

        try:
            result = await self.world_repo.create_club_from_career(club_name, country_id, region_id)
        except BackendError as e:
            logger.error(f"[WORLD] Failed to create club {club_name!r}: {e.message}")
            return None, "Failed to create club"
        if not result.get("success"):
            return None, result.get("error") or "Failed to create club"

        countries = await self.get_directory_countries()
        country = next((c for c in countries if c.country_id == country_id), None)
        region = None
        if region_id is not None:
            region = next((r for r in await self.get_regions(country_id) if r.id == region_id), None)

        name = result.get("club_name") or club_name
        logger.info(
            f"[WORLD] {'Reused' if result.get('already_exists') else 'Created'} club "
            f"{normalize_club_name(name)!r} in country {country_id}"
        )
        return ClubSearchResult(
            id=result["club_id"],
            club_name=name,
            avatar_url=result.get("avatar_url"),
            country_id=country_id,
            country_name=country.country_name if country else None,
            country_code=country.country_code if country else None,
            flag_emoji=country.flag_emoji if country else None,
            province_id=region_id,
            province_name=region.name if region else None,
            province_slug=region.slug if region else None,
        ), None

    # === CLAIMS ===

    async def claim_club(
        self, profile_id: UUID, world_club_id: UUID,
        men_league_id: Optional[int] = None, women_league_id: Optional[int] = None,
    ) -> Tuple[bool, str]:
        try:
            result = await self.world_repo.claim_club(world_club_id, profile_id, men_league_id, women_league_id)
        except BackendError as e:
            logger.error(f"[WORLD] Claim of {world_club_id} failed: {e.message}")
            return False, "Failed to claim club. Please try again."
        if not result.get("success"):
            return False, result.get("error") or "Failed to claim club."
        logger.info(f"[WORLD] Profile {profile_id} claimed club {world_club_id}")
        return True, "Club claimed."

    async def create_and_claim_club(
        self, profile_id: UUID, club_name: str, country_id: int, province_id: Optional[int] = None,
        men_league_id: Optional[int] = None, women_league_id: Optional[int] = None,
    ) -> Tuple[bool, str]:
        if not (club_name or "").strip():
            return False, "Club name is required."
        try:
            result = await self.world_repo.create_and_claim_club(
                club_name.strip(), country_id, province_id, profile_id, men_league_id, women_league_id,
            )
        except BackendError as e:
            logger.error(f"[WORLD] Create-and-claim of {club_name!r} failed: {e.message}")
            return False, "Failed to create club. Please try again."
        if not result.get("success"):
            return False, result.get("error") or "Failed to create club."
        logger.info(f"[WORLD] Profile {profile_id} created and claimed {club_name!r}")
        return True, "Club created and claimed."
