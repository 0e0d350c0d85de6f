"""
Supabase implementation of the world directory repositories.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID
from core.domain.models import (
    Country, CountryDirectoryEntry,
    WorldProvince, WorldLeague, WorldClub, ClubSearchResult,
    Page,
)
from core.interfaces.repositories import IWorldRepository, IWorldAdminRepository
from infrastructure.database.supabase_client import db, run_sync

logger = logging.getLogger(__name__)


def _rpc_result(data) -> Dict[str, Any]:
    """RPCs returning JSON come back as a dict or a one-element list."""
    if isinstance(data, list):
        return data[0] if data else {}
    return data or {}


class SupabaseWorldRepository(IWorldRepository):
    """Directory reads, club search and claim RPCs"""

    @run_sync
    def _search_clubs_sync(self, query: str, limit: int) -> List[dict]:
        response = db().rpc("search_world_clubs", {"p_query": query, "p_limit": limit}).execute()
        return response.data or []

    async def search_clubs(self, query: str, limit: int) -> List[ClubSearchResult]:
        rows = await self._search_clubs_sync(query, limit)
        return [ClubSearchResult.model_validate(r) for r in rows]

    @run_sync
    def _get_countries_sync(self) -> List[dict]:
        response = db().table("countries").select("id, code, name, nationality_name, flag_emoji")\
            .order("name").execute()
        return response.data or []

    async def get_countries(self) -> List[Country]:
        rows = await self._get_countries_sync()
        return [Country.model_validate(r) for r in rows]

    @run_sync
    def _get_directory_countries_sync(self) -> List[dict]:
        response = db().table("world_countries_with_directory").select("*")\
            .order("country_name").execute()
        return response.data or []

    async def get_directory_countries(self) -> List[CountryDirectoryEntry]:
        rows = await self._get_directory_countries_sync()
        return [CountryDirectoryEntry.model_validate(r) for r in rows]

    @run_sync
    def _country_has_regions_sync(self, country_id: int) -> Optional[dict]:
        response = db().table("world_countries_with_directory").select("has_regions")\
            .eq("country_id", country_id).limit(1).execute()
        return response.data[0] if response.data else None

    async def country_has_regions(self, country_id: int) -> bool:
        data = await self._country_has_regions_sync(country_id)
        return bool(data and data.get("has_regions"))

    @run_sync
    def _get_regions_sync(self, country_id: int) -> List[dict]:
        response = db().table("world_provinces").select("*")\
            .eq("country_id", country_id)\
            .order("display_order")\
            .execute()
        return response.data or []

    async def get_regions(self, country_id: int) -> List[WorldProvince]:
        rows = await self._get_regions_sync(country_id)
        return [WorldProvince.model_validate(r) for r in rows]

    @run_sync
    def _get_leagues_sync(self, country_id: int, region_id: Optional[int]) -> List[dict]:
        params: Dict[str, Any] = {"p_country_id": country_id}
        if region_id is not None:
            params["p_region_id"] = region_id
        response = db().rpc("get_leagues_for_location", params).execute()
        return response.data or []

    async def get_leagues_for_location(self, country_id: int, region_id: Optional[int]) -> List[WorldLeague]:
        rows = await self._get_leagues_sync(country_id, region_id)
        leagues = []
        for r in rows:
            # The RPC omits location columns; stamp the location that was asked for
            row = {"province_id": region_id, "country_id": country_id, **r}
            leagues.append(WorldLeague.model_validate(row))
        return sorted(leagues, key=lambda l: (l.tier is None, l.tier or 0, l.display_order))

    @run_sync
    def _get_clubs_sync(self, country_id: int, province_id: Optional[int]) -> List[dict]:
        query = db().table("world_clubs").select("*").eq("country_id", country_id)
        if province_id is not None:
            query = query.eq("province_id", province_id)
        response = query.order("club_name").execute()
        return response.data or []

    async def get_clubs(self, country_id: int, province_id: Optional[int] = None) -> List[WorldClub]:
        rows = await self._get_clubs_sync(country_id, province_id)
        return [WorldClub.model_validate(r) for r in rows]

    @run_sync
    def _get_claim_sync(self, profile_id: UUID) -> Optional[dict]:
        response = db().table("world_clubs").select("*")\
            .eq("claimed_profile_id", str(profile_id))\
            .eq("is_claimed", True)\
            .limit(1)\
            .execute()
        return response.data[0] if response.data else None

    async def get_claim_for_profile(self, profile_id: UUID) -> Optional[WorldClub]:
        data = await self._get_claim_sync(profile_id)
        return WorldClub.model_validate(data) if data else None

    @run_sync
    def _create_club_from_career_sync(self, club_name: str, country_id: int, province_id: Optional[int]):
        params: Dict[str, Any] = {"p_club_name": club_name, "p_country_id": country_id}
        if province_id is not None:
            params["p_province_id"] = province_id
        return db().rpc("create_world_club_from_career", params).execute().data

    async def create_club_from_career(
        self, club_name: str, country_id: int, province_id: Optional[int]
    ) -> Dict[str, Any]:
        return _rpc_result(await self._create_club_from_career_sync(club_name, country_id, province_id))

    @run_sync
    def _claim_club_sync(self, params: Dict[str, Any]):
        return db().rpc("claim_world_club", params).execute().data

    async def claim_club(
        self, world_club_id: UUID, profile_id: UUID,
        men_league_id: Optional[int], women_league_id: Optional[int],
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "p_world_club_id": str(world_club_id),
            "p_profile_id": str(profile_id),
        }
        if men_league_id is not None:
            params["p_men_league_id"] = men_league_id
        if women_league_id is not None:
            params["p_women_league_id"] = women_league_id
        return _rpc_result(await self._claim_club_sync(params))

    @run_sync
    def _create_and_claim_sync(self, params: Dict[str, Any]):
        return db().rpc("create_and_claim_world_club", params).execute().data

    async def create_and_claim_club(
        self, club_name: str, country_id: int, province_id: Optional[int], profile_id: UUID,
        men_league_id: Optional[int], women_league_id: Optional[int],
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "p_club_name": club_name,
            "p_country_id": country_id,
            "p_profile_id": str(profile_id),
        }
        for key, value in (("p_province_id", province_id),
                           ("p_men_league_id", men_league_id),
                           ("p_women_league_id", women_league_id)):
            if value is not None:
                params[key] = value
        return _rpc_result(await self._create_and_claim_sync(params))


class SupabaseWorldAdminRepository(IWorldAdminRepository):
    """Paginated CRUD over world_provinces, world_leagues and world_clubs"""

    TABLES = ("world_provinces", "world_leagues", "world_clubs")

    @staticmethod
    def _page_range(page: int, page_size: int) -> Tuple[int, int]:
        start = page * page_size
        return start, start + page_size - 1

    @run_sync
    def _list_sync(self, table: str, filters: Dict[str, Any], page: int, page_size: int,
                   order_by: str) -> Tuple[List[dict], int]:
        query = db().table(table).select("*", count="exact")

        search = (filters.get("search") or "").strip()
        if search:
            column = "club_name" if table == "world_clubs" else "name"
            query = query.ilike(column, f"%{search}%")
        for column in ("country_id", "province_id", "tier", "created_from"):
            value = filters.get(column)
            if value is not None and value != "":
                query = query.eq(column, value)
        if filters.get("is_claimed") is not None:
            query = query.eq("is_claimed", bool(filters["is_claimed"]))

        start, end = self._page_range(page, page_size)
        response = query.order(order_by).range(start, end).execute()
        return response.data or [], response.count or 0

    async def list_regions(self, filters: Dict[str, Any], page: int, page_size: int) -> Page[WorldProvince]:
        rows, total = await self._list_sync("world_provinces", filters, page, page_size, "display_order")
        return Page[WorldProvince](rows=[WorldProvince.model_validate(r) for r in rows], total_count=total)

    async def list_leagues(self, filters: Dict[str, Any], page: int, page_size: int) -> Page[WorldLeague]:
        rows, total = await self._list_sync("world_leagues", filters, page, page_size, "display_order")
        return Page[WorldLeague](rows=[WorldLeague.model_validate(r) for r in rows], total_count=total)

    async def list_clubs(self, filters: Dict[str, Any], page: int, page_size: int) -> Page[WorldClub]:
        rows, total = await self._list_sync("world_clubs", filters, page, page_size, "club_name")
        return Page[WorldClub](rows=[WorldClub.model_validate(r) for r in rows], total_count=total)

    @run_sync
    def _save_sync(self, table: str, data: Dict[str, Any], row_id: Optional[Any]) -> dict:
        if table not in self.TABLES:
            raise ValueError(f"Unknown world table: {table}")
        if row_id is None:
            response = db().table(table).insert(data).execute()
        else:
            response = db().table(table).update(data).eq("id", str(row_id)).execute()
        return response.data[0] if response.data else {}

    async def save(self, table: str, data: Dict[str, Any], row_id: Optional[Any] = None) -> Dict[str, Any]:
        return await self._save_sync(table, data, row_id)

    @run_sync
    def _delete_sync(self, table: str, row_id: Any) -> None:
        if table not in self.TABLES:
            raise ValueError(f"Unknown world table: {table}")
        db().table(table).delete().eq("id", str(row_id)).execute()

    async def delete(self, table: str, row_id: Any) -> None:
        await self._delete_sync(table, row_id)
        logger.info(f"[WORLD_ADMIN] Deleted {table} row {row_id}")

    @run_sync
    def _count_region_dependents_sync(self, region_id: int) -> Tuple[int, int]:
        leagues = db().table("world_leagues").select("id", count="exact")\
            .eq("province_id", region_id).execute()
        clubs = db().table("world_clubs").select("id", count="exact")\
            .eq("province_id", region_id).execute()
        return leagues.count or 0, clubs.count or 0

    async def count_region_dependents(self, region_id: int) -> Tuple[int, int]:
        return await self._count_region_dependents_sync(region_id)

    @run_sync
    def _unclaim_sync(self, club_id: UUID) -> None:
        db().table("world_clubs").update({
            "is_claimed": False,
            "claimed_profile_id": None,
            "claimed_at": None,
        }).eq("id", str(club_id)).execute()

    async def unclaim_club(self, club_id: UUID) -> None:
        await self._unclaim_sync(club_id)
        logger.info(f"[WORLD_ADMIN] Unclaimed club {club_id} at {datetime.now(timezone.utc).isoformat()}")
