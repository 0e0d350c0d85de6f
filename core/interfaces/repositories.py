"""
Repository interfaces - abstractions for data access.
Services depend on these; Supabase implementations live in infrastructure/.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID
from core.domain.models import (
    Profile,
    Brand,
    Country, CountryDirectoryEntry,
    WorldProvince, WorldLeague, WorldClub, ClubSearchResult,
    JourneyEntry,
    Conversation, Message,
    FriendshipEdge, FriendshipStatus,
    ReferenceCard,
    Notification, NotificationCounts, NotificationFilter, ProfileCounts, Role,
    DashboardStats, SignupTrend, TopCountry,
    AuthOrphan, ProfileOrphan, BrokenReferences,
    AdminProfileListItem, ProfileSearchParams, AuditLogEntry, EngagementSummary,
    Page,
)


class IProfileRepository(ABC):
    """Interface for profile data access"""

    @abstractmethod
    async def get_by_id(self, profile_id: UUID) -> Optional[Profile]:
        """Get profile by ID"""
        pass

    @abstractmethod
    async def update(self, profile_id: UUID, update: Dict[str, Any]) -> Optional[Profile]:
        """Apply a partial update and return the server row"""
        pass

    @abstractmethod
    async def create_for_new_user(self, user_id: UUID, email: str, role: str) -> Optional[Profile]:
        """Create the profile row for a freshly authenticated user"""
        pass


class IBrandRepository(ABC):
    """Interface for brand data access"""

    @abstractmethod
    async def get_my_brand(self) -> Optional[Brand]:
        """Brand owned by the current caller"""
        pass

    @abstractmethod
    async def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Create a brand, returns the RPC result"""
        pass

    @abstractmethod
    async def update(self, data: Dict[str, Any]) -> None:
        """Update the caller's brand"""
        pass


class IWorldRepository(ABC):
    """Interface for world directory reads and claim actions"""

    @abstractmethod
    async def search_clubs(self, query: str, limit: int) -> List[ClubSearchResult]:
        """Ranked club search, prefix matches first"""
        pass

    @abstractmethod
    async def get_countries(self) -> List[Country]:
        """All countries"""
        pass

    @abstractmethod
    async def get_directory_countries(self) -> List[CountryDirectoryEntry]:
        """Countries that have directory content"""
        pass

    @abstractmethod
    async def country_has_regions(self, country_id: int) -> bool:
        """Whether the country's directory is split into regions"""
        pass

    @abstractmethod
    async def get_regions(self, country_id: int) -> List[WorldProvince]:
        """Regions of a country in display order"""
        pass

    @abstractmethod
    async def get_leagues_for_location(self, country_id: int, region_id: Optional[int]) -> List[WorldLeague]:
        """Leagues for a region, or for a country without regions"""
        pass

    @abstractmethod
    async def get_clubs(self, country_id: int, province_id: Optional[int] = None) -> List[WorldClub]:
        """Clubs listed under a country or region"""
        pass

    @abstractmethod
    async def get_claim_for_profile(self, profile_id: UUID) -> Optional[WorldClub]:
        """World club claimed by this profile, if any"""
        pass

    @abstractmethod
    async def create_club_from_career(
        self, club_name: str, country_id: int, province_id: Optional[int]
    ) -> Dict[str, Any]:
        """User-contributed club; returns the existing club on duplicate"""
        pass

    @abstractmethod
    async def claim_club(
        self, world_club_id: UUID, profile_id: UUID,
        men_league_id: Optional[int], women_league_id: Optional[int],
    ) -> Dict[str, Any]:
        """Claim a directory club for a club profile"""
        pass

    @abstractmethod
    async def create_and_claim_club(
        self, club_name: str, country_id: int, province_id: Optional[int], profile_id: UUID,
        men_league_id: Optional[int], women_league_id: Optional[int],
    ) -> Dict[str, Any]:
        """Create a club in the directory and claim it in one step"""
        pass


class IWorldAdminRepository(ABC):
    """Interface for admin CRUD over regions, leagues and clubs"""

    @abstractmethod
    async def list_regions(self, filters: Dict[str, Any], page: int, page_size: int) -> Page[WorldProvince]:
        pass

    @abstractmethod
    async def list_leagues(self, filters: Dict[str, Any], page: int, page_size: int) -> Page[WorldLeague]:
        pass

    @abstractmethod
    async def list_clubs(self, filters: Dict[str, Any], page: int, page_size: int) -> Page[WorldClub]:
        pass

    @abstractmethod
    async def save(self, table: str, data: Dict[str, Any], row_id: Optional[Any] = None) -> Dict[str, Any]:
        """Insert when row_id is None, otherwise update"""
        pass

    @abstractmethod
    async def delete(self, table: str, row_id: Any) -> None:
        pass

    @abstractmethod
    async def count_region_dependents(self, region_id: int) -> Tuple[int, int]:
        """(leagues, clubs) referencing the region"""
        pass

    @abstractmethod
    async def unclaim_club(self, club_id: UUID) -> None:
        pass


class IJourneyRepository(ABC):
    """Interface for career history entries"""

    @abstractmethod
    async def list_for_user(self, user_id: UUID) -> List[JourneyEntry]:
        pass

    @abstractmethod
    async def delete_many(self, entry_ids: List[str]) -> None:
        pass

    @abstractmethod
    async def insert(self, data: Dict[str, Any]) -> None:
        pass

    @abstractmethod
    async def update(self, entry_id: str, data: Dict[str, Any]) -> None:
        pass


class IFriendshipRepository(ABC):
    """Interface for friendship edges"""

    @abstractmethod
    async def get_edge(self, viewer_id: UUID, other_id: UUID) -> Optional[FriendshipEdge]:
        pass

    @abstractmethod
    async def send_request(self, requester_id: UUID, other_id: UUID) -> None:
        """Upsert a pending edge for the pair"""
        pass

    @abstractmethod
    async def set_status(self, friendship_id: UUID, status: FriendshipStatus) -> None:
        pass

    @abstractmethod
    async def list_friends(self, profile_id: UUID) -> List[FriendshipEdge]:
        pass


class IReferenceRepository(ABC):
    """Interface for trusted references (all RPC-backed)"""

    @abstractmethod
    async def get_my_references(self) -> List[ReferenceCard]:
        pass

    @abstractmethod
    async def get_my_requests(self) -> List[ReferenceCard]:
        pass

    @abstractmethod
    async def get_given(self) -> List[ReferenceCard]:
        pass

    @abstractmethod
    async def get_for_profile(self, profile_id: UUID) -> List[ReferenceCard]:
        pass

    @abstractmethod
    async def request(self, reference_id: UUID, relationship_type: str, note: Optional[str]) -> None:
        pass

    @abstractmethod
    async def respond(self, reference_id: UUID, accept: bool, endorsement: Optional[str]) -> None:
        pass

    @abstractmethod
    async def remove(self, reference_id: UUID) -> None:
        pass

    @abstractmethod
    async def withdraw(self, reference_id: UUID) -> None:
        pass


class IProfileActivityRepository(ABC):
    """Interface for counts of rows that hang off a profile"""

    @abstractmethod
    async def count_activity(self, profile_id: UUID, role: Role) -> ProfileCounts:
        """Counts relevant to the role; the others stay zero"""
        pass


class INotificationRepository(ABC):
    """Interface for the caller's notification inbox (all RPC-backed)"""

    @abstractmethod
    async def get_page(
        self, filter: NotificationFilter, kind: Optional[str], limit: int, offset: int,
    ) -> List[Notification]:
        pass

    @abstractmethod
    async def counts(self) -> NotificationCounts:
        pass

    @abstractmethod
    async def mark_read(self, notification_id: UUID) -> bool:
        """False when nothing was updated"""
        pass

    @abstractmethod
    async def mark_all_read(self, kind: Optional[str]) -> int:
        pass

    @abstractmethod
    async def clear(self, notification_ids: Optional[List[UUID]], kind: Optional[str]) -> int:
        pass


class IConversationRepository(ABC):
    """Interface for conversations and messages"""

    @abstractmethod
    async def create(self, participant_one_id: UUID, participant_two_id: UUID) -> Conversation:
        """Insert a conversation; raises BackendError on unique violation"""
        pass

    @abstractmethod
    async def find_between(self, a: UUID, b: UUID) -> Optional[Conversation]:
        pass

    @abstractmethod
    async def delete(self, conversation_id: UUID) -> None:
        pass

    @abstractmethod
    async def list_for_profile(self, profile_id: UUID) -> List[Conversation]:
        pass

    @abstractmethod
    async def list_messages(self, conversation_id: UUID, limit: int = 50) -> List[Message]:
        pass

    @abstractmethod
    async def insert_message(
        self, conversation_id: UUID, sender_id: UUID, content: str, idempotency_key: str
    ) -> Message:
        pass


class IAdminRepository(ABC):
    """Interface for admin analytics and moderation RPCs"""

    @abstractmethod
    async def is_platform_admin(self) -> bool:
        pass

    @abstractmethod
    async def get_dashboard_stats(self) -> DashboardStats:
        pass

    @abstractmethod
    async def get_signup_trends(self, days: int) -> List[SignupTrend]:
        pass

    @abstractmethod
    async def get_top_countries(self, limit: int) -> List[TopCountry]:
        pass

    @abstractmethod
    async def get_auth_orphans(self) -> List[AuthOrphan]:
        pass

    @abstractmethod
    async def get_profile_orphans(self) -> List[ProfileOrphan]:
        pass

    @abstractmethod
    async def get_broken_references(self) -> BrokenReferences:
        pass

    @abstractmethod
    async def search_profiles(self, params: ProfileSearchParams) -> Page[AdminProfileListItem]:
        pass

    @abstractmethod
    async def get_profile_details(self, profile_id: UUID) -> Dict[str, Any]:
        pass

    @abstractmethod
    async def block_user(self, profile_id: UUID, reason: Optional[str]) -> Dict[str, Any]:
        pass

    @abstractmethod
    async def unblock_user(self, profile_id: UUID) -> Dict[str, Any]:
        pass

    @abstractmethod
    async def update_profile(self, profile_id: UUID, updates: Dict[str, Any], reason: Optional[str]) -> Dict[str, Any]:
        pass

    @abstractmethod
    async def set_test_account(self, profile_id: UUID, is_test: bool) -> Dict[str, Any]:
        pass

    @abstractmethod
    async def delete_orphan_profile(self, profile_id: UUID) -> Dict[str, Any]:
        pass

    @abstractmethod
    async def get_audit_logs(
        self, action: Optional[str], target_type: Optional[str], admin_id: Optional[UUID],
        limit: int, offset: int,
    ) -> Page[AuditLogEntry]:
        pass

    @abstractmethod
    async def get_engagement_summary(self) -> EngagementSummary:
        pass


class IRateLimitRepository(ABC):
    """Backend-enforced rate limits"""

    @abstractmethod
    async def check(self, kind: str, identifier: str) -> Optional[Dict[str, Any]]:
        """RPC result dict, or None when the check itself failed"""
        pass
