"""
Domain models - the core of business logic.
These models mirror backend rows and are transport-agnostic (web, API, scripts).
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List, Dict, Any, Generic, TypeVar
from datetime import date, datetime
from uuid import UUID
from enum import Enum

from core.utils.text import slugify


# === ENUMS ===

class Role(str, Enum):
    PLAYER = "player"
    COACH = "coach"
    CLUB = "club"
    BRAND = "brand"


class JourneyEntryType(str, Enum):
    CLUB = "club"
    NATIONAL_TEAM = "national_team"
    ACHIEVEMENT = "achievement"
    TOURNAMENT = "tournament"
    MILESTONE = "milestone"
    ACADEMY = "academy"
    OTHER = "other"


class FriendshipStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    BLOCKED = "blocked"


class ReferenceStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    REVOKED = "revoked"


class MessageStatus(str, Enum):
    """Client-side delivery state of a message"""
    SENDING = "sending"
    DELIVERED = "delivered"
    FAILED = "failed"


class ClubOrigin(str, Enum):
    SEED = "seed"
    USER = "user"


# === PROFILE ===

class Profile(BaseModel):
    """Full profile row. Role-specific fields stay None for other roles."""
    id: UUID
    role: Role
    email: Optional[str] = None
    full_name: Optional[str] = None
    username: Optional[str] = None
    avatar_url: Optional[str] = None
    base_location: Optional[str] = None
    nationality: Optional[str] = None
    nationality_country_id: Optional[int] = None
    nationality2_country_id: Optional[int] = None
    contact_email: Optional[str] = None
    contact_email_public: bool = False
    social_links: Dict[str, str] = Field(default_factory=dict)
    bio: Optional[str] = None
    onboarding_completed: bool = False
    is_blocked: bool = False
    is_test_account: bool = False

    # Player / coach
    position: Optional[str] = None
    secondary_position: Optional[str] = None
    gender: Optional[str] = None
    date_of_birth: Optional[date] = None
    current_club: Optional[str] = None
    current_world_club_id: Optional[UUID] = None
    open_to_play: bool = False
    open_to_coach: bool = False
    brand_representation: Optional[str] = None
    highlight_video_url: Optional[str] = None

    # Club
    year_founded: Optional[int] = None
    website: Optional[str] = None
    club_bio: Optional[str] = None
    club_history: Optional[str] = None
    mens_league_division: Optional[str] = None
    womens_league_division: Optional[str] = None
    mens_league_id: Optional[int] = None
    womens_league_id: Optional[int] = None
    world_region_id: Optional[int] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    def merged(self, update: Dict[str, Any]) -> "Profile":
        """Return a validated copy with the partial update applied."""
        data = self.model_dump()
        data.update(update)
        return Profile.model_validate(data)


# === BRAND ===

class Brand(BaseModel):
    id: UUID
    profile_id: UUID
    name: str
    slug: str
    category: str
    bio: Optional[str] = None
    logo_url: Optional[str] = None
    website_url: Optional[str] = None
    instagram_url: Optional[str] = None
    is_verified: bool = False
    created_at: Optional[datetime] = None


class BrandInput(BaseModel):
    """Values of the brand create/edit form"""
    name: str = ""
    slug: str = ""
    category: str = ""
    bio: str = ""
    logo_url: str = ""
    website_url: str = ""
    instagram_url: str = ""


# === WORLD DIRECTORY ===

class Country(BaseModel):
    id: int
    code: str
    name: str
    nationality_name: Optional[str] = None
    flag_emoji: Optional[str] = None


class CountryDirectoryEntry(BaseModel):
    """Row of the countries-with-directory view"""
    country_id: int
    country_code: str
    country_name: str
    flag_emoji: Optional[str] = None
    has_regions: bool = False
    total_clubs: int = 0


class WorldProvince(BaseModel):
    """Region within a country"""
    id: int
    country_id: int
    name: str
    slug: str
    description: Optional[str] = None
    display_order: int = 0
    logical_id: Optional[str] = None


class WorldLeague(BaseModel):
    id: int
    name: str
    slug: Optional[str] = None
    tier: Optional[int] = None
    province_id: Optional[int] = None
    country_id: Optional[int] = None
    display_order: int = 0
    logical_id: Optional[str] = None

    @property
    def url_slug(self) -> str:
        return self.slug or slugify(self.name)


class WorldClub(BaseModel):
    id: UUID
    club_id: Optional[str] = None
    club_name: str
    club_name_normalized: Optional[str] = None
    country_id: int
    province_id: Optional[int] = None
    men_league_id: Optional[int] = None
    women_league_id: Optional[int] = None
    is_claimed: bool = False
    claimed_profile_id: Optional[UUID] = None
    claimed_at: Optional[datetime] = None
    created_from: ClubOrigin = ClubOrigin.SEED
    avatar_url: Optional[str] = None


class ClubSearchResult(BaseModel):
    """Ranked row returned by the club search RPC"""
    id: UUID
    club_name: str
    avatar_url: Optional[str] = None
    country_id: int
    country_name: Optional[str] = None
    country_code: Optional[str] = None
    flag_emoji: Optional[str] = None
    province_id: Optional[int] = None
    province_name: Optional[str] = None
    province_slug: Optional[str] = None
    men_league_id: Optional[int] = None
    women_league_id: Optional[int] = None
    men_league_name: Optional[str] = None
    women_league_name: Optional[str] = None
    is_claimed: bool = False

    @property
    def league_name(self) -> Optional[str]:
        return self.women_league_name or self.men_league_name


class ClubClaimContext(BaseModel):
    """World-directory data needed to edit a claimed club's leagues"""
    world_club_id: UUID
    country_id: int
    province_id: Optional[int] = None
    has_regions: bool = False
    regions: List[WorldProvince] = Field(default_factory=list)
    leagues: List[WorldLeague] = Field(default_factory=list)

    def league_name(self, league_id: Optional[int]) -> Optional[str]:
        if league_id is None:
            return None
        for league in self.leagues:
            if league.id == league_id:
                return league.name
        return None

    def leagues_for_region(self, region_id: Optional[int]) -> List[WorldLeague]:
        """Leagues selectable for a region; all leagues when the country has no regions."""
        if not self.has_regions:
            return list(self.leagues)
        if region_id is None:
            return []
        return [league for league in self.leagues if league.province_id == region_id]


# === JOURNEY ===

class JourneyEntry(BaseModel):
    """Career history timeline item. Unsaved entries carry a temp- id."""
    id: str
    user_id: Optional[UUID] = None
    entry_type: JourneyEntryType = JourneyEntryType.CLUB
    club_name: str = ""
    position_role: str = ""
    division_league: str = ""
    years: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    highlights: List[str] = Field(default_factory=list)
    location_city: Optional[str] = None
    location_country: Optional[str] = None
    description: Optional[str] = None
    badge_label: Optional[str] = None
    image_url: Optional[str] = None
    world_club_id: Optional[UUID] = None
    display_order: int = 0
    created_at: Optional[datetime] = None


# === MESSAGING ===

class Conversation(BaseModel):
    id: UUID
    participant_one_id: UUID
    participant_two_id: UUID
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    last_message_at: Optional[datetime] = None

    def other_participant(self, profile_id: UUID) -> UUID:
        if self.participant_one_id == profile_id:
            return self.participant_two_id
        return self.participant_one_id


class Message(BaseModel):
    id: str
    conversation_id: Optional[UUID] = None
    sender_id: UUID
    content: str
    idempotency_key: Optional[str] = None
    sent_at: Optional[datetime] = None
    read_at: Optional[datetime] = None
    status: MessageStatus = MessageStatus.DELIVERED


# === RELATIONSHIPS ===

class FriendshipEdge(BaseModel):
    """Edge between the viewer and another profile, as seen from the viewer"""
    id: UUID
    profile_id: UUID
    friend_id: UUID
    requester_id: UUID
    status: FriendshipStatus
    created_at: Optional[datetime] = None
    accepted_at: Optional[datetime] = None


class ReferenceCard(BaseModel):
    id: UUID
    requester_id: Optional[UUID] = None
    reference_id: Optional[UUID] = None
    relationship_type: str
    request_note: Optional[str] = None
    endorsement_text: Optional[str] = None
    status: ReferenceStatus = ReferenceStatus.PENDING
    created_at: Optional[datetime] = None
    accepted_at: Optional[datetime] = None
    # Denormalized profile summary of the other side
    profile_id: Optional[UUID] = None
    full_name: Optional[str] = None
    role: Optional[Role] = None
    avatar_url: Optional[str] = None


# === PROFILE STRENGTH ===

class ProfileCounts(BaseModel):
    """Related rows that count toward profile strength"""
    journey: int = 0
    gallery: int = 0
    friends: int = 0
    references: int = 0


class StrengthBucket(BaseModel):
    id: str
    label: str
    hint: str
    weight: int
    completed: bool = False
    # Where the dashboard sends the user to complete it: "edit-profile" or a tab id
    action: str = "edit-profile"


class ProfileStrength(BaseModel):
    percentage: int = 0
    buckets: List[StrengthBucket] = Field(default_factory=list)

    @property
    def next_step(self) -> Optional[StrengthBucket]:
        """Heaviest bucket still missing."""
        missing = [b for b in self.buckets if not b.completed]
        return max(missing, key=lambda b: b.weight) if missing else None


# === NOTIFICATIONS ===

class NotificationFilter(str, Enum):
    ALL = "all"
    UNREAD = "unread"
    BY_TYPE = "by_type"


class NotificationActor(BaseModel):
    id: Optional[UUID] = None
    full_name: Optional[str] = None
    role: Optional[str] = None
    username: Optional[str] = None
    avatar_url: Optional[str] = None
    base_location: Optional[str] = None


class Notification(BaseModel):
    id: UUID
    kind: str
    source_entity_id: Optional[UUID] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    target_url: Optional[str] = None
    created_at: datetime
    read_at: Optional[datetime] = None
    seen_at: Optional[datetime] = None
    cleared_at: Optional[datetime] = None
    actor: NotificationActor = Field(default_factory=NotificationActor)

    @field_validator("metadata", mode="before")
    @classmethod
    def none_as_empty(cls, v):
        return v or {}

    @field_validator("actor", mode="before")
    @classmethod
    def none_as_unknown_actor(cls, v):
        return v or {}

    @property
    def is_read(self) -> bool:
        return self.read_at is not None


class NotificationCounts(BaseModel):
    unread_count: int = 0
    total_count: int = 0


# === ADMIN ===

class DashboardStats(BaseModel):
    total_users: int = 0
    total_players: int = 0
    total_coaches: int = 0
    total_clubs: int = 0
    total_brands: int = 0
    blocked_users: int = 0
    test_accounts: int = 0
    signups_7d: int = 0
    signups_30d: int = 0
    onboarding_completed: int = 0
    onboarding_pending: int = 0
    total_conversations: int = 0
    total_messages: int = 0
    messages_7d: int = 0
    total_friendships: int = 0
    auth_orphans: int = 0
    profile_orphans: int = 0
    generated_at: Optional[datetime] = None


class SignupTrend(BaseModel):
    date: date
    total_signups: int = 0
    players: int = 0
    coaches: int = 0
    clubs: int = 0
    brands: int = 0


class TopCountry(BaseModel):
    country: str
    user_count: int = 0


class AuthOrphan(BaseModel):
    """Auth user without a profile row"""
    user_id: UUID
    email: Optional[str] = None
    created_at: Optional[datetime] = None
    last_sign_in_at: Optional[datetime] = None
    email_confirmed_at: Optional[datetime] = None
    intended_role: Optional[str] = None


class ProfileOrphan(BaseModel):
    """Profile row without an auth user"""
    profile_id: UUID
    email: Optional[str] = None
    full_name: Optional[str] = None
    role: Optional[str] = None
    created_at: Optional[datetime] = None


class BrokenReferences(BaseModel):
    applications_missing_vacancy: List[Dict[str, Any]] = Field(default_factory=list)
    applications_missing_player: List[Dict[str, Any]] = Field(default_factory=list)
    vacancies_missing_club: List[Dict[str, Any]] = Field(default_factory=list)
    messages_missing_sender: List[Dict[str, Any]] = Field(default_factory=list)
    friendships_missing_users: List[Dict[str, Any]] = Field(default_factory=list)

    @field_validator("*", mode="before")
    @classmethod
    def null_as_empty(cls, v):
        return v or []

    @property
    def total(self) -> int:
        return (
            len(self.applications_missing_vacancy)
            + len(self.applications_missing_player)
            + len(self.vacancies_missing_club)
            + len(self.messages_missing_sender)
            + len(self.friendships_missing_users)
        )


class DataIssuesReport(BaseModel):
    auth_orphans: List[AuthOrphan] = Field(default_factory=list)
    profile_orphans: List[ProfileOrphan] = Field(default_factory=list)
    broken_references: BrokenReferences = Field(default_factory=BrokenReferences)

    @property
    def total_issues(self) -> int:
        return len(self.auth_orphans) + len(self.profile_orphans) + self.broken_references.total


class AdminProfileListItem(BaseModel):
    id: UUID
    email: Optional[str] = None
    full_name: Optional[str] = None
    username: Optional[str] = None
    role: Optional[str] = None
    is_blocked: bool = False
    is_test_account: bool = False
    onboarding_completed: bool = False
    created_at: Optional[datetime] = None
    avatar_url: Optional[str] = None


class ProfileSearchParams(BaseModel):
    query: Optional[str] = None
    role: Optional[Role] = None
    is_blocked: Optional[bool] = None
    is_test_account: Optional[bool] = None
    onboarding_completed: Optional[bool] = None
    limit: int = 50
    offset: int = 0


class AuditLogEntry(BaseModel):
    id: UUID
    admin_id: Optional[UUID] = None
    admin_email: Optional[str] = None
    admin_name: Optional[str] = None
    action: str
    target_type: str
    target_id: Optional[str] = None
    old_data: Optional[Dict[str, Any]] = None
    new_data: Optional[Dict[str, Any]] = None
    metadata: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None


class EngagementSummary(BaseModel):
    total_active_users_7d: int = 0
    total_active_users_30d: int = 0
    total_time_minutes_7d: int = 0
    total_time_minutes_30d: int = 0
    total_sessions_7d: int = 0
    avg_session_minutes: float = 0
    avg_daily_active_users: float = 0


# === PAGINATION ===

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    """One page of rows plus the total row count across all pages"""
    rows: List[T] = Field(default_factory=list)
    total_count: int = 0


# === RATE LIMITS ===

class RateLimitResult(BaseModel):
    allowed: bool = True
    remaining: int = 0
    reset_at: Optional[datetime] = None
    limit: int = 0
