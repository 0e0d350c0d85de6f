"""
Web loader - initializes repositories, gateways and services.
"""

from config.features import features
from config.settings import settings

# Infrastructure
from infrastructure.auth.supabase_auth import SupabaseAuthGateway
from infrastructure.database import (
    SupabaseAdminRepository,
    SupabaseBrandRepository,
    SupabaseConversationRepository,
    SupabaseFriendshipRepository,
    SupabaseJourneyRepository,
    SupabaseNotificationRepository,
    SupabaseProfileActivityRepository,
    SupabaseProfileRepository,
    SupabaseRateLimitRepository,
    SupabaseReferenceRepository,
    SupabaseWorldAdminRepository,
    SupabaseWorldRepository,
)
from infrastructure.functions.admin_actions import EdgeFunctionAdminActions
from infrastructure.storage.avatar_storage import SupabaseAvatarStorage

# Core services
from core.services import (
    AdminService, AuthService, BrandService, FriendshipService, JourneyService,
    MessagingService, NotificationService, ProfileService, ProfileStrengthService,
    ReferenceService, WorldService,
)
from core.state.drafts import DraftStore

from adapters.web.context import Services
from adapters.web.sessions import SessionManager


# === REPOSITORIES ===
profile_repo = SupabaseProfileRepository()
brand_repo = SupabaseBrandRepository()
world_repo = SupabaseWorldRepository()
world_admin_repo = SupabaseWorldAdminRepository()
journey_repo = SupabaseJourneyRepository()
friendship_repo = SupabaseFriendshipRepository()
reference_repo = SupabaseReferenceRepository()
conversation_repo = SupabaseConversationRepository()
admin_repo = SupabaseAdminRepository()
rate_limit_repo = SupabaseRateLimitRepository()
activity_repo = SupabaseProfileActivityRepository()
notification_repo = SupabaseNotificationRepository()


# === GATEWAYS ===
auth_gateway = SupabaseAuthGateway()
avatar_storage = SupabaseAvatarStorage()
admin_actions = EdgeFunctionAdminActions(settings.supabase_url)
drafts = DraftStore(settings.draft_dir)


# === BUSINESS SERVICES ===
auth_service = AuthService(
    auth_gateway=auth_gateway,
    rate_limit_repo=rate_limit_repo,
    profile_repo=profile_repo,
    site_url=settings.site_url,
    rate_limits_enabled=features.RATE_LIMITS_ENABLED,
)
profile_service = ProfileService(
    profile_repo=profile_repo,
    world_repo=world_repo,
    drafts=drafts,
    avatar_storage=avatar_storage,
    autosave_ms=features.DRAFT_AUTOSAVE_MS,
)
brand_service = BrandService(brand_repo=brand_repo, profile_repo=profile_repo)
world_service = WorldService(
    world_repo=world_repo,
    search_limit=features.CLUB_SEARCH_LIMIT,
    dropdown_limit=features.DROPDOWN_CLUB_LIMIT,
    country_limit=features.DROPDOWN_COUNTRY_LIMIT,
    debounce_ms=features.SEARCH_DEBOUNCE_MS,
    min_search_length=features.MIN_SEARCH_LENGTH,
)
journey_service = JourneyService(journey_repo=journey_repo)
friendship_service = FriendshipService(friendship_repo=friendship_repo)
reference_service = ReferenceService(reference_repo=reference_repo)
messaging_service = MessagingService(conversation_repo=conversation_repo)
strength_service = ProfileStrengthService(activity_repo=activity_repo, brand_repo=brand_repo)
notification_service = NotificationService(notification_repo=notification_repo)
admin_service = AdminService(
    admin_repo=admin_repo,
    world_admin_repo=world_admin_repo,
    admin_actions=admin_actions,
    admin_user_ids=settings.admin_user_ids,
    page_size=features.ADMIN_PAGE_SIZE,
    search_debounce_ms=features.SEARCH_DEBOUNCE_MS,
)


# === WEB ===
services = Services(
    auth=auth_service,
    profiles=profile_service,
    brands=brand_service,
    world=world_service,
    journey=journey_service,
    friendships=friendship_service,
    references=reference_service,
    messaging=messaging_service,
    admin=admin_service,
    strength=strength_service,
    notifications=notification_service,
    sessions=SessionManager(profile_repo.get_by_id),
    session_cookie=settings.session_cookie,
    secure_cookies=settings.site_url.startswith("https://"),
    world_directory_enabled=features.WORLD_DIRECTORY_ENABLED,
)
