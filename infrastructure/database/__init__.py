from infrastructure.database.profile_repository import SupabaseProfileRepository
from infrastructure.database.brand_repository import SupabaseBrandRepository
from infrastructure.database.world_repository import SupabaseWorldRepository, SupabaseWorldAdminRepository
from infrastructure.database.journey_repository import SupabaseJourneyRepository
from infrastructure.database.friendship_repository import SupabaseFriendshipRepository
from infrastructure.database.reference_repository import SupabaseReferenceRepository
from infrastructure.database.conversation_repository import SupabaseConversationRepository
from infrastructure.database.admin_repository import SupabaseAdminRepository
from infrastructure.database.rate_limit_repository import SupabaseRateLimitRepository
from infrastructure.database.profile_activity_repository import SupabaseProfileActivityRepository
from infrastructure.database.notification_repository import SupabaseNotificationRepository

__all__ = [
    "SupabaseProfileRepository",
    "SupabaseBrandRepository",
    "SupabaseWorldRepository",
    "SupabaseWorldAdminRepository",
    "SupabaseJourneyRepository",
    "SupabaseFriendshipRepository",
    "SupabaseReferenceRepository",
    "SupabaseConversationRepository",
    "SupabaseAdminRepository",
    "SupabaseRateLimitRepository",
    "SupabaseProfileActivityRepository",
    "SupabaseNotificationRepository",
]
