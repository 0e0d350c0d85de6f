from core.services.auth_service import AuthService, AuthResult
from core.services.profile_service import ProfileService
from core.services.brand_service import BrandService
from core.services.world_service import WorldService, DirectoryPage
from core.services.journey_service import JourneyService
from core.services.friendship_service import FriendshipService, FriendshipView
from core.services.reference_service import ReferenceService, ReferenceBoard
from core.services.messaging_service import MessagingService, ChatThread
from core.services.admin_service import AdminService, AdminOverview
from core.services.profile_strength import ProfileStrengthService, profile_strength
from core.services.notification_service import NotificationService, NotificationPage

__all__ = [
    "AuthService",
    "AuthResult",
    "ProfileService",
    "BrandService",
    "WorldService",
    "DirectoryPage",
    "JourneyService",
    "FriendshipService",
    "FriendshipView",
    "ReferenceService",
    "ReferenceBoard",
    "MessagingService",
    "ChatThread",
    "AdminService",
    "AdminOverview",
    "ProfileStrengthService",
    "profile_strength",
    "NotificationService",
    "NotificationPage",
]
