from core.interfaces.repositories import (
    IProfileRepository,
    IBrandRepository,
    IWorldRepository,
    IWorldAdminRepository,
    IJourneyRepository,
    IFriendshipRepository,
    IReferenceRepository,
    IConversationRepository,
    IAdminRepository,
    IRateLimitRepository,
)
from core.interfaces.gateways import IAuthGateway, IAvatarStorage, IAdminActions, AuthSession

__all__ = [
    # Repositories
    "IProfileRepository",
    "IBrandRepository",
    "IWorldRepository",
    "IWorldAdminRepository",
    "IJourneyRepository",
    "IFriendshipRepository",
    "IReferenceRepository",
    "IConversationRepository",
    "IAdminRepository",
    "IRateLimitRepository",
    # Gateways
    "IAuthGateway",
    "IAvatarStorage",
    "IAdminActions",
    "AuthSession",
]
