"""
Profile strength - how complete a profile is, as weighted buckets.

Each role has its own buckets and the weights of a role add up to 100.
The percentage is the sum of the weights of completed buckets.
"""

import logging
from typing import Callable, Dict, List, Optional

from core.domain.constants import MIN_BRAND_BIO_LENGTH
from core.domain.errors import BackendError
from core.domain.models import Brand, Profile, ProfileCounts, ProfileStrength, Role, StrengthBucket
from core.interfaces.repositories import IBrandRepository, IProfileActivityRepository

logger = logging.getLogger(__name__)


def _filled(*values) -> bool:
    return all(v is not None and str(v).strip() for v in values)


def _has_country(profile: Profile) -> bool:
    # New country id or the legacy nationality text
    return bool(profile.nationality_country_id or (profile.nationality or "").strip())


# === BUCKETS PER ROLE ===

def player_buckets(profile: Profile, counts: ProfileCounts, brand: Optional[Brand] = None) -> List[StrengthBucket]:
    return [
        StrengthBucket(
            id="basic-info", label="Basic info completed",
            hint="Add your nationality, location, and playing position", weight=15,
            completed=_has_country(profile) and _filled(profile.base_location, profile.position),
        ),
        StrengthBucket(
            id="profile-photo", label="Add a profile photo",
            hint="Help clubs recognize you with a profile picture", weight=15,
            completed=_filled(profile.avatar_url),
        ),
        StrengthBucket(
            id="highlight-video", label="Add your highlight video",
            hint="Show clubs what you can do on the pitch", weight=20,
            completed=_filled(profile.highlight_video_url), action="add-video",
        ),
        StrengthBucket(
            id="journey", label="Share a moment in your Journey",
            hint="Add your career history, milestones, or achievements", weight=15,
            completed=counts.journey > 0, action="journey",
        ),
        StrengthBucket(
            id="media-gallery", label="Add a photo or video to your Gallery",
            hint="Build your visual portfolio for clubs to see", weight=10,
            completed=counts.gallery > 0, action="profile",
        ),
        StrengthBucket(
            id="friends", label="Make your first connection",
            hint="Add a friend to start building your trusted circle", weight=10,
            completed=counts.friends > 0, action="friends",
        ),
        StrengthBucket(
            id="references", label="Get a trusted reference",
            hint="Ask a coach or teammate to vouch for you", weight=15,
            completed=counts.references > 0, action="friends",
        ),
    ]


def coach_buckets(profile: Profile, counts: ProfileCounts, brand: Optional[Brand] = None) -> List[StrengthBucket]:
    return [
        StrengthBucket(
            id="basic", label="Basic Info",
            hint="Complete name, nationality, location, DOB, and gender", weight=25,
            completed=_has_country(profile) and _filled(
                profile.full_name, profile.base_location, profile.date_of_birth, profile.gender,
            ),
        ),
        StrengthBucket(
            id="photo", label="Profile Photo", hint="Upload a profile photo", weight=20,
            completed=_filled(profile.avatar_url),
        ),
        StrengthBucket(
            id="bio", label="Professional Bio", hint="Add a bio about your coaching background", weight=20,
            completed=_filled(profile.bio),
        ),
        StrengthBucket(
            id="journey", label="Experience / Journey", hint="Add at least one experience entry", weight=20,
            completed=counts.journey >= 1, action="journey",
        ),
        StrengthBucket(
            id="gallery", label="Media Gallery", hint="Upload at least one gallery photo", weight=15,
            completed=counts.gallery >= 1, action="gallery",
        ),
    ]


def club_buckets(profile: Profile, counts: ProfileCounts, brand: Optional[Brand] = None) -> List[StrengthBucket]:
    # League divisions are optional; one way to get in touch is enough
    has_contact = _filled(profile.website) or _filled(profile.contact_email)
    return [
        StrengthBucket(
            id="basic", label="Basic Info",
            hint="Complete country, city, year founded, and add website or contact email", weight=35,
            completed=_has_country(profile) and _filled(profile.base_location)
            and bool(profile.year_founded) and has_contact,
        ),
        StrengthBucket(
            id="logo", label="Club Logo", hint="Upload your club logo", weight=25,
            completed=_filled(profile.avatar_url),
        ),
        StrengthBucket(
            id="about", label="About the Club", hint="Add a description about your club", weight=20,
            completed=_filled(profile.club_bio),
        ),
        StrengthBucket(
            id="gallery", label="Photo Gallery", hint="Upload at least one photo to your gallery", weight=20,
            completed=counts.gallery >= 1, action="gallery",
        ),
    ]


def brand_buckets(profile: Profile, counts: ProfileCounts, brand: Optional[Brand] = None) -> List[StrengthBucket]:
    bio = (brand.bio or "").strip() if brand else ""
    return [
        StrengthBucket(
            id="identity", label="Brand Identity", hint="Add your brand name, logo, and category", weight=30,
            completed=brand is not None and _filled(brand.name, brand.logo_url, brand.category),
        ),
        StrengthBucket(
            id="about", label="About Your Brand",
            hint=f"Write a description about your brand (min {MIN_BRAND_BIO_LENGTH} characters)", weight=25,
            completed=len(bio) >= MIN_BRAND_BIO_LENGTH,
        ),
        StrengthBucket(
            id="contact", label="Contact Info", hint="Add your website or Instagram link", weight=25,
            completed=brand is not None and (_filled(brand.website_url) or _filled(brand.instagram_url)),
        ),
        StrengthBucket(
            id="location", label="Location", hint="Add your country in profile settings", weight=20,
            completed=_has_country(profile),
        ),
    ]


BUCKETS: Dict[Role, Callable[..., List[StrengthBucket]]] = {
    Role.PLAYER: player_buckets,
    Role.COACH: coach_buckets,
    Role.CLUB: club_buckets,
    Role.BRAND: brand_buckets,
}


def profile_strength(profile: Profile, counts: ProfileCounts, brand: Optional[Brand] = None) -> ProfileStrength:
    buckets = BUCKETS[profile.role](profile, counts, brand)
    return ProfileStrength(
        percentage=sum(b.weight for b in buckets if b.completed),
        buckets=buckets,
    )


class ProfileStrengthService:
    """Loads the counts a role needs and scores the profile"""

    def __init__(self, activity_repo: IProfileActivityRepository, brand_repo: IBrandRepository):
        self.activity_repo = activity_repo
        self.brand_repo = brand_repo

    async def get(self, profile: Profile) -> ProfileStrength:
        try:
            counts = await self.activity_repo.count_activity(profile.id, profile.role)
        except BackendError as e:
            # Missing counts only leave their buckets incomplete
            logger.error(f"[STRENGTH] Failed to count activity for {profile.id}: {e.message}")
            counts = ProfileCounts()

        brand = None
        if profile.role == Role.BRAND:
            try:
                brand = await self.brand_repo.get_my_brand()
            except BackendError as e:
                logger.error(f"[STRENGTH] Failed to load brand for {profile.id}: {e.message}")

        strength = profile_strength(profile, counts, brand)
        logger.debug(f"[STRENGTH] {profile.id} ({profile.role.value}) at {strength.percentage}%")
        return strength
