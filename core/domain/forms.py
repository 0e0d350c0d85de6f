"""
Profile edit forms.

The edit form is a discriminated union over role: each variant knows which
profile columns it owns, how to seed itself from a profile row and how to
turn its values into a partial update for the profiles table.
"""

from typing import Annotated, Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter

from core.domain.constants import BRAND_CATEGORIES
from core.domain.models import BrandInput, ClubClaimContext, Profile
from core.utils.social_links import clean_social_links, validate_social_links
from core.utils.text import blank_to_none


class ProfileFormBase(BaseModel):
    """Fields shared by every role"""
    full_name: str = ""
    base_location: str = ""
    avatar_url: str = ""
    contact_email: str = ""
    contact_email_public: bool = False
    social_links: Dict[str, str] = Field(default_factory=dict)
    nationality: str = ""
    nationality_country_id: Optional[int] = None
    nationality2_country_id: Optional[int] = None

    @classmethod
    def _base_from_profile(cls, profile: Profile) -> Dict[str, Any]:
        return {
            "full_name": profile.full_name or "",
            "base_location": profile.base_location or "",
            "avatar_url": profile.avatar_url or "",
            "contact_email": profile.contact_email or "",
            "contact_email_public": profile.contact_email_public,
            "social_links": dict(profile.social_links),
            "nationality": profile.nationality or "",
            "nationality_country_id": profile.nationality_country_id,
            "nationality2_country_id": profile.nationality2_country_id,
        }

    def validate_form(self) -> Dict[str, str]:
        """Field name -> error message. Empty dict means the form is valid."""
        errors = {}
        if not self.full_name.strip():
            errors["full_name"] = "Full name is required."
        ok, message = validate_social_links(self.social_links)
        if not ok:
            errors["social_links"] = message
        return errors

    def _base_update(self) -> Dict[str, Any]:
        return {
            "full_name": self.full_name.strip(),
            "base_location": self.base_location.strip(),
            "avatar_url": self.avatar_url or None,
            "contact_email": blank_to_none(self.contact_email),
            "contact_email_public": self.contact_email_public,
            "social_links": clean_social_links(self.social_links),
        }

    def to_update(self, claim: Optional[ClubClaimContext] = None) -> Dict[str, Any]:
        """Partial update restricted to the columns this role owns."""
        update = self._base_update()
        update.update(self._role_update(claim))
        return update

    def _role_update(self, claim: Optional[ClubClaimContext]) -> Dict[str, Any]:
        return {}

    def draft_data(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


# === PLAYER ===

class PlayerForm(ProfileFormBase):
    role: Literal["player"] = "player"
    position: str = ""
    secondary_position: str = ""
    gender: str = ""
    date_of_birth: str = ""
    current_club: str = ""
    current_world_club_id: Optional[str] = None
    bio: str = ""
    open_to_play: bool = False
    brand_representation: str = ""
    highlight_video_url: str = ""

    @classmethod
    def from_profile(cls, profile: Profile) -> "PlayerForm":
        return cls(
            **cls._base_from_profile(profile),
            position=profile.position or "",
            secondary_position=profile.secondary_position or "",
            gender=profile.gender or "",
            date_of_birth=profile.date_of_birth.isoformat() if profile.date_of_birth else "",
            current_club=profile.current_club or "",
            current_world_club_id=str(profile.current_world_club_id) if profile.current_world_club_id else None,
            bio=profile.bio or "",
            open_to_play=profile.open_to_play,
            brand_representation=profile.brand_representation or "",
            highlight_video_url=profile.highlight_video_url or "",
        )

    def validate_form(self) -> Dict[str, str]:
        errors = super().validate_form()
        if self.secondary_position and self.secondary_position == self.position:
            errors["secondary_position"] = "Primary and secondary positions must be different."
        return errors

    def _role_update(self, claim: Optional[ClubClaimContext]) -> Dict[str, Any]:
        return {
            "nationality": self.nationality,
            "nationality_country_id": self.nationality_country_id,
            "nationality2_country_id": self.nationality2_country_id,
            "position": self.position,
            "secondary_position": self.secondary_position or None,
            "gender": self.gender or None,
            "date_of_birth": self.date_of_birth or None,
            "current_club": self.current_club or None,
            "current_world_club_id": self.current_world_club_id,
            "bio": self.bio or None,
            "open_to_play": self.open_to_play,
            "brand_representation": self.brand_representation or None,
            "highlight_video_url": blank_to_none(self.highlight_video_url),
        }


# === COACH ===

class CoachForm(ProfileFormBase):
    role: Literal["coach"] = "coach"
    gender: str = ""
    date_of_birth: str = ""
    current_club: str = ""
    current_world_club_id: Optional[str] = None
    bio: str = ""
    open_to_coach: bool = False

    @classmethod
    def from_profile(cls, profile: Profile) -> "CoachForm":
        return cls(
            **cls._base_from_profile(profile),
            gender=profile.gender or "",
            date_of_birth=profile.date_of_birth.isoformat() if profile.date_of_birth else "",
            current_club=profile.current_club or "",
            current_world_club_id=str(profile.current_world_club_id) if profile.current_world_club_id else None,
            bio=profile.bio or "",
            open_to_coach=profile.open_to_coach,
        )

    def _role_update(self, claim: Optional[ClubClaimContext]) -> Dict[str, Any]:
        return {
            "nationality": self.nationality,
            "nationality_country_id": self.nationality_country_id,
            "nationality2_country_id": self.nationality2_country_id,
            "gender": self.gender or None,
            "date_of_birth": self.date_of_birth or None,
            "current_club": self.current_club or None,
            "current_world_club_id": self.current_world_club_id,
            "bio": self.bio or None,
            "open_to_coach": self.open_to_coach,
        }


# === CLUB ===

class ClubForm(ProfileFormBase):
    role: Literal["club"] = "club"
    year_founded: str = ""
    website: str = ""
    club_bio: str = ""
    club_history: str = ""
    womens_league_division: str = ""
    mens_league_division: str = ""
    womens_league_id: Optional[int] = None
    mens_league_id: Optional[int] = None
    world_region_id: Optional[int] = None

    @classmethod
    def from_profile(cls, profile: Profile) -> "ClubForm":
        return cls(
            **cls._base_from_profile(profile),
            year_founded=str(profile.year_founded) if profile.year_founded else "",
            website=profile.website or "",
            club_bio=profile.club_bio or "",
            club_history=profile.club_history or "",
            womens_league_division=profile.womens_league_division or "",
            mens_league_division=profile.mens_league_division or "",
            womens_league_id=profile.womens_league_id,
            mens_league_id=profile.mens_league_id,
            world_region_id=profile.world_region_id,
        )

    def validate_form(self) -> Dict[str, str]:
        errors = super().validate_form()
        if self.year_founded and not self.year_founded.strip().isdigit():
            errors["year_founded"] = "Year founded must be a number."
        return errors

    def select_region(self, region_id: Optional[int]) -> None:
        """Changing the region invalidates both league selections."""
        if region_id != self.world_region_id:
            self.mens_league_id = None
            self.womens_league_id = None
        self.world_region_id = region_id

    def _role_update(self, claim: Optional[ClubClaimContext]) -> Dict[str, Any]:
        update = {
            "nationality": self.nationality,
            "nationality_country_id": self.nationality_country_id,
            "nationality2_country_id": None,
            "year_founded": int(self.year_founded) if self.year_founded.strip() else None,
            "website": self.website or None,
            "club_bio": self.club_bio or None,
            "club_history": self.club_history or None,
        }
        if claim:
            update["mens_league_id"] = self.mens_league_id
            update["womens_league_id"] = self.womens_league_id
            update["world_region_id"] = self.world_region_id if claim.has_regions else None
            update["mens_league_division"] = claim.league_name(self.mens_league_id)
            update["womens_league_division"] = claim.league_name(self.womens_league_id)
        else:
            update["mens_league_division"] = self.mens_league_division or None
            update["womens_league_division"] = self.womens_league_division or None
        return update


# === BRAND ===

class BrandProfileForm(ProfileFormBase):
    """Brand details live in the brands table; the profile keeps contact fields."""
    role: Literal["brand"] = "brand"

    @classmethod
    def from_profile(cls, profile: Profile) -> "BrandProfileForm":
        return cls(**cls._base_from_profile(profile))


ProfileForm = Annotated[
    Union[PlayerForm, CoachForm, ClubForm, BrandProfileForm],
    Field(discriminator="role"),
]

_FORM_ADAPTER = TypeAdapter(ProfileForm)

_FORMS_BY_ROLE = {
    "player": PlayerForm,
    "coach": CoachForm,
    "club": ClubForm,
    "brand": BrandProfileForm,
}


def parse_form(data: Dict[str, Any]) -> ProfileFormBase:
    """Validate raw form values (must include 'role') into the matching variant."""
    return _FORM_ADAPTER.validate_python(data)


def form_from_profile(profile: Profile) -> ProfileFormBase:
    return _FORMS_BY_ROLE[profile.role.value].from_profile(profile)


def merge_draft(base: ProfileFormBase, draft: Optional[Dict[str, Any]]) -> ProfileFormBase:
    """Overlay saved draft values on the profile-derived form. Role never changes."""
    if not draft:
        return base
    data = base.model_dump()
    data.update({k: v for k, v in draft.items() if k in data})
    data["role"] = base.role
    return parse_form(data)


# === ONBOARDING ===

def normalize_gender(value: str) -> Optional[str]:
    key = (value or "").strip().lower()
    if key in ("men", "male", "m", "man"):
        return "Men"
    if key in ("women", "female", "f", "w", "woman"):
        return "Women"
    return None


class OnboardingForm(BaseModel):
    """Complete-profile form shown once after email verification"""
    role: Literal["player", "coach", "club", "brand"]
    full_name: str = ""
    club_name: str = ""
    city: str = ""
    country: str = ""
    nationality_country_id: Optional[int] = None
    nationality2_country_id: Optional[int] = None
    position: str = ""
    secondary_position: str = ""
    gender: str = ""
    date_of_birth: str = ""
    year_founded: str = ""
    womens_league_division: str = ""
    mens_league_division: str = ""
    website: str = ""
    contact_email: str = ""
    club_bio: str = ""
    club_history: str = ""
    category: str = ""
    bio: str = ""
    avatar_url: str = ""

    def validate_form(self) -> Optional[str]:
        """First blocking error, or None."""
        if self.role == "player":
            if not self.full_name.strip():
                return "Full name is required."
            if not self.city.strip():
                return "Base location is required."
            if not self.nationality_country_id:
                return "Nationality is required."
            if not self.position:
                return "Position is required."
            if not self.gender:
                return "Gender is required."
        elif self.role == "coach":
            if not self.full_name.strip():
                return "Full name is required."
            if not self.city.strip():
                return "Base location is required."
            if not self.nationality_country_id:
                return "Nationality is required."
            if not self.gender:
                return "Gender is required."
        elif self.role == "brand":
            if not self.full_name.strip():
                return "Brand name is required."
            if self.category and self.category not in BRAND_CATEGORIES:
                return "Please choose a brand category."
        else:
            if not self.club_name.strip():
                return "Club name is required."
            if not self.city.strip():
                return "City is required."
            if not self.country.strip():
                return "Country is required."
            if not self.contact_email.strip():
                return "Contact email is required."
        if self.secondary_position and self.secondary_position == self.position:
            return "Primary and secondary positions must be different."
        return None

    def to_update(self, nationality_text: str = "") -> Dict[str, Any]:
        update: Dict[str, Any] = {
            "role": self.role,
            "full_name": self.full_name or self.club_name or "",
            "base_location": self.city or "",
            "nationality": nationality_text,
            "nationality_country_id": self.nationality_country_id,
            "onboarding_completed": True,
            "avatar_url": self.avatar_url or None,
        }
        if self.role == "player":
            update.update({
                "nationality2_country_id": self.nationality2_country_id,
                "position": self.position,
                "secondary_position": self.secondary_position or None,
                "gender": normalize_gender(self.gender),
                "date_of_birth": self.date_of_birth or None,
            })
        elif self.role == "coach":
            update.update({
                "nationality2_country_id": self.nationality2_country_id,
                "gender": normalize_gender(self.gender),
                "date_of_birth": self.date_of_birth or None,
            })
        elif self.role == "brand":
            update.update({
                "website": blank_to_none(self.website),
                "bio": blank_to_none(self.bio),
            })
        else:
            update.update({
                "full_name": self.club_name,
                "year_founded": int(self.year_founded) if self.year_founded.strip().isdigit() else None,
                "womens_league_division": self.womens_league_division or None,
                "mens_league_division": self.mens_league_division or None,
                "website": self.website,
                "contact_email": self.contact_email,
                "club_bio": self.club_bio,
                "club_history": self.club_history,
            })
        return update

    def brand_input(self) -> BrandInput:
        """Brand row created alongside a brand account's profile."""
        return BrandInput(
            name=self.full_name.strip(),
            category=self.category,
            bio=self.bio,
            logo_url=self.avatar_url,
            website_url=self.website,
        )
