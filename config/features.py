"""
Feature Flags - Easy on/off toggle for features.
Change values here to enable/disable functionality.
"""

import os


class Features:
    """Feature toggles - set via env vars or defaults"""

    # === WORLD DIRECTORY ===
    WORLD_DIRECTORY_ENABLED: bool = os.getenv("WORLD_DIRECTORY_ENABLED", "true").lower() == "true"
    CLUB_SEARCH_LIMIT: int = int(os.getenv("CLUB_SEARCH_LIMIT", "15"))
    DROPDOWN_CLUB_LIMIT: int = int(os.getenv("DROPDOWN_CLUB_LIMIT", "8"))
    DROPDOWN_COUNTRY_LIMIT: int = int(os.getenv("DROPDOWN_COUNTRY_LIMIT", "5"))

    # === SEARCH ===
    SEARCH_DEBOUNCE_MS: int = int(os.getenv("SEARCH_DEBOUNCE_MS", "300"))
    MIN_SEARCH_LENGTH: int = int(os.getenv("MIN_SEARCH_LENGTH", "2"))

    # === PROFILE DRAFTS ===
    DRAFT_AUTOSAVE_MS: int = int(os.getenv("DRAFT_AUTOSAVE_MS", "400"))

    # === ADMIN ===
    ADMIN_PAGE_SIZE: int = int(os.getenv("ADMIN_PAGE_SIZE", "25"))

    # === RATE LIMITS ===
    RATE_LIMITS_ENABLED: bool = os.getenv("RATE_LIMITS_ENABLED", "true").lower() == "true"

    # === DEBUG ===
    DEBUG_MODE: bool = os.getenv("DEBUG", "false").lower() == "true"

    @classmethod
    def to_dict(cls) -> dict:
        """Get all features as dict (useful for logging)"""
        return {
            "world_directory_enabled": cls.WORLD_DIRECTORY_ENABLED,
            "search_debounce_ms": cls.SEARCH_DEBOUNCE_MS,
            "min_search_length": cls.MIN_SEARCH_LENGTH,
            "draft_autosave_ms": cls.DRAFT_AUTOSAVE_MS,
            "admin_page_size": cls.ADMIN_PAGE_SIZE,
            "rate_limits_enabled": cls.RATE_LIMITS_ENABLED,
            "debug_mode": cls.DEBUG_MODE,
        }


# Shortcut
features = Features()
