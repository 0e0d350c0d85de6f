"""
Domain constants - roles, positions, limits and other static data.
Centralized here for easy modification.
"""

# Positions a player can select
PLAYER_POSITIONS = ["goalkeeper", "defender", "midfielder", "forward"]
GENDERS = ["Men", "Women"]

# Social platforms accepted on profiles
SOCIAL_PLATFORMS = ["instagram", "tiktok", "linkedin", "twitter", "facebook"]
MAX_SOCIAL_URL_LENGTH = 500

# Brand categories
BRAND_CATEGORIES = [
    "equipment", "apparel", "accessories", "nutrition", "services", "technology", "other",
]

# Limits
MIN_PASSWORD_LENGTH = 8
MIN_NAME_LENGTH = 2
MAX_NAME_LENGTH = 120
MAX_BIO_LENGTH = 1500
MAX_REFERENCES = 5
MIN_YEAR_FOUNDED = 1800

# === Avatars ===
AVATAR_BUCKET = "avatars"
MAX_AVATAR_BYTES = 5 * 1024 * 1024
MAX_AVATAR_PIXELS = 40_000_000
AVATAR_MAX_DIMENSION = 400
AVATAR_JPEG_QUALITY = 85
ALLOWED_IMAGE_FORMATS = {"JPEG", "PNG", "WEBP", "GIF"}

# === Journey ===
TEMP_ID_PREFIX = "temp-"
MONTH_ABBREVIATIONS = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
]

# === Messaging ===
MAX_MESSAGE_LENGTH = 1000

# === Notifications ===
NOTIFICATION_PAGE_SIZE = 30
NOTIFICATION_KINDS = [
    "friend_request_received", "friend_request_accepted",
    "reference_request_received", "reference_request_accepted", "reference_request_rejected", "reference_updated",
    "profile_comment_created", "profile_comment_reply", "profile_comment_like",
    "message_received", "conversation_started",
    "vacancy_application_received", "vacancy_application_status", "opportunity_published",
    "profile_completed", "account_verified", "system_announcement",
]

# === Profile strength ===
MIN_BRAND_BIO_LENGTH = 50

# === Admin ===
DELETE_CONFIRM_TEXT = "DELETE"
ADMIN_SEARCH_LIMIT = 50
SIGNUP_TREND_DAYS = 30
TOP_COUNTRIES_LIMIT = 10

# === Rate limiting (web) ===
RATE_LIMIT_REQUESTS = 60  # per interval per session
RATE_LIMIT_AUTH = 10      # auth routes per interval
RATE_LIMIT_INTERVAL_SECONDS = 60
