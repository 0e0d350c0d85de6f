from core.state.toasts import Toast, ToastKind, ToastStore
from core.state.profile_store import ProfileStore
from core.state.drafts import DraftStore, DraftAutosaver
from core.state.debounce import LatestQueryDebouncer
from core.state.search_select import ClubPicker, WorldSearchDropdown, club_url, country_url
from core.state.table import TableController
from core.state.confirm import ConfirmDialog
from core.state.tabs import TabSet, DASHBOARD_TABS, ADMIN_WORLD_TABS, ADMIN_DATA_ISSUES_TABS

__all__ = [
    "Toast",
    "ToastKind",
    "ToastStore",
    "ProfileStore",
    "DraftStore",
    "DraftAutosaver",
    "LatestQueryDebouncer",
    "ClubPicker",
    "WorldSearchDropdown",
    "club_url",
    "country_url",
    "TableController",
    "ConfirmDialog",
    "TabSet",
    "DASHBOARD_TABS",
    "ADMIN_WORLD_TABS",
    "ADMIN_DATA_ISSUES_TABS",
]
