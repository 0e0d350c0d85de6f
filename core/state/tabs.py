"""
Tab state carried in the `tab` query parameter.
"""

from dataclasses import dataclass
from typing import Tuple

from yarl import URL

TAB_PARAM = "tab"


@dataclass(frozen=True)
class TabSet:
    tabs: Tuple[str, ...]
    default: str

    def read(self, url: URL) -> str:
        """Active tab for a URL; unknown or missing values fall back to the default."""
        value = url.query.get(TAB_PARAM)
        return value if value in self.tabs else self.default

    def write(self, url: URL, tab: str) -> URL:
        """URL with the tab applied. The default tab is expressed by omitting the parameter."""
        if tab not in self.tabs:
            tab = self.default
        query = {k: v for k, v in url.query.items() if k != TAB_PARAM}
        if tab != self.default:
            query[TAB_PARAM] = tab
        return url.with_query(query)


PLAYER_TABS = TabSet(("profile", "journey", "friends", "references"), "profile")
COACH_TABS = TabSet(("profile", "journey", "friends", "references"), "profile")
CLUB_TABS = TabSet(("overview", "friends", "references"), "overview")
BRAND_TABS = TabSet(("overview",), "overview")

DASHBOARD_TABS = {
    "player": PLAYER_TABS,
    "coach": COACH_TABS,
    "club": CLUB_TABS,
    "brand": BRAND_TABS,
}

ADMIN_WORLD_TABS = TabSet(("clubs", "leagues", "regions"), "clubs")
ADMIN_DATA_ISSUES_TABS = TabSet(("auth_orphans", "profile_orphans", "broken_references"), "auth_orphans")
