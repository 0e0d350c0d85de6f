"""
Server-rendered HTML pages. Plain f-string templates, no template engine.
"""

from html import escape
from typing import Iterable, List, Optional

from yarl import URL

from core.domain.models import CountryDirectoryEntry, DataIssuesReport, Profile, ProfileStrength
from core.services.admin_service import AdminOverview
from core.services.world_service import GENDERS, DirectoryPage
from core.state.search_select import country_url
from core.state.tabs import TabSet
from locales import t

ROLE_KEYS = ("player", "coach", "club", "brand")

STYLE = """
  body { font-family: -apple-system, BlinkMacSystemFont, sans-serif; max-width: 720px; margin: 0 auto; padding: 16px; background: #f9fafb; color: #111827; }
  h1 { font-size: 1.6em; }
  h2 { font-size: 1.3em; border-bottom: 1px solid #e5e7eb; padding-bottom: 8px; }
  .card { background: #fff; border: 1px solid #e5e7eb; border-radius: 8px; padding: 16px; margin-bottom: 12px; }
  .big { font-size: 2em; font-weight: bold; color: #6d28d9; }
  .row { display: flex; justify-content: space-between; margin: 4px 0; }
  .label, .muted { color: #6b7280; }
  .error { color: #b91c1c; }
  .button { display: inline-block; padding: 8px 14px; border-radius: 6px; background: #6d28d9; color: #fff; text-decoration: none; }
  nav a { margin-right: 12px; }
  nav a.active { font-weight: bold; }
  li.highlight { background: #ede9fe; }
  table { width: 100%; border-collapse: collapse; margin-top: 8px; }
  th, td { text-align: left; padding: 6px 8px; border-bottom: 1px solid #e5e7eb; }
  th { color: #6b7280; font-weight: normal; }
"""


def layout(title: str, body: str) -> str:
    return f"""<!DOCTYPE html>
<html><head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>{escape(title)} | {t("site_name")}</title>
<style>{STYLE}</style>
</head><body>
{body}
</body></html>"""


def _error(error: Optional[str]) -> str:
    return f'<p class="error" role="alert">{escape(error)}</p>' if error else ""


# === AUTH PAGES ===

def landing_page(email: str = "", error: Optional[str] = None) -> str:
    body = f"""
<h1>{t("landing_title")}</h1>
<p class="muted">{t("landing_tagline")}</p>
<div class="card" data-signin-card>
  <h2>{t("sign_in")}</h2>
  {_error(error)}
  <form method="post" action="/signin">
    <input type="email" name="email" value="{escape(email)}" placeholder="{t("email_placeholder")}" required>
    <input type="password" name="password" required>
    <button type="submit">{t("sign_in_button")}</button>
  </form>
  <form method="post" action="/auth/oauth/google"><button type="submit">{t("sign_in_google")}</button></form>
  <p><a href="/forgot-password">{t("forgot_password")}</a></p>
  <p><a class="button" role="button" href="/signup">{t("create_account")}</a></p>
  <p>{t("new_here")} <a role="button" href="/signup">{t("join_playr")}</a></p>
</div>"""
    return layout(t("sign_in"), body)


def signup_page(
    role: Optional[str] = None, email: str = "", error: Optional[str] = None, sign_in_url: Optional[str] = None,
) -> str:
    if role not in ROLE_KEYS:
        choices = "\n".join(
            f'<div class="card"><a role="button" href="/signup?role={key}"><h4>{t(f"join_as_{key}")}</h4></a>'
            f'<p class="muted">{t(f"join_as_{key}_desc")}</p></div>'
            for key in ROLE_KEYS
        )
        body = f"""
<h2>{t("join_playr")}</h2>
<p class="muted">{t("signup_choose_role")}</p>
{_error(error)}
{choices}
<p><a href="/">{t("have_account")}</a></p>"""
        return layout(t("join_playr"), body)

    body = f"""
<h2>{t(f"join_as_{role}")}</h2>
{_error(error)}
{f'<p><a href="{escape(sign_in_url)}">{t("sign_in_button")}</a></p>' if sign_in_url else ""}
<form method="post" action="/signup">
  <input type="hidden" name="role" value="{role}">
  <input type="email" name="email" value="{escape(email)}" placeholder="{t("email_placeholder")}" required>
  <input type="password" name="password" placeholder="{t("password_placeholder")}" required>
  <button type="submit">{t("signup_submit")}</button>
</form>
<p><a href="/signup">{t("change_role")}</a></p>"""
    return layout(t(f"join_as_{role}"), body)


def verify_email_page(email: str, reason: Optional[str] = None, notice: Optional[str] = None) -> str:
    key = "verify_unverified" if reason == "unverified_signin" else "verify_sent"
    body = f"""
<h2>{t("verify_title")}</h2>
<p>{escape(t(key, email=email))}</p>
{f'<p class="muted">{escape(notice)}</p>' if notice else ""}
<form method="post" action="/verify-email/resend">
  <input type="hidden" name="email" value="{escape(email)}">
  <button type="submit">{t("verify_resend")}</button>
</form>"""
    return layout(t("verify_title"), body)


def complete_profile_page(role: str, error: Optional[str] = None) -> str:
    fields = {
        "player": ("full_name", "city", "nationality_country_id", "position", "secondary_position", "gender", "date_of_birth"),
        "coach": ("full_name", "city", "nationality_country_id", "gender", "date_of_birth"),
        "club": ("club_name", "city", "country", "contact_email", "year_founded", "website", "club_bio"),
        "brand": ("full_name", "category", "website", "bio"),
    }.get(role, ("full_name",))
    inputs = "\n".join(f'  <label>{name}<input name="{name}"></label>' for name in fields)
    body = f"""
<h2>{t("complete_profile_title")}</h2>
{_error(error)}
<form method="post" action="/complete-profile">
  <input type="hidden" name="role" value="{escape(role)}">
{inputs}
  <button type="submit">Save</button>
</form>"""
    return layout(t("complete_profile_title"), body)


# === DASHBOARD ===

def tab_nav(url: URL, tabs: TabSet, active: str) -> str:
    links = []
    for tab in tabs.tabs:
        href = str(tabs.write(url, tab))
        css = ' class="active"' if tab == active else ""
        links.append(f'<a href="{escape(href)}"{css}>{t(f"tab_{tab}")}</a>')
    return f"<nav>{''.join(links)}</nav>"


def strength_card(strength: ProfileStrength) -> str:
    step = strength.next_step
    hint = f'<div class="muted">{escape(step.label)}: {escape(step.hint)}</div>' if step else ""
    return f"""
<div class="card">
  <div class="label">{t("profile_strength")}</div>
  <div class="big">{strength.percentage}%</div>
  {hint}
</div>"""


def dashboard_page(
    profile: Profile, url: URL, tabs: TabSet, active: str, strength: Optional[ProfileStrength] = None,
) -> str:
    rows = [
        ("Role", profile.role.value),
        ("Location", profile.base_location),
        ("Nationality", profile.nationality),
    ]
    if profile.role.value in ("player", "coach"):
        rows += [("Position", profile.position), ("Current club", profile.current_club)]
    elif profile.role.value == "club":
        rows += [
            ("Founded", profile.year_founded),
            ("Women's league", profile.womens_league_division),
            ("Men's league", profile.mens_league_division),
        ]
    details = "\n".join(
        f'<div class="row"><span class="label">{label}</span><span>{escape(str(value))}</span></div>'
        for label, value in rows if value
    )
    body = f"""
<h1>{escape(profile.full_name or t("dashboard_title"))}</h1>
{tab_nav(url, tabs, active)}
{strength_card(strength) if strength else ""}
<div class="card" data-tab="{active}">
{details}
</div>
<p><a class="button" href="/dashboard/profile/edit">{t("edit_profile")}</a></p>"""
    return layout(t("dashboard_title"), body)


# === WORLD ===

def world_index_page(countries: Iterable[CountryDirectoryEntry]) -> str:
    rows = "\n".join(
        f'<tr><td><a href="{country_url(c.country_code)}">{c.flag_emoji or ""} {escape(c.country_name)}</a></td>'
        f"<td>{c.total_clubs}</td></tr>"
        for c in countries
    )
    body = f"""
<h1>{t("world_title")}</h1>
<input type="search" placeholder="{t("world_search_placeholder")}" data-search="/api/world/search">
<table><tr><th>Country</th><th>{t("world_clubs")}</th></tr>
{rows}
</table>"""
    return layout(t("world_title"), body)


def _active(flag: bool, name: str = "active") -> str:
    return f' class="{name}"' if flag else ""


def directory_page(page: DirectoryPage, highlight: str = "") -> str:
    country = page.country
    crumbs = [country.country_name] + [p.name for p in (page.region, page.league) if p is not None]
    title = " / ".join(crumbs)
    path = escape(page.path)
    sections: List[str] = []
    if page.region is None and page.regions:
        links = "".join(
            f'<li><a href="{country_url(country.country_code)}/{escape(r.slug)}">{escape(r.name)}</a></li>'
            for r in page.regions
        )
        sections.append(f"<h2>{t('world_regions')}</h2><ul>{links}</ul>")
    if page.league is not None:
        league_url = URL(f"{page.path}/{page.league.url_slug}")
        toggles = " ".join(
            f'<a href="{escape(str(league_url.with_query(gender=g)))}"{_active(g == page.gender)}>{t("world_" + g)}</a>'
            for g in GENDERS
        )
        sections.append(f"<nav>{toggles}</nav>")
    elif page.leagues:
        items = "".join(
            f'<li><a href="{path}/{escape(league.url_slug)}">{escape(league.name)}</a></li>'
            for league in page.leagues
        )
        sections.append(f"<h2>{t('world_leagues')}</h2><ul>{items}</ul>")
    if page.region is not None or not page.regions or page.league is not None:
        if page.clubs:
            items = "".join(
                f"<li{_active(str(club.id) == highlight, 'highlight')}>{escape(club.club_name)}</li>"
                for club in page.clubs
            )
            sections.append(f"<h2>{t('world_clubs')}</h2><ul>{items}</ul>")
        else:
            sections.append(f'<p class="muted">{t("world_no_clubs")}</p>')
    body = f"""
<p><a href="/world">{t("world_title")}</a></p>
<h1>{country.flag_emoji or ""} {escape(title)}</h1>
{"".join(sections)}"""
    return layout(title, body)


# === ADMIN ===

def admin_overview_page(overview: AdminOverview, report: Optional[DataIssuesReport] = None) -> str:
    s = overview.stats
    trend_rows = "".join(
        f"<tr><td>{d.date.isoformat()}</td><td>{d.total_signups}</td><td>{d.players}</td>"
        f"<td>{d.coaches}</td><td>{d.clubs}</td><td>{d.brands}</td></tr>\n"
        for d in overview.trends
    )
    country_rows = "".join(
        f"<tr><td>{escape(c.country)}</td><td>{c.user_count}</td></tr>\n" for c in overview.top_countries
    )
    issues = ""
    if report is not None:
        issues = f"""
<div class="card">
  <div class="label">{t("admin_data_issues")}</div>
  <div class="row"><span>Auth users without profile</span><span>{len(report.auth_orphans)}</span></div>
  <div class="row"><span>Profiles without auth user</span><span>{len(report.profile_orphans)}</span></div>
  <div class="row"><span>Broken references</span><span>{report.broken_references.total}</span></div>
</div>"""

    body = f"""
<h1>{t("admin_title")}</h1>

<div class="card">
  <div class="big">{s.total_users}</div>
  <div class="label">Total Users</div>
  <div class="row"><span>Players</span><span>{s.total_players}</span></div>
  <div class="row"><span>Coaches</span><span>{s.total_coaches}</span></div>
  <div class="row"><span>Clubs</span><span>{s.total_clubs}</span></div>
  <div class="row"><span>Brands</span><span>{s.total_brands}</span></div>
  <div class="row"><span>Blocked</span><span>{s.blocked_users}</span></div>
</div>

<div class="card">
  <div class="label">Signups</div>
  <div class="row"><span>Last 7 days</span><span>{s.signups_7d}</span></div>
  <div class="row"><span>Last 30 days</span><span>{s.signups_30d}</span></div>
  <div class="row"><span>Onboarding pending</span><span>{s.onboarding_pending}</span></div>
  <table>
    <tr><th>Date</th><th>Total</th><th>Players</th><th>Coaches</th><th>Clubs</th><th>Brands</th></tr>
    {trend_rows}
  </table>
</div>

<div class="card">
  <div class="label">Top Countries</div>
  <table>
    <tr><th>Country</th><th>Users</th></tr>
    {country_rows}
  </table>
</div>
{issues}"""
    return layout(t("admin_title"), body)
