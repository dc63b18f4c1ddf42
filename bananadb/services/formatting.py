from datetime import datetime

COUNTRY_FLAGS = {
    "Germany": "🇩🇪",
    "Portugal": "🇵🇹",
    "Spain": "🇪🇸",
    "France": "🇫🇷",
    "Italy": "🇮🇹",
    "United Kingdom": "🇬🇧",
}
DEFAULT_FLAG = "🏳️"

def country_flag(country: str) -> str:
    return COUNTRY_FLAGS.get(country, DEFAULT_FLAG)

def format_date(value: datetime) -> str:
    return value.strftime("%d.%m.%Y")

def format_year_range(start: int, end: int) -> str:
    if start == end:
        return str(start)[-2:]
    return f"{str(start)[-2:]}/{str(end)[-2:]}"

def project_display_name(project) -> str:
    """e.g. ``05.03.2024.BMW.X5.19/21.PIKACHU``"""
    return ".".join([
        format_date(project.created_at),
        project.make.upper(),
        project.model.upper(),
        format_year_range(project.year_range_start, project.year_range_end),
        project.freename.upper(),
    ])

def filter_projects(projects, query: str):
    query = (query or "").strip().lower()
    if not query:
        return list(projects)
    return [p for p in projects if query in project_display_name(p).lower()]

def listing_duration(first_listing: datetime | None, last_listing: datetime | None):
    """Days between first and last listing as (text, css class); None without listings."""
    if not first_listing or not last_listing:
        return None
    days = (last_listing - first_listing).days
    if days == 0:
        return "+0", "text-green"
    if days == 1:
        return "+1 day", "text-green"
    css = "text-green"
    if days > 30:
        css = "text-yellow"
    if days > 60:
        css = "text-red"
    return f"+{days} days", css
