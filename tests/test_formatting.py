"""Tests for display helpers."""

from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest

from bananadb.services.formatting import (country_flag, filter_projects, format_year_range, listing_duration,
                                          project_display_name)


def project(**kw):
    data = dict(created_at=datetime(2024, 3, 5), make="bmw", model="x5", year_range_start=2019,
                year_range_end=2021, freename="pikachu")
    data.update(kw)
    return SimpleNamespace(**data)


def test_display_name():
    assert project_display_name(project()) == "05.03.2024.BMW.X5.19/21.PIKACHU"


def test_single_year_range():
    assert format_year_range(2020, 2020) == "20"
    assert project_display_name(project(year_range_end=2019)) == "05.03.2024.BMW.X5.19.PIKACHU"


def test_filter_projects_substring_case_insensitive():
    projects = [project(), project(make="audi", model="a4", freename="eevee")]
    assert [p.make for p in filter_projects(projects, "EEVEE")] == ["audi"]
    assert [p.make for p in filter_projects(projects, "x5.19")] == ["bmw"]
    assert len(filter_projects(projects, "  ")) == 2
    assert filter_projects(projects, "golf") == []


@pytest.mark.parametrize("days, expected", [
    (0, ("+0", "text-green")),
    (1, ("+1 day", "text-green")),
    (30, ("+30 days", "text-green")),
    (31, ("+31 days", "text-yellow")),
    (61, ("+61 days", "text-red")),
])
def test_listing_duration(days, expected):
    start = datetime(2024, 1, 1)
    assert listing_duration(start, start + timedelta(days=days)) == expected


def test_listing_duration_without_listings():
    assert listing_duration(None, None) is None


def test_country_flag():
    assert country_flag("Germany") == "🇩🇪"
    assert country_flag("Atlantis") == "🏳️"
