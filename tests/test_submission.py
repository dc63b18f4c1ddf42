"""Tests for sequential listing submission."""

import asyncio

import pytest

from bananadb import crud
from bananadb.errors import AllSubmissionsFailedError, DuplicateListingError, PersistenceError
from bananadb.services.identifiers import generate_unique_identifier
from bananadb.services.submission import build_record, submit_all


class Recorder:
    def __init__(self, fail=None):
        self.records = []
        self.fail = fail or {}

    async def __call__(self, record):
        await asyncio.sleep(0)
        error = self.fail.get(record["model"])
        if error:
            raise error
        self.records.append(record)
        return record


def test_build_record(listing):
    item = listing(location="Porto", seller="Stand X", warranty="12 months")
    record = build_record(item, "standvirtual", 7, 3)
    assert record["source"] == "standvirtual"
    assert record["project_id"] == 7
    assert record["user_id"] == 3
    assert record["location"] == "Porto"
    assert record["unique_identifier"] == generate_unique_identifier(item, "standvirtual")
    assert "warranty" not in record


@pytest.mark.asyncio
async def test_all_succeed_in_order(listing):
    create = Recorder()
    items = [listing(model=m) for m in ("X1", "X3", "X5")]
    result = await submit_all(items, "mobile.de", 1, 1, create)
    assert result.success_count == 3
    assert result.failures == []
    assert [r["model"] for r in create.records] == ["X1", "X3", "X5"]


@pytest.mark.asyncio
async def test_partial_failure_keeps_going(listing):
    create = Recorder(fail={"X3": DuplicateListingError("id"), "X5": PersistenceError("disk full")})
    items = [listing(model=m) for m in ("X1", "X3", "X5", "X6")]
    progress = []

    result = await submit_all(items, "s", 1, 1, create, on_progress=lambda *a: progress.append(a))

    assert result.success_count == 2
    assert [f.listing.model for f in result.failures] == ["X3", "X5"]
    assert result.failures[0].is_duplicate
    assert result.failures[0].message == "Duplicate listing - already exists in database"
    assert not result.failures[1].is_duplicate
    assert progress == [(1, 4, 0), (1, 4, 1), (1, 4, 2), (2, 4, 2)]


@pytest.mark.asyncio
async def test_all_failing_raises(listing):
    create = Recorder(fail={"X5": DuplicateListingError()})
    with pytest.raises(AllSubmissionsFailedError) as exc:
        await submit_all([listing(), listing()], "s", 1, 1, create)
    assert exc.value.failure_count == 2
    assert str(exc.value) == "Failed to create any listings. 2 error(s) occurred."


@pytest.mark.asyncio
async def test_empty_batch_is_not_an_error():
    result = await submit_all([], "s", 1, 1, Recorder())
    assert result.success_count == 0


@pytest.mark.asyncio
async def test_duplicate_against_database(db, make_user, make_project, listing):
    user = make_user()
    project = make_project(user)

    async def create(record):
        return crud.create_listing(db, record)

    first = await submit_all([listing()], "mobile.de", project.id, user.id, create)
    assert first.success_count == 1

    second = await submit_all([listing(), listing(model="X3")], "mobile.de", project.id, user.id, create)
    assert second.success_count == 1
    assert second.failures[0].is_duplicate

    # Same car from a different source is a different listing
    third = await submit_all([listing()], "autoscout24", project.id, user.id, create)
    assert third.success_count == 1
