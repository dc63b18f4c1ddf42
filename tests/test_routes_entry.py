"""Tests for the new entry screen: parse with a mocked provider, then submit."""

import asyncio
import json

import httpx
import pytest
from fastapi import Depends

from conftest import login
from bananadb import crud
from bananadb.db import SessionLocal
from bananadb.main import app
from bananadb.models import CarListing
from bananadb.routes import web_entry
from bananadb.routes.common import get_listing_parser, get_settings_store
from bananadb.services import settings_store as keys
from bananadb.services.listing_parser import ListingParser
from bananadb.services.settings_store import SettingsStore

LISTINGS = [
    {"make": "BMW", "model": "X5", "year": 2019, "mileage": 85000, "price": 42000, "location": "Munich"},
    {"make": "BMW", "model": "X5", "year": 2020, "mileage": 60000, "price": 47000},
]


@pytest.fixture
def provider_reply(db):
    """Configure OpenRouter and route its requests to a mock returning ``state['body']``."""
    store = SettingsStore(SessionLocal)
    store.write_many({keys.AI_PROVIDER: "openrouter", keys.OPENROUTER_API_KEY: "or-key",
                      keys.OPENROUTER_PROMPT: "extract listings"})
    state = {"status": 200, "content": json.dumps({"listings": LISTINGS}), "calls": 0}

    def handler(request):
        state["calls"] += 1
        if state["status"] != 200:
            return httpx.Response(state["status"], json={"error": {"message": "Provider exploded"}})
        return httpx.Response(200, json={"choices": [{"message": {"content": state["content"]}}]})

    def parser(store=Depends(get_settings_store)):
        return ListingParser(store, client_options={"openrouter": {"transport": httpx.MockTransport(handler)}})

    app.dependency_overrides[get_listing_parser] = parser
    return state


@pytest.fixture
def signed_in(client, make_user, make_project):
    user = make_user()
    project = make_project(user)
    login(client)
    return user, project


def test_entry_page_shows_ai_status(client, signed_in, provider_reply):
    page = client.get("/entry")
    assert page.status_code == 200
    assert "OpenRouter" in page.text
    assert "API key configured" in page.text


def test_parse_requires_inputs(client, signed_in, provider_reply):
    _, project = signed_in
    resp = client.post("/entry/parse", data={"project_id": str(project.id), "source": "", "raw_data": "x"})
    assert resp.status_code == 400
    assert "Please select a project and data source" in resp.text
    assert provider_reply["calls"] == 0


def test_parse_shows_listings(client, signed_in, provider_reply):
    _, project = signed_in
    resp = client.post("/entry/parse", data={"project_id": str(project.id), "source": "mobile.de",
                                             "raw_data": "BMW X5 2019 85.000 km 42.000 EUR"})
    assert resp.status_code == 200
    assert "Parsed listings (2)" in resp.text
    assert "extract listings" not in resp.text
    assert provider_reply["calls"] == 1


def test_parse_error_is_shown(client, signed_in, provider_reply):
    _, project = signed_in
    provider_reply["status"] = 500
    resp = client.post("/entry/parse", data={"project_id": str(project.id), "source": "mobile.de",
                                             "raw_data": "text"})
    assert resp.status_code == 422
    assert "Provider exploded" in resp.text


def test_parse_malformed_reply(client, signed_in, provider_reply):
    _, project = signed_in
    provider_reply["content"] = "I could not find any cars"
    resp = client.post("/entry/parse", data={"project_id": str(project.id), "source": "mobile.de",
                                             "raw_data": "text"})
    assert resp.status_code == 422
    assert "Failed to parse AI response" in resp.text
    assert "I could not find any cars" in resp.text


def submit(client, project, listings):
    return client.post("/entry/submit", data={"project_id": str(project.id), "source": "mobile.de",
                                              "listings_json": json.dumps(listings)})


def test_submit_creates_listings(client, db, signed_in, provider_reply):
    user, project = signed_in
    resp = submit(client, project, LISTINGS)
    assert resp.status_code == 200
    assert "Successfully created 2 listings!" in resp.text

    rows = db.query(CarListing).order_by(CarListing.id).all()
    assert [r.mileage for r in rows] == [85000, 60000]
    assert rows[0].location == "Munich"
    assert rows[0].project_id == project.id
    assert rows[0].user_id == user.id
    assert rows[0].unique_identifier.startswith("mobile.de-")


def test_submit_partial_duplicates(client, db, signed_in, provider_reply):
    _, project = signed_in
    submit(client, project, LISTINGS[:1])
    resp = submit(client, project, LISTINGS)
    assert resp.status_code == 200
    assert "Created 1 listings with 1 error(s)." in resp.text
    assert "Duplicate listing - already exists in database" in resp.text
    assert db.query(CarListing).count() == 2


def test_submit_all_duplicates(client, db, signed_in, provider_reply):
    _, project = signed_in
    submit(client, project, LISTINGS)
    resp = submit(client, project, LISTINGS)
    assert resp.status_code == 422
    assert "Failed to create any listings. 2 error(s) occurred." in resp.text
    assert db.query(CarListing).count() == 2


def test_submit_rejects_tampered_payload(client, db, signed_in, provider_reply):
    _, project = signed_in
    resp = submit(client, project, [{"make": "BMW", "model": "X5", "year": "2019", "mileage": 1, "price": 1}])
    assert resp.status_code == 400
    assert db.query(CarListing).count() == 0


def test_database_calls_run_in_worker_threads(client, signed_in, provider_reply, monkeypatch):
    calls = []

    def spy(name, func):
        def wrapper(*args, **kwargs):
            try:
                asyncio.get_running_loop()
                calls.append((name, "event loop"))
            except RuntimeError:
                calls.append((name, "worker"))
            return func(*args, **kwargs)
        return wrapper

    monkeypatch.setattr(crud, "list_projects", spy("list_projects", crud.list_projects))
    monkeypatch.setattr(crud, "list_data_sources", spy("list_data_sources", crud.list_data_sources))
    monkeypatch.setattr("bananadb.routes.web_entry.current_user",
                        spy("current_user", web_entry.current_user))

    assert client.get("/entry").status_code == 200
    assert calls == [("current_user", "worker"), ("list_projects", "worker"), ("list_data_sources", "worker")]
