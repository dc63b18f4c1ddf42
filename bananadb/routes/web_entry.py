import asyncio
import json
import logging
from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session
from bananadb import crud
from bananadb.auth import current_user
from bananadb.db import get_db
from bananadb.errors import AllSubmissionsFailedError, BananaDBError
from bananadb.routes.common import get_listing_parser, get_settings_store, render
from bananadb.schemas import ParsedCarListing
from bananadb.services.ai_settings import PROVIDER_LABELS, check_ai_status
from bananadb.services.submission import submit_all

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/entry", tags=["entry"])

# Handlers here are async because they await provider and settings calls.
# Every SQLAlchemy call goes through asyncio.to_thread to keep it off the event loop.

def _page_data(db: Session, user):
    db.refresh(user)
    projects = [row["project"] for row in crud.list_projects(db, user)]
    return projects, crud.list_data_sources(db)

async def _entry_page(request, db, user, store, status_code=200, **context):
    try:
        context["ai_status"] = await check_ai_status(store)
    except BananaDBError as e:
        logger.error("Error checking AI settings: %s", e)
        context["ai_status_error"] = str(e)
    context.setdefault("project", None)
    context.setdefault("source", "")
    context.setdefault("raw_data", "")
    projects, data_sources = await asyncio.to_thread(_page_data, db, user)
    return render(request, "entry.html", "new-entry", user, status_code=status_code,
                  projects=projects, data_sources=data_sources, provider_labels=PROVIDER_LABELS, **context)

def _selected_project(db, user, project_id: str):
    if not project_id:
        return None
    try:
        return crud.get_project(db, user, int(project_id))
    except (ValueError, BananaDBError):
        return None

@router.get("", response_class=HTMLResponse)
async def entry_page(request: Request, db: Session = Depends(get_db), store=Depends(get_settings_store)):
    user = await asyncio.to_thread(current_user, request, db)
    if not user:
        return RedirectResponse(url="/login", status_code=303)
    return await _entry_page(request, db, user, store)

@router.post("/parse", response_class=HTMLResponse)
async def parse_entry(request: Request,
                      project_id: str = Form(""),
                      source: str = Form(""),
                      raw_data: str = Form(""),
                      db: Session = Depends(get_db),
                      store=Depends(get_settings_store),
                      parser=Depends(get_listing_parser)):
    user = await asyncio.to_thread(current_user, request, db)
    if not user:
        return RedirectResponse(url="/login", status_code=303)
    project = await asyncio.to_thread(_selected_project, db, user, project_id)
    context = {"project": project, "source": source, "raw_data": raw_data}
    if not project or not source or not raw_data.strip():
        return await _entry_page(request, db, user, store, status_code=400,
                                 parse_error="Please select a project and data source, and enter listing data",
                                 **context)

    debug = {"raw": raw_data}
    try:
        listings = await parser.parse(raw_data)
    except BananaDBError as e:
        debug["response"] = parser.last_response
        debug["error"] = str(e)
        return await _entry_page(request, db, user, store, status_code=422, parse_error=str(e),
                                 debug=debug, **context)

    debug["response"] = parser.last_response
    debug["parsed"] = json.dumps([l.model_dump() for l in listings], indent=2)
    return await _entry_page(request, db, user, store, listings=listings,
                             listings_json=json.dumps([l.model_dump() for l in listings]),
                             debug=debug, **context)

@router.post("/submit", response_class=HTMLResponse)
async def submit_entry(request: Request,
                       project_id: str = Form(""),
                       source: str = Form(""),
                       listings_json: str = Form("[]"),
                       db: Session = Depends(get_db),
                       store=Depends(get_settings_store)):
    user = await asyncio.to_thread(current_user, request, db)
    if not user:
        return RedirectResponse(url="/login", status_code=303)
    project = await asyncio.to_thread(_selected_project, db, user, project_id)
    if not project or not source:
        return await _entry_page(request, db, user, store, status_code=400,
                                 parse_error="Please select a project and data source, and enter listing data")
    try:
        listings = [ParsedCarListing.model_validate(item) for item in json.loads(listings_json)]
    except (ValueError, TypeError, RecursionError, ValidationError) as e:
        logger.error("Rejected reviewed listings: %s", e)
        return await _entry_page(request, db, user, store, status_code=400, project=project, source=source,
                                 parse_error="The reviewed listings could not be read. Please parse again.")

    async def create(record):
        return await asyncio.to_thread(crud.create_listing, db, record)

    def progress(current, total, errors):
        logger.debug("Processing %d of %d (%d errors)", current, total, errors)

    try:
        result = await submit_all(listings, source, project.id, user.id, create, on_progress=progress)
    except AllSubmissionsFailedError as e:
        return await _entry_page(request, db, user, store, status_code=422, project=project, source=source,
                                 submit_error=str(e), failures=e.failures)

    if result.failures:
        message = f"Created {result.success_count} listings with {len(result.failures)} error(s)."
    else:
        message = f"Successfully created {result.success_count} listings!"
    return await _entry_page(request, db, user, store, project=project, source=source,
                             submit_message=message, failures=result.failures)
