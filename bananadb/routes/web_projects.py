import asyncio
import logging
from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session
from bananadb import crud
from bananadb.auth import current_user
from bananadb.db import get_db
from bananadb.errors import AccessDeniedError
from bananadb.routes.common import render, validation_message
from bananadb.schemas import ProjectIn
from bananadb.services.formatting import filter_projects, listing_duration, project_display_name
from bananadb.services.freename import random_freename

logger = logging.getLogger(__name__)

router = APIRouter(tags=["projects"])

DOOR_CONFIGS = ("all door configs", "2/3 doors", "4/5 doors", "6/7 doors")
FUEL_TYPES = ("Petrol", "Diesel", "Electric", "Hybrid", "Plug-in Hybrid")

def _projects_page(request, db, user, status_code=200, **context):
    rows = crud.list_projects(db, user)
    for row in rows:
        row["duration"] = listing_duration(row["first_listing"], row["last_listing"])
    context.setdefault("form", ProjectIn.model_construct())
    return render(request, "projects.html", "projects", user, status_code=status_code,
                  rows=rows, door_configs=DOOR_CONFIGS, fuel_types=FUEL_TYPES, **context)

async def _project_form(request: Request) -> ProjectIn:
    form = await request.form()
    return ProjectIn.model_validate({k: v for k, v in form.items() if k in ProjectIn.model_fields})

@router.get("/projects", response_class=HTMLResponse)
def projects_page(request: Request, edit: int | None = None, db: Session = Depends(get_db)):
    user = current_user(request, db)
    if not user:
        return RedirectResponse(url="/login", status_code=303)
    context = {}
    if edit is not None:
        project = crud.get_project(db, user, edit)
        context["editing"] = project
        context["form"] = project
    return _projects_page(request, db, user, **context)

@router.post("/projects")
async def create_project(request: Request, db: Session = Depends(get_db)):
    user = await asyncio.to_thread(current_user, request, db)
    if not user:
        return RedirectResponse(url="/login", status_code=303)
    try:
        data = await _project_form(request)
    except ValidationError as e:
        return await asyncio.to_thread(_projects_page, request, db, user, status_code=400,
                                       form_error=validation_message(e), show_form=True)
    freename = await random_freename()
    await asyncio.to_thread(crud.create_project, db, user, data, freename)
    return RedirectResponse(url="/projects", status_code=303)

@router.post("/projects/{project_id}")
async def update_project(project_id: int, request: Request, db: Session = Depends(get_db)):
    user = await asyncio.to_thread(current_user, request, db)
    if not user:
        return RedirectResponse(url="/login", status_code=303)
    project = await asyncio.to_thread(crud.get_project, db, user, project_id)
    try:
        data = await _project_form(request)
    except ValidationError as e:
        return await asyncio.to_thread(_projects_page, request, db, user, status_code=400,
                                       form_error=validation_message(e), editing=project, form=project,
                                       show_form=True)
    await asyncio.to_thread(crud.update_project, db, user, project_id, data)
    return RedirectResponse(url="/projects", status_code=303)

@router.post("/projects/{project_id}/delete")
def delete_project(project_id: int, request: Request, db: Session = Depends(get_db)):
    user = current_user(request, db)
    if not user:
        return RedirectResponse(url="/login", status_code=303)
    try:
        crud.delete_project(db, user, project_id)
    except AccessDeniedError as e:
        logger.warning("Project %s not deleted: %s", project_id, e)
        return _projects_page(request, db, user, status_code=403, delete_error=str(e))
    return RedirectResponse(url="/projects", status_code=303)

@router.get("/projects/{project_id}", response_class=HTMLResponse)
def project_detail(project_id: int, request: Request, db: Session = Depends(get_db)):
    user = current_user(request, db)
    if not user:
        return RedirectResponse(url="/login", status_code=303)
    project = crud.get_project(db, user, project_id)
    listings = crud.list_listings(db, user, project_id=project.id)
    return render(request, "project_detail.html", "projects", user, project=project, listings=listings)

@router.post("/listings/{listing_id}/favorite")
def toggle_favorite(listing_id: int, request: Request, db: Session = Depends(get_db)):
    user = current_user(request, db)
    if not user:
        return RedirectResponse(url="/login", status_code=303)
    listing = crud.toggle_favorite(db, user, listing_id)
    return RedirectResponse(url=f"/projects/{listing.project_id}" if listing.project_id else "/projects",
                            status_code=303)

@router.post("/listings/{listing_id}/delete")
def delete_listing(listing_id: int, request: Request, db: Session = Depends(get_db)):
    user = current_user(request, db)
    if not user:
        return RedirectResponse(url="/login", status_code=303)
    project_id = crud.get_listing(db, user, listing_id).project_id
    crud.delete_listing(db, user, listing_id)
    return RedirectResponse(url=f"/projects/{project_id}" if project_id else "/projects", status_code=303)

@router.get("/api/projects")
def search_projects(request: Request, q: str = "", db: Session = Depends(get_db)):
    user = current_user(request, db)
    if not user:
        return JSONResponse({"error": "not authenticated"}, status_code=401)
    projects = [row["project"] for row in crud.list_projects(db, user)]
    return {"projects": [{"id": p.id, "name": project_display_name(p)} for p in filter_projects(projects, q)]}
