import asyncio
import logging
from urllib.parse import urlencode
from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session
from bananadb import crud
from bananadb.auth import current_user
from bananadb.db import get_db
from bananadb.errors import BananaDBError
from bananadb.routes.common import get_settings_store, render, validation_message
from bananadb.schemas import DataSourceIn
from bananadb.services.ai_settings import (PROVIDER_LABELS, PROVIDERS, check_ai_status, load_all_ai_settings,
                                           save_provider_settings, set_active_provider)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])

TABS = ("ai", "users", "data-sources")

def _admin(request: Request, db: Session):
    user = current_user(request, db)
    if user and user.is_admin:
        return user
    return None

def _denied(request, db):
    user = current_user(request, db)
    if not user:
        return RedirectResponse(url="/login", status_code=303)
    return render(request, "denied.html", "settings", user, status_code=403)

@router.get("/settings", response_class=HTMLResponse, name="admin_settings")
async def settings_page(request: Request, tab: str = "ai", message: str | None = None, error: str | None = None,
                        db: Session = Depends(get_db), store=Depends(get_settings_store)):
    user = await asyncio.to_thread(_admin, request, db)
    if not user:
        return await asyncio.to_thread(_denied, request, db)
    tab = tab if tab in TABS else "ai"
    context = {"tab": tab, "tabs": TABS, "message": message, "error": error}

    if tab == "ai":
        try:
            context["values"] = await load_all_ai_settings(store)
            context["ai_status"] = await check_ai_status(store)
        except BananaDBError as e:
            logger.error("Error loading settings: %s", e)
            context["error"] = str(e)
        context["providers"] = PROVIDERS
        context["provider_labels"] = PROVIDER_LABELS
    elif tab == "users":
        context["users"] = await asyncio.to_thread(crud.list_users, db)
    else:
        context["data_sources"] = await asyncio.to_thread(crud.list_data_sources, db)

    return render(request, "admin_settings.html", "settings", user, **context)

def _back(tab: str, message: str | None = None, error: str | None = None):
    params = {"tab": tab}
    if message:
        params["message"] = message
    if error:
        params["error"] = error
    return RedirectResponse(url=f"/admin/settings?{urlencode(params)}", status_code=303)

@router.post("/settings/provider")
async def update_provider(request: Request, provider: str = Form(...), db: Session = Depends(get_db),
                          store=Depends(get_settings_store)):
    if not await asyncio.to_thread(_admin, request, db):
        return await asyncio.to_thread(_denied, request, db)
    try:
        await set_active_provider(store, provider)
    except (ValueError, BananaDBError) as e:
        return _back("ai", error=str(e))
    return _back("ai", message=f"AI provider updated to {PROVIDER_LABELS[provider]}")

@router.post("/settings/{provider}")
async def update_provider_settings(provider: str, request: Request,
                                   api_key: str = Form(""),
                                   prompt: str = Form(""),
                                   site_url: str = Form(""),
                                   site_name: str = Form(""),
                                   db: Session = Depends(get_db),
                                   store=Depends(get_settings_store)):
    if not await asyncio.to_thread(_admin, request, db):
        return await asyncio.to_thread(_denied, request, db)
    try:
        await save_provider_settings(store, provider, api_key, prompt, site_url or None, site_name or None)
    except (ValueError, BananaDBError) as e:
        return _back("ai", error=str(e))
    return _back("ai", message=f"{PROVIDER_LABELS[provider]} settings saved successfully")

@router.post("/users/admin-status")
def update_admin_status(request: Request, email: str = Form(...), make_admin: bool = Form(False),
                        db: Session = Depends(get_db)):
    user = _admin(request, db)
    if not user:
        return _denied(request, db)
    try:
        crud.set_admin_status(db, user, email, make_admin)
    except BananaDBError as e:
        return _back("users", error=str(e))
    return _back("users", message=f"Updated {email}")

@router.post("/data-sources")
def add_data_source(request: Request, name: str = Form(""), country: str = Form(""), db: Session = Depends(get_db)):
    if not _admin(request, db):
        return _denied(request, db)
    try:
        crud.create_data_source(db, DataSourceIn(name=name, country=country))
    except ValidationError as e:
        return _back("data-sources", error=validation_message(e))
    except BananaDBError as e:
        return _back("data-sources", error=str(e))
    return _back("data-sources")

@router.post("/data-sources/{source_id}/delete")
def delete_data_source(source_id: int, request: Request, db: Session = Depends(get_db)):
    if not _admin(request, db):
        return _denied(request, db)
    try:
        crud.delete_data_source(db, source_id)
    except BananaDBError as e:
        return _back("data-sources", error=str(e))
    return _back("data-sources")
