from pathlib import Path
from fastapi import Depends
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError
from bananadb.auth import NavState
from bananadb.db import SessionLocal
from bananadb.services.formatting import country_flag, project_display_name
from bananadb.services.listing_parser import ListingParser
from bananadb.services.settings_store import SettingsStore

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.globals["project_name"] = project_display_name
templates.env.globals["country_flag"] = country_flag

def render(request, name: str, page: str, user, status_code: int = 200, **context):
    context["nav"] = NavState(current_page=page, user=user)
    return templates.TemplateResponse(request, name, context, status_code=status_code)

def validation_message(error: ValidationError) -> str:
    first = error.errors()[0]
    message = first.get("msg", "Invalid input")
    return message.removeprefix("Value error, ")

def get_settings_store() -> SettingsStore:
    return SettingsStore(SessionLocal)

def get_listing_parser(store: SettingsStore = Depends(get_settings_store)) -> ListingParser:
    return ListingParser(store)
