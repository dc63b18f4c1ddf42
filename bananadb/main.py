import logging
from html import escape
from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse
from fastapi.staticfiles import StaticFiles
from starlette.middleware.sessions import SessionMiddleware
from bananadb.config import settings
from bananadb.errors import AccessDeniedError, NotFoundError
from bananadb.logging_setup import configure_logging
from bananadb.routes.common import TEMPLATES_DIR
from bananadb.routes.web_auth import router as web_auth_router
from bananadb.routes.web_projects import router as web_projects_router
from bananadb.routes.web_entry import router as web_entry_router
from bananadb.routes.web_admin import router as web_admin_router

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.SITE_NAME)
app.add_middleware(SessionMiddleware, secret_key=settings.SECRET_KEY, same_site="lax")
app.mount("/static", StaticFiles(directory=str(TEMPLATES_DIR.parent / "static")), name="static")

app.include_router(web_auth_router)
app.include_router(web_projects_router)
app.include_router(web_entry_router)
app.include_router(web_admin_router)

@app.on_event("startup")
async def startup_event():
    # Initialize database tables if they don't exist
    from bananadb.db import engine
    from bananadb.models import Base
    Base.metadata.create_all(bind=engine)

@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return HTMLResponse(f"<p>{escape(str(exc))}</p>", status_code=404)

@app.exception_handler(AccessDeniedError)
async def access_denied_handler(request: Request, exc: AccessDeniedError):
    logger.warning("Access denied on %s: %s", request.url.path, exc)
    return HTMLResponse(f"<p>{escape(str(exc))}</p>", status_code=403)

@app.get("/healthz")
def healthz():
    return {"ok": True}
