import logging
from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session
from bananadb import crud
from bananadb.auth import authenticate, current_user, hash_password, login_session, logout_session
from bananadb.db import get_db
from bananadb.errors import PersistenceError
from bananadb.routes.common import render, validation_message
from bananadb.schemas import SignUpIn

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

@router.get("/", response_class=HTMLResponse, name="home")
def home(request: Request, db: Session = Depends(get_db)):
    user = current_user(request, db)
    if not user:
        return RedirectResponse(url="/login", status_code=303)
    return render(request, "home.html", "home", user)

@router.get("/login", response_class=HTMLResponse)
def login_page(request: Request, db: Session = Depends(get_db)):
    if current_user(request, db):
        return RedirectResponse(url="/", status_code=303)
    return render(request, "login.html", "login", None, mode="sign-in")

@router.post("/login")
def login(request: Request, email: str = Form(...), password: str = Form(...), db: Session = Depends(get_db)):
    user = authenticate(db, email, password)
    if user is None:
        logger.info("Failed sign-in for %s", email)
        return render(request, "login.html", "login", None, status_code=400, mode="sign-in",
                      message={"type": "error", "text": "Invalid login credentials"}, email=email)
    login_session(request, user)
    return RedirectResponse(url="/", status_code=303)

@router.get("/signup", response_class=HTMLResponse)
def signup_page(request: Request):
    return render(request, "login.html", "login", None, mode="sign-up")

@router.post("/signup")
def signup(request: Request, email: str = Form(...), password: str = Form(...),
           full_name: str = Form(""), db: Session = Depends(get_db)):
    try:
        data = SignUpIn(email=email, password=password, full_name=full_name.strip() or None)
        crud.create_user(db, data.email, hash_password(data.password), data.full_name)
    except ValidationError as e:
        logger.info("Rejected sign-up for %s: %s", email, validation_message(e))
        return render(request, "login.html", "login", None, status_code=400, mode="sign-up",
                      message={"type": "error", "text": validation_message(e)}, email=email)
    except PersistenceError as e:
        logger.info("Sign-up failed for %s: %s", email, e)
        return render(request, "login.html", "login", None, status_code=400, mode="sign-up",
                      message={"type": "error", "text": str(e)}, email=email)
    return render(request, "login.html", "login", None, mode="sign-in",
                  message={"type": "success", "text": "Registration successful! You can now sign in."},
                  email=email)

@router.post("/logout")
def logout(request: Request):
    logout_session(request)
    return RedirectResponse(url="/login", status_code=303)
