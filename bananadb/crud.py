"""Database operations for projects, listings, data sources and users.

Row ownership is enforced here: non-admin users only ever see or change
their own projects and listings.
"""
import logging
import sqlite3
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from bananadb.errors import AccessDeniedError, DuplicateListingError, NotFoundError, PersistenceError
from bananadb.models import CarListing, DataSource, Project, User, utcnow
from bananadb.schemas import DataSourceIn, ProjectIn

logger = logging.getLogger(__name__)

PG_UNIQUE_VIOLATION = "23505"
SQLITE_UNIQUE_CODES = {sqlite3.SQLITE_CONSTRAINT_UNIQUE, sqlite3.SQLITE_CONSTRAINT_PRIMARYKEY}

def is_unique_violation(exc: IntegrityError) -> bool:
    """True when the driver reports a unique-constraint conflict.

    Uses the driver's error code (SQLSTATE for PostgreSQL, extended result
    code for SQLite), never the message text.
    """
    orig = exc.orig
    if getattr(orig, "pgcode", None) == PG_UNIQUE_VIOLATION:
        return True
    if getattr(orig, "sqlstate", None) == PG_UNIQUE_VIOLATION:
        return True
    return getattr(orig, "sqlite_errorcode", None) in SQLITE_UNIQUE_CODES

def _commit(db: Session):
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

def _scoped(query, model, user: User):
    if user.is_admin:
        return query
    return query.filter(model.user_id == user.id)

# --- projects ---

def list_projects(db: Session, user: User) -> list[dict]:
    stats = (
        db.query(
            CarListing.project_id.label("project_id"),
            func.count(CarListing.id).label("listings_count"),
            func.min(CarListing.created_at).label("first_listing"),
            func.max(CarListing.created_at).label("last_listing"),
        )
        .group_by(CarListing.project_id)
        .subquery()
    )
    q = (
        db.query(Project, stats.c.listings_count, stats.c.first_listing, stats.c.last_listing)
        .outerjoin(stats, stats.c.project_id == Project.id)
        .order_by(Project.created_at.desc(), Project.id.desc())
    )
    q = _scoped(q, Project, user)
    return [
        {"project": p, "listings_count": count or 0, "first_listing": first, "last_listing": last}
        for p, count, first, last in q.all()
    ]

def get_project(db: Session, user: User, project_id: int) -> Project:
    project = db.get(Project, project_id)
    if project is None:
        raise NotFoundError("Project not found")
    if not user.is_admin and project.user_id != user.id:
        raise AccessDeniedError("You do not have access to this project")
    return project

def create_project(db: Session, user: User, data: ProjectIn, freename: str) -> Project:
    project = Project(**data.model_dump(), freename=freename, user_id=user.id)
    db.add(project)
    _commit(db)
    db.refresh(project)
    logger.info("User %s created project %s (%s)", user.id, project.id, freename)
    return project

def update_project(db: Session, user: User, project_id: int, data: ProjectIn) -> Project:
    project = get_project(db, user, project_id)
    for k, v in data.model_dump().items():
        setattr(project, k, v)
    _commit(db)
    db.refresh(project)
    return project

def delete_project(db: Session, user: User, project_id: int):
    if not user.is_admin:
        raise AccessDeniedError("Only administrators can delete projects")
    project = get_project(db, user, project_id)
    # Listings outlive their project
    db.query(CarListing).filter(CarListing.project_id == project.id).update(
        {CarListing.project_id: None}, synchronize_session=False)
    db.delete(project)
    _commit(db)
    logger.info("Admin %s deleted project %s", user.id, project_id)

# --- listings ---

def create_listing(db: Session, record: dict) -> CarListing:
    listing = CarListing(**record)
    db.add(listing)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if is_unique_violation(e):
            raise DuplicateListingError(record.get("unique_identifier")) from e
        raise PersistenceError(str(e.orig)) from e
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError(str(e)) from e
    db.refresh(listing)
    return listing

def list_listings(db: Session, user: User, project_id: int | None = None) -> list[CarListing]:
    q = db.query(CarListing).order_by(CarListing.created_at.desc(), CarListing.id.desc())
    if project_id is not None:
        q = q.filter(CarListing.project_id == project_id)
    return _scoped(q, CarListing, user).all()

def get_listing(db: Session, user: User, listing_id: int) -> CarListing:
    listing = db.get(CarListing, listing_id)
    if listing is None:
        raise NotFoundError("Listing not found")
    if not user.is_admin and listing.user_id != user.id:
        raise AccessDeniedError("You do not have access to this listing")
    return listing

def toggle_favorite(db: Session, user: User, listing_id: int) -> CarListing:
    listing = get_listing(db, user, listing_id)
    listing.is_favorite = not listing.is_favorite
    _commit(db)
    return listing

def delete_listing(db: Session, user: User, listing_id: int):
    listing = get_listing(db, user, listing_id)
    db.delete(listing)
    _commit(db)

# --- data sources ---

def list_data_sources(db: Session) -> list[DataSource]:
    return db.query(DataSource).order_by(DataSource.name).all()

def create_data_source(db: Session, data: DataSourceIn) -> DataSource:
    source = DataSource(name=data.name, country=data.country)
    db.add(source)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if is_unique_violation(e):
            raise PersistenceError(f"Data source {data.name} already exists") from e
        raise PersistenceError(str(e.orig)) from e
    db.refresh(source)
    return source

def delete_data_source(db: Session, source_id: int):
    source = db.get(DataSource, source_id)
    if source is None:
        raise NotFoundError("Data source not found")
    db.delete(source)
    _commit(db)

# --- users ---

def get_user(db: Session, user_id: int) -> User | None:
    return db.get(User, user_id)

def get_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(func.lower(User.email) == email.strip().lower()).first()

def create_user(db: Session, email: str, password_hash: str, full_name: str | None = None,
                is_admin: bool = False) -> User:
    user = User(email=email.strip().lower(), password_hash=password_hash,
                full_name=full_name or None, is_admin=is_admin)
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if is_unique_violation(e):
            raise PersistenceError("An account with this email already exists") from e
        raise PersistenceError(str(e.orig)) from e
    db.refresh(user)
    return user

def record_sign_in(db: Session, user: User):
    user.last_sign_in_at = utcnow()
    _commit(db)

def list_users(db: Session) -> list[User]:
    return db.query(User).order_by(User.created_at.desc(), User.id.desc()).all()

def set_admin_status(db: Session, acting_user: User, email: str, make_admin: bool) -> User:
    if not acting_user.is_admin:
        raise AccessDeniedError("Only administrators can manage admin status")
    user = get_user_by_email(db, email)
    if user is None:
        raise NotFoundError(f"No user with email {email}")
    if user.id == acting_user.id and not make_admin:
        raise AccessDeniedError("You cannot revoke your own admin status")
    user.is_admin = make_admin
    _commit(db)
    logger.info("Admin %s set is_admin=%s for %s", acting_user.id, make_admin, user.email)
    return user
