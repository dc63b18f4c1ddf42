"""
Create the schema, a first admin account and the default data sources.

    python -m bananadb.scripts.seed admin@example.com secret "Admin User"
"""
import logging
import sys
from sqlalchemy.orm import Session
from bananadb import crud
from bananadb.auth import hash_password
from bananadb.db import SessionLocal, Base, engine
from bananadb.errors import PersistenceError
from bananadb.logging_setup import configure_logging
from bananadb.models import DataSource
from bananadb.schemas import DataSourceIn
from bananadb.services import settings_store as keys
from bananadb.services.settings_store import SettingsStore

logger = logging.getLogger(__name__)

DEFAULT_DATA_SOURCES = (
    ("mobile.de", "Germany"),
    ("autoscout24", "Germany"),
    ("standvirtual", "Portugal"),
)

DEFAULT_PROMPT = (
    "You extract vehicle listings from pasted text. Respond with a JSON object "
    "of the form {\"listings\": [...]}. Every listing must have make, model, "
    "year, mileage (km) and price (EUR) as numbers where numeric. Include when "
    "present: co2, fuel_type, first_registration_date, power_kw, power_hp, "
    "gear_type, number_of_doors, number_of_seats, seller, location, "
    "listing_url, listing_date. Return only JSON."
)

def seed(admin_email: str | None = None, admin_password: str | None = None, admin_name: str | None = None):
    Base.metadata.create_all(bind=engine)
    db: Session = SessionLocal()
    try:
        if admin_email and admin_password:
            existing = crud.get_user_by_email(db, admin_email)
            if existing is None:
                crud.create_user(db, admin_email, hash_password(admin_password), admin_name, is_admin=True)
                logger.info("Created admin %s", admin_email)
            elif not existing.is_admin:
                existing.is_admin = True
                db.commit()
                logger.info("Promoted %s to admin", admin_email)

        names = {s.name for s in db.query(DataSource).all()}
        for name, country in DEFAULT_DATA_SOURCES:
            if name in names:
                continue
            try:
                crud.create_data_source(db, DataSourceIn(name=name, country=country))
            except PersistenceError as e:
                logger.warning("Skipping data source %s: %s", name, e)
    finally:
        db.close()

    store = SettingsStore(SessionLocal)
    prompt_keys = (keys.GEMINI_PROMPT, keys.DEEPSEEK_PROMPT, keys.OPENROUTER_PROMPT)
    store.write_many({key: DEFAULT_PROMPT for key in prompt_keys if not store.read(key)})

if __name__ == "__main__":
    configure_logging()
    args = sys.argv[1:]
    seed(*args[:3])
