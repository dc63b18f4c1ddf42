from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from bananadb.config import settings

def engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        # Request handlers hand sessions to the threadpool
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_size": 5,
        "max_overflow": 10,
        "pool_pre_ping": True,  # Verify connections before use
        "pool_recycle": 3600,   # Recycle connections every hour
        "connect_args": {
            "sslmode": settings.DB_SSLMODE,
            "connect_timeout": 30,
            "application_name": "bananadb",
        },
    }

engine = create_engine(settings.DATABASE_URL, future=True, echo=False, **engine_options(settings.DATABASE_URL))
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
Base = declarative_base()

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
