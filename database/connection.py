from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from database.base import Base
from core.config import settings


def build_engine(database_url: str, echo: bool = False):
    """Create an engine; SQLite connections are shared across handler threads."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args = {
            "check_same_thread": False,
            "timeout": settings.SQLITE_BUSY_TIMEOUT_SECONDS
        }
    return create_engine(database_url, echo=echo, connect_args=connect_args)


# Create database engine
engine = build_engine(settings.DATABASE_URL, echo=settings.SQL_ECHO)

# Create SessionLocal class
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Create all tables
def create_tables(bind=None):
    # Register every model on the metadata before creating
    from models import cascade, product, review, shop  # noqa: F401
    Base.metadata.create_all(bind=bind or engine)

# Dependency to get database session
def get_db() -> Session:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
