from sqlmodel import SQLModel, create_engine, Session
from flashback.core.config import settings
import logging

logger = logging.getLogger(__name__)

# SQLAlchemy prefers postgresql:// over postgres://
db_url = settings.database_url
if db_url.startswith("postgres://"):
    db_url = db_url.replace("postgres://", "postgresql://", 1)

logger.info(f"Connecting to database: {db_url[:20]}...")  # Log partial URL for debugging

if db_url.startswith("sqlite"):
    engine = create_engine(
        db_url,
        echo=False,
        connect_args={"check_same_thread": False},
    )
else:
    engine = create_engine(
        db_url,
        echo=False,
        pool_pre_ping=True,  # Verify connections before using
        pool_size=5,
        max_overflow=10,
    )


def get_session():
    """Dependency for getting database sessions."""
    with Session(engine) as session:
        yield session


def init_db(db_engine=None):
    """Initialize database tables."""
    # Import models to register them with SQLModel
    from flashback import models  # noqa: F401
    SQLModel.metadata.create_all(db_engine or engine)
