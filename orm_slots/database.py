from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import declarative_base, sessionmaker
import os
import logging
from dotenv import load_dotenv

load_dotenv()

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Database Configuration from environment variables
DB_HOST = os.getenv("DB_HOST")
DB_PORT = os.getenv("DB_PORT", "5432")
DB_USER = os.getenv("DB_USER")
DB_PASSWORD = os.getenv("DB_PASSWORD")
DB_NAME = os.getenv("DB_NAME")


def build_database_url() -> str:
    """DATABASE_URL wins, then the DB_* variables (PostgreSQL), then a local SQLite file."""
    url = os.getenv("DATABASE_URL")
    if url:
        return url
    if DB_HOST:
        return f"postgresql://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}"
    return "sqlite:///./slots.db"


DATABASE_URL = build_database_url()


# Create database if it doesn't exist
def create_database_if_not_exists(database_url: str = DATABASE_URL) -> None:
    url = make_url(database_url)
    if url.get_backend_name() != "postgresql":
        return

    server_url = url.set(database="postgres")
    try:
        engine = create_engine(server_url, isolation_level="AUTOCOMMIT")
        with engine.connect() as conn:
            result = conn.execute(
                text("SELECT 1 FROM pg_database WHERE datname = :name"),
                {"name": url.database},
            )
            if not result.fetchone():
                conn.execute(text(f'CREATE DATABASE "{url.database}"'))
                logger.info(f"Database '{url.database}' created successfully!")
            else:
                logger.info(f"Database '{url.database}' already exists.")
        engine.dispose()
    except Exception as e:
        logger.error(f"Error creating database: {e}")


def _set_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def enable_sqlite_foreign_keys(target_engine: Engine) -> Engine:
    """
    SQLite ignores ON DELETE CASCADE unless foreign keys are switched on per connection.
    Host applications call this on their own engines, other dialects are left alone.
    """
    if target_engine.dialect.name == "sqlite" and not event.contains(target_engine, "connect", _set_sqlite_foreign_keys):
        event.listen(target_engine, "connect", _set_sqlite_foreign_keys)
    return target_engine


engine = enable_sqlite_foreign_keys(create_engine(DATABASE_URL))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

# Dependency
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
