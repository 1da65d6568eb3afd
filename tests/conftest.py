import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from orm_slots import security
from orm_slots.database import Base, enable_sqlite_foreign_keys, get_db
from orm_slots.main import create_app
from slot_hosts import Article, BlogPost, HostBase

API_KEY = "test-api-key"


@pytest.fixture
def db_session():
    engine = enable_sqlite_foreign_keys(create_engine("sqlite:///:memory:"))
    Base.metadata.create_all(engine)
    HostBase.metadata.create_all(engine)
    Session = sessionmaker(bind=engine)
    session = Session()
    yield session
    session.close()
    engine.dispose()


@pytest.fixture
def article(db_session):
    article = Article(title="Hello slots")
    db_session.add(article)
    db_session.commit()
    return article


@pytest.fixture
def api_session_factory():
    """Sessions over one shared in-memory database, usable from the TestClient thread."""
    engine = enable_sqlite_foreign_keys(create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    ))
    Base.metadata.create_all(engine)
    HostBase.metadata.create_all(engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def client(api_session_factory, monkeypatch):
    monkeypatch.setattr(security, "API_KEY", API_KEY)

    app = create_app([(Article, None), (BlogPost, "/posts")])

    def override_get_db():
        db = api_session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app, headers={"Authorization": f"Bearer {API_KEY}"}) as test_client:
        yield test_client
