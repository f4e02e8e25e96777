# tests/conftest.py
from __future__ import annotations

import pytest
from starlette.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.base import Base
from app.db.session import get_db
import app.models.page  # noqa: F401  (registra las tablas en la metadata)
import app.models.site  # noqa: F401

# SQLite en memoria compartida por todas las conexiones del proceso
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


@pytest.fixture(scope="function")
def db() -> Session:
    """
    Una sesión por prueba sobre un esquema recién creado.
    Los servicios hacen commit, así que la limpieza es drop_all al final.
    """
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def _override_get_db(db: Session):
    """
    Override automático de la dependencia get_db de FastAPI para que
    todos los endpoints usen **la misma sesión** de la prueba en curso.
    """
    from app.main import app  # import tardío para evitar ciclos
    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    try:
        yield
    finally:
        app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def client() -> TestClient:
    from app.main import app
    return TestClient(app)
