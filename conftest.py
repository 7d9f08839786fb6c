import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-testing-only")
os.environ.setdefault("MAILGUN_API_KEY", "test-mailgun-key")

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import NullPool
from datetime import datetime, timedelta, timezone

from app.main import app
from app.db.session import get_db
from app.models.base import Base
from app.models.user import User
from app.models.catalog import Departamento, DepreciationFactor, Municipio, VehicleValuation
from app.core.security import create_access_token, hash_password, JWT_ALGORITHM
from app.core.config import settings
from app.core.enums import UserRole
import app.core.redis as redis_module


TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite:///./test.db")

# NullPool: every test runs on its own event loop.
test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)

AsyncSessionTest = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def override_get_db():
    async with AsyncSessionTest() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


@pytest.fixture
async def setup_db():
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def db_session(setup_db):
    async with AsyncSessionTest() as session:
        yield session


@pytest.fixture
async def test_client(setup_db):
    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


class FakeRedis:
    """In-memory stand-in for the handful of redis.asyncio calls the app makes."""

    def __init__(self):
        self.store = {}

    async def get(self, key):
        return self.store.get(key)

    async def set(self, key, value, ex=None):
        self.store[key] = value.encode() if isinstance(value, str) else value
        return True

    async def incr(self, key):
        value = int(self.store.get(key, 0)) + 1
        self.store[key] = str(value).encode()
        return value

    async def delete(self, *keys):
        for key in keys:
            self.store.pop(key, None)


@pytest.fixture
def fake_redis(monkeypatch):
    fake = FakeRedis()
    monkeypatch.setattr(redis_module, "redis", fake)
    return fake


async def _create_user(session, email, password, rol, activo=True, **names):
    user = User(
        primer_nombre=names.get("primer_nombre", "Test"),
        primer_apellido=names.get("primer_apellido", "User"),
        email=email,
        password_hash=hash_password(password),
        rol=rol,
        activo=activo,
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


@pytest.fixture
async def admin_user(db_session):
    return await _create_user(
        db_session, "admin@trustcorreduria.com", "adminpass123", UserRole.ADMINISTRADOR,
        primer_nombre="Ana", primer_apellido="Admin",
    )


@pytest.fixture
async def colaborador_user(db_session):
    return await _create_user(
        db_session, "colab@trustcorreduria.com", "colabpass123", UserRole.COLABORADOR,
        primer_nombre="Carlos", primer_apellido="Colaborador",
    )


@pytest.fixture
async def inactive_user(db_session):
    return await _create_user(db_session, "inactive@trustcorreduria.com", "inactive123", UserRole.COLABORADOR, activo=False)


@pytest.fixture
def admin_token(admin_user):
    return create_access_token(admin_user)


@pytest.fixture
def colaborador_token(colaborador_user):
    return create_access_token(colaborador_user)


@pytest.fixture
def admin_headers(admin_token):
    return {"Authorization": f"Bearer {admin_token}"}


@pytest.fixture
def colaborador_headers(colaborador_token):
    return {"Authorization": f"Bearer {colaborador_token}"}


@pytest.fixture
def expired_token(colaborador_user):
    from jose import jwt

    payload = {
        "sub": str(colaborador_user.id),
        "email": colaborador_user.email,
        "rol": str(colaborador_user.rol),
        "exp": datetime.now(timezone.utc) - timedelta(hours=1),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=JWT_ALGORITHM)


@pytest.fixture
async def catalog_data(db_session):
    db_session.add_all([
        VehicleValuation(marca="TOYOTA", modelo="TUNDRA", anio=2021, valor_nuevo=28000),
        VehicleValuation(marca="TOYOTA", modelo="TUNDRA", anio=2021, valor_nuevo=30000),
        VehicleValuation(marca="TOYOTA", modelo="TUNDRA", anio=2019, valor_nuevo=26000),
        VehicleValuation(marca="TOYOTA", modelo="HILUX", anio=2020, valor_nuevo=24000),
        VehicleValuation(marca=" NISSAN ", modelo="FRONTIER", anio=2018, valor_nuevo=20000),
        VehicleValuation(marca="HYUNDAI", modelo="TUCSON", anio=2022, valor_nuevo=0),
        DepreciationFactor(anio=2021, factor_conversion=0.85),
        DepreciationFactor(anio=2020, factor_conversion=0.8),
        Departamento(id=1, name="Managua"),
        Departamento(id=2, name="Masaya"),
        Departamento(id=18, name="Managua Oficina"),
        Municipio(id=1, name="Managua", departamento_id=1),
        Municipio(id=2, name="Tipitapa", departamento_id=1),
        Municipio(id=3, name="Ciudad Sandino", departamento_id=1),
        Municipio(id=4, name="Nindirí", departamento_id=2),
        Municipio(id=5, name="Tipitapa", departamento_id=18),
    ])
    await db_session.commit()


@pytest.fixture
def valid_quote_data():
    return {
        "marca": "TOYOTA",
        "modelo": "TUNDRA",
        "año": 2021,
        "tipoCobertura": "amplia",
        "excesoRC": 0,
        "primerNombre": "María",
        "primerApellido": "López",
        "email": "maria@example.com",
        "telefono": "22510108",
        "identificacion": "001-010190-0001A",
        "departamento": "Managua",
        "municipio": "Managua",
        "direccion": "Km 5 Carretera a Masaya",
        "chasis": "CH123",
        "motor": "MT456",
        "color": "Blanco",
        "placa": "M 123 456",
        "usoVehiculo": "particular",
        "vigencia": "2026-12-31",
        "circulacionDueño": "si",
        "vehiculoDañado": "no",
        "cesionDerechos": "no",
        "formaPago": "debito",
        "aceptaTerminos": True,
    }


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
    config.addinivalue_line(
        "markers", "auth: marks tests related to authentication"
    )
    config.addinivalue_line(
        "markers", "crud: marks tests related to CRUD operations"
    )
    config.addinivalue_line(
        "markers", "pricing: marks tests related to premium calculation"
    )
    config.addinivalue_line(
        "markers", "mail: marks tests related to e-mail delivery"
    )
    config.addinivalue_line(
        "markers", "rate_limit: marks tests related to rate limiting"
    )
    config.addinivalue_line(
        "markers", "audit: marks tests related to audit logging"
    )
    config.addinivalue_line(
        "markers", "idempotency: marks tests related to idempotency"
    )
