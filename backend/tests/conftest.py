# Standard Library

from typing import AsyncGenerator

# Third-Party Libraries
import pytest
import pytest_asyncio

from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, AsyncEngine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

# First-Party Libraries
from eletrica.main import app
from eletrica.config import settings
from eletrica.database import get_db_session
from eletrica.users.models import User
from eletrica.auth.security import get_password_hash, create_access_token

# URL de base pour la DB en mémoire
TEST_DATABASE_BASE_URL = "sqlite+aiosqlite:///:memory:"

API_PREFIX = settings.API_V1_PREFIX

# --- Fixtures de Base ---

@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Crée un engine, des tables, et fournit une session DB en mémoire pour chaque test."""
    # StaticPool: une seule connexion, sinon chaque connexion ouvre une base vide
    engine: AsyncEngine = create_async_engine(
        TEST_DATABASE_BASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    TestingSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with TestingSessionLocal() as session:
        yield session

    await engine.dispose()

@pytest_asyncio.fixture(scope="function")
async def test_client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Fournit un AsyncClient httpx qui utilise la session DB de test isolée."""
    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db_session] = override_get_db_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    del app.dependency_overrides[get_db_session]

# --- Fixtures Utilisateur et Authentification ---

async def _create_user(db_session: AsyncSession, email: str, password: str, name: str) -> int:
    user = User(email=email, password_hash=get_password_hash(password), name=name)
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user.id

@pytest_asyncio.fixture(scope="function")
async def test_user_id(db_session: AsyncSession) -> int:
    """Crée le professionnel principal et retourne son ID."""
    return await _create_user(db_session, "eletricista@example.com", "testpassword", "Eletricista Teste")

@pytest_asyncio.fixture(scope="function")
async def test_user_2_id(db_session: AsyncSession) -> int:
    """Crée un deuxième professionnel, sans accès aux données du premier."""
    return await _create_user(db_session, "outro@example.com", "testpassword2", "Outro Eletricista")

@pytest.fixture(scope="function")
def auth_headers_user(test_user_id: int) -> dict[str, str]:
    access_token = create_access_token(data={"sub": str(test_user_id)})
    return {"Authorization": f"Bearer {access_token}"}

@pytest.fixture(scope="function")
def auth_headers_user_2(test_user_2_id: int) -> dict[str, str]:
    access_token = create_access_token(data={"sub": str(test_user_2_id)})
    return {"Authorization": f"Bearer {access_token}"}

# --- Fixtures Clients et Catalogue (créés via l'API, retournés en JSON) ---

@pytest.fixture
def client_payload() -> dict:
    return {
        "full_name": "Maria da Silva",
        "phone": "(11) 98765-4321",
        "email": "maria@example.com",
        "cpf_cnpj": "123.456.789-09",
        "cep": "01310-100",
        "street": "Avenida Paulista",
        "number": "1000",
        "neighborhood": "Bela Vista",
        "city": "São Paulo",
        "state": "sp",
    }

@pytest_asyncio.fixture(scope="function")
async def client_record(test_client: AsyncClient, auth_headers_user: dict, client_payload: dict) -> dict:
    response = await test_client.post(f"{API_PREFIX}/clients/", json=client_payload, headers=auth_headers_user)
    assert response.status_code == 201, response.text
    return response.json()

@pytest_asyncio.fixture(scope="function")
async def service_record(test_client: AsyncClient, auth_headers_user: dict) -> dict:
    response = await test_client.post(
        f"{API_PREFIX}/services/",
        json={"name": "Instalação de tomada", "price": "50.00", "unit": "UNIT", "category": "Instalação"},
        headers=auth_headers_user,
    )
    assert response.status_code == 201, response.text
    return response.json()

@pytest_asyncio.fixture(scope="function")
async def material_record(test_client: AsyncClient, auth_headers_user: dict) -> dict:
    response = await test_client.post(
        f"{API_PREFIX}/materials/",
        json={"name": "Cabo flexível 2,5mm", "price": "3.50", "unit": "METER", "category": "Cabos"},
        headers=auth_headers_user,
    )
    assert response.status_code == 201, response.text
    return response.json()

@pytest_asyncio.fixture(scope="function")
async def budget_record(test_client: AsyncClient, auth_headers_user: dict, client_record: dict) -> dict:
    """Orçamento PENDING vide pour le client de test."""
    response = await test_client.post(
        f"{API_PREFIX}/budgets/",
        json={"name": "Reforma elétrica", "client_id": client_record["id"], "notes": "Apartamento 42"},
        headers=auth_headers_user,
    )
    assert response.status_code == 201, response.text
    return response.json()
