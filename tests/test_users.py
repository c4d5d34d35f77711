"""
Tests for user registration and lookup
"""
import pytest
from sqlalchemy import select, func

from crud.user import UserRepository
from database import get_db
from database_models import User
from auth_utils import hash_password, verify_password
from tests.conftest import FailingSession


async def _count_users(session, email):
    result = await session.execute(
        select(func.count()).select_from(User).where(User.email == email)
    )
    return result.scalar_one()


async def _failing_db():
    yield FailingSession()


@pytest.mark.asyncio
async def test_create_and_get_user(test_db):
    """
    Repository round trip:
    - User creation via UserRepository.create_user
    - Retrieval via get_user_by_email with a differently-cased address
    - New users start with an inactive subscription
    """
    user_repo = UserRepository(test_db)
    hashed_pwd = hash_password("test_password_123")

    created_user = await user_repo.create_user({
        "name": "Test",
        "email": "Test@Example.com",
        "hashed_password": hashed_pwd,
    })
    await test_db.commit()

    assert created_user.id
    assert created_user.email == "test@example.com"
    assert created_user.subscription_active is False
    assert created_user.subscription_end_date is None

    retrieved_user = await user_repo.get_user_by_email("TEST@example.com")
    assert retrieved_user is not None
    assert retrieved_user.id == created_user.id


@pytest.mark.asyncio
async def test_register_then_fetch(async_client):
    response = await async_client.post(
        "/api/register",
        json={"name": "Анна", "email": "anna@example.com", "password": "secret-pass"}
    )
    assert response.status_code == 200, response.text
    body = response.json()
    assert body["success"] is True
    assert body["user"]["name"] == "Анна"
    assert body["user"]["email"] == "anna@example.com"
    user_id = body["user"]["id"]

    response = await async_client.get(f"/api/user/{user_id}")
    assert response.status_code == 200
    user = response.json()
    assert user["id"] == user_id
    assert user["name"] == "Анна"
    assert user["email"] == "anna@example.com"
    assert user["telegramId"] is None
    assert user["subscription"] == {
        "active": False,
        "plan": None,
        "startDate": None,
        "endDate": None,
    }
    assert "password" not in user
    assert "hashed_password" not in user


@pytest.mark.asyncio
async def test_duplicate_email_rejected(async_client, test_db):
    payload = {"name": "Ivan", "email": "ivan@example.com", "password": "first"}
    first = await async_client.post("/api/register", json=payload)
    assert first.status_code == 200

    second = await async_client.post(
        "/api/register",
        json={"name": "Ivan 2", "email": "IVAN@example.com", "password": "second"}
    )
    assert second.status_code == 400
    assert second.json() == {"error": "User already exists"}

    assert await _count_users(test_db, "ivan@example.com") == 1


@pytest.mark.asyncio
async def test_password_is_hashed(async_client, test_db):
    response = await async_client.post(
        "/api/register",
        json={"name": "Olga", "email": "olga@example.com", "password": "plain-text"}
    )
    assert response.status_code == 200

    user = await UserRepository(test_db).get_user_by_email("olga@example.com")
    assert user.hashed_password != "plain-text"
    assert verify_password("plain-text", user.hashed_password) is True
    assert verify_password("wrong", user.hashed_password) is False


@pytest.mark.asyncio
async def test_register_keeps_telegram_id(async_client):
    response = await async_client.post(
        "/api/register",
        json={"name": "Petr", "email": "petr@example.com", "password": "pw", "telegramId": "123456"}
    )
    user_id = response.json()["user"]["id"]

    user = (await async_client.get(f"/api/user/{user_id}")).json()
    assert user["telegramId"] == "123456"


@pytest.mark.asyncio
async def test_register_invalid_email(async_client):
    response = await async_client.post(
        "/api/register",
        json={"name": "X", "email": "not-an-email", "password": "pw"}
    )
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid email format"}


@pytest.mark.asyncio
async def test_unknown_user_not_found(async_client):
    response = await async_client.get("/api/user/" + "a" * 32)
    assert response.status_code == 404
    assert response.json() == {"error": "User not found"}


@pytest.mark.asyncio
@pytest.mark.parametrize("bad_id", ["123", "zz" * 16, "not-a-valid-identifier"])
async def test_malformed_user_id(async_client, bad_id):
    response = await async_client.get(f"/api/user/{bad_id}")
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid user id"}


@pytest.mark.asyncio
async def test_register_accepts_numeric_telegram_id(async_client):
    response = await async_client.post(
        "/api/register",
        json={"name": "Nina", "email": "nina@example.com", "password": "pw", "telegramId": 123456789}
    )
    assert response.status_code == 200, response.text
    user_id = response.json()["user"]["id"]

    user = (await async_client.get(f"/api/user/{user_id}")).json()
    assert user["telegramId"] == "123456789"


@pytest.mark.asyncio
async def test_register_losing_unique_race(async_client, test_db, monkeypatch):
    """A registration that passes the lookup but hits the unique email index"""
    payload = {"name": "Vera", "email": "vera@example.com", "password": "pw"}
    assert (await async_client.post("/api/register", json=payload)).status_code == 200

    async def _not_found(self, email):
        return None

    monkeypatch.setattr(UserRepository, "get_user_by_email", _not_found)

    response = await async_client.post("/api/register", json=payload)
    assert response.status_code == 400
    assert response.json() == {"error": "User already exists"}
    assert await _count_users(test_db, "vera@example.com") == 1


@pytest.mark.asyncio
async def test_fetch_user_storage_failure(async_client, app_overrides):
    app_overrides.dependency_overrides[get_db] = _failing_db

    response = await async_client.get("/api/user/" + "a" * 32)
    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


@pytest.mark.asyncio
async def test_register_storage_failure(async_client, app_overrides):
    app_overrides.dependency_overrides[get_db] = _failing_db

    response = await async_client.post(
        "/api/register",
        json={"name": "Lev", "email": "lev@example.com", "password": "pw"}
    )
    assert response.status_code == 500
    assert response.json() == {"error": "Registration failed"}
