"""
Tests for authentication endpoints and session handling.
"""

import pytest
from httpx import AsyncClient

from facility_booking.models.user import UserRole
from tests.conftest import TEST_PASSWORD


@pytest.mark.asyncio
async def test_register_user(client: AsyncClient):
    """Successful registration returns an EMPLOYEE account."""
    response = await client.post("/api/v1/auth/register", json={
        "employee_id": 4242,
        "name": "New Hire",
        "password": "securepassword123",
    })
    assert response.status_code == 201
    data = response.json()
    assert data["employee_id"] == 4242
    assert data["role"] == "EMPLOYEE"
    assert "hashed_password" not in data  # Never expose password hash


@pytest.mark.asyncio
async def test_register_duplicate_employee_id(client: AsyncClient, employee):
    """Duplicate employee id returns 409."""
    response = await client.post("/api/v1/auth/register", json={
        "employee_id": employee.employee_id,
        "name": "Impostor",
        "password": "securepassword123",
    })
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_register_weak_password(client: AsyncClient):
    """Password under 8 chars returns 400 naming the field."""
    response = await client.post("/api/v1/auth/register", json={
        "employee_id": 4243,
        "name": "Weak",
        "password": "short",
    })
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid password"


@pytest.mark.asyncio
async def test_login_sets_session_cookie(client: AsyncClient, employee):
    response = await client.post("/api/v1/auth/login", json={
        "employee_id": employee.employee_id,
        "password": TEST_PASSWORD,
    })
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Ada Employee"
    assert data["role"] == "EMPLOYEE"
    assert response.cookies.get("sid")


@pytest.mark.asyncio
async def test_login_wrong_password(client: AsyncClient, employee):
    response = await client.post("/api/v1/auth/login", json={
        "employee_id": employee.employee_id,
        "password": "wrongpassword",
    })
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_login_unknown_employee(client: AsyncClient):
    response = await client.post("/api/v1/auth/login", json={
        "employee_id": 77777,
        "password": "anypassword123",
    })
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_logout_destroys_session(client: AsyncClient, employee, auditorium):
    login = await client.post("/api/v1/auth/login", json={
        "employee_id": employee.employee_id,
        "password": TEST_PASSWORD,
    })
    headers = {"Cookie": f"sid={login.cookies.get('sid')}"}

    assert (await client.get("/api/v1/dashboard", headers=headers)).status_code == 200

    response = await client.post("/api/v1/auth/logout", headers=headers)
    assert response.status_code == 200

    assert (await client.get("/api/v1/dashboard", headers=headers)).status_code == 401


@pytest.mark.asyncio
async def test_requests_without_session_are_unauthenticated(client: AsyncClient, auditorium):
    assert (await client.get("/api/v1/dashboard")).status_code == 401
    assert (await client.get("/api/v1/facility/auditorium")).status_code == 401
    response = await client.get("/api/v1/dashboard", headers={"Cookie": "sid=forged"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_session_for_deleted_user_is_not_found(client: AsyncClient, headers_for, db_session, make_user):
    user = await make_user(5555, "Temporary")
    headers = await headers_for(user)
    await db_session.delete(user)
    await db_session.commit()

    response = await client.get("/api/v1/dashboard", headers=headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_role_is_reresolved_every_request(client: AsyncClient, headers_for, db_session, employee, group_director):
    """A demoted director loses access on the next request, without logging out."""
    headers = await headers_for(group_director)
    assert (await client.get("/api/v1/approvals/gd", headers=headers)).status_code == 200

    group_director.role = UserRole.EMPLOYEE
    await db_session.commit()

    assert (await client.get("/api/v1/approvals/gd", headers=headers)).status_code == 403


@pytest.mark.asyncio
async def test_change_password(client: AsyncClient, headers_for, employee):
    headers = await headers_for(employee)
    response = await client.post("/api/v1/auth/password", json={
        "old_password": TEST_PASSWORD,
        "new_password": "brandnewpassword",
    }, headers=headers)
    assert response.status_code == 200

    relogin = await client.post("/api/v1/auth/login", json={
        "employee_id": employee.employee_id,
        "password": "brandnewpassword",
    })
    assert relogin.status_code == 200


@pytest.mark.asyncio
async def test_change_password_rejects_wrong_old_password(client: AsyncClient, headers_for, employee):
    response = await client.post("/api/v1/auth/password", json={
        "old_password": "not-my-password",
        "new_password": "brandnewpassword",
    }, headers=await headers_for(employee))
    assert response.status_code == 401
