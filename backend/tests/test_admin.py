"""
Tests for admin management of users, groups and facilities.
"""

import pytest
from httpx import AsyncClient

from tests.conftest import slot


@pytest.mark.asyncio
async def test_admin_routes_require_admin(client: AsyncClient, headers_for, employee, facility_manager):
    for user in (employee, facility_manager):
        headers = await headers_for(user)
        assert (await client.get("/api/v1/admin/users", headers=headers)).status_code == 403
        assert (await client.get("/api/v1/admin/bookings", headers=headers)).status_code == 403
        assert (await client.post("/api/v1/admin/groups", json={"name": "Ops"}, headers=headers)).status_code == 403


@pytest.mark.asyncio
async def test_list_users(client: AsyncClient, headers_for, employee, group_director, admin):
    response = await client.get("/api/v1/admin/users", headers=await headers_for(admin))
    assert response.status_code == 200
    ids = [u["employee_id"] for u in response.json()]
    assert ids == sorted(ids)
    assert {1001, 1100, 9001} <= set(ids)
    assert all("hashed_password" not in u for u in response.json())


@pytest.mark.asyncio
async def test_create_group_and_assign_director(client: AsyncClient, headers_for, make_user, admin):
    headers = await headers_for(admin)
    created = await client.post("/api/v1/admin/groups", json={"name": "Operations"}, headers=headers)
    assert created.status_code == 201
    group_id = created.json()["id"]

    duplicate = await client.post("/api/v1/admin/groups", json={"name": "Operations"}, headers=headers)
    assert duplicate.status_code == 409
    assert duplicate.json()["detail"] == "Field name must be unique."

    first = await make_user(4001, "First Director")
    second = await make_user(4002, "Second Director")

    response = await client.put(
        f"/api/v1/admin/groups/{group_id}/director",
        json={"employee_id": first.employee_id},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json()["role"] == "GROUP_DIRECTOR"
    assert response.json()["group_id"] == group_id

    # Reassigning demotes the previous director
    await client.put(
        f"/api/v1/admin/groups/{group_id}/director",
        json={"employee_id": second.employee_id},
        headers=headers,
    )
    users = {u["employee_id"]: u for u in (await client.get("/api/v1/admin/users", headers=headers)).json()}
    assert users[4001]["role"] == "EMPLOYEE"
    assert users[4002]["role"] == "GROUP_DIRECTOR"

    groups = await client.get("/api/v1/admin/groups", headers=headers)
    assert [g["name"] for g in groups.json()] == ["Operations"]


@pytest.mark.asyncio
async def test_second_director_in_group_conflicts(client: AsyncClient, headers_for, employee, group_director, admin):
    response = await client.patch(
        f"/api/v1/admin/users/{employee.employee_id}",
        json={"role": "GROUP_DIRECTOR"},
        headers=await headers_for(admin),
    )
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_director_without_group_is_invalid(client: AsyncClient, headers_for, make_user, admin):
    loner = await make_user(4100, "No Group")
    response = await client.patch(
        f"/api/v1/admin/users/{loner.employee_id}",
        json={"role": "GROUP_DIRECTOR"},
        headers=await headers_for(admin),
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "A Group Director must belong to a group"


@pytest.mark.asyncio
async def test_move_user_between_groups(
    client: AsyncClient, headers_for, create_booking, employee, group_director, other_director, marketing, admin, auditorium
):
    await create_booking(employee, "auditorium", slot(9, 10))

    response = await client.patch(
        f"/api/v1/admin/users/{employee.employee_id}",
        json={"group_id": marketing.id},
        headers=await headers_for(admin),
    )
    assert response.status_code == 200
    assert response.json()["group_id"] == marketing.id

    # Scope follows group membership
    gd_queue = await client.get("/api/v1/approvals/gd", headers=await headers_for(group_director))
    assert gd_queue.json() == []
    other_queue = await client.get("/api/v1/approvals/gd", headers=await headers_for(other_director))
    assert len(other_queue.json()) == 1


@pytest.mark.asyncio
async def test_update_unknown_user_or_group(client: AsyncClient, headers_for, employee, admin):
    headers = await headers_for(admin)
    assert (await client.patch("/api/v1/admin/users/424242", json={"role": "EMPLOYEE"}, headers=headers)).status_code == 404
    response = await client.patch(
        f"/api/v1/admin/users/{employee.employee_id}",
        json={"group_id": 999},
        headers=headers,
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_create_facility_with_manager(client: AsyncClient, headers_for, create_booking, make_user, employee, group_director, admin):
    new_manager = await make_user(5001, "New Manager")
    headers = await headers_for(admin)

    response = await client.post("/api/v1/admin/facilities", json={
        "name": "Board Room",
        "slug": "board-room",
        "icon": "/icons/board.svg",
        "manager_employee_id": new_manager.employee_id,
    }, headers=headers)
    assert response.status_code == 201
    data = response.json()
    assert data["slug"] == "board-room"
    assert data["manager"]["employee_id"] == new_manager.employee_id

    # The new manager now has an approval scope for this facility
    booking = await create_booking(employee, "board-room")
    await client.post(f"/api/v1/approvals/gd/{booking['id']}/approve", headers=await headers_for(group_director))
    fm = await client.post(f"/api/v1/approvals/fm/{booking['id']}/approve", headers=await headers_for(new_manager))
    assert fm.status_code == 200


@pytest.mark.asyncio
async def test_duplicate_slug_conflicts(client: AsyncClient, headers_for, admin, auditorium):
    response = await client.post("/api/v1/admin/facilities", json={
        "name": "Another Auditorium",
        "slug": "auditorium",
    }, headers=await headers_for(admin))
    assert response.status_code == 409
    assert response.json()["detail"] == "Field slug must be unique."


@pytest.mark.asyncio
async def test_bad_slug_is_invalid(client: AsyncClient, headers_for, admin):
    response = await client.post("/api/v1/admin/facilities", json={
        "name": "Bad",
        "slug": "Not A Slug",
    }, headers=await headers_for(admin))
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid slug"


@pytest.mark.asyncio
async def test_manager_cannot_manage_two_facilities(client: AsyncClient, headers_for, admin, facility_manager, auditorium, gym):
    response = await client.patch(
        "/api/v1/admin/facilities/gym",
        json={"manager_employee_id": facility_manager.employee_id},
        headers=await headers_for(admin),
    )
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_deactivate_facility(client: AsyncClient, headers_for, admin, employee, auditorium):
    headers = await headers_for(admin)
    response = await client.patch("/api/v1/admin/facilities/auditorium", json={"is_active": False}, headers=headers)
    assert response.status_code == 200
    assert response.json()["is_active"] is False

    listing = await client.get("/api/v1/admin/facilities", headers=headers)
    assert [f["slug"] for f in listing.json()] == ["auditorium"]

    dashboard = await client.get("/api/v1/dashboard", headers=await headers_for(employee))
    assert dashboard.json()["facilities"] == []


@pytest.mark.asyncio
async def test_demoting_manager_releases_facility(client: AsyncClient, headers_for, admin, facility_manager, auditorium):
    headers = await headers_for(admin)
    response = await client.patch(
        f"/api/v1/admin/users/{facility_manager.employee_id}",
        json={"role": "EMPLOYEE"},
        headers=headers,
    )
    assert response.status_code == 200

    listing = await client.get("/api/v1/admin/facilities", headers=headers)
    assert listing.json()[0]["manager"] is None


@pytest.mark.asyncio
async def test_admin_sees_all_bookings(client: AsyncClient, headers_for, create_booking, employee, outsider, admin, auditorium, gym):
    await create_booking(employee, "auditorium", slot(9, 10))
    await create_booking(outsider, "gym", slot(9, 10))

    response = await client.get("/api/v1/admin/bookings", headers=await headers_for(admin))
    assert response.status_code == 200
    assert len(response.json()) == 2
